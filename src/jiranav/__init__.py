"""jiranav - browse Jira issues and branch from them."""

from jiranav._version import __version__

__all__ = ["__version__"]
