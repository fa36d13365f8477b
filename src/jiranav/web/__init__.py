"""Local web endpoints used by jiranav."""
