"""Allow ``python -m jiranav``."""

from jiranav.cli import main

if __name__ == "__main__":
    main()
