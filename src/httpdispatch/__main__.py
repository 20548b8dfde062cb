"""Main entry point for running httpdispatch as a module.

Usage:
    python -m httpdispatch send <url>
    python -m httpdispatch --help
"""

from httpdispatch.cli import main

if __name__ == '__main__':
    main()
