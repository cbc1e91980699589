"""
capollama entry point.

Enables running the captioner as a module:
    python -m capollama ~/Pictures --dry-run
"""

import sys

from capollama.cli import main

if __name__ == "__main__":
    sys.exit(main())
