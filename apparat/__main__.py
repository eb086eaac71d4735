"""
Run the APPARAT command line.

Usage:
    python -m apparat status
"""

import sys

from .interface.cli import main

if __name__ == "__main__":
    sys.exit(main())
