#!/usr/bin/env python3
"""Main entry point for attachee package."""

import sys
from attachee.cli import main

if __name__ == "__main__":
    sys.exit(main())
