#!/usr/bin/env python3
"""
A6Cutter - Entry point for python -m a6cutter

This module allows the package to be run as a module:
    python -m a6cutter
"""

import sys

from a6cutter import main

if __name__ == "__main__":
    sys.exit(main())
