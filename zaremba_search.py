#!/usr/bin/env python3
"""Search for z(n) and v(n) record-setters. See `zaremba_search.py --help`."""
import sys

from zaremba.cli import main

if __name__ == '__main__':
    sys.exit(main())
