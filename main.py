#!/usr/bin/env python3
"""
BoutMetrics launcher.

Compiles sleep bout durations from per-animal CSV files by genotype.
Run `python main.py --help` for options.
"""

import sys

from boutmetrics.cli import main


if __name__ == '__main__':
    sys.exit(main())
