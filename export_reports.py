#!/usr/bin/env python3
"""Personal finance report exporter.

This is the main entry point script for finance_reports.
It wraps the package CLI for convenient execution.

Usage:
    python export_reports.py report monthly --user alice --period last-month

For full documentation and options:
    python export_reports.py --help
"""

import sys
from pathlib import Path

# Add src to path for development installs
src_path = Path(__file__).parent / "src"
if src_path.exists():
    sys.path.insert(0, str(src_path))

from finance_reports.cli import main

if __name__ == "__main__":
    sys.exit(main())
