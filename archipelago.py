#!/usr/bin/env python3
"""
Archipelago: Island-Model Symbolic Regression

Main entry point for the Archipelago application.
This file serves as a thin wrapper that delegates all functionality
to the archipelago_pkg package.

Usage:
    python archipelago.py                           # Fit the default quadratic
    python archipelago.py --function trigonometric  # Fit a built-in target
    python archipelago.py --csv data.csv --format json
    python archipelago.py --help                    # Show help
"""

from __future__ import annotations

import sys


def main() -> int:
    """
    Main entry point for Archipelago.

    Delegates all functionality to the archipelago_pkg.cli module,
    which handles argument parsing, the evolutionary run, and output formatting.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        from archipelago_pkg.cli import main_entry

        return main_entry(sys.argv[1:])
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        return 1


if __name__ == "__main__":
    sys.exit(main())
