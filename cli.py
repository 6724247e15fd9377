#!/usr/bin/env python
"""
crit CLI entry point.

Usage:
    python cli.py init               # Create the .crit layout
    python cli.py analyze            # Full analysis
    python cli.py watch              # Watch until Ctrl+C
    python cli.py list               # Show pending criticisms
"""

from crit.cli.app import main

if __name__ == "__main__":
    main()
