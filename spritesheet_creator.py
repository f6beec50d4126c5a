#!/usr/bin/env python3
"""
Sprite Sheet Creator - converts png image sequences into compact sprite sheets

Runs the command line interface when arguments are given, the GUI otherwise.
"""

import sys

from spritepack.cli import main as cli_main


def main():
    """Main entry point for the Sprite Sheet Creator application."""
    if len(sys.argv) > 1:
        raise SystemExit(cli_main())

    from spritepack.gui import run_gui
    run_gui()


if __name__ == "__main__":
    main()
