"""
Package entry point.

Allows running the application via:

    python -m colloscope

This simply forwards execution to colloscope.cli.main().
"""

from colloscope.cli import main

if __name__ == "__main__":
    main()
