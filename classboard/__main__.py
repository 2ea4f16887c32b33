"""
Package entry point.

Allows running the application via:

    python -m classboard

This simply forwards execution to classboard.cli.main().
"""

from classboard.cli import main

if __name__ == "__main__":
    main()
