"""
A6Cutter - Python package for cutting PDF pages into A6 tiles

Each page is optionally turned to portrait, cut into a grid of A6 tiles
(with adjustable cut-line offsets) and the resulting pages are filtered
by position before export.
"""

__version__ = "1.0.0"
__license__ = "GPL-3.0"


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the application.

    Returns:
        The application exit code.
    """
    from a6cutter.cli import main as cli_main

    return cli_main(argv)
