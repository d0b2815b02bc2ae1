"""Entry point for `python -m imagediff`.

Usage:
    python -m imagediff IMAGE_X IMAGE_Y
"""

from __future__ import annotations

from imagediff.cli import cli

cli()
