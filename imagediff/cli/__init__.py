"""imagediff command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``imagediff`` script).
"""

from imagediff.cli.main import cli

__all__ = ["cli"]
