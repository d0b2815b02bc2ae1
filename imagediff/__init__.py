"""imagediff: list the source-code changes between two container images."""

__version__ = "0.1.0"
