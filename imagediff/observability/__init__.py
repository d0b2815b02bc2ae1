"""Observability helpers for imagediff.

Submodules:
    logging -- structlog configuration and component-bound loggers.
"""
