"""Read-only HTTP API serving historical routes, points of interest and participants."""

__version__ = "0.1.0"
__all__ = ["__version__"]