"""Package version (PEP 440). Bump when publishing."""

__version__ = "0.1.0"

__all__ = ["__version__"]
