"""Order persistence and reporting engine for a point-of-sale backend."""

__version__ = "0.1.0"
