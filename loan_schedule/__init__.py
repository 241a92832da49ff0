"""Payment schedule engine for credits."""

__version__ = "0.1.0"
