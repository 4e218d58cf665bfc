"""Survey Hub: rated multi-segment surveys with analytics and export."""

__version__ = "1.0.0"
