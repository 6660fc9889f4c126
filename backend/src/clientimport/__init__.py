"""Pre-flight validation and upload of bulk gym client CSV imports."""

__version__ = "0.1.0"
