"""Post-processing for scanned line drawings."""

__version__ = "0.1.0"
