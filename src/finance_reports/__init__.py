"""Personal finance reporting and PDF export engine."""

__version__ = "0.1.0"
