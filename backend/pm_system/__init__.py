"""Project-management record-keeping API."""

__version__ = "0.1.0"
