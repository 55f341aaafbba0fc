"""Listing Alerts: match incoming real-estate listings against buyer search profiles."""

__version__ = "0.1.0"
