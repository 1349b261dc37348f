"""Administrative backend for a multi-site content-management system."""

__version__ = "0.1.0"
