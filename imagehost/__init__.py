"""Image upload, listing and static serving service."""

__version__ = "1.0.0"
