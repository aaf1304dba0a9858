"""Thumbnail service: resized image derivatives over S3-compatible storage."""

__version__ = "1.0.0"
