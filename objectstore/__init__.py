"""
objectstore - Object storage manager for filesystem and cloud backends.

This package provides one async interface for:
- Local filesystem directories
- Amazon S3 and S3-compatible stores
- Google Cloud Storage
- etcd key-value clusters
"""

__version__ = "0.1.0"
