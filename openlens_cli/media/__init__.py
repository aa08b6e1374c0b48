"""
Media Transfer Layer.

This package is responsible for fetching finished artifacts from the job
service onto local storage.
"""

from .downloader import ArtifactFetcher

__all__ = ["ArtifactFetcher"]
