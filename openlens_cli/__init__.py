"""
OpenLens CLI: submit a remote video-processing job, follow it to completion
and save the result into the local media library.
"""

__version__ = "0.3.0"
