"""
Job Service API Layer.

This package handles all communication with the remote video-processing
service: submitting jobs and polling them until they settle.
"""

from .client import JobServiceClient
from .poller import StatusPoller
from .submitter import JobSubmitter

__all__ = ["JobServiceClient", "JobSubmitter", "StatusPoller"]
