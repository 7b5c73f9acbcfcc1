"""
Core module containing configuration, constants, enums and exceptions.
"""
from .config import settings, cleanup_settings
from .enums import JobStatus, ToolName
from .exceptions import (
    TubeGrabException,
    InvalidURLException,
    MetadataFetchException,
    MetadataParseException,
    DownloadFailedException,
    JobConflictException,
    UnexpectedErrorException,
)

__all__ = [
    "settings",
    "cleanup_settings",
    "JobStatus",
    "ToolName",
    "TubeGrabException",
    "InvalidURLException",
    "MetadataFetchException",
    "MetadataParseException",
    "DownloadFailedException",
    "JobConflictException",
    "UnexpectedErrorException",
]
