"""
Managers module initialization.
"""
from .job_manager import job_manager, JobManager
from .file_manager import file_manager, FileManager

__all__ = [
    "job_manager",
    "JobManager",
    "file_manager",
    "FileManager",
]
