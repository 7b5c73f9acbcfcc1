"""
Services module initialization.
"""
from .executable_locator import executable_locator, ExecutableLocator
from .command_builder import CommandBuilder
from .process_runner import process_runner, ProcessRunner, ProcessResult
from .metadata_service import metadata_service, MetadataService
from .download_service import download_service, DownloadService, DownloadResult

__all__ = [
    "executable_locator",
    "ExecutableLocator",
    "CommandBuilder",
    "process_runner",
    "ProcessRunner",
    "ProcessResult",
    "metadata_service",
    "MetadataService",
    "download_service",
    "DownloadService",
    "DownloadResult",
]
