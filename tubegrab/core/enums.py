"""
Enumeraciones utilizadas en la aplicación.
Centraliza los estados y tipos para evitar strings mágicos.
"""
from enum import Enum


class ToolName(str, Enum):
    """Herramientas externas que invoca el servicio."""
    FETCHER = "fetcher"
    MUXER = "muxer"


class JobStatus(str, Enum):
    """Estados posibles de un job de descarga."""
    STARTING = "starting"
    DOWNLOADING = "downloading"
    MERGING = "merging"
    FINISHED = "finished"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.FINISHED, JobStatus.FAILED)
