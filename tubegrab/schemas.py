"""
Modelos de datos de la aplicación.
Define los esquemas de entrada/salida y el esquema parcial de la salida de yt-dlp.
"""
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

Number = Union[int, float]


# === Request Models ===

class VideoInfoRequest(BaseModel):
    """Solicitud de metadatos de un video."""
    url: str = Field(..., description="URL del video")

    class Config:
        json_schema_extra = {
            "example": {"url": "https://www.youtube.com/watch?v=..."}
        }


class VideoDownloadRequest(BaseModel):
    """Solicitud de descarga de un video."""
    url: str = Field(..., description="URL del video a descargar")
    format_id: Optional[str] = Field(None, description="format_id elegido de /api/youtube/info")
    resolution: Optional[str] = Field(None, description="Etiqueta de resolución elegida (informativa)")
    job_id: Optional[str] = Field(
        None,
        pattern=r"^[A-Za-z0-9_-]{1,64}$",
        description="Token del cliente para consultar el progreso",
    )

    class Config:
        json_schema_extra = {
            "example": {
                "url": "https://www.youtube.com/watch?v=...",
                "format_id": "22",
                "resolution": "720p",
                "job_id": "3f2a9c1e",
            }
        }


# === Response Models ===

class VideoFormatOption(BaseModel):
    """Una resolución descargable."""
    format_id: Optional[str] = Field(None, description="Identificador de formato de yt-dlp")
    resolution: str = Field(..., description="Etiqueta '<alto>p'")
    ext: str = Field(..., description="Extensión del contenedor")
    filesize: Optional[int] = Field(None, description="Tamaño (exacto o estimado) en bytes")
    fps: Optional[Number] = Field(None, description="Frames por segundo")


class VideoMetadata(BaseModel):
    """Metadatos de un video y sus resoluciones disponibles."""
    title: str
    thumbnail: Optional[str] = None
    duration: Optional[Number] = None
    uploader: str
    formats: List[VideoFormatOption] = []


class ErrorResponse(BaseModel):
    """Cuerpo de error estándar."""
    error: str = Field(..., description="Mensaje de error")
    details: Optional[Any] = Field(None, description="Diagnóstico (solo en modo debug o validación)")


class ProgressResponse(BaseModel):
    """Estado de progreso de una descarga."""
    job_id: str = Field(..., description="Token del job")
    status: str = Field(..., description="starting, downloading, merging, finished, failed o unknown")
    progress: float = Field(..., description="Porcentaje 0-100")


class BinaryInfo(BaseModel):
    """Información de un binario externo."""
    path: str = Field(..., description="Ruta resuelta o nombre del comando")
    installed: bool = Field(..., description="Si el binario puede lanzarse")


class HealthResponse(BaseModel):
    """Respuesta del health check."""
    status: str = Field(..., description="Estado general: ok o degraded")
    binaries: Dict[str, BinaryInfo] = Field(..., description="Estado de binarios requeridos")


# === Esquema parcial de la salida de `yt-dlp --dump-json` ===
# Cualquier campo ausente se trata como None, nunca como error.

class FetcherFormat(BaseModel):
    format_id: Optional[str] = None
    height: Optional[int] = None
    vcodec: Optional[str] = None
    ext: Optional[str] = None
    filesize: Optional[Number] = None
    filesize_approx: Optional[Number] = None
    tbr: Optional[float] = None
    fps: Optional[Number] = None


class FetcherPayload(BaseModel):
    title: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[Number] = None
    uploader: Optional[str] = None
    formats: Optional[List[FetcherFormat]] = None
