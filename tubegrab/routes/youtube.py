"""
Rutas del descargador de video.
Metadatos, descarga y consulta de progreso.
"""
import logging

from fastapi import APIRouter, Query
from fastapi.responses import FileResponse
from starlette.background import BackgroundTask

from ..core.config import settings
from ..core.exceptions import TubeGrabException, UnexpectedErrorException
from ..managers import file_manager, job_manager
from ..schemas import (
    VideoInfoRequest,
    VideoDownloadRequest,
    VideoMetadata,
    ProgressResponse,
    ErrorResponse,
)
from ..services import metadata_service, download_service
from ..validators import URLValidator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/youtube", tags=["youtube"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post("/info", response_model=VideoMetadata, responses=ERROR_RESPONSES)
def video_info(payload: VideoInfoRequest):
    """
    Obtiene título, miniatura, duración, autor y resoluciones disponibles.
    """
    try:
        url = URLValidator.validate_url(payload.url)
        return metadata_service.fetch_metadata(url)
    except TubeGrabException:
        raise
    except Exception as e:
        logger.exception(f"Exception while fetching video info url={payload.url} error={e}")
        raise UnexpectedErrorException(str(e))


@router.post(
    "/download",
    response_class=FileResponse,
    responses={200: {"content": {settings.OUTPUT_MEDIA_TYPE: {}}}, **ERROR_RESPONSES},
)
def video_download(payload: VideoDownloadRequest):
    """
    Descarga el video y lo entrega como adjunto MP4.
    El archivo temporal se elimina en cuanto termina el envío.
    """
    try:
        url = URLValidator.validate_url(payload.url)
        result = download_service.download(
            url,
            format_id=payload.format_id,
            resolution=payload.resolution,
            job_id=payload.job_id,
        )
    except TubeGrabException:
        raise
    except Exception as e:
        logger.exception(f"Download exception url={payload.url} error={e}")
        raise UnexpectedErrorException(str(e))

    # Servir con auto-eliminación
    background = BackgroundTask(file_manager.remove_quietly, result.path)
    resp = FileResponse(
        path=str(result.path),
        media_type=settings.OUTPUT_MEDIA_TYPE,
        background=background,
    )
    # El nombre ya está saneado a [A-Za-z0-9_- ], seguro entre comillas
    resp.headers["Content-Disposition"] = f'attachment; filename="{result.filename}"'
    resp.headers["X-Job-Id"] = result.job_id
    return resp


@router.get("/progress", response_model=ProgressResponse)
def download_progress(job_id: str = Query(..., min_length=1, max_length=64)):
    """
    Estado de una descarga en curso, pensado para sondeo periódico.
    Los job_id desconocidos (o ya purgados) responden con estado 'unknown'.
    """
    status, progress = job_manager.get_progress(job_id)
    return ProgressResponse(job_id=job_id, status=status.value, progress=progress)
