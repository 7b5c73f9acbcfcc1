"""
Servicio de metadatos de video.
Obtiene la información de un video con `yt-dlp --dump-json` y deriva
la lista de resoluciones descargables.
"""
import json
import logging
from typing import List, Optional

from pydantic import ValidationError

from ..core.config import settings
from ..core.constants import DEFAULT_TITLE, DEFAULT_UPLOADER, DEFAULT_FORMAT_EXT, NO_CODEC
from ..core.exceptions import MetadataFetchException, MetadataParseException
from ..helpers import TextHelper
from ..schemas import FetcherFormat, FetcherPayload, VideoFormatOption, VideoMetadata
from .command_builder import CommandBuilder
from .executable_locator import executable_locator, ExecutableLocator
from .process_runner import process_runner, ProcessRunner

logger = logging.getLogger(__name__)


def estimate_filesize(fmt: FetcherFormat, duration: Optional[float]) -> Optional[int]:
    """
    Tamaño del formato en bytes.

    Usa el tamaño exacto, si no el aproximado, y si ninguno está disponible
    (o es 0) lo estima como tbr(kbit/s) * 1000 / 8 * duración(s).
    """
    filesize = fmt.filesize if fmt.filesize is not None else fmt.filesize_approx

    if not filesize and fmt.tbr is not None and duration is not None:
        filesize = round(fmt.tbr * 1000 / 8 * duration)

    return int(filesize) if filesize is not None else None


def build_format_options(payload: FetcherPayload) -> List[VideoFormatOption]:
    """
    Deriva las resoluciones descargables del payload de yt-dlp.

    Solo se conservan formatos con altura y códec de video (no solo audio).
    Se deduplica por etiqueta de resolución (gana la primera aparición) y se
    ordena de forma descendente comparando la etiqueta como texto, no como
    número: "720p" queda por delante de "1080p".

    Args:
        payload: Salida parseada de --dump-json

    Returns:
        Lista de VideoFormatOption
    """
    options: List[VideoFormatOption] = []
    seen = set()

    for fmt in payload.formats or []:
        if fmt.height is None or fmt.vcodec is None or fmt.vcodec == NO_CODEC:
            continue

        resolution = f"{fmt.height}p"
        if resolution in seen:
            continue
        seen.add(resolution)

        options.append(VideoFormatOption(
            format_id=fmt.format_id,
            resolution=resolution,
            ext=fmt.ext or DEFAULT_FORMAT_EXT,
            filesize=estimate_filesize(fmt, payload.duration),
            fps=fmt.fps,
        ))

    return sorted(options, key=lambda option: option.resolution, reverse=True)


def parse_payload(output: str) -> FetcherPayload:
    """
    Parsea la salida JSON de yt-dlp.

    Raises:
        MetadataParseException: Si no es un objeto JSON no vacío con el esquema esperado
    """
    try:
        data = json.loads(output)
    except (TypeError, ValueError) as e:
        raise MetadataParseException(f"JSON inválido: {e}")

    if not data or not isinstance(data, dict):
        raise MetadataParseException("Salida vacía o no es un objeto")

    try:
        return FetcherPayload(**data)
    except ValidationError as e:
        raise MetadataParseException(f"Esquema inesperado: {e}")


class MetadataService:
    """Servicio para consultar los metadatos de un video."""

    def __init__(
        self,
        locator: ExecutableLocator = executable_locator,
        runner: ProcessRunner = process_runner,
    ):
        self.locator = locator
        self.runner = runner

    def build_command(self, url: str) -> List[str]:
        """
        Construye el comando yt-dlp para volcar los metadatos de un único video.

        Args:
            url: URL del video (siempre el último argumento)

        Returns:
            Lista con el comando y argumentos
        """
        return (
            CommandBuilder(self.locator.fetcher())
            .flag("--dump-json")
            .flag("--no-playlist")
            .positional(url)
            .build()
        )

    def fetch_metadata(self, url: str) -> VideoMetadata:
        """
        Obtiene los metadatos y resoluciones disponibles de un video.

        Args:
            url: URL validada del video

        Returns:
            VideoMetadata

        Raises:
            MetadataFetchException: Si yt-dlp termina con error
            MetadataParseException: Si la salida no es el JSON esperado
        """
        command = self.build_command(url)
        logger.info(f"Fetching video info url={url} fetcher={command[0]}")

        result = self.runner.run(command, timeout=settings.INFO_TIMEOUT)

        if not result.ok:
            logger.error(
                f"Failed to fetch video info url={url} fetcher={command[0]} "
                f"exit_code={result.returncode} timed_out={result.timed_out} "
                f"stderr={TextHelper.truncate_text(result.stderr)!r} "
                f"stdout={TextHelper.truncate_text(result.stdout, 20)!r}"
            )
            raise MetadataFetchException(stderr=result.stderr, exit_code=result.returncode)

        try:
            payload = parse_payload(result.stdout)
        except MetadataParseException:
            logger.error(f"Failed to parse video info url={url} output={result.stdout[:500]!r}")
            raise

        formats = build_format_options(payload)
        metadata = VideoMetadata(
            title=payload.title if payload.title is not None else DEFAULT_TITLE,
            thumbnail=payload.thumbnail,
            duration=payload.duration,
            uploader=payload.uploader if payload.uploader is not None else DEFAULT_UPLOADER,
            formats=formats,
        )

        logger.info(f"Fetched video info url={url} title={metadata.title!r} formats_count={len(formats)}")
        return metadata


# Instancia global
metadata_service = MetadataService()
