"""
Localizador de binarios externos (yt-dlp, ffmpeg).
"""
import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from ..core.config import settings
from ..core.enums import ToolName

logger = logging.getLogger(__name__)


class ExecutableLocator:
    """
    Resuelve la ruta de un binario externo.

    Orden: variable de entorno (si apunta a un archivo existente), rutas de
    instalación habituales (la primera que exista) y por último el nombre
    del comando, que el lanzador del proceso resolverá por PATH.
    Nunca lanza excepciones: la ausencia del binario solo se detecta al
    intentar ejecutarlo.
    """

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        # None: leer os.environ en cada llamada
        self._environ = environ

    def locate(self, tool: ToolName) -> str:
        """
        Args:
            tool: Herramienta lógica (fetcher o muxer)

        Returns:
            Ruta absoluta del binario o el nombre del comando
        """
        environ = self._environ if self._environ is not None else os.environ

        env_name = settings.TOOL_ENV_OVERRIDES.get(tool)
        custom_path = environ.get(env_name) if env_name else None
        if custom_path:
            if Path(custom_path).exists():
                return custom_path
            logger.warning(f"Ignoring {env_name}, path does not exist path={custom_path}")

        for candidate in settings.TOOL_CANDIDATES.get(tool, []):
            if Path(candidate).exists():
                return candidate

        return settings.TOOL_COMMANDS[tool]

    def fetcher(self) -> str:
        return self.locate(ToolName.FETCHER)

    def muxer(self) -> str:
        return self.locate(ToolName.MUXER)


# Instancia global
executable_locator = ExecutableLocator()
