"""
Validadores de entrada de la aplicación.
Separa las responsabilidades de validación del resto de utilidades.
"""
from urllib.parse import urlparse

from .core.constants import ALLOWED_URL_SCHEMES
from .core.exceptions import InvalidURLException


class URLValidator:
    """Validador de URLs de video."""

    @staticmethod
    def is_valid_url(url: str) -> bool:
        """
        Comprueba que la URL sea absoluta y bien formada.

        Args:
            url: URL a validar

        Returns:
            True si tiene esquema http(s), host y ningún espacio
        """
        if not url or not isinstance(url, str):
            return False

        s = url.strip()
        if any(ch.isspace() for ch in s):
            return False

        try:
            parsed = urlparse(s)
            # Acceder al puerto fuerza la validación de valores como ':abc'
            parsed.port
        except ValueError:
            return False

        return parsed.scheme.lower() in ALLOWED_URL_SCHEMES and bool(parsed.hostname)

    @staticmethod
    def validate_url(url: str) -> str:
        """
        Valida una URL y lanza excepción si no es válida.

        Args:
            url: URL a validar

        Returns:
            URL validada (sin espacios alrededor)

        Raises:
            InvalidURLException: Si la URL falta o está mal formada
        """
        if not url or not isinstance(url, str) or not url.strip():
            raise InvalidURLException(reason="URL vacía o tipo inválido")

        if not URLValidator.is_valid_url(url):
            raise InvalidURLException(url=url, reason="Se requiere una URL absoluta http(s)")

        return url.strip()
