"""
Constantes utilizadas en la aplicación.
Centraliza valores constantes para facilitar el mantenimiento.
"""

# Esquemas aceptados para la URL del video
ALLOWED_URL_SCHEMES = ("http", "https")

# Selectores de formato para yt-dlp
YTDLP_DEFAULT_FORMAT = "bestvideo[ext=mp4]+bestaudio[ext=m4a]/bestvideo+bestaudio/best"
YTDLP_SELECTED_FORMAT_TEMPLATE = "{format_id}+bestaudio/best"
YTDLP_MERGE_OUTPUT_FORMAT = "mp4"

# Valores por defecto del payload de metadatos
DEFAULT_TITLE = "Unknown"
DEFAULT_UPLOADER = "Unknown"
DEFAULT_FORMAT_EXT = "mp4"
NO_CODEC = "none"

# Patrones regex
FILENAME_UNSAFE_PATTERN = r"[^A-Za-z0-9_\- ]"
# Token de los archivos de descarga propios: <prefijo><uuid hex>.mp4 y parciales (<stem>.part, ...)
TEMP_FILE_TOKEN_PATTERN = r"[0-9a-f]{32}\."
PROGRESS_PERCENT_PATTERN = r"\[download\]\s+([\d.]+)%"
PROGRESS_DESTINATION_PATTERN = r"\[download\]\s+Destination:"
PROGRESS_MERGER_PATTERN = r"\[Merger\]"

# Tramos de progreso: primer stream, segundo stream, merge
PROGRESS_FIRST_STREAM_SPAN = 60.0
PROGRESS_SECOND_STREAM_SPAN = 30.0
PROGRESS_MERGING = 95.0
PROGRESS_DONE = 100.0

# Mensajes de error (visibles por el cliente)
ERROR_VALIDATION = "Validation failed"
ERROR_INVALID_URL = "The url field must be a valid URL."
ERROR_FETCH_INFO = "Failed to fetch video information. Please check the URL."
ERROR_PARSE_INFO = "Failed to parse video information."
ERROR_DOWNLOAD = "Failed to download video."
ERROR_JOB_CONFLICT = "A download with this job_id is already running."
ERROR_UNEXPECTED_PREFIX = "An error occurred: "

# Código de salida usado cuando el binario no pudo lanzarse
LAUNCH_FAILURE_EXIT_CODE = 127
