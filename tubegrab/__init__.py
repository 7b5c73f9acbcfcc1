"""
TubeGrab: API para consultar y descargar videos con yt-dlp y ffmpeg.
"""
