"""
Gestor de jobs de descarga.
Mantiene un registro de procesos en ejecución y del progreso de cada job,
y permite su consulta y terminación.
"""
import logging
import os
import re
import signal
import subprocess
import threading
import time
from typing import Dict, List, Optional, Tuple

from ..core.config import settings
from ..core.constants import (
    PROGRESS_PERCENT_PATTERN,
    PROGRESS_DESTINATION_PATTERN,
    PROGRESS_MERGER_PATTERN,
    PROGRESS_FIRST_STREAM_SPAN,
    PROGRESS_SECOND_STREAM_SPAN,
    PROGRESS_MERGING,
    PROGRESS_DONE,
)
from ..core.enums import JobStatus
from ..core.exceptions import JobConflictException

logger = logging.getLogger(__name__)

_PERCENT_RE = re.compile(PROGRESS_PERCENT_PATTERN)
_DESTINATION_RE = re.compile(PROGRESS_DESTINATION_PATTERN)
_MERGER_RE = re.compile(PROGRESS_MERGER_PATTERN)


class JobProgress:
    """Estado de progreso de un job."""

    def __init__(self, job_id: str):
        self.job_id = job_id
        self.status = JobStatus.STARTING
        self.progress = 0.0
        self.updated_at = time.time()
        # Se incrementa con cada línea "[download] Destination:"
        self.stream_index = -1

    def advance(self, value: float) -> None:
        """Actualiza el porcentaje sin permitir retrocesos."""
        self.progress = max(self.progress, min(value, PROGRESS_DONE))
        self.updated_at = time.time()


class JobManager:
    """
    Gestor centralizado de jobs de descarga.
    Implementa el patrón Singleton para mantener un registro único de procesos.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Implementación del patrón Singleton."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Inicializa el gestor de jobs."""
        if self._initialized:
            return

        self._registry: Dict[str, subprocess.Popen] = {}
        self._progress: Dict[str, JobProgress] = {}
        self._initialized = True

    # === Procesos ===

    def register_job(self, job_id: str, process: subprocess.Popen) -> None:
        """
        Registra un proceso de descarga.

        Args:
            job_id: Identificador único del job
            process: Proceso Popen asociado

        Raises:
            JobConflictException: Si otro proceso sigue registrado con ese job_id
        """
        with self._lock:
            current = self._registry.get(job_id)
            if current is not None and current is not process and current.poll() is None:
                raise JobConflictException(job_id)
            self._registry[job_id] = process

    def unregister_job(self, job_id: str, process: Optional[subprocess.Popen] = None) -> None:
        """
        Elimina un proceso del registro.

        Si se indica process, solo se elimina cuando es el proceso registrado.
        """
        with self._lock:
            if process is not None and self._registry.get(job_id) is not process:
                return
            self._registry.pop(job_id, None)

    def get_job_process(self, job_id: str) -> Optional[subprocess.Popen]:
        with self._lock:
            return self._registry.get(job_id)

    def terminate_job(self, job_id: str, timeout: float = None) -> bool:
        """
        Intenta terminar un proceso de forma controlada.

        Args:
            job_id: Identificador del job a terminar
            timeout: Tiempo de espera en segundos (default desde settings)

        Returns:
            True si se envió la señal de terminación
        """
        if timeout is None:
            timeout = settings.JOB_TERMINATION_TIMEOUT

        process = self.get_job_process(job_id)
        if not process:
            return False

        try:
            kill_process(process, signal.SIGTERM)
            try:
                process.wait(timeout=timeout)
            except subprocess.TimeoutExpired:
                kill_process(process, signal.SIGKILL)
        finally:
            self.unregister_job(job_id, process)

        return True

    def terminate_all(self) -> None:
        """Termina todos los jobs registrados de forma ordenada."""
        with self._lock:
            job_ids = list(self._registry.keys())

        for job_id in job_ids:
            try:
                self.terminate_job(job_id)
            except OSError as e:
                # Continuar con otros jobs incluso si uno falla
                logger.error(f"Failed to terminate job job_id={job_id} error={e}")

    def get_active_jobs(self) -> List[str]:
        with self._lock:
            return list(self._registry.keys())

    # === Progreso ===

    def start_progress(self, job_id: str) -> None:
        """
        Crea el estado de progreso de un job.

        Un job_id ya terminado puede reutilizarse; uno en curso no.

        Raises:
            JobConflictException: Si el job_id tiene una descarga en curso
        """
        with self._lock:
            current = self._progress.get(job_id)
            if current is not None and not current.status.is_terminal:
                raise JobConflictException(job_id)
            self._progress[job_id] = JobProgress(job_id)

    def update_from_line(self, job_id: str, line: str) -> None:
        """
        Actualiza el progreso a partir de una línea de salida de yt-dlp.

        El primer stream ocupa el tramo 0-60, el segundo 60-90 y el merge
        con ffmpeg se marca en 95. Las líneas no reconocidas se ignoran.

        Args:
            job_id: Identificador del job
            line: Línea de salida (con --newline)
        """
        with self._lock:
            state = self._progress.get(job_id)
            if state is None or state.status.is_terminal:
                return

            if _DESTINATION_RE.search(line):
                state.stream_index += 1
                state.status = JobStatus.DOWNLOADING
                state.updated_at = time.time()
                return

            if _MERGER_RE.search(line):
                state.status = JobStatus.MERGING
                state.advance(PROGRESS_MERGING)
                return

            match = _PERCENT_RE.search(line)
            if not match:
                return

            try:
                percent = float(match.group(1))
            except ValueError:
                return

            state.status = JobStatus.DOWNLOADING
            if state.stream_index <= 0:
                state.advance(percent * PROGRESS_FIRST_STREAM_SPAN / 100.0)
            else:
                state.advance(
                    PROGRESS_FIRST_STREAM_SPAN + percent * PROGRESS_SECOND_STREAM_SPAN / 100.0
                )

    def finish_progress(self, job_id: str) -> None:
        self._set_terminal(job_id, JobStatus.FINISHED)

    def fail_progress(self, job_id: str) -> None:
        self._set_terminal(job_id, JobStatus.FAILED)

    def _set_terminal(self, job_id: str, status: JobStatus) -> None:
        with self._lock:
            state = self._progress.get(job_id)
            if state is None:
                return
            state.status = status
            if status == JobStatus.FINISHED:
                state.advance(PROGRESS_DONE)
            state.updated_at = time.time()

    def get_progress(self, job_id: str) -> Tuple[JobStatus, float]:
        """
        Obtiene el estado y porcentaje de un job.

        Returns:
            Tupla (estado, porcentaje); (UNKNOWN, 0.0) si no existe
        """
        with self._lock:
            state = self._progress.get(job_id)
            if state is None:
                return JobStatus.UNKNOWN, 0.0
            return state.status, round(state.progress, 1)

    def prune_progress(self, max_age_seconds: float) -> int:
        """
        Elimina estados terminados más antiguos que max_age_seconds.

        Returns:
            Número de entradas eliminadas
        """
        cutoff = time.time() - max_age_seconds
        with self._lock:
            stale = [
                job_id for job_id, state in self._progress.items()
                if state.status.is_terminal and state.updated_at < cutoff
            ]
            for job_id in stale:
                del self._progress[job_id]
        return len(stale)


def kill_process(process: subprocess.Popen, sig: int) -> None:
    """Envía una señal al grupo del proceso, o al proceso si no hay grupo."""
    try:
        if hasattr(os, "killpg"):
            os.killpg(os.getpgid(process.pid), sig)
            return
    except (ProcessLookupError, PermissionError):
        pass

    try:
        if sig == signal.SIGTERM:
            process.terminate()
        else:
            process.kill()
    except ProcessLookupError:
        pass


# Instancia global del gestor
job_manager = JobManager()
