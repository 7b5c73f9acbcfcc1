"""
Scheduler para limpieza automática del servidor.
Usa APScheduler para borrar temporales abandonados y podar el progreso de jobs terminados.
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED

from ..core.config import cleanup_settings
from .file_manager import file_manager
from .job_manager import job_manager


class CleanupScheduler:
    """
    Programador de tareas de limpieza automática.
    Ejecuta limpiezas periódicas según configuración.
    """

    def __init__(self):
        self.scheduler = BackgroundScheduler(
            job_defaults={
                'coalesce': True,  # Combinar ejecuciones perdidas en una sola
                'max_instances': 1,
                'misfire_grace_time': 300
            }
        )
        self.logger = logging.getLogger(__name__)
        self._started = False

    def start(self) -> None:
        """Inicia el scheduler si está habilitado."""
        if not cleanup_settings.TEMP_CLEANUP_ENABLED:
            self.logger.info("Cleanup scheduler disabled by configuration")
            return

        if self._started:
            self.logger.warning("Cleanup scheduler already started")
            return

        self.scheduler.add_job(
            func=self.run_cleanup,
            trigger=IntervalTrigger(minutes=cleanup_settings.TEMP_CLEANUP_INTERVAL_MINUTES),
            id='cleanup_temp',
            name='Cleanup Temp',
            replace_existing=True,
        )
        self.scheduler.add_listener(self._job_error, EVENT_JOB_ERROR)
        self.scheduler.add_listener(self._job_missed, EVENT_JOB_MISSED)
        self.scheduler.start()
        self._started = True

        self.logger.info(
            f"Cleanup scheduler started interval_minutes={cleanup_settings.TEMP_CLEANUP_INTERVAL_MINUTES} "
            f"max_age_minutes={cleanup_settings.TEMP_MAX_AGE_MINUTES}"
        )

    def stop(self) -> None:
        """Detiene el scheduler."""
        if not self._started:
            return

        self.scheduler.shutdown(wait=False)
        self._started = False
        self.logger.info("Cleanup scheduler stopped")

    def run_cleanup(self) -> dict:
        """
        Ejecuta una pasada de limpieza (llamada por el scheduler).

        Returns:
            Dict con el número de temporales y estados de progreso eliminados
        """
        files_deleted = file_manager.cleanup_stale_temp_files(cleanup_settings.TEMP_MAX_AGE_MINUTES)
        progress_pruned = job_manager.prune_progress(cleanup_settings.PROGRESS_TTL_SECONDS)

        if files_deleted or progress_pruned:
            self.logger.info(
                f"Temp cleanup completed files_deleted={files_deleted} progress_pruned={progress_pruned}"
            )
        return {"files_deleted": files_deleted, "progress_pruned": progress_pruned}

    def _job_error(self, event):
        """Callback cuando un job falla."""
        self.logger.error(f"Job '{event.job_id}' raised an error: {event.exception}")

    def _job_missed(self, event):
        """Callback cuando un job se pierde."""
        self.logger.warning(
            f"Job '{event.job_id}' was missed, scheduled for {event.scheduled_run_time}"
        )


# Instancia global del scheduler
cleanup_scheduler = CleanupScheduler()
