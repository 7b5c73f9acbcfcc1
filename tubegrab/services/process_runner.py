"""
Ejecución de procesos externos.
Envuelve subprocess para capturar salida, código de salida y timeouts
de forma uniforme, sin lanzar excepciones por fallos del binario.
"""
import logging
import signal
import subprocess
import threading
import time
from collections import deque
from typing import Callable, Deque, List, Optional

from ..core.config import settings
from ..core.constants import LAUNCH_FAILURE_EXIT_CODE
from ..managers.job_manager import job_manager, kill_process

logger = logging.getLogger(__name__)


class ProcessResult:
    """Resultado de la ejecución de un proceso externo."""

    def __init__(
        self,
        returncode: int,
        stdout: str = "",
        stderr: str = "",
        timed_out: bool = False,
        elapsed: float = 0.0,
    ):
        self.returncode = returncode
        self.stdout = stdout or ""
        self.stderr = stderr or ""
        self.timed_out = timed_out
        self.elapsed = elapsed

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out

    @property
    def diagnostics(self) -> str:
        """Texto más útil para diagnosticar un fallo."""
        return self.stderr.strip() or self.stdout.strip()


class ProcessRunner:
    """Lanza binarios externos y recoge su resultado."""

    def run(self, command: List[str], timeout: Optional[float] = None) -> ProcessResult:
        """
        Ejecuta un comando y espera a que termine.

        Args:
            command: argv completo
            timeout: Límite en segundos (None: sin límite)

        Returns:
            ProcessResult; un binario inexistente devuelve código 127
        """
        start = time.monotonic()
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            return ProcessResult(
                returncode=-1,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr) or f"Timed out after {timeout} seconds",
                timed_out=True,
                elapsed=time.monotonic() - start,
            )
        except OSError as e:
            logger.error(f"Failed to launch process executable={command[0]} error={e}")
            return ProcessResult(
                returncode=LAUNCH_FAILURE_EXIT_CODE,
                stderr=str(e),
                elapsed=time.monotonic() - start,
            )

        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
            elapsed=time.monotonic() - start,
        )

    def run_streaming(
        self,
        command: List[str],
        on_line: Optional[Callable[[str], None]] = None,
        timeout: Optional[float] = None,
        job_id: Optional[str] = None,
    ) -> ProcessResult:
        """
        Ejecuta un comando leyendo su salida línea a línea.

        stdout y stderr se combinan; cada línea se entrega a on_line desde
        un thread lector. Si se supera el timeout el proceso se mata y el
        resultado queda marcado como timed_out. Mientras corre, el proceso
        queda registrado en el job_manager para poder terminarlo al apagar.

        Args:
            command: argv completo
            on_line: Callback por línea (sin salto de línea final)
            timeout: Límite de tiempo total en segundos
            job_id: Identificador del job para el registro de procesos

        Returns:
            ProcessResult con las últimas líneas de la salida combinada en stdout

        Raises:
            JobConflictException: Si job_id ya tiene un proceso en ejecución
        """
        start = time.monotonic()
        try:
            process = subprocess.Popen(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                start_new_session=True,
            )
        except OSError as e:
            logger.error(f"Failed to launch process executable={command[0]} error={e}")
            return ProcessResult(
                returncode=LAUNCH_FAILURE_EXIT_CODE,
                stderr=str(e),
                elapsed=time.monotonic() - start,
            )

        if job_id:
            try:
                job_manager.register_job(job_id, process)
            except Exception:
                kill_process(process, getattr(signal, "SIGKILL", signal.SIGTERM))
                process.wait()
                if process.stdout is not None:
                    process.stdout.close()
                raise

        # Solo se conserva la cola de la salida para diagnóstico
        lines: Deque[str] = deque(maxlen=settings.MAX_LOG_LINES)

        def _read_output() -> None:
            if process.stdout is None:
                return
            # readline() evita el buffer de lectura anticipada de "for line in"
            while True:
                line = process.stdout.readline()
                if not line:
                    break
                line = line.rstrip("\r\n")
                lines.append(line)
                if on_line and line:
                    try:
                        on_line(line)
                    except Exception:
                        logger.exception(f"Output callback failed line={line!r}")

        reader = threading.Thread(target=_read_output, daemon=True)

        timed_out = False
        try:
            reader.start()
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            timed_out = True
            logger.error(f"Process timed out, killing executable={command[0]} timeout={timeout}")
            kill_process(process, getattr(signal, "SIGKILL", signal.SIGTERM))
            process.wait()
        except Exception:
            # Sin lector el proceso no puede seguir; se mata antes de propagar
            kill_process(process, getattr(signal, "SIGKILL", signal.SIGTERM))
            process.wait()
            raise
        finally:
            if job_id:
                job_manager.unregister_job(job_id, process)

        reader.join(timeout=5)
        if process.stdout is not None:
            process.stdout.close()

        return ProcessResult(
            returncode=process.returncode if not timed_out else -1,
            stdout="\n".join(lines),
            timed_out=timed_out,
            elapsed=time.monotonic() - start,
        )


def _decode(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


# Instancia global
process_runner = ProcessRunner()
