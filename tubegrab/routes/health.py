"""
Rutas de health check y bienvenida.
"""
import os
from shutil import which

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..core.enums import ToolName
from ..schemas import BinaryInfo, HealthResponse
from ..services import executable_locator

router = APIRouter(tags=["Health"])


@router.get("/")
def read_root():
    """Endpoint de bienvenida."""
    return JSONResponse(content={"message": "Welcome to TubeGrab API"})


@router.get("/health", response_model=HealthResponse)
def health_check():
    """
    Healthcheck que valida presencia de binarios externos requeridos.

    Returns:
        200: Todos los binarios disponibles
        503: Falta algún binario requerido
    """
    binaries_status = {}
    all_ok = True

    for tool in ToolName:
        path = executable_locator.locate(tool)
        # Una ruta absoluta ya fue verificada; un nombre de comando se busca en PATH
        ok = os.path.isabs(path) or which(path) is not None
        binaries_status[tool.value] = BinaryInfo(path=path, installed=ok)

        if not ok:
            all_ok = False

    status_code = 200 if all_ok else 503
    health = HealthResponse(status="ok" if all_ok else "degraded", binaries=binaries_status)

    return JSONResponse(status_code=status_code, content=health.model_dump())
