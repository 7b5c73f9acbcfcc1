from dotenv import load_dotenv
import uvicorn

if __name__ == "__main__":
    # Cargar variables de entorno desde .env antes de leer la configuración
    load_dotenv()

    from tubegrab.core.config import settings

    uvicorn.run(
        "tubegrab.api:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        workers=settings.WORKERS if not settings.RELOAD else 1
    )
