# main.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from swiftloan.api import routes_sessions
from swiftloan.core.config import settings

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app():
    app = FastAPI(title=settings.APP_NAME)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(routes_sessions.router, prefix="/api")

    @app.get("/api/health")
    def health():
        return {"status": "ok", "model": settings.GOOGLE_MODEL}

    return app


app = create_app()
