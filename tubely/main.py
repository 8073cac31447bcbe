"""
➡️ But : assembler toutes les pièces du puzzle.

Crée l'instance FastAPI (app), configure le logging, CORS, le schéma OpenAPI,
inclut les routers (/api/v1/...) et monte ASSETS_ROOT sur /assets.

Point unique d'exécution : uvicorn tubely.main:app --reload.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from tubely.core.config import settings
from tubely.core.openapi import custom_openapi
from tubely.db.session import init_db
from tubely.api.v1.routers import authentication, videos, thumbnails

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    settings.ASSETS_ROOT.mkdir(parents=True, exist_ok=True)
    logger.info("assets root: %s, bucket: %s", settings.ASSETS_ROOT.resolve(), settings.S3_BUCKET)
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="0.0.1",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "auth", "description": "Comptes et tokens"},
        {"name": "videos", "description": "Vidéos : métadonnées et upload du fichier"},
        {"name": "thumbnails", "description": "Miniatures des vidéos"},
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], allow_credentials=True,
    allow_methods=["*"], allow_headers=["*"],
)

# Routers
app.include_router(authentication.router, prefix="/api/v1")
app.include_router(videos.router, prefix="/api/v1")
app.include_router(thumbnails.router, prefix="/api/v1")

# Miniatures servies depuis le disque local
app.mount("/assets", StaticFiles(directory=settings.ASSETS_ROOT, check_dir=False), name="assets")

app.openapi = lambda: custom_openapi(app)

if __name__ == "__main__":
    uvicorn.run("tubely.main:app", host="0.0.0.0", port=settings.PORT, reload=(settings.ENV == "dev"))
