import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqladmin import Admin

from clubhub.admin import ADMIN_VIEWS, AdminAuth
from clubhub.api.admin import router as admin_router
from clubhub.api.auth import router as auth_router
from clubhub.api.events import router as events_router
from clubhub.api.gallery import router as gallery_router
from clubhub.api.resources import router as resources_router
from clubhub.api.user import router as user_router
from clubhub.auth_utils import get_auth_settings
from clubhub.dependencies import get_image_host_instance, set_image_host_instance
from clubhub.exceptions import register_exception_handlers
from clubhub.image_host import S3ImageHost
from clubhub.logging_config import configure_logging
from clubhub.models.db import get_engine, init_db

# uvicorn imports this module on startup, so logging is configured before it serves
configure_logging()

logger = logging.getLogger(__name__)


class AppSettings(BaseSettings):
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    create_tables: bool = True

    model_config = SettingsConfigDict(env_prefix="APP_", env_file=".env", extra="ignore")


app_settings = AppSettings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and the image host client on startup; close the client on shutdown."""
    logger.info("Starting up application...")
    if app_settings.create_tables:
        init_db()

    owned_host: S3ImageHost | None = None
    try:
        get_image_host_instance()
    except RuntimeError:
        try:
            owned_host = S3ImageHost()
            set_image_host_instance(owned_host)
            logger.info("Image host client initialized successfully")
        except Exception as e:
            logger.error("Failed to initialize image host client: %s", e)
            raise

    yield

    logger.info("Shutting down application...")
    if owned_host is not None:
        try:
            await owned_host.close()
            logger.info("Image host client closed successfully")
        except Exception as e:
            logger.error("Error during image host client shutdown: %s", e)
        set_image_host_instance(None)


app = FastAPI(title="clubhub", redoc_url=None, redirect_slashes=False, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(gallery_router)
app.include_router(events_router)
app.include_router(resources_router)
app.include_router(admin_router)

# /admin is taken by the JSON admin routes
admin = Admin(app, get_engine(), base_url="/dashboard", authentication_backend=AdminAuth(secret_key=get_auth_settings().jwt_secret_key))
for view in ADMIN_VIEWS:
    admin.add_view(view)


@app.get("/")
def read_root():
    return {"message": "Hello from clubhub!"}
