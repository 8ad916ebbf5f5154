"""FastAPI application initialization."""

from contextlib import asynccontextmanager

from dotenv import load_dotenv

# Load environment variables before anything else
load_dotenv()

from fastapi import FastAPI

from courier.api.auth import router as auth_router
from courier.api.error_handlers import register_error_handlers
from courier.api.messages import router as messages_router
from courier.api.middleware import RequestContextMiddleware
from courier.api.routes import router
from courier.api.users import router as users_router
from courier.config import get_settings
from courier.services.credential_service import CredentialService
from courier.services.logging_service import configure_logging, get_logger


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the database pool at startup and close it at shutdown."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger = get_logger("main")

    from courier.database import close_database, init_database, run_migrations

    await init_database()
    await run_migrations()
    # Builds the cached dummy hash before the first login arrives
    CredentialService()
    logger.info("application_started", log_level=settings.log_level)

    yield

    await close_database()
    logger.info("application_shutdown")


app = FastAPI(
    title="Courier",
    description="Direct messaging between registered users",
    version="0.1.0",
    lifespan=lifespan,
)

register_error_handlers(app)

# Correlation id and access log for every request
app.add_middleware(RequestContextMiddleware)

app.include_router(auth_router)
app.include_router(users_router)
app.include_router(messages_router)
app.include_router(router)
