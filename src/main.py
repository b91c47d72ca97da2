import tomllib
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.auth.router import router as auth_router
from src.config import get_client_base_url
from src.db.audit_logs.router import router as audit_logs_router
from src.db.database import close_db
from src.db.feature_flags.router import router as feature_flags_router
from src.db.phone_numbers.router import router as phone_numbers_router
from src.db.profiles.router import router as profiles_router
from src.db.tenants.router import router as tenants_router
from src.integrations.connectwise.router import router as connectwise_router
from src.integrations.creds.router import router as creds_router
from src.integrations.teams.router import router as teams_router
from src.integrations.teams.session import get_session_manager
from src.utils.logger import logger
from src.workflows.router import router as workflows_router


def get_version():
    """Get version from pyproject.toml"""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    return data["project"]["version"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Voice Manager API starting", version=app.version)
    yield
    session_manager = get_session_manager()
    if session_manager is not None:
        await session_manager.close_all()
    await close_db()
    logger.info("Voice Manager API stopped")


app = FastAPI(
    title="Voice Manager API",
    description="Microsoft Teams voice administration for managed tenants",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_client_base_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(tenants_router, prefix="/api")
app.include_router(phone_numbers_router, prefix="/api")
app.include_router(profiles_router, prefix="/api")
app.include_router(creds_router, prefix="/api")
app.include_router(teams_router, prefix="/api")
app.include_router(connectwise_router, prefix="/api")
app.include_router(workflows_router, prefix="/api")
app.include_router(audit_logs_router, prefix="/api")
app.include_router(feature_flags_router, prefix="/api")


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "Voice Manager API is running"}
