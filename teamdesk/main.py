import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from teamdesk.api.activity_routes import router as activity_router
from teamdesk.api.announcement_routes import router as announcement_router
from teamdesk.api.documentation_routes import router as documentation_router
from teamdesk.api.domain_routes import router as domain_router
from teamdesk.api.leaderboard_routes import router as leaderboard_router
from teamdesk.api.site_status_routes import router as site_status_router
from teamdesk.api.suggestion_routes import router as suggestion_router
from teamdesk.api.task_routes import router as task_router
from teamdesk.api.user_routes import router as user_router
from teamdesk.config import get_settings
from teamdesk.db import models as _models  # noqa: F401
from teamdesk.db.base import Base
from teamdesk.db.session import engine

logger = logging.getLogger(__name__)

settings = get_settings()
if not settings.auth_enabled:
    logger.warning("authentication is disabled; every request runs as the system super-admin")

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(user_router)
app.include_router(domain_router)
app.include_router(task_router)
app.include_router(announcement_router)
app.include_router(documentation_router)
app.include_router(suggestion_router)
app.include_router(leaderboard_router)
app.include_router(activity_router)
app.include_router(site_status_router)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


if settings.enable_autocreate_schema:
    Base.metadata.create_all(bind=engine)
