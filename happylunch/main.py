import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from . import local_storage, models  # noqa: F401  (registers tables on Base)
from .config import configure_logging, settings
from .database import Base, SessionLocal, engine
from .realtime import router as realtime_router
from .repositories import users as user_repository
from .responses import ok, register_exception_handlers
from .routes import admin, auth, favorites, notifications, restaurants, reviews, uploads

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and grant admin roles from ADMIN_EMAILS on startup."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        promoted = user_repository.promote_admins(db, settings.admin_emails)
        if promoted:
            logger.info("Promoted %d account(s) from ADMIN_EMAILS", promoted)
    finally:
        db.close()
    logger.info("Happy Lunch API ready")
    yield


app = FastAPI(title="Happy Lunch", lifespan=lifespan)

register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount the uploads directory to serve files
app.mount("/uploads", StaticFiles(directory=local_storage.ensure_upload_dir()), name="uploads")

app.include_router(auth.router)
app.include_router(restaurants.router)
app.include_router(reviews.router)
app.include_router(favorites.router)
app.include_router(notifications.router)
app.include_router(admin.router)
app.include_router(uploads.router)
app.include_router(realtime_router)


@app.get("/health")
async def health_check():
    return ok("Server is running", status="OK")


def run():
    uvicorn.run("happylunch.main:app", host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
