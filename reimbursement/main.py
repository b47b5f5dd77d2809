import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from reimbursement.core.config import settings
from reimbursement.core.errors import register_exception_handlers
from reimbursement.core.logging import configure_logging
from reimbursement.db.base import Base
from reimbursement.db.session import engine

# registers the tables on Base.metadata
import reimbursement.models  # noqa: F401

from reimbursement.api.auth import router as auth_router
from reimbursement.api.expenses import router as expenses_router
from reimbursement.api.uploads import UPLOAD_DIR, UPLOAD_URL_PREFIX, router as uploads_router
from reimbursement.api.users import router as users_router

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    Base.metadata.create_all(bind=engine)
    logger.info("%s started (env=%s)", settings.APP_NAME, settings.ENV)
    yield
    engine.dispose()
    logger.info("%s shut down", settings.APP_NAME)


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# ROUTERS
app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
app.include_router(users_router, prefix="/api/users", tags=["users"])
app.include_router(expenses_router, prefix="/api/expenses", tags=["expenses"])
app.include_router(uploads_router, prefix="/api", tags=["uploads"])

# uploaded receipts
app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=UPLOAD_DIR), name="uploads")


@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}


def run():
    import uvicorn

    uvicorn.run("reimbursement.main:app", host="0.0.0.0", port=4000, reload=settings.is_development)
