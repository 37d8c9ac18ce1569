import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from pageguard.api import routes
from pageguard.config import settings
from pageguard.database import SessionLocal, get_db, init_db
from pageguard.services.trust_store import TrustedDomainStore

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting {settings.APP_NAME} {settings.VERSION}...")
    init_db()
    db = SessionLocal()
    try:
        trusted = TrustedDomainStore(db).list_domains()
    finally:
        db.close()
    logger.info(f"✓ Database ready, {len(trusted)} trusted domains configured")
    yield
    logger.info(f"👋 Shutting down {settings.APP_NAME}...")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Rule-based phishing risk scoring for captured page snapshots",
    debug=settings.DEBUG,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(routes.router, prefix=settings.API_PREFIX, tags=["PageGuard"])


@app.get("/")
def root():
    return {
        "message": f"{settings.APP_NAME} API",
        "version": settings.VERSION,
        "api": settings.API_PREFIX,
        "docs": "/docs",
    }


@app.get("/health")
def health(db: Session = Depends(get_db)):
    """Liveness plus a database round trip"""
    db.execute(text("SELECT 1"))
    return {"status": "ok", "trustedDomains": len(TrustedDomainStore(db).list_domains())}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pageguard.main:app", host="0.0.0.0", port=8000, reload=False)
