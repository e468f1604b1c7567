# FastAPI main application entry point
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from talentrank.api import recommendations
from talentrank.api.recommendations import get_vector_store
from talentrank.database import init_db
from talentrank.config import get_settings
from talentrank.middleware.audit import AuditMiddleware

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="TalentRank API", version="1.0.0")

# Request tracing
app.add_middleware(AuditMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Include routers
app.include_router(recommendations.router)


@app.on_event("startup")
async def startup_event():
    """Initialize database on startup."""
    init_db()


@app.get("/")
async def root():
    return {"message": "TalentRank API is running"}


@app.get("/health")
async def health():
    """Report API status and vector store reachability."""
    vector_store_ok = await get_vector_store().health_check()
    return {"status": "ok", "vector_store": "ok" if vector_store_ok else "unavailable"}
