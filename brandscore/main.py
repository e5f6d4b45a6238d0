"""
Brand Score FastAPI application — main entry point.
Quiz catalog, AI-backed brand audit, lead capture and report retrieval.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .database import connect_db, close_db, get_db
from .middleware.rate_limit import RateLimitMiddleware
from .routers.audit_router import router as audit_router
from .routers.leads_router import router as leads_router
from .routers.reports_router import router as reports_router
from .services.audit import build_audit_context

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await connect_db()
    except Exception as e:
        logger.warning(f"MongoDB not available — using in-memory store: {e}")
        await close_db()

    app.state.audit_ctx = build_audit_context(settings)

    yield

    await app.state.audit_ctx.aclose()
    await close_db()


app = FastAPI(
    title="Brand Score API",
    description=(
        "**Brand Score** — lead-generation brand audit\n\n"
        "Features:\n"
        "- 16-question brand questionnaire\n"
        "- Mobile PageSpeed scan (performance, SEO, stack, critical issues)\n"
        "- Gemini analysis with Google Search grounding\n"
        "- Deterministic fallback report when AI is unavailable\n"
        "- Lead capture, CRM webhook and shareable report links\n"
    ),
    version="1.0.0",
    docs_url="/docs" if settings.environment != "production" else None,
    redoc_url="/redoc" if settings.environment != "production" else None,
    lifespan=lifespan,
)

app.add_middleware(RateLimitMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(audit_router)
app.include_router(leads_router)
app.include_router(reports_router)


@app.get("/", tags=["Health"])
async def root():
    return {"service": "Brand Score API", "version": "1.0.0", "status": "running", "docs": "/docs"}


@app.api_route("/health", methods=["GET", "HEAD"], tags=["Health"])
async def health():
    return {
        "status": "ok",
        "database": "connected" if get_db() is not None else "in-memory fallback",
        "environment": settings.environment,
        "ai_enabled": bool(settings.google_gemini_api_key),
        "pagespeed_enabled": bool(settings.pagespeed_api_key),
    }
