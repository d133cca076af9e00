"""
Server entry point: FastAPI app setup and route configuration.
Sets up the FastAPI server with CORS and the audit API routes.
"""

from __future__ import annotations

import contextlib
from collections.abc import AsyncGenerator

import dotenv
import fastapi
import uvicorn
from fastapi import responses
from fastapi.middleware import cors

from consentcheck import config
from consentcheck.analysis import vendors
from consentcheck.consent import catalog
from consentcheck.models import audit
from consentcheck.pipeline import audit as audit_pipeline
from consentcheck.utils import logger

dotenv.load_dotenv()

log = logger.create_logger("Server")


@contextlib.asynccontextmanager
async def lifespan(_app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
    """Log server start on startup."""
    settings = config.get_settings()
    log.section("Consent Check Server Started")
    log.info("Environment", {"env": settings.environment, "headless": settings.browser_headless})
    log.info("Supported banners", {"banners": ", ".join(catalog.banner_names())})
    log.info("Tracked vendors", {"vendors": ", ".join(vendors.vendor_names())})
    yield


app = fastapi.FastAPI(title="Consent Check Server", lifespan=lifespan)

# ============================================================================
# Middleware
# ============================================================================

app.add_middleware(
    cors.CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# API Routes
# ============================================================================


@app.get("/api/health")
async def health_endpoint() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/api/analyze")
async def analyze_endpoint(request: audit.AnalyzeRequest) -> responses.JSONResponse:
    """
    Audit a website's consent banner and pre-/post-consent tracking.

    Error-status results are returned with HTTP 500; malformed requests
    are rejected by validation with HTTP 422 before any browser starts.
    """
    log.info("Incoming analysis request", {"website": request.website, "banner": request.banner, "mode": request.mode})
    result = await audit_pipeline.run_audit(request)
    status_code = (
        fastapi.status.HTTP_500_INTERNAL_SERVER_ERROR if result.is_error else fastapi.status.HTTP_200_OK
    )
    return responses.JSONResponse(content=result.model_dump(), status_code=status_code)


# ============================================================================
# Start Server
# ============================================================================


def main() -> None:
    """Entry point for running the server."""
    settings = config.get_settings()
    log.success(f"Server listening on {settings.host}:{settings.port}")
    uvicorn.run(
        "consentcheck.app:app",
        host=settings.host,
        port=settings.port,
        reload=not settings.is_production,
    )


if __name__ == "__main__":
    main()
