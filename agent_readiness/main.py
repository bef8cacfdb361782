from __future__ import annotations

import logging
import os
from pathlib import Path

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import load_settings
from .errors import ScoringInputError
from .models import ScoreRequest, ScoringResult
from .scorer import score
from .store import ReportStore
from .urls import normalize_url

logging.basicConfig(
    level=os.getenv("AGENT_READINESS_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Load .env from the repo root so local dev picks up AGENT_READINESS_* overrides.
_HERE = Path(__file__).resolve()
settings = load_settings(_HERE.parents[1] / ".env")

app = FastAPI(title="Agent Readiness Scorer", version="0.1.0")
store = ReportStore(ttl_seconds=settings.cache_ttl_hours * 3600, max_reports=settings.max_reports)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/api/score", response_model=ScoringResult)
async def score_endpoint(req: ScoreRequest):
    if not req.url or not req.url.strip():
        raise HTTPException(status_code=400, detail="URL required")

    try:
        origin = normalize_url(req.url).origin
    except ScoringInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    cached = store.fresh(origin)
    if cached is not None:
        logger.info("event=scan_cached url=%s id=%s", origin, cached.id)
        return cached

    try:
        result = await score(req.url, settings=settings)
    except ScoringInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("scoring %s failed", origin)
        raise HTTPException(status_code=500, detail="Scoring failed")

    store.put(result)
    logger.info("event=scan url=%s id=%s score=%d", result.url, result.id, result.total_score)
    return result


@app.get("/api/report/{report_id}", response_model=ScoringResult)
def report_endpoint(report_id: str):
    result = store.get(report_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return result
