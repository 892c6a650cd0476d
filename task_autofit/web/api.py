"""
FastAPI wrapper around the auto-fit engine.

This exposes a minimal HTTP API so a frontend can:
- check the service is up
- run auto-fit on a snapshot it already has (tasks, events, placements, settings)

What this does NOT do:
- no auth, no provider calls, no storage: the caller sends everything the engine needs
  and persists whatever it decides to keep
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import Field

from task_autofit import config
from task_autofit.autofit import run_auto_fit
from task_autofit.errors import InvalidWallTimeError, TimezoneResolutionError
from task_autofit.models import AutoFitRequest, AutoFitResult, Placement

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Logging is configured at server startup
    config.configure_logging()
    yield


# Create the FastAPI app object (the web server routes requests to functions below)
app = FastAPI(title="Task Auto-Fit API", version="0.3.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=False,      # Must be False when allow_origins is "*"
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------------
# Response models (API contracts)
# ----------------------------

class AutoFitResponse(AutoFitResult):
    """
    Engine result plus the merged placement list for the day (existing + new),
    so the UI can replace its state in one step.
    """
    all_placements: list[Placement] = Field(default_factory=list)


# ----------------------------
# Endpoints
# ----------------------------

@app.get("/health")
def health():
    """
    Health check endpoint.
    Used to confirm the service is running.
    """
    return {"ok": True}


@app.post("/autofit", response_model=AutoFitResponse, response_model_by_alias=True)
def autofit(req: AutoFitRequest):
    """
    Read-only: compute placements for the requested day.

    Steps:
    1) Validate the snapshot (pydantic -> 422 on malformed input)
    2) Run the engine in the requested timezone
    3) Return new placements, unplaced tasks, the summary message and the merged list
    """
    try:
        result = run_auto_fit(req)
    except (TimezoneResolutionError, InvalidWallTimeError) as e:
        # Convert to a clean 400 so the frontend can show the message
        raise HTTPException(status_code=400, detail=str(e)) from e

    logger.info("POST /autofit %s: %s", req.date, result.message)
    return AutoFitResponse(
        placements=result.placements,
        unplaced_tasks=result.unplaced_tasks,
        message=result.message,
        all_placements=[*req.existing_placements, *result.placements],
    )
