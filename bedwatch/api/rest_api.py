"""
REST API for the availability dashboard and upload automation.
Serves the stored history, the aggregated view model, and the CSV upload.
"""

import os
import secrets
from datetime import datetime
from typing import Optional

from fastapi import Depends, FastAPI, File, Header, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field

from ..config import ADMIN_PASSWORD, ALL
from ..logger import setup_logger
from ..models import GroupKey
from ..services.aggregation_service import (
    SORT_FIELDS,
    RowFilter,
    get_aggregation_service,
)
from ..services.ingestion_service import IngestionService, IngestStatus
from .store import SnapshotStore, get_store

logger = setup_logger(__name__)

API_VERSION = "v1"


# ============================================================================
# Models
# ============================================================================

class HealthResponse(BaseModel):
    """API health check response."""
    status: str
    version: str
    timestamp: datetime


class UploadResponse(BaseModel):
    """Successful (or idempotently skipped) upload."""
    success: bool = True
    skipped: bool = False
    message: str
    rowsImported: int = Field(0, description="Rows stored in the new snapshot")
    totalSnapshots: int = Field(0, description="Snapshots in the history after the upload")
    timestamp: Optional[datetime] = Field(None, description="Snapshot timestamp")


class TrendResponse(BaseModel):
    """Trend of one (building, room type) bucket."""
    building: str
    roomType: str
    gender: str
    genders: list
    points: list
    start: int
    current: int
    filledPct: int


# ============================================================================
# API Security
# ============================================================================

async def verify_admin_password(x_admin_password: Optional[str] = Header(None, alias="x-admin-password")):
    """Check the upload password header against BEDWATCH_ADMIN_PASSWORD."""
    expected = os.environ.get("BEDWATCH_ADMIN_PASSWORD", ADMIN_PASSWORD)
    if not expected:
        raise HTTPException(status_code=500, detail="BEDWATCH_ADMIN_PASSWORD environment variable not set on server.")

    # Constant-time comparison to prevent timing attacks
    if not x_admin_password or not secrets.compare_digest(x_admin_password, expected):
        raise HTTPException(status_code=401, detail="Invalid password.")

    return x_admin_password


# ============================================================================
# FastAPI App
# ============================================================================

api = FastAPI(
    title="Bed Availability API",
    description="Housing bed-space history and upload endpoint",
    version=API_VERSION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)


@api.get("/api/health", response_model=HealthResponse, tags=["System"])
async def health_check():
    """Check if API is running."""
    return HealthResponse(status="healthy", version=API_VERSION, timestamp=datetime.now())


@api.get("/api/data", tags=["History"])
def get_history(store: SnapshotStore = Depends(get_store)):
    """
    Full stored history.

    Missing or unreadable storage returns an empty history, never an error.
    """
    return store.load().to_dict()


@api.get("/api/view", tags=["History"])
def get_view(
    gender: str = Query(ALL, description="Gender filter"),
    building: str = Query(ALL, description="Building filter"),
    room_type: str = Query(ALL, description="Room type filter"),
    q: str = Query("", description="Search in building or room type"),
    sort: str = Query("total_beds", description="building, room_type, total_beds or change"),
    direction: Optional[str] = Query(None, pattern="^(asc|desc)$"),
    store: SnapshotStore = Depends(get_store),
):
    """Grouped availability for the latest snapshot with change and baselines."""
    if sort not in SORT_FIELDS:
        raise HTTPException(status_code=400, detail=f"Unknown sort field: {sort}")

    ascending = None if direction is None else direction == "asc"
    view = get_aggregation_service().build_view(
        store.load(),
        RowFilter(gender=gender, building=building, room_type=room_type, search=q),
        sort_field=sort,
        ascending=ascending,
    )
    return view.to_dict()


@api.get("/api/trend", response_model=TrendResponse, tags=["History"])
def get_trend(
    building: str = Query(..., description="Building"),
    room_type: str = Query(..., description="Room type"),
    gender: str = Query(ALL, description="Gender filter"),
    store: SnapshotStore = Depends(get_store),
):
    """Bed totals of one bucket across every snapshot, oldest first."""
    service = get_aggregation_service()
    history = store.load()
    key = GroupKey(building, room_type)

    points = list(service.trend_series(history, key, gender))
    summary = service.trend_summary(points)

    return TrendResponse(
        building=building,
        roomType=room_type,
        gender=gender,
        genders=service.trend_genders(history, key),
        points=[point.to_dict() for point in points],
        start=summary['start'],
        current=summary['current'],
        filledPct=summary['filled_pct'],
    )


@api.post("/api/upload", response_model=UploadResponse, tags=["Upload"])
async def upload_snapshot(
    file: Optional[UploadFile] = File(None),
    store: SnapshotStore = Depends(get_store),
    _: str = Depends(verify_admin_password),
):
    """
    Import one availability CSV as a new snapshot.

    A snapshot whose timestamp is already stored is skipped and reported as success.
    """
    payload = await file.read() if file is not None else None
    result = IngestionService(store).ingest(payload)

    if result.status == IngestStatus.NO_FILE:
        raise HTTPException(status_code=400, detail=result.message)
    if result.status == IngestStatus.NO_ROWS:
        raise HTTPException(status_code=400, detail=result.message)
    if result.status == IngestStatus.STORE_FAILED:
        logger.error(f"Upload failed: {result.message}")
        raise HTTPException(status_code=503, detail=result.message)

    return UploadResponse(
        skipped=result.status == IngestStatus.DUPLICATE,
        message=result.message,
        rowsImported=result.rows_imported,
        totalSnapshots=result.total_snapshots,
        timestamp=result.timestamp,
    )


# ============================================================================
# Run standalone
# ============================================================================


if __name__ == "__main__":
    import uvicorn

    print("Starting bed availability API on http://0.0.0.0:8000")
    uvicorn.run(api, host="0.0.0.0", port=8000)
