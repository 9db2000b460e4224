"""HTTP API handing wind readings to renderers and schedulers."""

import hmac
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator

from .config import settings
from .models import DataStatus, WindReading
from .service import WindWidgetService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="windwidget/api")


def require_api_key(x_api_key: str | None = Header(default=None)):
    """Validate the X-API-Key header against the configured key, if any."""
    if not settings.api_key:
        logger.debug("No API key configured; allowing all requests")
        return

    if not x_api_key:
        logger.debug("No API key provided")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API key")

    if hmac.compare_digest(str(x_api_key), str(settings.api_key)):
        return

    logger.debug("Invalid API key provided")
    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")


router = APIRouter(dependencies=[Depends(require_api_key)])
SERVICE = WindWidgetService(settings)


class WindReadingResponse(BaseModel):
    """Serialized reading plus the derived values renderers display."""
    location_name: str
    times: List[str]
    speeds: List[float]
    directions: List[float]
    gusts: List[float]
    current_speed: float
    current_direction: float
    current_gust: float
    status: DataStatus
    last_updated_millis: int
    max_speed: float
    max_gust: float
    direction_cardinal: str
    beaufort: int

    @classmethod
    def from_reading(cls, reading: WindReading) -> "WindReadingResponse":
        return cls(
            **reading.model_dump(),
            max_speed=reading.max_speed,
            max_gust=reading.max_gust,
            direction_cardinal=reading.direction_cardinal,
            beaufort=reading.beaufort,
        )


class CredentialsRequest(BaseModel):
    """Incoming credentials from the widget configuration form."""
    application_key: str
    api_key: str
    mac_address: str
    location_name: str = ""

    @field_validator("application_key", "api_key", "mac_address", mode="after")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class CredentialsStatus(BaseModel):
    """What the configuration form may show back; keys are never echoed."""
    widget_id: Optional[int] = None
    configured: bool
    location_name: Optional[str] = None
    mac_address: Optional[str] = None


class RefreshRequest(BaseModel):
    """Batch refresh for the periodic trigger."""
    widget_ids: List[Optional[int]] = Field(default_factory=lambda: [None])
    force_refresh: bool = False


class RefreshResponse(BaseModel):
    readings: List[WindReadingResponse]
    widget_ids: List[Optional[int]]


@router.get("/health")
def health():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/wind", response_model=WindReadingResponse)
def get_wind(
    widget_id: Optional[int] = Query(default=None),
    force_refresh: bool = Query(default=False),
):
    """Return the best available reading for a widget (never an error)."""
    reading = SERVICE.fetch(widget_id, force_refresh=force_refresh)
    logger.debug("Served reading", extra={"widget_id": widget_id, "status": reading.status.value})
    return WindReadingResponse.from_reading(reading)


@router.put("/widgets/{widget_id}/credentials", response_model=CredentialsStatus)
def put_credentials(widget_id: int, body: CredentialsRequest):
    """Save credentials for a widget instance."""
    store = SERVICE.credential_store(widget_id)
    store.save(body.application_key, body.api_key, body.mac_address, body.location_name)
    creds = store.load()
    return CredentialsStatus(
        widget_id=widget_id,
        configured=creds is not None,
        location_name=creds.location_name if creds else None,
        mac_address=creds.mac_address if creds else None,
    )


@router.get("/widgets/{widget_id}/credentials", response_model=CredentialsStatus)
def get_credentials(widget_id: int):
    """Report whether a widget is configured, without revealing its keys."""
    creds = SERVICE.credential_store(widget_id).load()
    if creds is None:
        return CredentialsStatus(widget_id=widget_id, configured=False)
    return CredentialsStatus(
        widget_id=widget_id,
        configured=True,
        location_name=creds.location_name,
        mac_address=creds.mac_address,
    )


@router.post("/widgets/refresh", response_model=RefreshResponse)
def refresh_widgets(body: RefreshRequest):
    """Fetch readings for several widgets in one call."""
    results = SERVICE.refresh_widgets(body.widget_ids, force_refresh=body.force_refresh)
    ids = list(results.keys())
    return RefreshResponse(
        widget_ids=ids,
        readings=[WindReadingResponse.from_reading(results[i]) for i in ids],
    )
