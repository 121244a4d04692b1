"""Common Pydantic models shared across route tooling."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TrackPoint(BaseModel):
    """Single recorded track sample, immutable once parsed.

    Coordinates are not range checked: out-of-range values from a hand-edited
    file pass through untouched.
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitude in degrees")
    lon: float = Field(..., description="Longitude in degrees")
    elevation: Optional[float] = Field(None, description="Elevation in meters")

    @property
    def has_elevation(self) -> bool:
        return self.elevation is not None


class GPXStats(BaseModel):
    """Distance and elevation summary of a route"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    distance_km: float = Field(0.0, ge=0, alias="distanceKm")
    elevation_gain_m: int = Field(0, ge=0, alias="elevationGainM")
    elevation_loss_m: int = Field(0, ge=0, alias="elevationLossM")
    min_elevation_m: Optional[int] = Field(None, alias="minElevationM")
    max_elevation_m: Optional[int] = Field(None, alias="maxElevationM")

    def to_page_metadata(self) -> dict:
        """Serialize using the camelCase keys embedded in rendered pages."""
        return self.model_dump(by_alias=True, exclude_none=True)


class GPXDocumentMetadata(BaseModel):
    """Identifying metadata carried through simplification"""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    type: Optional[str] = None

    @field_validator("name", "type")
    @classmethod
    def blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class ElevationSample(BaseModel):
    """Point of an elevation chart: cumulative distance against elevation"""

    model_config = ConfigDict(frozen=True)

    distance_km: float = Field(..., ge=0)
    elevation_m: float


class TrackBounds(BaseModel):
    """Bounding box of a route, used to fit a map viewport"""

    model_config = ConfigDict(frozen=True)

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def center(self) -> tuple:
        return (
            (self.min_lat + self.max_lat) / 2,
            (self.min_lon + self.max_lon) / 2,
        )
