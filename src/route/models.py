"""
Route simplification models and settings
"""

from typing import List

from pydantic import BaseModel, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..common.utils import reduction_percent

DEFAULT_TOLERANCE_DEG = 0.00005  # ~5.5m
DEFAULT_COORD_PRECISION = 5  # ~1.1m
DEFAULT_ELEVATION_PRECISION = 1


class SimplifySettings(BaseSettings):
    """Simplification tuning, overridable through TRIPGPX_* environment variables"""

    model_config = SettingsConfigDict(env_prefix="TRIPGPX_")

    tolerance_deg: float = Field(
        DEFAULT_TOLERANCE_DEG,
        ge=0,
        description="Douglas-Peucker tolerance in degrees",
    )
    coord_precision: int = Field(
        DEFAULT_COORD_PRECISION,
        ge=0,
        le=15,
        description="Decimal digits kept for latitude/longitude",
    )
    elevation_precision: int = Field(
        DEFAULT_ELEVATION_PRECISION,
        ge=0,
        le=15,
        description="Decimal digits kept for elevation",
    )


class SimplifyResult(BaseModel):
    """Simplified GPX text with before/after counts for reporting"""

    text: str
    original_point_count: int = Field(..., ge=0)
    simplified_point_count: int = Field(..., ge=0)
    original_byte_size: int = Field(..., ge=0)
    new_byte_size: int = Field(..., ge=0)

    @computed_field
    @property
    def size_reduction_pct(self) -> float:
        return reduction_percent(self.original_byte_size, self.new_byte_size)


class RouteReport(BaseModel):
    """Outcome of simplifying one day's route file"""

    day: str
    path: str
    original_point_count: int = Field(..., ge=0)
    simplified_point_count: int = Field(..., ge=0)
    original_byte_size: int = Field(..., ge=0)
    new_byte_size: int = Field(..., ge=0)

    @property
    def size_reduction_pct(self) -> float:
        return reduction_percent(self.original_byte_size, self.new_byte_size)


class BatchSummary(BaseModel):
    """Totals across a batch simplification run"""

    reports: List[RouteReport] = Field(default_factory=list)
    failed: List[str] = Field(
        default_factory=list, description="Days whose route could not be processed"
    )

    @property
    def total_original_byte_size(self) -> int:
        return sum(r.original_byte_size for r in self.reports)

    @property
    def total_new_byte_size(self) -> int:
        return sum(r.new_byte_size for r in self.reports)

    @property
    def total_original_point_count(self) -> int:
        return sum(r.original_point_count for r in self.reports)

    @property
    def total_simplified_point_count(self) -> int:
        return sum(r.simplified_point_count for r in self.reports)

    @property
    def size_reduction_pct(self) -> float:
        return reduction_percent(
            self.total_original_byte_size, self.total_new_byte_size
        )
