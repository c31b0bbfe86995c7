"""
Layout value types shared by every solver stage.

A Region is an axis-aligned rectangle with identity (a zone inside a store, or
a shelf inside a zone). A Container is the rectangle a region set must fit in.
"""
from enum import Enum
from typing import List, Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Granularity(str, Enum):
    """Which container/region pair a request operates on"""
    ZONE = "zone"    # container = store, regions = zones
    SHELF = "shelf"  # container = zone, regions = shelves


class CandidateSource(str, Enum):
    ORACLE = "oracle"
    STRATEGY = "strategy"


class Container(BaseModel):
    """Bounding rectangle for one region set. Origin is the top-left corner."""
    width: float = Field(..., gt=0, description="Container width in meters")
    height: float = Field(..., gt=0, description="Container height in meters")

    @property
    def area(self) -> float:
        return self.width * self.height


class Region(BaseModel):
    """A positioned rectangle with a stable id and a semantic category."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    label: str = Field("", validation_alias=AliasChoices("label", "name"))
    category: str = "general"
    x: float = 0.0
    y: float = 0.0
    w: float = Field(..., validation_alias=AliasChoices("w", "width"))
    h: float = Field(..., validation_alias=AliasChoices("h", "height"))

    @field_validator("w", "h")
    @classmethod
    def validate_positive_size(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("region width and height must be positive")
        return v

    @property
    def area(self) -> float:
        return self.w * self.h


class LayoutMetrics(BaseModel):
    """Summary scores shown next to a candidate (all percentages 0-100)"""
    utilization: float = Field(0.0, ge=0, le=100)
    efficiency: float = Field(0.0, ge=0, le=100)
    accessibility: float = Field(0.0, ge=0, le=100)


class LayoutReport(BaseModel):
    """Validity report for a region set (what the canvas shows in its status bar)"""
    utilization: float = 0.0        # percent of container covered
    overlapping: bool = False
    unused_space: float = 0.0       # square meters not covered by any region
    overlap_area: float = 0.0
    boundary_violation: float = 0.0
    overlapping_ids: List[str] = []
    out_of_bounds_ids: List[str] = []


class LayoutCandidate(BaseModel):
    """One complete proposed region set, ready for presentation"""
    name: str
    description: str = ""
    rectangles: List[Region] = []
    metrics: LayoutMetrics = Field(default_factory=LayoutMetrics)
    source: CandidateSource = CandidateSource.STRATEGY
    strategy: Optional[str] = None
    warnings: List[str] = []
    request_id: int = 0
