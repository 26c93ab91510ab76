"""
Pydantic models for plan statistics, saved plans and API request/response schemas.
"""
from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, Field


# ============================================================================
# Fairness Presets
# ============================================================================

class FairnessPreset(BaseModel):
    """A named partisan target for automap."""
    label: str
    target_dem_share: float
    tolerance: float
    description: str

    class Config:
        frozen = True


# ============================================================================
# District Statistics
# ============================================================================

class DistrictStats(BaseModel):
    """Statistics for a single district."""
    district_id: int
    population: int = 0
    dem_votes: int = 0
    rep_votes: int = 0
    dem_share: float = 0.5
    precinct_count: int = 0
    county_count: int = 0
    # Centroid bounding-box approximation, not polygon geometry
    area: float = 0.0
    perimeter: float = 0.0
    compactness: float = 0.0
    population_deviation: float = 0.0  # percent from target
    seat: Optional[str] = None  # DEM / REP / TOSSUP, None for empty districts
    on_target: bool = False


# ============================================================================
# Plan Summary
# ============================================================================

class PlanSummary(BaseModel):
    """Plan-level fairness metrics and per-district statistics."""
    num_districts: int
    target_dem_share: float
    tolerance: float = 0.0
    target_population: int = 0
    total_population: int = 0
    statewide_dem_share: float = 0.5
    assigned_precincts: int = 0
    total_precincts: int = 0
    dem_seats: int = 0
    rep_seats: int = 0
    tossup_seats: int = 0
    average_dem_share: float = 0.0
    efficiency_gap: float = 0.0  # positive favors R, negative favors D
    max_population_deviation: float = 0.0
    districts_on_target: int = 0
    districts: list[DistrictStats] = Field(default_factory=list)


class PhaseReport(BaseModel):
    """Progress counters for one automap run."""
    counties: int = 0
    counties_assigned: int = 0
    phase1_assigned: int = 0
    phase2_assigned: int = 0
    fallback_assignments: int = 0
    optimization_iterations: int = 0
    optimization_moves: int = 0


# ============================================================================
# Saved Plan
# ============================================================================

class Plan(BaseModel):
    """A district plan in the shape collaborators persist (camelCase keys)."""
    state: str = ""
    plan_id: str = Field(default="", alias="planId")
    name: str = ""
    num_districts: int = Field(alias="numDistricts")
    last_updated: str = Field(default="", alias="lastUpdated")
    assignments: dict[str, int] = Field(default_factory=dict)  # precinct_id -> district_id

    class Config:
        populate_by_name = True

    @classmethod
    def from_assignments(
        cls,
        assignments: dict[str, int],
        num_districts: int,
        state: str = "",
        plan_id: str = "",
        name: str = "",
    ) -> "Plan":
        """Build a plan, keeping only precincts with a non-zero district."""
        return cls(
            state=state,
            plan_id=plan_id,
            name=name,
            num_districts=num_districts,
            last_updated=datetime.now().strftime("%Y-%m-%dT%H:%M:%S"),
            assignments={pid: d for pid, d in assignments.items() if d > 0},
        )


# ============================================================================
# API Requests
# ============================================================================

class GeneratePlanRequest(BaseModel):
    """Request body for POST /generate-plan."""
    precincts: list[dict[str, Any]] = Field(
        min_length=1,
        description="Precinct property records (id, population, dem, rep, county, x, y)",
    )
    num_districts: int = Field(ge=1, le=100, description="Number of districts")
    preset: str = Field(default="fair", pattern="^(very_r|lean_r|fair|lean_d|very_d)$")
    target_dem_share: Optional[float] = Field(
        default=None,
        gt=0.0,
        lt=1.0,
        description="Custom target dem share; overrides the preset target",
    )
    state: str = Field(default="")
    plan_id: str = Field(default="")
    name: str = Field(default="Automap plan")


class EvaluateRequest(BaseModel):
    """Request body for POST /evaluate."""
    precincts: list[dict[str, Any]] = Field(min_length=1)
    num_districts: int = Field(ge=1, le=100)
    assignments: dict[str, int] = Field(
        default_factory=dict,
        description="Current assignments (precinct_id -> district_id)",
    )
    preset: str = Field(default="fair", pattern="^(very_r|lean_r|fair|lean_d|very_d)$")
    target_dem_share: Optional[float] = Field(default=None, gt=0.0, lt=1.0)


# ============================================================================
# API Responses
# ============================================================================

class GeneratePlanResponse(BaseModel):
    """Response for POST /generate-plan."""
    plan: Plan
    summary: PlanSummary
    phases: PhaseReport
    warnings: list[str] = Field(default_factory=list)


class EvaluateResponse(BaseModel):
    """Response for POST /evaluate."""
    summary: PlanSummary
    warnings: list[str] = Field(default_factory=list)


class PresetsResponse(BaseModel):
    """Response for GET /presets."""
    presets: dict[str, FairnessPreset]
    default_preset: str = "fair"


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""
    status: str = "ok"
