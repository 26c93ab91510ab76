"""
FastAPI application for the redistricting tool.
Provides endpoints for fairness presets, automap plan generation and plan evaluation.
"""
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from automap import apply_assignments, generate_plan
from data_loader import build_graph
from metrics import summarize_plan
from models import (
    HealthResponse,
    PresetsResponse,
    GeneratePlanRequest,
    GeneratePlanResponse,
    EvaluateRequest,
    EvaluateResponse,
    Plan,
)
from presets import DEFAULT_PRESET, FAIRNESS_PRESETS, resolve_target


DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
    "http://127.0.0.1:5173",
]


def get_cors_origins() -> list[str]:
    """Allowed origins from REDISTRICTING_CORS_ORIGINS (comma-separated), else dev defaults."""
    raw = os.environ.get("REDISTRICTING_CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or DEFAULT_CORS_ORIGINS


# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title="Redistricting Tool API",
    description="Backend API for automap district generation and plan metrics",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Health Check
# ============================================================================

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Simple health check endpoint."""
    return HealthResponse(status="ok")


# ============================================================================
# Presets
# ============================================================================

@app.get("/presets", response_model=PresetsResponse)
async def get_presets():
    """List the fairness presets available to automap."""
    return PresetsResponse(presets=FAIRNESS_PRESETS, default_preset=DEFAULT_PRESET)


# ============================================================================
# Plan Generation
# ============================================================================

@app.post("/generate-plan", response_model=GeneratePlanResponse)
def generate_plan_endpoint(request: GeneratePlanRequest):
    """
    Run automap on the submitted precincts and return the plan with its metrics.
    """
    try:
        graph = build_graph(request.precincts)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        result = generate_plan(
            graph,
            num_districts=request.num_districts,
            preset=request.preset,
            target_dem_share=request.target_dem_share,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=422,
            detail=f"Automap failed: {exc}",
        ) from exc

    plan = Plan.from_assignments(
        result.assignments,
        num_districts=request.num_districts,
        state=request.state,
        plan_id=request.plan_id,
        name=request.name,
    )

    return GeneratePlanResponse(
        plan=plan,
        summary=result.summary,
        phases=result.phases,
        warnings=result.warnings,
    )


# ============================================================================
# Evaluation
# ============================================================================

@app.post("/evaluate", response_model=EvaluateResponse)
def evaluate_plan(request: EvaluateRequest):
    """
    Compute metrics for a manual (or saved) assignment.
    """
    try:
        graph = build_graph(request.precincts)
        target, tolerance = resolve_target(request.preset, request.target_dem_share)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    warnings: list[str] = list(graph.warnings)
    out_of_range = sorted(
        pid for pid, d in request.assignments.items()
        if d < 0 or d > request.num_districts
    )
    if out_of_range:
        raise HTTPException(
            status_code=400,
            detail=f"District ids must be in 0..{request.num_districts}; "
                   f"invalid for precincts {out_of_range[:5]}",
        )

    apply_assignments(graph, request.assignments, warnings=warnings)

    summary = summarize_plan(
        graph.precincts,
        graph.assignment(),
        request.num_districts,
        target_dem_share=target,
        tolerance=tolerance,
        warnings=warnings,
    )
    return EvaluateResponse(summary=summary, warnings=warnings)


# ============================================================================
# Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
