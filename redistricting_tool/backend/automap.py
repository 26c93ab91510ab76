"""
Automap: generate a district plan toward a partisan target.

Runs the three phases in order on a precinct graph:
1. Whole counties, largest first, filled into districts in order
2. Remaining precincts placed by composite score
3. Border-precinct refinement of the global fairness score
then summarizes the resulting plan.
"""
from dataclasses import dataclass, field

from assigner import assign_remaining, assign_whole_counties
from counties import build_county_groups
from district_tally import DistrictTally
from metrics import summarize_plan
from models import PhaseReport, PlanSummary
from optimizer import local_refinement_pass
from precinct_graph import PrecinctGraph
from presets import DEFAULT_PRESET, get_preset, resolve_target


@dataclass
class AutomapResult:
    """Output of one automap run."""
    assignments: dict[str, int]  # precinct_id -> district_id
    summary: PlanSummary
    phases: PhaseReport
    warnings: list[str] = field(default_factory=list)


def generate_plan(
    graph: PrecinctGraph,
    num_districts: int,
    preset: str = DEFAULT_PRESET,
    target_dem_share: float | None = None,
) -> AutomapResult:
    """
    Assign every precinct in `graph` to one of `num_districts` districts.

    The graph's assignment is reset and then mutated in place. Preconditions are
    checked before anything is touched, so a ValueError leaves the graph as it was.

    Args:
        graph: Precinct graph for the loaded dataset
        num_districts: Number of districts to draw
        preset: Fairness preset key (see presets.FAIRNESS_PRESETS)
        target_dem_share: Optional custom target overriding the preset's share

    Returns:
        AutomapResult with assignments, plan summary, phase counters and warnings
    """
    if len(graph) == 0:
        raise ValueError("No precinct data loaded.")
    if num_districts < 1:
        raise ValueError(f"num_districts must be at least 1, got {num_districts}")

    target, tolerance = resolve_target(preset, target_dem_share)
    total_pop = graph.total_population
    target_pop = total_pop // num_districts
    if target_pop <= 0:
        raise ValueError(
            f"Total population {total_pop} is too small for {num_districts} districts"
        )

    warnings: list[str] = list(graph.warnings)
    report = PhaseReport()

    print(f"[generate_plan] preset={get_preset(preset).label} target_dem_share={target:.3f} "
          f"districts={num_districts} precincts={len(graph)}")
    print(f"[generate_plan] Total population: {total_pop}, target per district: {target_pop}")

    graph.reset_assignment()
    tally = DistrictTally.from_graph(graph, num_districts)

    # Phase 1: whole counties
    counties = build_county_groups(graph, warnings=warnings)
    report.counties = len(counties)
    report.counties_assigned = assign_whole_counties(
        graph, counties, num_districts, target_pop, tally
    )
    report.phase1_assigned = graph.assigned_count()
    print(f"[generate_plan] Phase 1 complete: {report.phase1_assigned}/{len(graph)} precincts assigned "
          f"({report.counties_assigned}/{report.counties} counties)")

    # Phase 2: remaining precincts
    report.fallback_assignments = assign_remaining(
        graph, num_districts, target_pop, target, tally
    )
    report.phase2_assigned = graph.assigned_count()
    print(f"[generate_plan] Phase 2 complete: {report.phase2_assigned}/{len(graph)} precincts assigned")
    if report.fallback_assignments:
        print(f"[generate_plan] {report.fallback_assignments} precincts placed in least-populated district")

    # Phase 3: border refinement
    report.optimization_iterations, report.optimization_moves = local_refinement_pass(
        graph, tally, target_pop, target
    )
    print(f"[generate_plan] Phase 3 complete: {report.optimization_iterations} iterations, "
          f"{report.optimization_moves} moves kept")

    summary = summarize_plan(
        graph.precincts,
        graph.assignment(),
        num_districts,
        target_dem_share=target,
        tolerance=tolerance,
        warnings=warnings,
    )
    print(f"[generate_plan] Seats D/R/T: {summary.dem_seats}/{summary.rep_seats}/{summary.tossup_seats}, "
          f"efficiency gap {summary.efficiency_gap:+.2f}%")

    return AutomapResult(
        assignments=graph.assignments_by_id(),
        summary=summary,
        phases=report,
        warnings=warnings,
    )


def apply_assignments(
    graph: PrecinctGraph,
    assignments: dict[str, int],
    warnings: list[str] | None = None,
) -> int:
    """
    Load a saved precinct_id -> district mapping onto the graph.

    All districts are reset first. Ids not present in the graph are skipped
    and reported.

    Returns:
        Number of precincts assigned to a non-zero district
    """
    graph.reset_assignment()
    unknown = []
    for precinct_id, district in assignments.items():
        idx = graph.index_of(precinct_id)
        if idx is None:
            unknown.append(precinct_id)
            continue
        graph[idx].district = int(district)

    if unknown:
        msg = f"[apply_assignments] {len(unknown)} unknown precinct ids skipped: {unknown[:5]}"
        print(msg)
        if warnings is not None:
            warnings.append(msg)

    return graph.assigned_count()
