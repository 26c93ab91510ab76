"""
District statistics and plan-level fairness metrics.
Implements per-district aggregation, bounding-box Polsby-Popper compactness,
seat classification and the efficiency gap.
"""
from typing import Sequence
import numpy as np

from models import DistrictStats, PlanSummary
from precinct_graph import Precinct

# Maximum distinct county names counted per district
MAX_COUNTIES_PER_DISTRICT = 100

# Seat classification bounds on dem share
DEM_SEAT_THRESHOLD = 0.52
REP_SEAT_THRESHOLD = 0.48


# ============================================================================
# Geometry Approximation
# ============================================================================

def polsby_popper(area: float, perimeter: float) -> float:
    """
    Polsby-Popper compactness: 4*pi*area / perimeter^2.

    1.0 for a circle. With the bounding-box approximation used here a square
    district scores pi/4 and a linear one scores 0.

    Args:
        area: District area
        perimeter: District perimeter

    Returns:
        Compactness score, 0 when the perimeter is not positive
    """
    if perimeter <= 0:
        return 0.0
    return float((4.0 * np.pi * area) / (perimeter * perimeter))


def bounding_box_geometry(xs: np.ndarray, ys: np.ndarray) -> tuple[float, float]:
    """Area and perimeter of the bounding box around a set of centroids."""
    if xs.size == 0:
        return 0.0, 0.0
    width = float(xs.max() - xs.min())
    height = float(ys.max() - ys.min())
    return width * height, 2 * (width + height)


# ============================================================================
# Seat Classification & Efficiency Gap
# ============================================================================

def classify_seat(dem_share: float) -> str:
    """DEM above 52%, REP below 48%, otherwise TOSSUP (bounds inclusive)."""
    if dem_share > DEM_SEAT_THRESHOLD:
        return "DEM"
    if dem_share < REP_SEAT_THRESHOLD:
        return "REP"
    return "TOSSUP"


def wasted_votes(dem: int, rep: int) -> tuple[int, int]:
    """
    Wasted (dem, rep) votes in one district.

    The winner wastes every vote above a bare majority (half the total plus one,
    integer division); the loser wastes all of its votes. A tied district wastes
    nothing for either party.
    """
    threshold = (dem + rep) // 2 + 1
    if dem > rep:
        return dem - threshold, rep
    if rep > dem:
        return dem, rep - threshold
    return 0, 0


def efficiency_gap(stats: list[DistrictStats], statewide_votes: int) -> float:
    """
    Efficiency gap in percent: 100 * (wasted dem - wasted rep) / statewide votes.

    Positive values favor Republicans, negative values favor Democrats.
    Empty districts are skipped.
    """
    if statewide_votes <= 0:
        return 0.0

    wasted_dem = 0
    wasted_rep = 0
    for s in stats:
        if s.precinct_count == 0:
            continue
        d, r = wasted_votes(s.dem_votes, s.rep_votes)
        wasted_dem += d
        wasted_rep += r

    return 100.0 * (wasted_dem - wasted_rep) / statewide_votes


# ============================================================================
# District Statistics
# ============================================================================

def compute_district_stats(
    precincts: Sequence[Precinct],
    assignment: Sequence[int],
    num_districts: int,
    target_dem_share: float | None = None,
    tolerance: float = 0.0,
    warnings: list[str] | None = None,
) -> list[DistrictStats]:
    """
    Compute statistics for districts 1..num_districts from an assignment snapshot.

    Pure function of its inputs: nothing is cached and the precincts are not
    modified, so repeated calls give identical results.

    Args:
        precincts: Precincts of the dataset, in index order
        assignment: District id for each precinct (same order); ids outside
            1..num_districts are ignored
        num_districts: Number of districts
        target_dem_share: Optional target used for the on_target flag
        tolerance: Allowed distance from the target for on_target
        warnings: Optional list collecting diagnostic messages

    Returns:
        One DistrictStats per district, ordered by district id
    """
    if len(assignment) != len(precincts):
        raise ValueError(
            f"Assignment covers {len(assignment)} precincts, dataset has {len(precincts)}"
        )

    districts = np.asarray(assignment, dtype=int)
    xs = np.array([p.x for p in precincts], dtype=float)
    ys = np.array([p.y for p in precincts], dtype=float)
    pops = np.array([p.population for p in precincts], dtype=np.int64)

    total_pop = int(pops.sum())
    target_pop = total_pop // num_districts if num_districts > 0 else 0

    county_names: dict[int, list[str]] = {d: [] for d in range(1, num_districts + 1)}
    overflowed: set[int] = set()
    for p, d in zip(precincts, districts):
        d = int(d)
        if d < 1 or d > num_districts:
            continue
        names = county_names[d]
        if p.county in names:
            continue
        if len(names) < MAX_COUNTIES_PER_DISTRICT:
            names.append(p.county)
        else:
            overflowed.add(d)

    if overflowed:
        msg = (
            f"[compute_district_stats] County count capped at {MAX_COUNTIES_PER_DISTRICT} "
            f"for districts {sorted(overflowed)}"
        )
        print(msg)
        if warnings is not None:
            warnings.append(msg)

    stats = []
    for d in range(1, num_districts + 1):
        mask = districts == d
        members = [p for p, m in zip(precincts, mask) if m]
        population = sum(p.population for p in members)
        dem = sum(p.dem for p in members)
        rep = sum(p.rep for p in members)
        dem_share = dem / (dem + rep) if (dem + rep) > 0 else 0.5

        area, perimeter = bounding_box_geometry(xs[mask], ys[mask])
        deviation = 100.0 * (population - target_pop) / target_pop if target_pop > 0 else 0.0

        occupied = len(members) > 0
        on_target = (
            occupied
            and target_dem_share is not None
            and abs(dem_share - target_dem_share) <= tolerance
        )

        stats.append(DistrictStats(
            district_id=d,
            population=population,
            dem_votes=dem,
            rep_votes=rep,
            dem_share=dem_share,
            precinct_count=len(members),
            county_count=len(county_names[d]),
            area=area,
            perimeter=perimeter,
            compactness=polsby_popper(area, perimeter) if occupied else 0.0,
            population_deviation=deviation,
            seat=classify_seat(dem_share) if occupied else None,
            on_target=on_target,
        ))

    return stats


# ============================================================================
# Plan Summary
# ============================================================================

def summarize_plan(
    precincts: Sequence[Precinct],
    assignment: Sequence[int],
    num_districts: int,
    target_dem_share: float,
    tolerance: float = 0.0,
    warnings: list[str] | None = None,
) -> PlanSummary:
    """
    Compute full plan metrics: seats, average and statewide dem share,
    efficiency gap and population deviation, plus per-district statistics.
    """
    stats = compute_district_stats(
        precincts,
        assignment,
        num_districts,
        target_dem_share=target_dem_share,
        tolerance=tolerance,
        warnings=warnings,
    )

    total_pop = sum(p.population for p in precincts)
    total_dem = sum(p.dem for p in precincts)
    total_rep = sum(p.rep for p in precincts)
    statewide_votes = total_dem + total_rep

    occupied = [s for s in stats if s.precinct_count > 0]
    shares = np.array([s.dem_share for s in occupied], dtype=float)
    deviations = np.array([s.population_deviation for s in occupied], dtype=float)

    return PlanSummary(
        num_districts=num_districts,
        target_dem_share=target_dem_share,
        tolerance=tolerance,
        target_population=total_pop // num_districts if num_districts > 0 else 0,
        total_population=total_pop,
        statewide_dem_share=total_dem / statewide_votes if statewide_votes > 0 else 0.5,
        assigned_precincts=sum(1 for d in assignment if 1 <= d <= num_districts),
        total_precincts=len(precincts),
        dem_seats=sum(1 for s in occupied if s.seat == "DEM"),
        rep_seats=sum(1 for s in occupied if s.seat == "REP"),
        tossup_seats=sum(1 for s in occupied if s.seat == "TOSSUP"),
        average_dem_share=float(shares.mean()) if shares.size else 0.0,
        efficiency_gap=efficiency_gap(stats, statewide_votes),
        max_population_deviation=float(np.abs(deviations).max()) if deviations.size else 0.0,
        districts_on_target=sum(1 for s in stats if s.on_target),
        districts=stats,
    )
