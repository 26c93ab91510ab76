"""
Phased district assignment.

Phase 1 places whole counties (largest first) into districts in order, filling
each district to within the population tolerance before moving on.
Phase 2 scores every remaining precinct against every district that still has
room and places it greedily, falling back to the least populated district when
all districts are full.
"""
from counties import CountyGroup
from district_tally import DistrictTally
from precinct_graph import PrecinctGraph

# ============================================================================
# Scoring Constants
# ============================================================================

# Allowed population deviation from the per-district target
POPULATION_TOLERANCE = 0.10

POPULATION_WEIGHT = 0.4
PARTISAN_WEIGHT = 0.3
COUNTY_BONUS = 0.2
ADJACENCY_BONUS = 0.1


def population_bounds(target_pop: int) -> tuple[float, float]:
    """Return (floor, ceiling) district populations for a target."""
    return (
        target_pop * (1 - POPULATION_TOLERANCE),
        target_pop * (1 + POPULATION_TOLERANCE),
    )


# ============================================================================
# Phase 1: Whole Counties
# ============================================================================

def assign_whole_counties(
    graph: PrecinctGraph,
    counties: list[CountyGroup],
    num_districts: int,
    target_pop: int,
    tally: DistrictTally,
) -> int:
    """
    Assign whole counties to districts 1..num_districts in order.

    A county goes to the current district if it fits under the population
    ceiling; the district pointer advances once the district reaches the floor.
    Counties that do not fit are skipped and never retried against a later
    district.

    Args:
        graph: Precinct graph (assignment is mutated in place)
        counties: County groups, largest population first
        num_districts: Number of districts
        target_pop: Target population per district
        tally: Running district aggregates, kept in sync with the graph

    Returns:
        Number of counties assigned
    """
    floor, ceiling = population_bounds(target_pop)
    current = 1
    assigned = 0

    for county in counties:
        if current > num_districts:
            break
        if tally.population[current] + county.population > ceiling:
            continue

        for idx in county.precincts:
            tally.assign(graph[idx], current)
        assigned += 1

        if tally.population[current] >= floor:
            current += 1

    return assigned


# ============================================================================
# Phase 2: Remaining Precincts
# ============================================================================

def order_unassigned(graph: PrecinctGraph, target_dem_share: float) -> list[int]:
    """
    Unassigned precinct indices, ordered so precincts that help reach the target go first.

    Descending dem share for a Democratic target, ascending for a Republican
    target, source order for an even target. The sort is stable.
    """
    unassigned = graph.unassigned()
    if target_dem_share > 0.5:
        unassigned.sort(key=lambda i: graph[i].dem_share, reverse=True)
    elif target_dem_share < 0.5:
        unassigned.sort(key=lambda i: graph[i].dem_share)
    return unassigned


def score_district(
    graph: PrecinctGraph,
    index: int,
    district: int,
    tally: DistrictTally,
    target_pop: int,
    target_dem_share: float,
) -> float:
    """Composite score for placing precinct `index` into `district`."""
    p = graph[index]

    new_pop = tally.population[district] + p.population
    pop_score = 1.0 - abs((new_pop - target_pop) / target_pop)

    new_dem = tally.dem[district] + p.dem
    new_rep = tally.rep[district] + p.rep
    new_share = new_dem / (new_dem + new_rep) if (new_dem + new_rep) > 0 else 0.5
    partisan_score = 1.0 - abs(new_share - target_dem_share)

    county_bonus = COUNTY_BONUS if tally.has_county(district, p.county) else 0.0

    adjacency_bonus = 0.0
    for n in p.neighbors:
        if graph[n].district == district:
            adjacency_bonus = ADJACENCY_BONUS
            break

    return (
        pop_score * POPULATION_WEIGHT
        + partisan_score * PARTISAN_WEIGHT
        + county_bonus
        + adjacency_bonus
    )


def assign_remaining(
    graph: PrecinctGraph,
    num_districts: int,
    target_pop: int,
    target_dem_share: float,
    tally: DistrictTally,
) -> int:
    """
    Place every unassigned precinct in its best-scoring district.

    Districts at or above the population ceiling are not considered. The
    highest score wins, with ties going to the lowest district id. If no
    district has room the precinct goes to the least populated district.

    Returns:
        Number of precincts placed by the least-populated fallback
    """
    _, ceiling = population_bounds(target_pop)
    fallbacks = 0

    for idx in order_unassigned(graph, target_dem_share):
        best_district = None
        best_score = float("-inf")

        for d in tally.districts():
            if tally.population[d] >= ceiling:
                continue
            score = score_district(graph, idx, d, tally, target_pop, target_dem_share)
            if score > best_score:
                best_score = score
                best_district = d

        if best_district is None:
            best_district = min(tally.districts(), key=lambda d: tally.population[d])
            fallbacks += 1

        tally.assign(graph[idx], best_district)

    return fallbacks
