"""
Local refinement of a district assignment via border-precinct moves.

This is a first-improving single-pass search: each pass visits precincts in
insertion order and keeps any single move that raises the global fairness score
by more than IMPROVEMENT_EPSILON. It does not search for the best move within a
pass, so visitation order affects the result.
"""
from district_tally import DistrictTally
from precinct_graph import PrecinctGraph

# ============================================================================
# Refinement Constants
# ============================================================================

MAX_ITERATIONS = 50
IMPROVEMENT_EPSILON = 0.001


def fairness_score(
    tally: DistrictTally,
    target_pop: int,
    target_dem_share: float,
) -> float:
    """
    Global fairness score of the current assignment (higher is better).

    Sum over populated districts of an even blend of population balance and
    distance from the target dem share, each clamped at zero, divided by the
    number of districts. Empty districts contribute 0 but still count in the
    divisor.
    """
    total = 0.0

    for d in tally.districts():
        pop = tally.population[d]
        if pop == 0:
            continue

        pop_score = max(0.0, 1.0 - abs((pop - target_pop) / target_pop))
        partisan_score = max(0.0, 1.0 - abs(tally.dem_share(d) - target_dem_share) * 2)

        total += pop_score * 0.5 + partisan_score * 0.5

    return total / tally.num_districts


def find_swap_district(graph: PrecinctGraph, index: int) -> int:
    """
    District of the first neighbor assigned elsewhere, or 0 if `index` is not a border precinct.
    """
    current = graph[index].district
    for n in graph[index].neighbors:
        neighbor_district = graph[n].district
        if neighbor_district != 0 and neighbor_district != current:
            return neighbor_district
    return 0


def local_refinement_pass(
    graph: PrecinctGraph,
    tally: DistrictTally,
    target_pop: int,
    target_dem_share: float,
    max_iterations: int = MAX_ITERATIONS,
    epsilon: float = IMPROVEMENT_EPSILON,
) -> tuple[int, int]:
    """
    Improve the assignment by moving border precincts into a neighboring district.

    Args:
        graph: Precinct graph (assignment is mutated in place)
        tally: Running district aggregates, kept in sync with the graph
        target_pop: Target population per district
        target_dem_share: Target Democratic vote share
        max_iterations: Maximum number of passes
        epsilon: Minimum score gain for a move to be kept

    Returns:
        (passes run, moves kept)
    """
    iterations = 0
    moves = 0
    improved = True

    while improved and iterations < max_iterations:
        improved = False
        iterations += 1

        for idx, precinct in enumerate(graph):
            if precinct.district == 0:
                continue

            target_district = find_swap_district(graph, idx)
            if target_district == 0:
                continue

            current_score = fairness_score(tally, target_pop, target_dem_share)
            original_district = precinct.district
            tally.assign(precinct, target_district)
            new_score = fairness_score(tally, target_pop, target_dem_share)

            if new_score > current_score + epsilon:
                improved = True
                moves += 1
            else:
                tally.assign(precinct, original_district)

    return iterations, moves
