import math

import pytest

from metrics import (
    bounding_box_geometry,
    classify_seat,
    compute_district_stats,
    efficiency_gap,
    polsby_popper,
    summarize_plan,
    wasted_votes,
)
from precinct_graph import Precinct
import numpy as np


def scenario_precincts():
    return [
        Precinct("P1", population=100, dem=60, rep=40, county="X", x=0.0, y=0.0),
        Precinct("P2", population=100, dem=55, rep=45, county="X", x=1.0, y=0.0),
        Precinct("P3", population=100, dem=30, rep=70, county="Y", x=5.0, y=5.0),
        Precinct("P4", population=100, dem=20, rep=80, county="Y", x=6.0, y=5.0),
    ]


def test_polsby_popper():
    assert polsby_popper(1.0, 4.0) == pytest.approx(math.pi / 4)
    assert polsby_popper(5.0, 0.0) == 0.0
    assert polsby_popper(5.0, -1.0) == 0.0


def test_bounding_box_geometry():
    area, perimeter = bounding_box_geometry(np.array([0.0, 2.0, 1.0]), np.array([1.0, 4.0, 2.0]))
    assert area == pytest.approx(6.0)
    assert perimeter == pytest.approx(10.0)
    assert bounding_box_geometry(np.array([]), np.array([])) == (0.0, 0.0)


@pytest.mark.parametrize(
    "dem_share,seat",
    [(0.50, "TOSSUP"), (0.52, "TOSSUP"), (0.48, "TOSSUP"), (0.521, "DEM"), (0.479, "REP")],
)
def test_classify_seat_boundaries(dem_share, seat):
    assert classify_seat(dem_share) == seat


def test_wasted_votes():
    assert wasted_votes(115, 85) == (14, 85)
    assert wasted_votes(50, 150) == (50, 49)
    assert wasted_votes(100, 100) == (0, 0)
    assert wasted_votes(0, 0) == (0, 0)


def test_district_stats_for_scenario():
    stats = compute_district_stats(scenario_precincts(), [1, 1, 2, 2], 2)

    d1, d2 = stats
    assert (d1.district_id, d1.population, d1.dem_votes, d1.rep_votes) == (1, 200, 115, 85)
    assert d1.dem_share == pytest.approx(0.575)
    assert d1.seat == "DEM"
    assert d1.precinct_count == 2
    assert d1.county_count == 1
    assert (d2.population, d2.dem_votes, d2.rep_votes) == (200, 50, 150)
    assert d2.dem_share == pytest.approx(0.25)
    assert d2.seat == "REP"
    # centroids on a line: zero-area box
    assert d1.area == 0.0
    assert d1.perimeter == pytest.approx(2.0)
    assert d1.compactness == 0.0
    assert d1.population_deviation == 0.0


def test_district_stats_are_idempotent():
    precincts = scenario_precincts()
    assignment = [1, 2, 2, 1]
    first = compute_district_stats(precincts, assignment, 3)
    second = compute_district_stats(precincts, assignment, 3)
    assert [s.model_dump() for s in first] == [s.model_dump() for s in second]


def test_empty_district_and_out_of_range_assignment():
    stats = compute_district_stats(scenario_precincts(), [1, 1, 0, 9], 2)
    empty = stats[1]
    assert empty.precinct_count == 0
    assert empty.population == 0
    assert empty.dem_share == 0.5
    assert empty.seat is None
    assert empty.compactness == 0.0
    assert empty.population_deviation == pytest.approx(-100.0)


def test_square_district_compactness():
    precincts = [
        Precinct("a", county="A", x=0.0, y=0.0),
        Precinct("b", county="A", x=1.0, y=1.0),
    ]
    stats = compute_district_stats(precincts, [1, 1], 1)
    assert stats[0].area == pytest.approx(1.0)
    assert stats[0].compactness == pytest.approx(math.pi / 4)


def test_county_count_is_capped():
    precincts = [Precinct(f"p{i}", county=f"C{i}", x=float(i)) for i in range(105)]
    warnings = []
    stats = compute_district_stats(precincts, [1] * 105, 1, warnings=warnings)
    assert stats[0].county_count == 100
    assert len(warnings) == 1


def test_assignment_length_must_match():
    with pytest.raises(ValueError):
        compute_district_stats(scenario_precincts(), [1, 2], 2)


def test_efficiency_gap_for_scenario():
    precincts = scenario_precincts()
    stats = compute_district_stats(precincts, [1, 1, 2, 2], 2)
    assert efficiency_gap(stats, 400) == pytest.approx(-17.5)


def test_efficiency_gap_is_zero_for_even_districts():
    precincts = [
        Precinct(f"p{i}", population=100, dem=50, rep=50, county="X", x=float(i))
        for i in range(4)
    ]
    stats = compute_district_stats(precincts, [1, 1, 2, 2], 2)
    assert efficiency_gap(stats, 400) == 0.0


def test_efficiency_gap_without_votes():
    stats = compute_district_stats([Precinct("a", population=10)], [1], 1)
    assert efficiency_gap(stats, 0) == 0.0


def test_summarize_plan_for_scenario():
    summary = summarize_plan(scenario_precincts(), [1, 1, 2, 2], 2, target_dem_share=0.5, tolerance=0.02)

    assert summary.total_population == 400
    assert summary.target_population == 200
    assert summary.assigned_precincts == 4
    assert (summary.dem_seats, summary.rep_seats, summary.tossup_seats) == (1, 1, 0)
    assert summary.average_dem_share == pytest.approx((0.575 + 0.25) / 2)
    assert summary.statewide_dem_share == pytest.approx(165 / 400)
    assert summary.efficiency_gap == pytest.approx(-17.5)
    assert summary.max_population_deviation == 0.0
    assert summary.districts_on_target == 0
    assert len(summary.districts) == 2


def test_summarize_plan_on_target_uses_tolerance():
    precincts = [
        Precinct("a", population=100, dem=51, rep=49, county="A", x=0.0),
        Precinct("b", population=100, dem=60, rep=40, county="B", x=1.0),
    ]
    summary = summarize_plan(precincts, [1, 2], 2, target_dem_share=0.5, tolerance=0.02)
    assert [s.on_target for s in summary.districts] == [True, False]
    assert summary.districts_on_target == 1
    assert summary.tossup_seats == 1
    assert summary.dem_seats == 1


def test_summarize_plan_population_deviation():
    precincts = [
        Precinct("a", population=120, county="A", x=0.0),
        Precinct("b", population=80, county="B", x=1.0),
    ]
    summary = summarize_plan(precincts, [1, 2], 2, target_dem_share=0.5)
    assert [s.population_deviation for s in summary.districts] == [pytest.approx(20.0), pytest.approx(-20.0)]
    assert summary.max_population_deviation == pytest.approx(20.0)
