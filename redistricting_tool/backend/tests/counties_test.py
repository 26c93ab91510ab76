from counties import build_county_groups
from precinct_graph import Precinct, PrecinctGraph


def test_groups_are_summed_and_sorted_by_population():
    graph = PrecinctGraph([
        Precinct("a", population=50, dem=10, rep=30, county="Small", x=0.0),
        Precinct("b", population=200, dem=60, rep=40, county="Big", x=1.0),
        Precinct("c", population=25, dem=5, rep=5, county="Small", x=2.0),
        Precinct("d", population=100, dem=0, rep=0, county="Mid", x=3.0),
    ])
    groups = build_county_groups(graph)

    assert [g.name for g in groups] == ["Big", "Mid", "Small"]
    small = groups[2]
    assert small.precincts == [0, 2]
    assert (small.population, small.dem, small.rep) == (75, 15, 35)
    assert small.dem_share == 15 / 50
    assert groups[1].dem_share == 0.5


def test_population_ties_keep_first_seen_order():
    graph = PrecinctGraph([
        Precinct("a", population=100, county="Y", x=0.0),
        Precinct("b", population=100, county="X", x=1.0),
        Precinct("c", population=100, county="Z", x=2.0),
    ])
    assert [g.name for g in build_county_groups(graph)] == ["Y", "X", "Z"]


def test_county_cap_drops_overflow_and_reports():
    graph = PrecinctGraph([
        Precinct(f"p{i}", population=10 + i, county=f"C{i}", x=float(i)) for i in range(4)
    ])
    warnings = []
    groups = build_county_groups(graph, max_counties=2, warnings=warnings)

    assert sorted(g.name for g in groups) == ["C0", "C1"]
    assert len(warnings) == 1
    assert "2 counties" in warnings[0]


def test_precincts_of_known_county_still_join_after_cap():
    graph = PrecinctGraph([
        Precinct("a", population=10, county="A", x=0.0),
        Precinct("b", population=10, county="B", x=1.0),
        Precinct("c", population=10, county="A", x=2.0),
    ])
    groups = build_county_groups(graph, max_counties=1)
    assert len(groups) == 1
    assert groups[0].precincts == [0, 2]
