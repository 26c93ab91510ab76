"""
Running per-district aggregates.

Tracks population, vote totals and county membership for each district so the
assigner and the optimizer never rescan the precinct list to score a move.
"""
from collections import Counter

from precinct_graph import Precinct, PrecinctGraph


class DistrictTally:
    """
    Population/dem/rep totals and county counts for districts 1..num_districts.

    Index 0 holds unassigned precincts and is tracked like any other district,
    which keeps add/remove symmetric.
    """

    def __init__(self, num_districts: int):
        self.num_districts = num_districts
        size = num_districts + 1
        self.population = [0] * size
        self.dem = [0] * size
        self.rep = [0] * size
        self.precinct_count = [0] * size
        self.counties: list[Counter] = [Counter() for _ in range(size)]

    @classmethod
    def from_graph(cls, graph: PrecinctGraph, num_districts: int) -> "DistrictTally":
        """Build a tally from the districts currently set on the graph's precincts."""
        tally = cls(num_districts)
        for p in graph:
            if 0 <= p.district <= num_districts:
                tally.add(p, p.district)
        return tally

    def add(self, precinct: Precinct, district: int) -> None:
        self.population[district] += precinct.population
        self.dem[district] += precinct.dem
        self.rep[district] += precinct.rep
        self.precinct_count[district] += 1
        self.counties[district][precinct.county] += 1

    def remove(self, precinct: Precinct, district: int) -> None:
        self.population[district] -= precinct.population
        self.dem[district] -= precinct.dem
        self.rep[district] -= precinct.rep
        self.precinct_count[district] -= 1
        counts = self.counties[district]
        counts[precinct.county] -= 1
        if counts[precinct.county] <= 0:
            del counts[precinct.county]

    def assign(self, precinct: Precinct, district: int) -> None:
        """Move a precinct to `district`, updating its field and both tallies."""
        self.remove(precinct, precinct.district)
        precinct.district = district
        self.add(precinct, district)

    def dem_share(self, district: int) -> float:
        total = self.dem[district] + self.rep[district]
        return self.dem[district] / total if total > 0 else 0.5

    def has_county(self, district: int, county: str) -> bool:
        return self.counties[district].get(county, 0) > 0

    def districts(self) -> range:
        return range(1, self.num_districts + 1)
