"""
County grouping for whole-county assignment.
"""
from dataclasses import dataclass, field

from precinct_graph import PrecinctGraph

# Maximum number of distinct counties grouped per run
MAX_COUNTIES = 500


@dataclass
class CountyGroup:
    """Precincts sharing a county name, with summed totals."""
    name: str
    precincts: list[int] = field(default_factory=list)
    population: int = 0
    dem: int = 0
    rep: int = 0

    @property
    def dem_share(self) -> float:
        total = self.dem + self.rep
        return self.dem / total if total > 0 else 0.5


def build_county_groups(
    graph: PrecinctGraph,
    max_counties: int = MAX_COUNTIES,
    warnings: list[str] | None = None,
) -> list[CountyGroup]:
    """
    Group precincts by exact county name and sort largest-population first.

    Counties beyond `max_counties` (in first-seen order) are dropped; their
    precincts stay unassigned for the scored assignment phase. The drop is
    printed and appended to `warnings` when a list is given.

    Args:
        graph: Precinct graph for the loaded dataset
        max_counties: Cap on the number of county groups
        warnings: Optional list collecting diagnostic messages

    Returns:
        County groups in descending population order (ties keep first-seen order)
    """
    groups: dict[str, CountyGroup] = {}
    dropped: set[str] = set()

    for i, p in enumerate(graph):
        group = groups.get(p.county)
        if group is None:
            if len(groups) >= max_counties:
                dropped.add(p.county)
                continue
            group = CountyGroup(name=p.county)
            groups[p.county] = group

        group.precincts.append(i)
        group.population += p.population
        group.dem += p.dem
        group.rep += p.rep

    if dropped:
        msg = (
            f"[build_county_groups] County cap of {max_counties} reached: "
            f"{len(dropped)} counties left for precinct-level assignment"
        )
        print(msg)
        if warnings is not None:
            warnings.append(msg)

    # dicts keep insertion order and sorted() is stable
    return sorted(groups.values(), key=lambda g: g.population, reverse=True)
