"""
Precinct records and the precinct adjacency graph.

Adjacency is approximated from centroids: two precincts are neighbors when their
centroids are closer than ADJACENCY_THRESHOLD or when they share a county name.
Each neighbor list is capped at MAX_NEIGHBORS, filled in ascending index order,
so the relation is not guaranteed to be symmetric.
"""
from collections import defaultdict
from dataclasses import dataclass, field
import math

# ============================================================================
# Adjacency Constants
# ============================================================================

# Centroid distance (coordinate units, usually degrees) under which precincts touch
ADJACENCY_THRESHOLD = 0.01

# Maximum number of neighbors recorded per precinct
MAX_NEIGHBORS = 100

UNKNOWN_COUNTY = "unknown"


@dataclass
class Precinct:
    """A single voting precinct and its current district."""
    id: str
    population: int = 0
    dem: int = 0
    rep: int = 0
    county: str = UNKNOWN_COUNTY
    x: float = 0.0
    y: float = 0.0
    district: int = 0
    neighbors: list[int] = field(default_factory=list)

    @property
    def dem_share(self) -> float:
        total = self.dem + self.rep
        return self.dem / total if total > 0 else 0.5


class PrecinctGraph:
    """
    Holds the precincts of one dataset and their adjacency lists.

    Neighbor lists are stored on each Precinct as indices into the graph.
    The graph also owns the current assignment (each precinct's `district`).
    """

    def __init__(
        self,
        precincts: list[Precinct],
        threshold: float = ADJACENCY_THRESHOLD,
        max_neighbors: int = MAX_NEIGHBORS,
    ):
        self.precincts = list(precincts)
        self.threshold = threshold
        self.max_neighbors = max_neighbors
        self.dropped_links = 0
        self.warnings: list[str] = []
        self._index_by_id = {p.id: i for i, p in enumerate(self.precincts)}
        self._build_adjacency()

    def __len__(self) -> int:
        return len(self.precincts)

    def __iter__(self):
        return iter(self.precincts)

    def __getitem__(self, index: int) -> Precinct:
        return self.precincts[index]

    # ------------------------------------------------------------------------
    # Adjacency
    # ------------------------------------------------------------------------

    def _cell(self, p: Precinct) -> tuple[int, int]:
        return (math.floor(p.x / self.threshold), math.floor(p.y / self.threshold))

    def _build_adjacency(self) -> None:
        """
        Build neighbor lists (distance-or-county) for every precinct.

        Distance candidates come from a grid with cells the size of the threshold,
        so only the 3x3 block of cells around a precinct needs checking. County
        candidates come from a county index. Candidates are then visited in
        ascending index order, which reproduces a full pairwise scan exactly,
        including which links are dropped once a list is full.
        """
        by_county: dict[str, list[int]] = defaultdict(list)
        grid: dict[tuple[int, int], list[int]] = defaultdict(list)
        use_grid = self.threshold > 0

        for i, p in enumerate(self.precincts):
            p.neighbors = []
            by_county[p.county].append(i)
            if use_grid:
                grid[self._cell(p)].append(i)

        for i, p in enumerate(self.precincts):
            candidates = set(by_county[p.county])
            if use_grid:
                cx, cy = self._cell(p)
                for dx in (-1, 0, 1):
                    for dy in (-1, 0, 1):
                        for j in grid.get((cx + dx, cy + dy), ()):
                            other = self.precincts[j]
                            dist = math.sqrt((p.x - other.x) ** 2 + (p.y - other.y) ** 2)
                            if dist < self.threshold:
                                candidates.add(j)
            candidates.discard(i)

            ordered = sorted(candidates)
            if len(ordered) > self.max_neighbors:
                self.dropped_links += len(ordered) - self.max_neighbors
                ordered = ordered[:self.max_neighbors]
            p.neighbors = ordered

        if self.dropped_links:
            msg = (
                f"[PrecinctGraph] Neighbor lists capped at {self.max_neighbors}: "
                f"{self.dropped_links} adjacency links dropped"
            )
            print(msg)
            self.warnings.append(msg)

    def neighbors(self, index: int) -> list[int]:
        return self.precincts[index].neighbors

    def is_symmetric(self) -> bool:
        """True if every i -> j neighbor link has a matching j -> i link."""
        for i, p in enumerate(self.precincts):
            for j in p.neighbors:
                if i not in self.precincts[j].neighbors:
                    return False
        return True

    # ------------------------------------------------------------------------
    # Assignment helpers
    # ------------------------------------------------------------------------

    def index_of(self, precinct_id: str) -> int | None:
        return self._index_by_id.get(precinct_id)

    @property
    def total_population(self) -> int:
        return sum(p.population for p in self.precincts)

    def reset_assignment(self) -> None:
        for p in self.precincts:
            p.district = 0

    def assignment(self) -> list[int]:
        """Current district for each precinct, by index."""
        return [p.district for p in self.precincts]

    def assignments_by_id(self, include_unassigned: bool = False) -> dict[str, int]:
        """Mapping of precinct id -> district id (unassigned precincts omitted by default)."""
        return {
            p.id: p.district
            for p in self.precincts
            if include_unassigned or p.district > 0
        }

    def unassigned(self) -> list[int]:
        return [i for i, p in enumerate(self.precincts) if p.district == 0]

    def assigned_count(self) -> int:
        return sum(1 for p in self.precincts if p.district > 0)
