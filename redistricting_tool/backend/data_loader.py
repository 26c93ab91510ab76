"""
Precinct record normalization.
Turns precinct property records (as delivered by importers or the web UI) into
Precinct objects: resolves field aliases, coerces counts and fills defaults.
"""
from typing import Any
import numpy as np
import pandas as pd

from precinct_graph import UNKNOWN_COUNTY, Precinct, PrecinctGraph


# ============================================================================
# Field Aliases
# ============================================================================

# Canonical field -> accepted source columns, in priority order
PRECINCT_FIELD_ALIASES = {
    "id": ["id", "precinct_id", "GEOID20", "UNIQUE_ID"],
    "population": ["population", "TOTPOP", "POP100"],
    "dem": ["dem", "dem_votes", "G20PREDBID"],
    "rep": ["rep", "rep_votes", "G20PRERTRU"],
    "county": ["county", "COUNTY", "COUNTYFP", "COUNTYFP20"],
    "x": ["x", "lon", "lng", "longitude"],
    "y": ["y", "lat", "latitude"],
}

COUNT_COLUMNS = ["population", "dem", "rep"]
COORDINATE_COLUMNS = ["x", "y"]


def _first_existing(df: pd.DataFrame, candidates: list[str]) -> pd.Series | None:
    """
    Return the first candidate column, filling gaps from later candidates.
    Handles records that mix naming conventions (e.g. 'dem' in some rows, 'dem_votes' in others).
    """
    series = None
    for col in candidates:
        if col not in df.columns:
            continue
        series = df[col] if series is None else series.fillna(df[col])
    return series


def normalize_precinct_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Map raw precinct columns onto the canonical schema.

    Args:
        df: Raw precinct records, one row per precinct

    Returns:
        DataFrame with columns id, population, dem, rep, county, x, y
    """
    out = pd.DataFrame(index=df.index)

    for canonical, candidates in PRECINCT_FIELD_ALIASES.items():
        series = _first_existing(df, candidates)
        out[canonical] = series if series is not None else np.nan

    # Counts: non-numeric, missing or infinite become 0, fractional counts truncate
    for col in COUNT_COLUMNS:
        out[col] = _to_finite(out[col]).fillna(0).astype("int64")
    negatives = int((out[COUNT_COLUMNS] < 0).to_numpy().sum())
    if negatives > 0:
        print(f"[data_loader] Clamping {negatives} negative population/vote values to 0")
        out[COUNT_COLUMNS] = out[COUNT_COLUMNS].clip(lower=0)

    for col in COORDINATE_COLUMNS:
        out[col] = _to_finite(out[col]).fillna(0.0).astype(float)

    fallback_ids = pd.Series([f"p_{i}" for i in range(len(out))], index=out.index)
    ids = out["id"].where(out["id"].notna(), fallback_ids)
    out["id"] = ids.map(_format_id)

    out["county"] = out["county"].where(out["county"].notna(), UNKNOWN_COUNTY).astype(str)

    return out


def _to_finite(series: pd.Series) -> pd.Series:
    # "inf" strings parse as infinity; treat them like unparseable values
    return pd.to_numeric(series, errors="coerce").replace([np.inf, -np.inf], np.nan)


def _format_id(value: Any) -> str:
    # Numeric ids arrive as floats after pandas coercion; keep "12" rather than "12.0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def precincts_from_frame(df: pd.DataFrame) -> list[Precinct]:
    """Build Precinct objects from a DataFrame of precinct records."""
    if df.empty:
        return []
    norm = normalize_precinct_frame(df.reset_index(drop=True))
    return [
        Precinct(
            id=row.id,
            population=int(row.population),
            dem=int(row.dem),
            rep=int(row.rep),
            county=row.county,
            x=float(row.x),
            y=float(row.y),
        )
        for row in norm.itertuples(index=False)
    ]


def precincts_from_records(records: list[dict[str, Any]]) -> list[Precinct]:
    """Build Precinct objects from a list of property dicts."""
    if not records:
        return []
    return precincts_from_frame(pd.DataFrame.from_records(records))


def build_graph(records: list[dict[str, Any]]) -> PrecinctGraph:
    """Normalize records and build the precinct adjacency graph."""
    precincts = precincts_from_records(records)
    ids = [p.id for p in precincts]
    if len(set(ids)) != len(ids):
        duplicates = len(ids) - len(set(ids))
        raise ValueError(f"Precinct ids must be unique; found {duplicates} duplicates")
    graph = PrecinctGraph(precincts)
    print(f"[data_loader] Built graph: {len(graph)} precincts, total population {graph.total_population:,}")
    return graph
