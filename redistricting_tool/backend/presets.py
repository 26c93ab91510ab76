"""
Fairness presets for automap.

Each preset sets a target statewide Democratic share for the generated map.
Tolerance is not used when scoring assignments; the plan summary reports which
districts land within it.
"""
from models import FairnessPreset

DEFAULT_PRESET = "fair"

FAIRNESS_PRESETS: dict[str, FairnessPreset] = {
    "very_r": FairnessPreset(
        label="Very R",
        target_dem_share=0.40,  # 40% Dem = 60% Rep
        tolerance=0.05,
        description="Strongly Republican-favoring map",
    ),
    "lean_r": FairnessPreset(
        label="Lean R",
        target_dem_share=0.46,
        tolerance=0.03,
        description="Slightly Republican-favoring map",
    ),
    "fair": FairnessPreset(
        label="Fair",
        target_dem_share=0.50,
        tolerance=0.02,
        description="Balanced, competitive districts",
    ),
    "lean_d": FairnessPreset(
        label="Lean D",
        target_dem_share=0.54,
        tolerance=0.03,
        description="Slightly Democratic-favoring map",
    ),
    "very_d": FairnessPreset(
        label="Very D",
        target_dem_share=0.60,
        tolerance=0.05,
        description="Strongly Democratic-favoring map",
    ),
}


def get_preset(key: str) -> FairnessPreset:
    """Look up a preset by key, raising ValueError for unknown keys."""
    if key not in FAIRNESS_PRESETS:
        raise ValueError(f"Unknown fairness preset '{key}'. Must be one of: {list(FAIRNESS_PRESETS)}")
    return FAIRNESS_PRESETS[key]


def resolve_target(key: str, custom_target: float | None = None) -> tuple[float, float]:
    """
    Return (target_dem_share, tolerance) for a preset.

    A positive custom target replaces the preset's target share; zero or a
    negative value is ignored like None. The preset's tolerance is kept either way.
    """
    preset = get_preset(key)
    if custom_target is not None and custom_target > 0:
        if custom_target >= 1:
            raise ValueError(f"target_dem_share must be below 1.0, got {custom_target}")
        return custom_target, preset.tolerance
    return preset.target_dem_share, preset.tolerance
