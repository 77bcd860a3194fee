from typing import NamedTuple, Optional, Tuple


class GradeScale(NamedTuple):
    """Ordered (threshold, label) bands, highest first, plus the label below the last band"""
    name: str
    bands: Tuple[Tuple[float, str], ...]
    fallback: str


# Used while marks are being entered (per subject / per group review)
LIVE_ENTRY_BANDS = GradeScale(
    name="live_entry",
    bands=(
        (95, "A++"),
        (90, "A+"),
        (85, "A"),
        (80, "B++"),
        (75, "B+"),
        (70, "B"),
        (60, "C"),
        (50, "D"),
        (40, "E"),
    ),
    fallback="U",
)

# Used for the persisted overall grade of a result
FINAL_RECORD_BANDS = GradeScale(
    name="final_record",
    bands=(
        (90, "A+"),
        (80, "A"),
        (70, "B"),
        (60, "C"),
        (50, "D"),
        (40, "E"),
    ),
    fallback="F",
)


def calculate_grade(percentage: Optional[float], scale: GradeScale = FINAL_RECORD_BANDS) -> str:
    """Map a percentage onto a grade label. Out-of-range values land in the nearest band."""
    if percentage is None:
        return ""
    for threshold, label in scale.bands:
        if percentage >= threshold:
            return label
    return scale.fallback


def calculate_percentage(obtained: float, maximum: float) -> float:
    if not maximum or maximum <= 0:
        return 0.0
    return obtained / maximum * 100


def round_two(value: float) -> float:
    return round(float(value), 2)
