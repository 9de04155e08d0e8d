"""Weather condition flags and the derived ``clear`` rule."""

from typing import Mapping, Optional

from weather_reports.exceptions import ValidationError


# Independent weather phenomena a station can report
CONDITION_FLAGS = ("fog", "rain", "snow", "hail", "thunder", "tornado")

# Flags reported in aggregates, ``clear`` first
STAT_FLAGS = ("clear",) + CONDITION_FLAGS


def effective_conditions(conditions: Optional[Mapping[str, bool]] = None) -> dict[str, bool]:
    """
    Fill in missing condition flags and check the given ones.

    Args:
        conditions: Mapping of condition name to boolean; may be partial or None

    Returns:
        Dict with every condition flag present, missing ones set to False

    Raises:
        ValidationError: On an unknown condition name or a non-boolean value
    """
    conditions = dict(conditions or {})

    unknown = sorted(set(conditions) - set(CONDITION_FLAGS))
    if unknown:
        raise ValidationError(
            f"Unknown condition(s): {', '.join(unknown)}. "
            f"Must be one of: {', '.join(CONDITION_FLAGS)}"
        )

    effective = {}
    for flag in CONDITION_FLAGS:
        value = conditions.get(flag, False)
        if value is None:
            value = False
        if not isinstance(value, bool):
            raise ValidationError(f"Condition '{flag}' must be a boolean")
        effective[flag] = value

    return effective


def derive_clear(conditions: Mapping[str, bool]) -> bool:
    """True when none of the condition flags is set."""
    return not any(conditions.get(flag, False) for flag in CONDITION_FLAGS)
