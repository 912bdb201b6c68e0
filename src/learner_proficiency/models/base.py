"""Shared pydantic base for models exposed to the API layer."""

import math
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Frozen model serialized with camelCase field names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_api(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(by_alias=True, mode="json")


def clamp(value: Any, low: float, high: float | None = None) -> float:
    """Clamp a loosely typed number into range.

    None, NaN, non-numeric values and negatives below ``low`` become ``low``.
    Positive infinity becomes ``high`` when there is one.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    if not math.isfinite(number):
        return high if number > 0 and high is not None else low
    if high is not None and number > high:
        return high
    return max(low, number)
