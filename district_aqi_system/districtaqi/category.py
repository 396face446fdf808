"""
Category module for the District AQI System.

This module contains the Category enumeration and the classify function,
which is the single source of truth for turning a numeric air quality index
into one of five ordered severity categories. Stations and districts never
store a category; they call classify on their current index every time the
category is read.
"""

import math
from enum import IntEnum


class Category(IntEnum):
    """
    Ordered air quality severity categories.

    The integer values give the total order used for "worst wins"
    comparisons: a higher value is a worse category.
    """

    VERY_GOOD = 1
    GOOD = 2
    MODERATE = 3
    POOR = 4
    VERY_POOR = 5

    @property
    def label(self) -> str:
        """Human-readable label, e.g. "very good"."""
        return self.name.replace("_", " ").lower()


# Upper bounds (inclusive) of every category except VERY_POOR
THRESHOLDS: tuple[tuple[float, Category], ...] = (
    (1.5, Category.VERY_GOOD),
    (2.5, Category.GOOD),
    (3.5, Category.MODERATE),
    (4.5, Category.POOR),
)


def classify(index_value: float) -> Category:
    """
    Classifies an air quality index into a severity category.

    Boundaries are inclusive on the upper side:
    - x <= 1.5: VERY_GOOD
    - 1.5 < x <= 2.5: GOOD
    - 2.5 < x <= 3.5: MODERATE
    - 3.5 < x <= 4.5: POOR
    - x > 4.5: VERY_POOR

    Args:
        index_value: The numeric air quality index (higher is worse)

    Returns:
        The Category for the index value

    Raises:
        ValueError: If index_value is NaN
    """
    if math.isnan(index_value):
        raise ValueError("cannot classify NaN index value")

    for upper_bound, category in THRESHOLDS:
        if index_value <= upper_bound:
            return category
    return Category.VERY_POOR
