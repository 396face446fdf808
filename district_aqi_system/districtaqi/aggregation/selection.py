"""
Worst-case selection shared by the station and district aggregators.

Both aggregation levels pick "the worst one wins": the pollutant reading
with the highest index at a station, and the station with the highest index
in a district. worst_of implements that arg-max once, with a deterministic
tie-break supplied by the caller.
"""

from typing import Any, Callable, Iterable, Optional, TypeVar

T = TypeVar("T")


def worst_of(
    items: Iterable[T],
    value: Callable[[T], float],
    rank: Callable[[T], Any],
) -> Optional[T]:
    """
    Returns the item with the maximum value.

    Among items sharing the maximum value, the one with the lowest rank
    wins, so the result does not depend on the order of items.

    Args:
        items: Candidates to choose from
        value: Comparable field to maximize (e.g. the index value)
        rank: Tie-break key; lower ranks win

    Returns:
        The worst item, or None if items is empty
    """
    worst: Optional[T] = None
    for item in items:
        if worst is None:
            worst = item
            continue
        item_value, worst_value = value(item), value(worst)
        if item_value > worst_value or (item_value == worst_value and rank(item) < rank(worst)):
            worst = item
    return worst
