"""Generic fuzzy matching utility for title-based searches."""

from collections.abc import Callable, Sequence
from typing import TypeVar


T = TypeVar("T")


def _title_of(item: object) -> str | None:
    """Safely get a string title from a record."""
    value = getattr(item, "title", None)
    return value if isinstance(value, str) else None


def fuzzy_match(
    items: Sequence[T],
    title_query: str,
    *,
    get_title: Callable[[T], str | None] = _title_of,
) -> T | None:
    """Fuzzy match a single item by title.

    Priority: exact match > contains match > partial word match.

    Args:
        items: Records to search
        title_query: User's search query
        get_title: Accessor returning the title to compare against

    Returns:
        Best matching item or None
    """
    matches = fuzzy_match_all(items, title_query, get_title=get_title)
    return matches[0] if matches else None


def fuzzy_match_all(
    items: Sequence[T],
    title_query: str,
    *,
    get_title: Callable[[T], str | None] = _title_of,
) -> list[T]:
    """Fuzzy match all items matching a title query.

    Only the highest-priority tier that has any hits is returned
    (exact > contains > partial word), in input order.

    Args:
        items: Records to search
        title_query: User's search query
        get_title: Accessor returning the title to compare against

    Returns:
        List of all matching items (may be empty)
    """
    title_lower = title_query.lower().strip()
    if not title_lower:
        return []

    # Exact match (highest priority)
    matches = [item for item in items if (v := get_title(item)) and v.lower() == title_lower]
    if matches:
        return matches

    # Contains match
    matches = [item for item in items if (v := get_title(item)) and title_lower in v.lower()]
    if matches:
        return matches

    # Partial word match
    query_words = set(title_lower.split())
    return [item for item in items if (v := get_title(item)) and query_words & set(v.lower().split())]


def fuzzy_rank(
    items: Sequence[T],
    title_query: str,
    *,
    get_title: Callable[[T], str | None] = _title_of,
) -> list[T]:
    """Return every item matching a title query, best tier first.

    Unlike `fuzzy_match_all`, lower tiers are kept: exact matches come first,
    then contains matches, then partial word matches, each tier in input order.
    """
    title_lower = title_query.lower().strip()
    if not title_lower:
        return []

    query_words = set(title_lower.split())
    exact: list[T] = []
    contains: list[T] = []
    partial: list[T] = []

    for item in items:
        title = get_title(item)
        if not title:
            continue
        lowered = title.lower()
        if lowered == title_lower:
            exact.append(item)
        elif title_lower in lowered:
            contains.append(item)
        elif query_words & set(lowered.split()):
            partial.append(item)

    return exact + contains + partial
