"""Step Gate — pure predicates deciding whether the wizard may leave a step."""

from typing import Any, Mapping

from config import MIN_DOCUMENTS_TO_ADVANCE


def _provided(value: Any) -> bool:
    """Whitespace-only text counts as not provided."""
    if value is None:
        return False
    return bool(str(value).strip())


def property_complete(property_info: Mapping[str, Any]) -> bool:
    return all(
        _provided(property_info.get(key))
        for key in ("address", "lot_size", "zoning", "property_type")
    )


def pool_complete(pool: Mapping[str, Any]) -> bool:
    dimensions = all(
        _provided(pool.get(key))
        for key in ("pool_type", "length", "width", "depth")
    )
    heating_ok = not pool.get("heating") or _provided(pool.get("heating_type"))
    return dimensions and heating_ok


def documents_complete(documents: Mapping[str, Any]) -> bool:
    # Any two of the three categories; Pool Design is not individually required
    return len(documents) >= MIN_DOCUMENTS_TO_ADVANCE


def can_advance(
    step: str,
    property_info: Mapping[str, Any],
    pool: Mapping[str, Any],
    documents: Mapping[str, Any],
) -> bool:
    """True if the wizard may move past `step`. No side effects."""
    if step == "property":
        return property_complete(property_info)
    if step == "pool":
        return pool_complete(pool)
    if step == "documents":
        return documents_complete(documents)
    if step == "review":
        return True
    return False
