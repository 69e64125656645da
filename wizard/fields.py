"""Field Store — property and pool specification models, options and seed values."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from errors import InvalidActionError


# ── Select options (value, label) ───────────────────────────────────────
ZONING_OPTIONS = [
    ("residential", "Residential"),
    ("commercial", "Commercial"),
    ("mixed", "Mixed Use"),
]

PROPERTY_TYPES = [
    ("single-family", "Single Family Home"),
    ("multi-family", "Multi-Family"),
    ("condo", "Condo"),
    ("townhouse", "Townhouse"),
]

POOL_TYPES = [
    ("inground", "In-Ground"),
    ("aboveground", "Above-Ground"),
]

HEATING_TYPES = [
    ("gas", "Gas"),
    ("electric", "Electric"),
    ("solar", "Solar"),
    ("heat-pump", "Heat Pump"),
]


class _WireModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="allow",
    )


class PropertyInfo(_WireModel):
    address: str = ""
    lot_size: str = ""
    zoning: str = ""
    property_type: str = ""


class PoolInfo(_WireModel):
    pool_type: str = ""
    length: str = ""
    width: str = ""
    depth: str = ""
    heating: bool = False
    lighting: bool = False
    diving_board: bool = False
    fence: bool = False
    heating_type: Optional[str] = None


# Placeholder content shown when a new application starts
DEFAULT_PROPERTY = PropertyInfo(
    address="123 Oak Street",
    lot_size="0.5",
    zoning="residential",
    property_type="single-family",
)

DEFAULT_POOL = PoolInfo(
    pool_type="inground",
    length="20",
    width="40",
    depth="8",
    heating=False,
    lighting=False,
    diving_board=False,
    fence=True,
    heating_type="gas",
)


ENTITY_MODELS = {"property": PropertyInfo, "pool": PoolInfo}

# field name → allowed option values; empty string always allowed (cleared select)
SELECT_FIELDS: Dict[tuple[str, str], list[str]] = {
    ("property", "zoning"): [v for v, _ in ZONING_OPTIONS],
    ("property", "property_type"): [v for v, _ in PROPERTY_TYPES],
    ("pool", "pool_type"): [v for v, _ in POOL_TYPES],
    ("pool", "heating_type"): [v for v, _ in HEATING_TYPES],
}


def seed_fields() -> Dict[str, Dict[str, Any]]:
    """Fresh copies of the default property and pool values."""
    return {
        "property": DEFAULT_PROPERTY.model_dump(),
        "pool": DEFAULT_POOL.model_dump(),
    }


def _resolve_key(model: type[BaseModel], key: str) -> Optional[str]:
    """Accept either the Python name (lot_size) or the wire alias (lotSize)."""
    for name, info in model.model_fields.items():
        if key == name or key == info.alias:
            return name
    return None


def validate_field_edit(entity: str, key: str, value: Any) -> tuple[str, Any]:
    """
    Check an edit before it reaches the store.
    Returns (field_name, normalized_value); raises InvalidActionError.
    """
    model = ENTITY_MODELS.get(entity)
    if model is None:
        raise InvalidActionError(f"Unknown entity '{entity}'")

    name = _resolve_key(model, key)
    if name is None:
        raise InvalidActionError(f"Unknown {entity} field '{key}'")

    annotation = model.model_fields[name].annotation
    if annotation is bool:
        if not isinstance(value, bool):
            raise InvalidActionError(f"{entity}.{name} expects true/false, got {value!r}")
        return name, value

    if value is None:
        if name == "heating_type":
            return name, None
        raise InvalidActionError(f"{entity}.{name} cannot be null")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise InvalidActionError(f"{entity}.{name} expects text, got {value!r}")

    options = SELECT_FIELDS.get((entity, name))
    if options is not None and value and value not in options:
        raise InvalidActionError(
            f"{entity}.{name} must be one of {', '.join(options)}; got '{value}'"
        )
    return name, value
