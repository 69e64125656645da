"""Tests for the step gate predicates."""

import itertools

import pytest

from wizard.fields import DEFAULT_POOL, DEFAULT_PROPERTY
from wizard.gate import can_advance

PROPERTY_KEYS = ("address", "lot_size", "zoning", "property_type")


def _property(**overrides):
    return {**DEFAULT_PROPERTY.model_dump(), **overrides}


def _pool(**overrides):
    return {**DEFAULT_POOL.model_dump(), **overrides}


@pytest.mark.parametrize("blanks", [
    combo for n in range(len(PROPERTY_KEYS) + 1) for combo in itertools.combinations(PROPERTY_KEYS, n)
])
def test_property_step_requires_all_four_fields(blanks):
    prop = _property(**{key: "" for key in blanks})
    assert can_advance("property", prop, _pool(), {}) is (len(blanks) == 0)


@pytest.mark.parametrize("value", ["", "   ", "\t\n"])
def test_whitespace_only_counts_as_missing(value):
    assert can_advance("property", _property(lot_size=value), _pool(), {}) is False
    assert can_advance("pool", _property(), _pool(depth=value), {}) is False


def test_no_numeric_validation_is_done_locally():
    assert can_advance("property", _property(lot_size="half an acre"), _pool(), {}) is True
    assert can_advance("pool", _property(), _pool(length="-3", width="abc"), {}) is True


@pytest.mark.parametrize("key", ["pool_type", "length", "width", "depth"])
def test_pool_step_requires_type_and_dimensions(key):
    assert can_advance("pool", _property(), _pool(**{key: ""}), {}) is False


@pytest.mark.parametrize("heating,heating_type,expected", [
    (False, None, True),
    (False, "", True),
    (True, "solar", True),
    (True, None, False),
    (True, "", False),
])
def test_pool_step_heating_type_required_only_when_heated(heating, heating_type, expected):
    pool = _pool(heating=heating, heating_type=heating_type)
    assert can_advance("pool", _property(), pool, {}) is expected


@pytest.mark.parametrize("count,expected", [(0, False), (1, False), (2, True), (3, True)])
def test_documents_step_needs_two_documents(count, expected):
    categories = ["Property Deed", "Site Plan", "Pool Design"][:count]
    documents = {category: {"id": str(i)} for i, category in enumerate(categories)}
    assert can_advance("documents", _property(), _pool(), documents) is expected


def test_review_always_passes():
    assert can_advance("review", {}, {}, {}) is True


def test_unknown_step_never_passes():
    assert can_advance("payment", _property(), _pool(), {}) is False
