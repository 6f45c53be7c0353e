"""Tests for docjoin.registry.

Tests JoinSpecRegistry registration, ordering, validation and normalization.
"""

import pytest

from docjoin.errors import ConfigurationError
from docjoin.registry import JoinSpecRegistry, normalize_spec
from docjoin.schemas import JoinSpecification


class TestRegister:
    """Tests for register()."""

    def test_register_is_chainable(self):
        registry = JoinSpecRegistry()
        result = registry.register({"field": "a", "to": "x", "from": "A"}).register(
            {"field": "b", "to": "y", "from": "B"}
        )
        assert result is registry
        assert len(registry) == 2

    def test_list_preserves_registration_order(self):
        registry = JoinSpecRegistry()
        for name in ["c", "a", "b"]:
            registry.register(source_field=name, target_field="key", target_collection="C")
        assert [spec.source_field for spec in registry.list()] == ["c", "a", "b"]

    def test_list_is_read_only_snapshot(self):
        registry = JoinSpecRegistry([{"field": "a", "to": "x", "from": "A"}])
        snapshot = registry.list()
        registry.register({"field": "b", "to": "y", "from": "B"})
        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1

    def test_register_defaults_result_field(self):
        registry = JoinSpecRegistry().register({"field": "ref", "to": "key", "from": "C"})
        assert registry.list()[0].result_field == "ref"

    def test_register_missing_field_raises(self):
        registry = JoinSpecRegistry()
        with pytest.raises(ConfigurationError):
            registry.register({"field": "ref", "from": "C"})
        assert len(registry) == 0

    def test_iteration(self):
        registry = JoinSpecRegistry([{"field": "a", "to": "x", "from": "A"}])
        assert [spec.source_field for spec in registry] == ["a"]


class TestNormalizeSpec:
    """Tests for normalize_spec()."""

    def test_passes_specification_through(self):
        spec = JoinSpecification("a", "x", "A")
        assert normalize_spec(spec) is spec

    def test_rejects_keywords_with_specification(self):
        with pytest.raises(ConfigurationError, match="cannot be combined"):
            normalize_spec(JoinSpecification("a", "x", "A"), result_field="b")

    def test_keywords_merge_over_mapping(self):
        spec = normalize_spec({"field": "a", "to": "x", "from": "A"}, result_field="a_doc")
        assert spec.result_field == "a_doc"

    def test_rejects_other_types(self):
        with pytest.raises(ConfigurationError, match="must be a JoinSpecification or mapping"):
            normalize_spec("a:x:A")
