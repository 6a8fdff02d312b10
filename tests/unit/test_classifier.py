"""
Tests for the Source Classifier
"""

import pytest

from subscriptproxy.proto_proxy.classifier import (
    classify_source,
    is_pair,
    is_pair_iterable,
    is_pairs,
)
from subscriptproxy.proto_proxy.models import ALL, GENFN, SourceKind


class TestPredicates:
    """Test suite for shape predicates."""

    @pytest.mark.parametrize("value", [("a", 1), ["a", 1]])
    def test_is_pair(self, value):
        """Test 2-element lists and tuples."""
        assert is_pair(value) is True

    @pytest.mark.parametrize("value", ["ab", ("a",), ("a", 1, 2), {"a": 1}])
    def test_is_not_pair(self, value):
        """Test values that only look like pairs."""
        assert is_pair(value) is False

    def test_is_pairs(self):
        """Test pair sequences."""
        assert is_pairs([("a", 1), ["b", 2]]) is True
        assert is_pairs([]) is True
        assert is_pairs([("a", 1, 2)]) is False

    def test_pair_iterable(self):
        """Test re-iterable sources of pairs."""
        assert is_pair_iterable({"a": 1}.items()) is True
        assert is_pair_iterable({("a", 1)}) is True
        assert is_pair_iterable({"a": 1}) is False
        assert is_pair_iterable("ab") is False
        assert is_pair_iterable(iter([("a", 1)])) is False
        assert is_pair_iterable([("a", 1), "xyz"]) is False
        assert is_pair_iterable((("a", 1), ("b", 2, 3))) is False


class TestClassifySource:
    """Test suite for source classification."""

    # =========================================================================
    # Recognized Shapes
    # =========================================================================

    def test_pairs(self):
        """Test that pair sequences become literal entries."""
        result = classify_source([("type", "drink"), ("size", "small")])

        assert result.kind is SourceKind.PAIRS
        assert result.entries == {"type": "drink", "size": "small"}

    def test_duplicate_pairs_overwrite(self):
        """Test that later pairs win over earlier ones."""
        result = classify_source([("a", 1), ("a", 2)])

        assert result.entries == {"a": 2}

    def test_wildcard(self):
        """Test that a callable becomes the wildcard handler."""
        def handler(prototype, key):
            return key

        result = classify_source(handler)

        assert result.kind is SourceKind.WILDCARD
        assert result.entries == {ALL: handler}

    def test_iterable(self):
        """Test that a re-iterable source is stored lazily."""
        env = {"PORT": "3000"}
        result = classify_source(env.items())

        assert result.kind is SourceKind.ITERABLE
        assert list(result.entries) == [GENFN]

        env["PORT"] = "4000"
        assert dict(result.entries[GENFN]()) == {"PORT": "4000"}

    def test_mapping(self):
        """Test that a mapping is copied into literal entries."""
        source = {"color": "red"}
        result = classify_source(source)
        source["color"] = "blue"

        assert result.kind is SourceKind.MAPPING
        assert result.entries == {"color": "red"}

    def test_one_shot_iterator(self):
        """Test that a one-shot iterator of pairs is materialized."""
        result = classify_source(iter([("a", 1)]))

        assert result.kind is SourceKind.PAIRS
        assert result.entries == {"a": 1}

    # =========================================================================
    # Unrecognized Shapes
    # =========================================================================

    @pytest.mark.parametrize(
        "source",
        [None, 42, "text", [("a", 1, 2)], [("a", 1), "xyz"], iter([1, 2])],
    )
    def test_unrecognized(self, source):
        """Test that unknown shapes register nothing."""
        result = classify_source(source)

        assert result.kind is SourceKind.UNRECOGNIZED
        assert result.entries == {}
