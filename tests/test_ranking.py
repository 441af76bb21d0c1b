"""Tests for ranking policies."""

import pytest
from pydantic import ValidationError

from gazetteer.ranking import DEFAULT_RANKING, POPULATION, SCORE, RankingPolicy, SortField


class TestSortField:
    """Test SortField parsing and rendering."""

    def test_parse_with_direction(self):
        """Test parsing a key with an explicit direction."""
        assert SortField.parse("population:asc") == SortField(field="population", descending=False)

    def test_parse_defaults_to_descending(self):
        """Test that a bare field sorts descending."""
        assert SortField.parse(" score ") == SortField(field="score", descending=True)

    def test_parse_rejects_unknown_direction(self):
        """Test that an unknown direction is rejected."""
        with pytest.raises(ValueError):
            SortField.parse("population:sideways")

    def test_parse_rejects_missing_field(self):
        """Test that a key without a field is rejected."""
        with pytest.raises(ValueError):
            SortField.parse(":desc")

    def test_str_round_trips(self):
        """Test that str() renders a key parse() accepts."""
        assert str(SortField(field="name", descending=False)) == "name:asc"


class TestRankingPolicy:
    """Test RankingPolicy construction."""

    def test_default_is_population_then_score(self):
        """Test that the default ranking is population, then score."""
        assert [f.field for f in DEFAULT_RANKING.sort_fields] == [POPULATION, SCORE]
        assert all(f.descending for f in DEFAULT_RANKING.sort_fields)
        assert str(DEFAULT_RANKING) == "population:desc, score:desc"

    def test_accepts_string_keys(self):
        """Test that string keys are parsed into SortFields."""
        policy = RankingPolicy(sort_fields=["score:desc", "population"])

        assert policy.sort_fields == (
            SortField(field="score", descending=True),
            SortField(field="population", descending=True),
        )

    def test_requires_at_least_one_key(self):
        """Test that an empty policy is rejected."""
        with pytest.raises(ValidationError):
            RankingPolicy(sort_fields=())

    def test_rejects_duplicate_keys(self):
        """Test that duplicate fields are rejected."""
        with pytest.raises(ValidationError):
            RankingPolicy(sort_fields=["population:desc", "population:asc"])

    def test_rejects_bad_string_key(self):
        """Test that a malformed string key is rejected."""
        with pytest.raises(ValidationError):
            RankingPolicy(sort_fields=["population:up"])

    def test_policy_is_immutable(self):
        """Test that RankingPolicy is immutable."""
        with pytest.raises(Exception):  # Pydantic ValidationError
            DEFAULT_RANKING.sort_fields = ()
