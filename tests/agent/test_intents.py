"""Tests for intent classification and selection rules."""

import pytest

from agent.intents import (
    Intent,
    choose_merchant,
    detect_intent,
    extract_query,
    pick_cheapest,
)


class TestDetectIntent:
    """Tests for detect_intent."""

    @pytest.mark.parametrize(
        "text",
        ["öde", "Şimdi ÖDE lütfen", "satın al", "siparişi tamamla"],
    )
    def test_checkout_keywords(self, text):
        assert detect_intent(text) == Intent.CHECKOUT

    @pytest.mark.parametrize("text", ["süt ürünleri ekle", "peynir istiyorum", ""])
    def test_default_is_search_and_add(self, text):
        assert detect_intent(text) == Intent.SEARCH_AND_ADD


class TestExtractQuery:
    """Tests for extract_query."""

    def test_cheese(self):
        assert extract_query("Beyaz PEYNIR ekle") == "peynir"

    @pytest.mark.parametrize("text", ["tereyağı ekle", "tereyagi lazim"])
    def test_butter(self, text):
        assert extract_query(text) == "tereyağı"

    def test_cheese_wins_over_butter(self):
        assert extract_query("peynir ve tereyağı") == "peynir"

    def test_falls_back_to_milk(self):
        assert extract_query("süt ürünleri ekle") == "sut"
        assert extract_query("ekmek") == "sut"

    def test_custom_default(self):
        assert extract_query("ekmek", default="ekmek") == "ekmek"


class TestChooseMerchant:
    """Tests for choose_merchant."""

    def test_highest_profit_weight(self):
        merchants = [
            {"id": "a", "profit_weight": 0.8},
            {"id": "b", "profit_weight": 1.2},
            {"id": "c", "profit_weight": 1.0},
        ]

        assert choose_merchant(merchants)["id"] == "b"

    def test_tie_goes_to_first(self):
        merchants = [
            {"id": "a", "profit_weight": 1.0},
            {"id": "b", "profit_weight": 1.0},
        ]

        assert choose_merchant(merchants)["id"] == "a"

    def test_missing_weight_counts_as_zero(self):
        merchants = [{"id": "a"}, {"id": "b", "profit_weight": 0.1}]

        assert choose_merchant(merchants)["id"] == "b"

    def test_empty(self):
        assert choose_merchant([]) is None


class TestPickCheapest:
    """Tests for pick_cheapest."""

    def test_two_cheapest(self):
        products = [
            {"id": "P-001", "price": 39.9},
            {"id": "P-003", "price": 89.0},
            {"id": "P-004", "price": 62.0},
        ]

        assert [p["id"] for p in pick_cheapest(products)] == ["P-001", "P-004"]

    def test_ties_keep_listing_order(self):
        products = [
            {"id": "x", "price": 10},
            {"id": "y", "price": 5},
            {"id": "z", "price": 5},
        ]

        assert [p["id"] for p in pick_cheapest(products)] == ["y", "z"]

    def test_fewer_than_count(self):
        assert len(pick_cheapest([{"id": "x", "price": 1}], count=2)) == 1
