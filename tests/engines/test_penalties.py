"""
Tests for the PenaltyRuleSet engine.

Covers:
- Flat Rp/s and Rp/sz surcharges
- Cumulative application of every matching rule
- Rp/kg rules and the weight factor
- Floor at zero
- Itemised breakdown
"""

from decimal import Decimal

import pytest

from seafood_engines.penalties import PenaltyRuleSet
from seafood_kernel.domain.values import PenaltyRule
from seafood_kernel.exceptions import ConversionFactorRequiredError
from seafood_modules.contracts.ranges import band_label_classifier


def _rules(*rules: tuple[str, str, str]) -> PenaltyRuleSet:
    return PenaltyRuleSet(rules=tuple(
        PenaltyRule(range_label=label, amount=Decimal(amount), unit=unit)
        for label, amount, unit in rules
    ))


class TestApplyPenalties:
    """Tests for apply_penalties."""

    def test_flat_per_size_penalty(self):
        rules = _rules(("20-25", "5000", "Rp/sz"))

        price = rules.apply_penalties(
            Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
        )

        assert price == Decimal("140000")

    def test_flat_per_piece_penalty(self):
        rules = _rules(("20-25", "750", "Rp/s"))

        price = rules.apply_penalties(
            Decimal("100000"), Decimal("21"), classifier=band_label_classifier,
        )

        assert price == Decimal("100750")

    def test_non_matching_rule_is_ignored(self):
        rules = _rules(("20-25", "5000", "Rp/sz"))

        price = rules.apply_penalties(
            Decimal("120000"), Decimal("30"), classifier=band_label_classifier,
        )

        assert price == Decimal("120000")

    def test_all_matching_rules_apply_cumulatively(self):
        rules = _rules(
            ("20-25", "5000", "Rp/sz"),
            ("20-30", "1000", "Rp/s"),
            ("26-30", "9999", "Rp/sz"),
        )

        price = rules.apply_penalties(
            Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
        )

        assert price == Decimal("141000")

    def test_duplicate_labels_both_apply(self):
        rules = _rules(("20-25", "1000", "Rp/sz"), ("20-25", "1000", "Rp/sz"))

        price = rules.apply_penalties(
            Decimal("0"), Decimal("22"), classifier=band_label_classifier,
        )

        assert price == Decimal("2000")

    def test_empty_rule_set_returns_base_price(self):
        price = PenaltyRuleSet().apply_penalties(
            Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
        )
        assert price == Decimal("135000")

    def test_custom_classifier(self):
        rules = _rules(("jumbo", "2500", "Rp/sz"))

        def by_name(size, label):
            return label == "jumbo" and size <= Decimal("15")

        assert rules.apply_penalties("90000", "12", classifier=by_name) == Decimal("92500")
        assert rules.apply_penalties("90000", "16", classifier=by_name) == Decimal("90000")


class TestWeightFactor:
    """Rp/kg rules need a caller-supplied size-to-weight factor."""

    def test_per_kg_rule_without_factor_raises(self):
        rules = _rules(("20-25", "200", "Rp/kg"))

        with pytest.raises(ConversionFactorRequiredError) as exc_info:
            rules.apply_penalties(
                Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
            )

        assert exc_info.value.code == "CONVERSION_FACTOR_REQUIRED"
        assert exc_info.value.range_label == "20-25"

    def test_per_kg_rule_uses_factor(self):
        rules = _rules(("20-25", "200", "Rp/kg"))

        price = rules.apply_penalties(
            Decimal("135000"),
            Decimal("25"),
            classifier=band_label_classifier,
            weight_factor=lambda size: Decimal("1") / Decimal("4"),
        )

        assert price == Decimal("135050")

    def test_non_matching_per_kg_rule_needs_no_factor(self):
        rules = _rules(("40-50", "200", "Rp/kg"))

        price = rules.apply_penalties(
            Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
        )

        assert price == Decimal("135000")


class TestFloorAndBreakdown:
    """Adjusted prices never go below zero; breakdown explains each delta."""

    def test_negative_total_is_floored_at_zero(self):
        rules = _rules(("20-25", "-5000", "Rp/sz"))

        breakdown = rules.penalty_breakdown(
            Decimal("1000"), Decimal("22"), classifier=band_label_classifier,
        )

        assert breakdown.adjusted_price == Decimal("0")
        assert breakdown.total_delta == Decimal("-5000")
        assert breakdown.floored is True

    def test_breakdown_lists_matching_rules(self):
        rules = _rules(("20-25", "5000", "Rp/sz"), ("26-30", "100", "Rp/sz"))

        breakdown = rules.penalty_breakdown(
            Decimal("135000"), Decimal("25"), classifier=band_label_classifier,
        )

        assert len(breakdown.applied) == 1
        assert breakdown.applied[0].rule.range_label == "20-25"
        assert breakdown.applied[0].delta == Decimal("5000")
        assert breakdown.adjusted_price == Decimal("140000")
        assert breakdown.floored is False

    def test_document_round_trip_keeps_penalty_amount_key(self):
        rules = _rules(("20-25", "5000", "Rp/sz"))
        document = rules.to_document()

        assert document == [{"range": "20-25", "penalty_amount": "5000", "unit": "Rp/sz"}]
        assert PenaltyRuleSet.from_document(document) == rules
