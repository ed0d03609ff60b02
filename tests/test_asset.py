"""
Tests for Asset construction and the fields derived by a rebalance run.
"""

import unittest
from decimal import Decimal
from fractions import Fraction

from rebalance import Asset
from rebalance import InvalidAssetError
from rebalance import RebalancedAsset
from rebalance import to_fraction


class TestToFraction(unittest.TestCase):

    def test_float_uses_decimal_text(self):
        self.assertEqual(to_fraction(0.1), Fraction(1, 10))

    def test_string_and_decimal(self):
        self.assertEqual(to_fraction(" 6500.25 "), Fraction(26001, 4))
        self.assertEqual(to_fraction(Decimal("0.3")), Fraction(3, 10))

    def test_fraction_passes_through(self):
        value = Fraction(2, 3)
        self.assertIs(to_fraction(value), value)

    def test_garbage_raises(self):
        with self.assertRaises(InvalidAssetError):
            to_fraction("ten")

    def test_none_and_bool_raise(self):
        with self.assertRaises(InvalidAssetError):
            to_fraction(None)
        with self.assertRaises(InvalidAssetError):
            to_fraction(True)


class TestAsset(unittest.TestCase):

    def test_creation_normalizes_to_fractions(self):
        asset = Asset("  TIPS fund ", 6500, 0.1)
        self.assertEqual(asset.name, "TIPS fund")
        self.assertEqual(asset.current_value, Fraction(6500))
        self.assertEqual(asset.target_fraction, Fraction(1, 10))
        self.assertIsInstance(asset.current_value, Fraction)

    def test_bounds_are_inclusive(self):
        Asset("cash", 0, 0)
        Asset("all-in", 10, 1)

    def test_negative_value_raises(self):
        with self.assertRaises(InvalidAssetError):
            Asset("bad", -1, "0.5")

    def test_target_above_one_raises(self):
        with self.assertRaises(InvalidAssetError):
            Asset("bad", 100, "1.01")

    def test_negative_target_raises(self):
        with self.assertRaises(InvalidAssetError):
            Asset("bad", 100, "-0.1")

    def test_empty_name_raises(self):
        with self.assertRaises(InvalidAssetError):
            Asset("   ", 100, "0.5")

    def test_invalid_asset_error_is_value_error(self):
        with self.assertRaises(ValueError):
            Asset("bad", "lots", "0.5")

    def test_frozen(self):
        asset = Asset("x", 1, "0.5")
        with self.assertRaises(AttributeError):
            asset.current_value = Fraction(2)


class TestRebalancedAsset(unittest.TestCase):

    def _evaluated(self, delta=None):
        return RebalancedAsset(
            asset=Asset("x", 100, "0.5"),
            grand_total=Fraction(300),
            target_value=Fraction(150),
            fractional_deviation=Fraction(-1, 3),
            actual_allocation=Fraction(1, 2),
            delta=delta,
        )

    def test_untouched_amount_is_zero(self):
        item = self._evaluated()
        self.assertIsNone(item.delta)
        self.assertEqual(item.amount, 0)
        self.assertEqual(item.new_value, Fraction(100))

    def test_new_fields_follow_delta(self):
        item = self._evaluated(delta=Fraction(50))
        self.assertEqual(item.new_value, Fraction(150))
        self.assertEqual(item.new_deviation, 0)
        self.assertEqual(item.new_allocation, Fraction(1, 2))

    def test_new_allocation_with_zero_grand_total(self):
        item = RebalancedAsset(
            asset=Asset("x", 0, "0.5"),
            grand_total=Fraction(0),
            target_value=Fraction(1),
            fractional_deviation=Fraction(-1),
            actual_allocation=Fraction(0),
        )
        self.assertEqual(item.new_allocation, 0)


if __name__ == "__main__":
    unittest.main()
