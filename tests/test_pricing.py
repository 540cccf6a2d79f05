"""Unit tests for fare calculation and the earnings split."""

import pytest

from src.domain.pricing import FlatRatePricing, split_earnings


class TestFlatRatePricing:
    def test_default_rate_is_ten(self):
        assert FlatRatePricing().calculate(10) == 100

    def test_custom_rate(self):
        assert FlatRatePricing(rate=3).calculate(7) == 21

    def test_zero_distance_is_free(self):
        assert FlatRatePricing().calculate(0) == 0


class TestSplitEarnings:
    def test_even_split(self):
        split = split_earnings(100)
        assert (split.owner_share, split.network_share) == (80, 20)

    def test_residue_goes_to_network(self):
        split = split_earnings(101)
        assert (split.owner_share, split.network_share) == (80, 21)

    def test_zero_earnings(self):
        split = split_earnings(0)
        assert (split.owner_share, split.network_share) == (0, 0)

    def test_shares_always_sum_to_earnings(self):
        for earnings in range(0, 2_000):
            assert split_earnings(earnings).total == earnings

    def test_large_values_stay_exact(self):
        earnings = 10**30 + 7
        split = split_earnings(earnings)
        assert split.owner_share + split.network_share == earnings

    def test_custom_owner_percent(self):
        split = split_earnings(99, owner_share_percent=50)
        assert (split.owner_share, split.network_share) == (49, 50)

    def test_negative_earnings_rejected(self):
        with pytest.raises(ValueError):
            split_earnings(-1)
