"""
Unit tests for forex_ta/macd.py
"""

import numpy as np
import pytest

from forex_ta.config import Bias
from forex_ta.macd import macd, macd_bias
from forex_ta.moving_averages import ema


class TestMACD:
    """Tests for MACD, signal line and histogram."""

    def test_definition_offsets(self):
        closes = list(np.linspace(1.08, 1.09, 40))
        result = macd(closes)

        assert result.macd_line.first_valid_index() == 25
        assert result.signal_line.first_valid_index() == 33
        assert result.histogram.first_valid_index() == 33
        assert len(result.macd_line) == 40

    def test_macd_is_ema_difference(self, synthetic_series):
        result = macd(synthetic_series)
        expected = ema(synthetic_series, 12) - ema(synthetic_series, 26)
        np.testing.assert_allclose(result.macd_line.to_numpy(), expected.to_numpy(), equal_nan=True)

    def test_histogram(self, synthetic_series):
        result = macd(synthetic_series)
        diff = (result.macd_line - result.signal_line).dropna()
        np.testing.assert_allclose(result.histogram.dropna().to_numpy(), diff.to_numpy())

    def test_histogram_undefined_where_either_line_is(self, synthetic_series):
        result = macd(synthetic_series)
        either_missing = result.macd_line.isna() | result.signal_line.isna()
        assert (result.histogram.isna() == either_missing).all()

    def test_rising_prices_bullish(self, rising_closes):
        result = macd(rising_closes)
        assert result.latest > 0
        assert result.bias == Bias.BULLISH
        assert np.isnan(result.latest_signal)

    def test_flat_prices_neutral(self, flat_closes):
        result = macd(flat_closes)
        assert result.latest == pytest.approx(0.0)
        assert result.bias == Bias.NEUTRAL

    def test_short_input_undefined(self):
        result = macd([1.0] * 10)
        assert result.macd_line.isna().all()
        assert np.isnan(result.latest)
        assert result.bias == Bias.NEUTRAL


class TestMACDBias:
    """Tests for the sign classification."""

    def test_signs(self):
        assert macd_bias(0.0005) == Bias.BULLISH
        assert macd_bias(-0.0005) == Bias.BEARISH
        assert macd_bias(0.0) == Bias.NEUTRAL
        assert macd_bias(np.nan) == Bias.NEUTRAL
