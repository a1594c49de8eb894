"""
Unit tests for forex_ta/patterns.py
"""

import pandas as pd
import pytest

from forex_ta.config import Bias
from forex_ta.patterns import CandlestickPattern, candle_anatomy, detect_pattern, scan_patterns
from forex_ta.price_series import PriceSeries, Sample


def bars(*rows):
    """Frame from (open, high, low, close) tuples."""
    return pd.DataFrame(list(rows), columns=["Open", "High", "Low", "Close"])


DOJI = (1.0000, 1.0020, 0.9990, 1.0001)
HAMMER = (1.000, 1.011, 0.970, 1.010)
SHOOTING_STAR = (1.010, 1.040, 0.999, 1.000)
SMALL_BEARISH = (1.010, 1.011, 0.999, 1.000)
SMALL_BULLISH = (1.000, 1.011, 0.999, 1.010)
WIDE_BULLISH = (0.998, 1.013, 0.997, 1.012)
WIDE_BEARISH = (1.012, 1.013, 0.997, 0.998)


class TestAnatomy:
    """Tests for body and wick measurement."""

    def test_hammer_anatomy(self):
        anatomy = candle_anatomy(Sample(0, *HAMMER))
        assert anatomy.body == pytest.approx(0.010)
        assert anatomy.upper_wick == pytest.approx(0.001)
        assert anatomy.lower_wick == pytest.approx(0.030)
        assert anatomy.range == pytest.approx(0.041)
        assert anatomy.is_bullish


class TestDetectPattern:
    """Tests for classification of the last bars."""

    def test_doji(self):
        assert detect_pattern(bars(DOJI)) == CandlestickPattern.DOJI

    def test_hammer(self):
        assert detect_pattern(bars(SMALL_BEARISH, HAMMER)) == CandlestickPattern.HAMMER

    def test_shooting_star(self):
        assert detect_pattern(bars(SMALL_BULLISH, SHOOTING_STAR)) == CandlestickPattern.SHOOTING_STAR

    def test_bullish_engulfing(self):
        assert detect_pattern(bars(SMALL_BEARISH, WIDE_BULLISH)) == CandlestickPattern.BULLISH_ENGULFING

    def test_bearish_engulfing(self):
        assert detect_pattern(bars(SMALL_BULLISH, WIDE_BEARISH)) == CandlestickPattern.BEARISH_ENGULFING

    def test_documented_engulfing_scenario(self):
        frame = bars((1.1000, 1.1010, 1.0940, 1.0950), (1.0930, 1.1030, 1.0920, 1.1020))
        assert detect_pattern(frame) == CandlestickPattern.BULLISH_ENGULFING

    def test_single_bar_patterns_take_precedence(self):
        # The hammer also engulfs the small bearish bar before it
        prev = (1.005, 1.0055, 1.0005, 1.001)
        assert detect_pattern(bars(prev, HAMMER)) == CandlestickPattern.HAMMER

    def test_single_bar_input(self):
        assert detect_pattern(bars(HAMMER)) == CandlestickPattern.HAMMER
        assert detect_pattern(bars(WIDE_BULLISH)) is None

    def test_empty_input(self):
        assert detect_pattern([]) is None

    def test_flat_bars_have_no_pattern(self, flat_closes):
        assert detect_pattern(PriceSeries.from_closes(flat_closes)) is None


class TestPatternMetadata:
    """Tests for bias and description."""

    def test_bias(self):
        assert CandlestickPattern.HAMMER.bias == Bias.BULLISH
        assert CandlestickPattern.SHOOTING_STAR.bias == Bias.BEARISH
        assert CandlestickPattern.DOJI.bias == Bias.NEUTRAL

    def test_description(self):
        assert CandlestickPattern.DOJI.description == "Indecision in the market"


class TestScanPatterns:
    """Tests for the per-bar marker scan."""

    def test_markers_aligned(self):
        result = scan_patterns(bars(SMALL_BEARISH, WIDE_BULLISH, SMALL_BULLISH, SHOOTING_STAR))
        assert len(result) == 4
        assert result.iloc[0] is None
        assert result.iloc[1] == "Bullish Engulfing"
        assert result.iloc[3] == "Shooting Star"
