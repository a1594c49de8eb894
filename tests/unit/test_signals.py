"""
Unit tests for forex_ta/signals.py
"""

import numpy as np
import pytest

from forex_ta.config import Bias, SignalPolicy, TradeSignal
from forex_ta.signals import SignalSynthesizer, trend_direction, trend_strength


class TestTrend:
    """Tests for trend direction and strength."""

    def test_rising_is_bullish(self, rising_closes):
        assert trend_direction(rising_closes) == Bias.BULLISH

    def test_falling_is_bearish(self, falling_closes):
        assert trend_direction(falling_closes) == Bias.BEARISH

    def test_needs_lookback_plus_one(self):
        assert trend_direction(list(range(20))) == Bias.NEUTRAL
        assert trend_direction(list(range(21))) == Bias.BULLISH

    def test_compares_against_lookback_bar(self):
        # Only close[-1] and close[-21] matter
        closes = [1.0] + [5.0] * 19 + [2.0]
        assert trend_direction(closes) == Bias.BULLISH

    def test_strength_all_up(self, rising_closes):
        assert trend_strength(rising_closes) == pytest.approx(100.0)

    def test_strength_flat(self, flat_closes):
        assert trend_strength(flat_closes) == 50.0

    def test_strength_mixed(self):
        assert trend_strength([1.0, 3.0, 2.0]) == pytest.approx(200.0 / 3.0)

    def test_strength_single_price(self):
        assert trend_strength([1.0]) == 50.0


class TestSignalSynthesizer:
    """Tests for the BUY/SELL/HOLD mapping."""

    def setup_method(self):
        self.synthesizer = SignalSynthesizer()

    def test_buy(self):
        assert self.synthesizer.synthesize(55.0, Bias.BULLISH, 0.0004).signal == TradeSignal.BUY

    def test_sell(self):
        assert self.synthesizer.synthesize(45.0, Bias.BEARISH, -0.0004).signal == TradeSignal.SELL

    def test_overbought_holds(self):
        summary = self.synthesizer.synthesize(75.0, Bias.BULLISH, 0.0004)
        assert summary.signal == TradeSignal.HOLD
        assert any("overbought" in reason for reason in summary.reasons)

    def test_oversold_holds(self):
        assert self.synthesizer.synthesize(25.0, Bias.BEARISH, -0.0004).signal == TradeSignal.HOLD

    def test_macd_disagreement_holds(self):
        assert self.synthesizer.synthesize(55.0, Bias.BULLISH, -0.0004).signal == TradeSignal.HOLD
        assert self.synthesizer.synthesize(45.0, Bias.BEARISH, 0.0004).signal == TradeSignal.HOLD

    def test_undefined_macd_does_not_block(self):
        assert self.synthesizer.synthesize(55.0, Bias.BULLISH, np.nan).signal == TradeSignal.BUY

    def test_neutral_trend_holds(self):
        assert self.synthesizer.synthesize(50.0, Bias.NEUTRAL, 0.0).signal == TradeSignal.HOLD

    def test_policy_without_confirmation(self):
        synthesizer = SignalSynthesizer(SignalPolicy(require_macd_confirmation=False))
        assert synthesizer.synthesize(55.0, Bias.BULLISH, -0.0004).signal == TradeSignal.BUY

    def test_rising_prices_never_sell(self, rising_closes):
        summary = self.synthesizer.from_prices(rising_closes, rsi=100.0, macd_value=0.001)
        assert summary.trend == Bias.BULLISH
        assert summary.signal != TradeSignal.SELL
