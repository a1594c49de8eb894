"""
Signal Synthesis

Combines RSI, trend direction and MACD sign into a coarse BUY/SELL/HOLD
signal for display.

    Trend direction  close[-1] vs close[-1 - lookback] (lookback = 20)
    Trend strength   sum of positive changes / sum of absolute changes over
                     the last ``lookback`` changes, as a percentage

The final mapping is a presentation heuristic, not a trading strategy; it is
driven entirely by ``SignalPolicy`` so callers can replace it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from forex_ta.config import SIGNAL_POLICY, TREND, Bias, SignalPolicy, TradeSignal
from forex_ta.macd import macd_bias
from forex_ta.price_series import PriceInput, to_close_series

logger = logging.getLogger(__name__)


# =============================================================================
# TREND
# =============================================================================

def trend_direction(prices: PriceInput, lookback: int = TREND.lookback) -> Bias:
    """
    Compare the latest close with the close ``lookback`` bars earlier.

    Returns
    -------
    Bias
        BULLISH if the latest close is higher, BEARISH otherwise, NEUTRAL
        when fewer than ``lookback + 1`` closes are available
    """
    values = to_close_series(prices).to_numpy(dtype=float)
    if lookback < 1 or len(values) < lookback + 1:
        return Bias.NEUTRAL
    return Bias.BULLISH if values[-1] > values[-1 - lookback] else Bias.BEARISH


def trend_strength(
    prices: PriceInput,
    lookback: int = TREND.lookback,
    neutral: float = TREND.neutral_strength
) -> float:
    """
    Share of upward movement in the last ``lookback`` price changes.

    Uses whatever changes are available when the series is shorter.

    Returns
    -------
    float
        0-100; ``neutral`` (50) when the prices did not move
    """
    values = to_close_series(prices).to_numpy(dtype=float)
    deltas = np.diff(values[-(lookback + 1):])

    total = np.abs(deltas).sum()
    if total == 0:
        return neutral

    positive = deltas[deltas > 0].sum()
    return float(positive / total * 100.0)


# =============================================================================
# SIGNAL SYNTHESIS
# =============================================================================

@dataclass
class SignalSummary:
    """Displayed signal with the readings it was derived from."""
    signal: TradeSignal
    trend: Bias
    rsi: float
    macd: float
    reasons: List[str] = field(default_factory=list)


class SignalSynthesizer:
    """
    Maps RSI, trend and MACD readings to a TradeSignal.

    Usage
    -----
    >>> synthesizer = SignalSynthesizer()
    >>> synthesizer.synthesize(rsi=55.0, trend=Bias.BULLISH, macd_value=0.0004).signal
    <TradeSignal.BUY: 'BUY'>
    """

    def __init__(self, policy: SignalPolicy = SIGNAL_POLICY):
        """
        Initialize with a signal policy.

        Parameters
        ----------
        policy : SignalPolicy
            RSI thresholds and MACD confirmation switch
        """
        self.policy = policy

    def synthesize(self, rsi: float, trend: Bias, macd_value: float) -> SignalSummary:
        """
        Combine the readings into a single signal.

        Parameters
        ----------
        rsi : float
            Current RSI
        trend : Bias
            Output of ``trend_direction``
        macd_value : float
            Latest MACD line value (NaN if undefined)

        Returns
        -------
        SignalSummary
            Signal plus the reasons that produced it
        """
        policy = self.policy
        momentum = macd_bias(macd_value)
        reasons = [f"Trend {trend.value}", f"RSI {rsi:.1f}", f"MACD {momentum.value}"]

        if trend == Bias.BULLISH:
            if rsi > policy.rsi_overbought:
                reasons.append("RSI overbought, no new long")
                signal = TradeSignal.HOLD
            elif policy.require_macd_confirmation and momentum == Bias.BEARISH:
                reasons.append("MACD does not confirm uptrend")
                signal = TradeSignal.HOLD
            else:
                signal = TradeSignal.BUY
        elif trend == Bias.BEARISH:
            if rsi < policy.rsi_oversold:
                reasons.append("RSI oversold, no new short")
                signal = TradeSignal.HOLD
            elif policy.require_macd_confirmation and momentum == Bias.BULLISH:
                reasons.append("MACD does not confirm downtrend")
                signal = TradeSignal.HOLD
            else:
                signal = TradeSignal.SELL
        else:
            reasons.append("Not enough history for a trend")
            signal = TradeSignal.HOLD

        logger.debug(f"Synthesized {signal.value}: {'; '.join(reasons)}")

        return SignalSummary(
            signal=signal,
            trend=trend,
            rsi=rsi,
            macd=macd_value,
            reasons=reasons
        )

    def from_prices(self, prices: PriceInput, rsi: float, macd_value: float,
                    lookback: int = TREND.lookback) -> SignalSummary:
        """Derive the trend from ``prices`` and synthesize."""
        return self.synthesize(rsi, trend_direction(prices, lookback), macd_value)
