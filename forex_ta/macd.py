"""
MACD (Moving Average Convergence Divergence)

    MACD      = EMA(close, fast) - EMA(close, slow)
    Signal    = EMA(MACD, signal), computed over the defined MACD values only
    Histogram = MACD - Signal

All three lines keep the input's length. MACD is NaN until the slow EMA is
seeded (index slow - 1); the signal line is NaN for a further signal - 1
bars; the histogram is defined only where both lines are.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from forex_ta.config import MACD_PARAMS, Bias
from forex_ta.moving_averages import ema
from forex_ta.price_series import PriceInput, to_close_series


@dataclass
class MACDResult:
    """MACD line, signal line and histogram aligned with the input."""
    macd_line: pd.Series
    signal_line: pd.Series
    histogram: pd.Series

    @staticmethod
    def _last_defined(series: pd.Series) -> float:
        valid = series.dropna()
        return float(valid.iloc[-1]) if len(valid) else np.nan

    @property
    def latest(self) -> float:
        """Last defined MACD value, NaN if none."""
        return self._last_defined(self.macd_line)

    @property
    def latest_signal(self) -> float:
        return self._last_defined(self.signal_line)

    @property
    def latest_histogram(self) -> float:
        return self._last_defined(self.histogram)

    @property
    def bias(self) -> Bias:
        return macd_bias(self.latest)


def macd(
    prices: PriceInput,
    fast: int = MACD_PARAMS.fast,
    slow: int = MACD_PARAMS.slow,
    signal: int = MACD_PARAMS.signal
) -> MACDResult:
    """
    Calculate MACD, signal line and histogram.

    Parameters
    ----------
    prices : PriceInput
        Closing prices
    fast, slow, signal : int
        Period parameters (default: 12, 26, 9)

    Returns
    -------
    MACDResult
        Three Series with the input's index
    """
    close = to_close_series(prices)

    ema_fast = ema(close, fast).to_numpy()
    ema_slow = ema(close, slow).to_numpy()
    macd_values = ema_fast - ema_slow  # NaN wherever either EMA is undefined

    # Signal EMA runs over the defined MACD values and is written back
    # at their positions
    defined = ~np.isnan(macd_values)
    signal_values = np.full(len(macd_values), np.nan)
    if defined.any():
        signal_values[defined] = ema(macd_values[defined], signal).to_numpy()

    histogram_values = macd_values - signal_values

    return MACDResult(
        macd_line=pd.Series(macd_values, index=close.index),
        signal_line=pd.Series(signal_values, index=close.index),
        histogram=pd.Series(histogram_values, index=close.index)
    )


def macd_bias(value: float) -> Bias:
    """MACD above zero is bullish, below zero bearish."""
    if pd.isna(value) or value == 0:
        return Bias.NEUTRAL
    return Bias.BULLISH if value > 0 else Bias.BEARISH
