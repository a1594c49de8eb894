"""
Momentum Oscillators

Bounded-range momentum measures and their display zones.

    RSI (Relative Strength Index)
        RSI = 100 - 100 / (1 + RS),  RS = Average Gain / Average Loss
        Gains and losses are simple averages over ``period`` price changes.

    Stochastic Oscillator
        %K = 100 * (Close - Lowest Low) / (Highest High - Lowest Low)
        %D = SMA(%K, 3)

Fallbacks keep every call displayable: RSI is 50 when there are fewer than
``period + 1`` closes and 100 when the average loss is zero; %K is 50 when
the window has no range.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Sequence, Union

import numpy as np
import pandas as pd

from forex_ta.config import OSCILLATORS, OscillatorParameters
from forex_ta.moving_averages import rolling_windows
from forex_ta.price_series import PriceInput, PriceSeries, to_close_series, to_ohlc_frame


# =============================================================================
# ENUMERATIONS
# =============================================================================

class MomentumZone(Enum):
    """Oscillator zone shown on the status cards."""
    OVERBOUGHT = "Overbought"
    NEUTRAL = "Neutral"
    OVERSOLD = "Oversold"


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass
class StochasticResult:
    """%K and %D lines aligned with the input bars."""
    k: pd.Series
    d: pd.Series

    @property
    def latest_k(self) -> float:
        """Last defined %K value, NaN if none."""
        valid = self.k.dropna()
        return float(valid.iloc[-1]) if len(valid) else np.nan

    @property
    def latest_d(self) -> float:
        """Last defined %D value, NaN if none."""
        valid = self.d.dropna()
        return float(valid.iloc[-1]) if len(valid) else np.nan


# =============================================================================
# RSI
# =============================================================================

def _simple_rsi(deltas: np.ndarray, params: OscillatorParameters) -> float:
    """RSI of one window of price changes using simple averages."""
    period = len(deltas)
    avg_gain = deltas[deltas > 0].sum() / period
    avg_loss = -deltas[deltas < 0].sum() / period

    if avg_loss == 0:
        return params.rsi_all_gains

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def rsi(
    prices: PriceInput,
    period: int = OSCILLATORS.rsi_period,
    params: OscillatorParameters = OSCILLATORS
) -> float:
    """
    Calculate the Relative Strength Index over the first ``period`` changes.

    Parameters
    ----------
    prices : PriceInput
        Closing prices
    period : int
        Number of price changes averaged (default: 14)
    params : OscillatorParameters
        Supplies the neutral and all-gains fallback values

    Returns
    -------
    float
        RSI in [0, 100]; 50 when fewer than ``period + 1`` closes are
        available, 100 when there were no losses
    """
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")

    values = to_close_series(prices).to_numpy(dtype=float)
    if len(values) < period + 1:
        return params.rsi_neutral

    deltas = np.diff(values[:period + 1])
    return float(_simple_rsi(deltas, params))


def rsi_series(
    prices: PriceInput,
    period: int = OSCILLATORS.rsi_period,
    params: OscillatorParameters = OSCILLATORS
) -> pd.Series:
    """
    RSI of every trailing window of ``period + 1`` closes, for charting.

    Each value uses the same simple averages as ``rsi``. The first
    ``period`` positions are NaN.
    """
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")

    close = to_close_series(prices)
    values = close.to_numpy(dtype=float)
    result = np.full(len(values), np.nan)

    if len(values) >= period + 1:
        deltas = np.diff(values)
        for j, window in enumerate(rolling_windows(deltas, period)):
            result[j + period] = _simple_rsi(window, params)

    return pd.Series(result, index=close.index)


# =============================================================================
# STOCHASTIC
# =============================================================================

def stochastic(
    ohlc: Union[PriceSeries, pd.DataFrame, Sequence[Any]],
    period: int = OSCILLATORS.stoch_period,
    d_period: int = OSCILLATORS.stoch_d_period,
    params: OscillatorParameters = OSCILLATORS
) -> StochasticResult:
    """
    Calculate the Stochastic Oscillator (%K and %D).

    Parameters
    ----------
    ohlc : PriceSeries, DataFrame or sequence of bars
        Needs High, Low and Close
    period : int
        Lookback for highest high / lowest low
    d_period : int
        SMA length for %D
    params : OscillatorParameters
        Supplies the zero-range fallback

    Returns
    -------
    StochasticResult
        %K defined from index ``period - 1`` and %D from
        ``period + d_period - 2``; earlier positions are NaN
    """
    if period < 1 or d_period < 1:
        raise ValueError(f"Periods must be >= 1, got {period} and {d_period}")

    frame = to_ohlc_frame(ohlc)
    n = len(frame)
    k_values = np.full(n, np.nan)

    if n >= period:
        highest_high = rolling_windows(frame['High'].to_numpy(dtype=float), period).max(axis=1)
        lowest_low = rolling_windows(frame['Low'].to_numpy(dtype=float), period).min(axis=1)
        close = frame['Close'].to_numpy(dtype=float)[period - 1:]

        price_range = highest_high - lowest_low
        with np.errstate(divide='ignore', invalid='ignore'):
            raw_k = (close - lowest_low) / price_range * 100.0
        k_values[period - 1:] = np.where(price_range == 0, params.stoch_zero_range, raw_k)

    k = pd.Series(k_values, index=frame.index)
    d = k.rolling(window=d_period, min_periods=d_period).mean()

    return StochasticResult(k=k, d=d)


# =============================================================================
# ZONE CLASSIFICATION
# =============================================================================

def classify_rsi(value: float, params: OscillatorParameters = OSCILLATORS) -> MomentumZone:
    """Overbought above 70, oversold below 30, neutral otherwise."""
    if pd.isna(value):
        return MomentumZone.NEUTRAL
    if value > params.rsi_overbought:
        return MomentumZone.OVERBOUGHT
    if value < params.rsi_oversold:
        return MomentumZone.OVERSOLD
    return MomentumZone.NEUTRAL


def classify_stochastic(value: float, params: OscillatorParameters = OSCILLATORS) -> MomentumZone:
    """Overbought above 80, oversold below 20, neutral otherwise."""
    if pd.isna(value):
        return MomentumZone.NEUTRAL
    if value > params.stoch_overbought:
        return MomentumZone.OVERBOUGHT
    if value < params.stoch_oversold:
        return MomentumZone.OVERSOLD
    return MomentumZone.NEUTRAL
