"""
Moving Averages

Simple and exponential moving averages over closing prices.

    SMA  = mean of the trailing ``period`` closes
    EMA  = seeded with the SMA of the first ``period`` closes, then
           EMA[i] = (Close[i] - EMA[i-1]) * 2 / (period + 1) + EMA[i-1]

``sma`` returns only complete windows (length n - period + 1, labelled by
the bar that closes each window). ``ema`` returns a series of the input's
length with NaN for the warm-up bars so it can be charted directly against
the price series.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from numpy.lib.stride_tricks import sliding_window_view

from forex_ta.price_series import PriceInput, to_close_series


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")


def rolling_windows(values: np.ndarray, period: int) -> np.ndarray:
    """
    Trailing windows of ``period`` values, one row per complete window.

    Row ``j`` holds ``values[j : j + period]``; an input shorter than the
    period gives an empty (0, period) array.
    """
    if len(values) < period:
        return np.empty((0, period), dtype=float)
    return sliding_window_view(values, period)


def sma(prices: PriceInput, period: int) -> pd.Series:
    """
    Calculate the Simple Moving Average.

    Parameters
    ----------
    prices : PriceInput
        Closing prices (PriceSeries, Series, array or sequence)
    period : int
        Window length

    Returns
    -------
    pd.Series
        ``len(prices) - period + 1`` averages labelled by window end, or an
        empty Series when there are fewer than ``period`` prices
    """
    _check_period(period)
    close = to_close_series(prices)

    if len(close) < period:
        return pd.Series(dtype=float)

    means = rolling_windows(close.to_numpy(dtype=float), period).mean(axis=1)
    return pd.Series(means, index=close.index[period - 1:])


def sma_aligned(prices: PriceInput, period: int) -> pd.Series:
    """SMA left-padded with NaN to the length of the input."""
    close = to_close_series(prices)
    result = np.full(len(close), np.nan)
    if len(close) >= period:
        result[period - 1:] = sma(close, period).to_numpy()
    return pd.Series(result, index=close.index)


def ema(prices: PriceInput, period: int) -> pd.Series:
    """
    Calculate the Exponential Moving Average seeded with an SMA.

    Parameters
    ----------
    prices : PriceInput
        Closing prices
    period : int
        Smoothing period; multiplier is 2 / (period + 1)

    Returns
    -------
    pd.Series
        Same length as the input. Positions 0..period-2 are NaN, position
        period-1 holds the seed SMA. All NaN if the input is shorter than
        the period.
    """
    _check_period(period)
    close = to_close_series(prices)
    values = close.to_numpy(dtype=float)
    result = np.full(len(values), np.nan)

    if len(values) < period:
        return pd.Series(result, index=close.index)

    multiplier = 2.0 / (period + 1)
    avg = values[:period].mean()
    result[period - 1] = avg

    for i in range(period, len(values)):
        avg = (values[i] - avg) * multiplier + avg
        result[i] = avg

    return pd.Series(result, index=close.index)
