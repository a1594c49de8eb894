"""
Volatility Bands (Bollinger Bands)

    Middle = SMA(close, period)
    StdDev = population standard deviation of the same window
    Upper  = Middle + num_std * StdDev
    Lower  = Middle - num_std * StdDev

Derived measures:

    Bandwidth = (Upper - Lower) / Middle * 100
    %B        = (Close - Lower) / (Upper - Lower)

Every line keeps the input's length with NaN for the first period - 1 bars.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

import numpy as np
import pandas as pd

from forex_ta.config import BOLLINGER
from forex_ta.moving_averages import rolling_windows
from forex_ta.price_series import PriceInput, to_close_series


class BandPosition(Enum):
    """Price position relative to the Bollinger envelope."""
    ABOVE = "Above"
    INSIDE = "Inside"
    BELOW = "Below"


@dataclass
class BollingerBands:
    """Bollinger Band components aligned with the input."""
    upper: pd.Series
    middle: pd.Series
    lower: pd.Series
    std_dev: pd.Series
    bandwidth: pd.Series
    percent_b: pd.Series

    def position(self, price: float) -> BandPosition:
        """Classify ``price`` against the most recent band values."""
        return classify_band_position(price, self.upper.iloc[-1], self.lower.iloc[-1])


def bollinger_bands(
    prices: PriceInput,
    period: int = BOLLINGER.period,
    num_std: float = BOLLINGER.num_std
) -> BollingerBands:
    """
    Calculate Bollinger Bands.

    Parameters
    ----------
    prices : PriceInput
        Closing prices
    period : int
        Moving average period (default: 20)
    num_std : float
        Standard deviation multiplier (default: 2.0)

    Returns
    -------
    BollingerBands
        Upper, middle, lower, std_dev, bandwidth and %B series
    """
    if period < 1:
        raise ValueError(f"Period must be >= 1, got {period}")

    close = to_close_series(prices)
    values = close.to_numpy(dtype=float)
    n = len(values)

    middle = np.full(n, np.nan)
    std = np.full(n, np.nan)

    if n >= period:
        windows = rolling_windows(values, period)
        middle[period - 1:] = windows.mean(axis=1)
        std[period - 1:] = windows.std(axis=1, ddof=0)

    upper = middle + num_std * std
    lower = middle - num_std * std

    width = upper - lower
    with np.errstate(divide='ignore', invalid='ignore'):
        bandwidth = np.where(middle != 0, width / middle * 100, np.nan)
        percent_b = np.where(width != 0, (values - lower) / width, np.nan)

    return BollingerBands(
        upper=pd.Series(upper, index=close.index),
        middle=pd.Series(middle, index=close.index),
        lower=pd.Series(lower, index=close.index),
        std_dev=pd.Series(std, index=close.index),
        bandwidth=pd.Series(bandwidth, index=close.index),
        percent_b=pd.Series(percent_b, index=close.index)
    )


def classify_band_position(price: float, upper: float, lower: float) -> BandPosition:
    """
    Classify price position relative to the bands.

    Undefined bands (warm-up) classify as INSIDE.
    """
    if pd.isna(price) or pd.isna(upper) or pd.isna(lower):
        return BandPosition.INSIDE
    if price > upper:
        return BandPosition.ABOVE
    if price < lower:
        return BandPosition.BELOW
    return BandPosition.INSIDE
