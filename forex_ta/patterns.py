"""
Candlestick Pattern Detection

Classifies the most recent one or two OHLC bars into a named pattern.

    body       = |close - open|
    upper wick = high - max(open, close)
    lower wick = min(open, close) - low
    range      = high - low

Patterns are checked in a fixed order and the first match wins:

    1. Doji               body < 0.1 * range and one wick > 2 * body
    2. Hammer             lower wick > 2 * body, upper wick < 0.5 * body, close > open
    3. Shooting Star      upper wick > 2 * body, lower wick < 0.5 * body, close < open
    4. Bullish Engulfing  bearish bar followed by a bullish bar whose body
                          covers it (close > prev open, open < prev close)
    5. Bearish Engulfing  the mirror image

The engulfing checks need two bars; with a single bar only the first three
are evaluated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Union

import pandas as pd

from forex_ta.config import PATTERNS, Bias, PatternThresholds
from forex_ta.price_series import PriceSeries, Sample, to_ohlc_frame


class CandlestickPattern(Enum):
    """Named candlestick shapes with their directional bias."""
    DOJI = "Doji"
    HAMMER = "Hammer"
    SHOOTING_STAR = "Shooting Star"
    BULLISH_ENGULFING = "Bullish Engulfing"
    BEARISH_ENGULFING = "Bearish Engulfing"

    @property
    def bias(self) -> Bias:
        return {
            CandlestickPattern.DOJI: Bias.NEUTRAL,
            CandlestickPattern.HAMMER: Bias.BULLISH,
            CandlestickPattern.SHOOTING_STAR: Bias.BEARISH,
            CandlestickPattern.BULLISH_ENGULFING: Bias.BULLISH,
            CandlestickPattern.BEARISH_ENGULFING: Bias.BEARISH
        }[self]

    @property
    def description(self) -> str:
        return {
            CandlestickPattern.DOJI: "Indecision in the market",
            CandlestickPattern.HAMMER: "Potential bullish reversal",
            CandlestickPattern.SHOOTING_STAR: "Potential bearish reversal",
            CandlestickPattern.BULLISH_ENGULFING: "Strong bullish reversal signal",
            CandlestickPattern.BEARISH_ENGULFING: "Strong bearish reversal signal"
        }[self]


@dataclass(frozen=True)
class CandleAnatomy:
    """Body and wick lengths of one bar."""
    open: float
    close: float
    body: float
    upper_wick: float
    lower_wick: float
    range: float

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open

    @property
    def is_bearish(self) -> bool:
        return self.close < self.open


def candle_anatomy(bar: Union[Sample, pd.Series]) -> CandleAnatomy:
    """Measure a Sample or a frame row with Open/High/Low/Close."""
    if isinstance(bar, Sample):
        o, h, l, c = bar.open, bar.high, bar.low, bar.close
    else:
        o, h, l, c = bar['Open'], bar['High'], bar['Low'], bar['Close']

    return CandleAnatomy(
        open=float(o),
        close=float(c),
        body=abs(c - o),
        upper_wick=h - max(o, c),
        lower_wick=min(o, c) - l,
        range=h - l
    )


def _match_single(bar: CandleAnatomy, t: PatternThresholds) -> Optional[CandlestickPattern]:
    long_wick = t.long_wick_multiple * bar.body
    short_wick = t.short_wick_ratio * bar.body

    if bar.body < t.doji_body_ratio * bar.range and (
        bar.upper_wick > long_wick or bar.lower_wick > long_wick
    ):
        return CandlestickPattern.DOJI

    if bar.lower_wick > long_wick and bar.upper_wick < short_wick and bar.is_bullish:
        return CandlestickPattern.HAMMER

    if bar.upper_wick > long_wick and bar.lower_wick < short_wick and bar.is_bearish:
        return CandlestickPattern.SHOOTING_STAR

    return None


def _match_pair(prev: CandleAnatomy, last: CandleAnatomy) -> Optional[CandlestickPattern]:
    if (prev.is_bearish and last.is_bullish
            and last.close > prev.open and last.open < prev.close):
        return CandlestickPattern.BULLISH_ENGULFING

    if (prev.is_bullish and last.is_bearish
            and last.close < prev.open and last.open > prev.close):
        return CandlestickPattern.BEARISH_ENGULFING

    return None


def detect_pattern(
    ohlc: Union[PriceSeries, pd.DataFrame, Sequence[Any]],
    thresholds: PatternThresholds = PATTERNS
) -> Optional[CandlestickPattern]:
    """
    Classify the last one or two bars.

    Parameters
    ----------
    ohlc : PriceSeries, DataFrame or sequence of bars
        Only the last two rows are inspected
    thresholds : PatternThresholds
        Body and wick proportions

    Returns
    -------
    CandlestickPattern or None
        First matching pattern, None if nothing matched or input is empty
    """
    return _detect_in_frame(to_ohlc_frame(ohlc), thresholds)


def _detect_in_frame(
    frame: pd.DataFrame,
    thresholds: PatternThresholds
) -> Optional[CandlestickPattern]:
    if len(frame) == 0:
        return None

    last = candle_anatomy(frame.iloc[-1])
    pattern = _match_single(last, thresholds)
    if pattern is not None or len(frame) < 2:
        return pattern

    prev = candle_anatomy(frame.iloc[-2])
    return _match_pair(prev, last)


def scan_patterns(
    ohlc: Union[PriceSeries, pd.DataFrame, Sequence[Any]],
    thresholds: PatternThresholds = PATTERNS
) -> pd.Series:
    """
    Run the detector at every bar (with its predecessor) for chart markers.

    Returns
    -------
    pd.Series
        Pattern display names aligned with the input; None where no
        pattern matched
    """
    frame = to_ohlc_frame(ohlc)
    names: List[Optional[str]] = []

    for i in range(len(frame)):
        pattern = _detect_in_frame(frame.iloc[max(0, i - 1):i + 1], thresholds)
        names.append(pattern.value if pattern is not None else None)

    return pd.Series(names, index=frame.index, dtype=object)
