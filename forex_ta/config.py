"""
Configuration Module for the Forex Technical Analysis Library

This module centralizes all configuration constants, indicator periods,
classification thresholds, and signal policy settings used throughout the
indicator pipeline.

All "magic numbers" and configuration values are defined here to ensure:
1. Single source of truth for all constants
2. Easy modification without touching indicator code
3. Transparency in thresholds used for display classifications
4. Consistency across all modules

Parameter groups are frozen dataclasses. Module-level instances hold the
defaults; ``AnalysisConfig`` bundles one instance of each group and
``load_config`` builds an ``AnalysisConfig`` from a JSON override file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)

# Library version reported in snapshots and reports
INDICATOR_VERSION: str = "1.0.0"


# =============================================================================
# ENUMERATIONS
# =============================================================================

class Bias(Enum):
    """Directional bias shared by trend, MACD and candlestick patterns."""
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class TradeSignal(Enum):
    """Presentational trade signal."""
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


# =============================================================================
# INDICATOR PARAMETERS
# =============================================================================

@dataclass(frozen=True)
class MovingAverageParameters:
    """Periods of the moving averages drawn on the price chart."""

    sma_fast: int = 20
    sma_slow: int = 50
    ema_fast: int = 12
    ema_slow: int = 26


@dataclass(frozen=True)
class OscillatorParameters:
    """Periods, zone thresholds and fallbacks for RSI and Stochastic."""

    # RSI
    rsi_period: int = 14
    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    rsi_neutral: float = 50.0      # Returned when the series is too short
    rsi_all_gains: float = 100.0   # Returned when the average loss is zero

    # Stochastic
    stoch_period: int = 14
    stoch_d_period: int = 3
    stoch_overbought: float = 80.0
    stoch_oversold: float = 20.0
    stoch_zero_range: float = 50.0  # %K when highest high == lowest low


@dataclass(frozen=True)
class MACDParameters:
    """MACD (12, 26, 9)."""

    fast: int = 12
    slow: int = 26
    signal: int = 9


@dataclass(frozen=True)
class BollingerParameters:
    """Bollinger Band window and width."""

    period: int = 20
    num_std: float = 2.0


@dataclass(frozen=True)
class PatternThresholds:
    """
    Candle proportions used by the pattern detector.

    All ratios compare wick or body lengths of the most recent bar.
    """

    doji_body_ratio: float = 0.1       # body < ratio * range
    long_wick_multiple: float = 2.0    # wick > multiple * body
    short_wick_ratio: float = 0.5      # opposite wick < ratio * body


@dataclass(frozen=True)
class TrendParameters:
    """Lookback for trend direction and trend strength."""

    lookback: int = 20
    neutral_strength: float = 50.0  # Strength when prices did not move


@dataclass(frozen=True)
class SignalPolicy:
    """
    Mapping from indicator readings to the displayed BUY/SELL/HOLD signal.

    BUY needs a bullish trend and an RSI not above ``rsi_overbought``; SELL
    needs a bearish trend and an RSI not below ``rsi_oversold``. With
    ``require_macd_confirmation`` the MACD bias must not oppose the trend.
    """

    rsi_overbought: float = 70.0
    rsi_oversold: float = 30.0
    require_macd_confirmation: bool = True


@dataclass(frozen=True)
class KeyLevelParameters:
    """Support/resistance ladder around the current price."""

    step: float = 0.005   # 0.5% per level
    levels: int = 3


@dataclass(frozen=True)
class SyntheticFeedParameters:
    """Random-walk OHLC generator used when no live feed is available."""

    periods: int = 50
    volatility: float = 0.002     # Close-to-open move, fraction of price
    wick: float = 0.001           # Maximum wick extension, fraction of price
    jpy_base_price: float = 150.5
    default_base_price: float = 1.0850


# =============================================================================
# AGGREGATE CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class AnalysisConfig:
    """All parameter groups consumed by ``TechnicalAnalyzer``."""

    moving_averages: MovingAverageParameters = field(default_factory=MovingAverageParameters)
    oscillators: OscillatorParameters = field(default_factory=OscillatorParameters)
    macd: MACDParameters = field(default_factory=MACDParameters)
    bollinger: BollingerParameters = field(default_factory=BollingerParameters)
    patterns: PatternThresholds = field(default_factory=PatternThresholds)
    trend: TrendParameters = field(default_factory=TrendParameters)
    signal_policy: SignalPolicy = field(default_factory=SignalPolicy)
    key_levels: KeyLevelParameters = field(default_factory=KeyLevelParameters)
    synthetic_feed: SyntheticFeedParameters = field(default_factory=SyntheticFeedParameters)

    def with_overrides(self, overrides: Dict[str, Dict[str, Any]]) -> 'AnalysisConfig':
        """
        Return a copy with selected fields replaced.

        Args:
            overrides: Mapping of section name (e.g. 'oscillators') to a
                mapping of field name to new value

        Returns:
            New AnalysisConfig; the original is unchanged

        Raises:
            ValueError: If a section or field name is unknown
        """
        sections = {f.name for f in fields(self)}
        updated = {}

        for section, values in overrides.items():
            if section not in sections:
                raise ValueError(f"Unknown configuration section: {section}")

            current = getattr(self, section)
            allowed = {f.name for f in fields(current)}
            unknown = [name for name in values if name not in allowed]
            if unknown:
                raise ValueError(f"Unknown fields in section '{section}': {unknown}")

            updated[section] = replace(current, **values)

        return replace(self, **updated)


# =============================================================================
# GLOBAL CONFIGURATION INSTANCES
# =============================================================================

# Create singleton instances of configuration classes
MOVING_AVERAGES = MovingAverageParameters()
OSCILLATORS = OscillatorParameters()
MACD_PARAMS = MACDParameters()
BOLLINGER = BollingerParameters()
PATTERNS = PatternThresholds()
TREND = TrendParameters()
SIGNAL_POLICY = SignalPolicy()
KEY_LEVELS = KeyLevelParameters()
SYNTHETIC_FEED = SyntheticFeedParameters()


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_default_config() -> AnalysisConfig:
    """
    Get the default analysis configuration.

    Returns:
        AnalysisConfig built from the module-level default instances
    """
    return AnalysisConfig(
        moving_averages=MOVING_AVERAGES,
        oscillators=OSCILLATORS,
        macd=MACD_PARAMS,
        bollinger=BOLLINGER,
        patterns=PATTERNS,
        trend=TREND,
        signal_policy=SIGNAL_POLICY,
        key_levels=KEY_LEVELS,
        synthetic_feed=SYNTHETIC_FEED
    )


def load_config(path: Union[str, Path]) -> AnalysisConfig:
    """
    Load configuration overrides from a JSON file.

    The file holds an object keyed by section name, for example::

        {"oscillators": {"rsi_period": 9}, "signal_policy": {"require_macd_confirmation": false}}

    Args:
        path: Path to the JSON file

    Returns:
        Default configuration with the file's overrides applied

    Raises:
        ValueError: If the file is not a JSON object or names unknown settings
    """
    path = Path(path)
    with open(path) as f:
        overrides = json.load(f)

    if not isinstance(overrides, dict):
        raise ValueError(f"Configuration file must contain a JSON object: {path}")

    config = get_default_config().with_overrides(overrides)
    logger.info(f"Loaded configuration overrides from {path}: {sorted(overrides)}")
    return config
