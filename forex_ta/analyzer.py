"""
Technical Analysis Engine

Main orchestrator for indicator computation. Given one PriceSeries it
recomputes the complete indicator set from scratch and returns an
AnalysisSnapshot holding:

    - indicators_df: every indicator series aligned with the input bars
    - latest values and display zones (RSI, Stochastic, MACD, band position)
    - the candlestick pattern of the last bars
    - trend direction and strength
    - the synthesized BUY/SELL/HOLD signal
    - support/resistance ladder around the current price

There is no incremental state: ``update`` appends a bar and recomputes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

import pandas as pd

from forex_ta.config import INDICATOR_VERSION, AnalysisConfig, Bias, get_default_config
from forex_ta.macd import MACDResult, macd
from forex_ta.moving_averages import ema, sma_aligned
from forex_ta.oscillators import (
    MomentumZone,
    StochasticResult,
    classify_rsi,
    classify_stochastic,
    rsi,
    rsi_series,
    stochastic,
)
from forex_ta.patterns import CandlestickPattern, detect_pattern, scan_patterns
from forex_ta.price_series import PriceSeries, Sample
from forex_ta.price_source import PriceSource
from forex_ta.signals import SignalSummary, SignalSynthesizer, trend_direction, trend_strength
from forex_ta.volatility_bands import BandPosition, BollingerBands, bollinger_bands

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass
class KeyLevels:
    """Support and resistance ladder around the current price."""
    support: Dict[str, float]       # S1, S2, ... below the price
    resistance: Dict[str, float]    # R1, R2, ... above the price


@dataclass
class AnalysisSnapshot:
    """
    Complete output from the analysis engine for one price series.

    Series data lives in ``indicators_df``; the remaining fields are the
    scalar summaries shown on status cards.
    """
    # Indicator series
    indicators_df: pd.DataFrame

    # Latest readings
    price: float
    rsi: float
    rsi_zone: MomentumZone
    stochastic_k: float
    stochastic_d: float
    stochastic_zone: MomentumZone
    macd: float
    macd_signal: float
    macd_histogram: float
    macd_bias: Bias
    band_position: BandPosition

    # Classifications
    pattern: Optional[CandlestickPattern]
    trend: Bias
    trend_strength: float
    signal: SignalSummary
    key_levels: KeyLevels

    # Metadata
    symbol: str
    bars: int
    generated_at: str = field(default_factory=lambda: datetime.now().isoformat())
    version: str = INDICATOR_VERSION
    provenance: Optional[object] = None


# =============================================================================
# KEY LEVELS
# =============================================================================

def compute_key_levels(price: float, step: float, levels: int) -> KeyLevels:
    """
    Percentage ladder around ``price``.

    S_k = price * (1 - k * step), R_k = price * (1 + k * step) for k = 1..levels
    """
    return KeyLevels(
        support={f"S{k}": price * (1 - k * step) for k in range(1, levels + 1)},
        resistance={f"R{k}": price * (1 + k * step) for k in range(1, levels + 1)}
    )


# =============================================================================
# MAIN ENGINE
# =============================================================================

class TechnicalAnalyzer:
    """
    Main orchestrator for technical indicator computation.

    Usage
    -----
    >>> analyzer = TechnicalAnalyzer()
    >>> snapshot = analyzer.analyze(PriceSeries.from_closes(closes), symbol="EUR/USD")
    >>> print(snapshot.signal.signal.value, snapshot.rsi_zone.value)
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        """
        Initialize the analysis engine.

        Parameters
        ----------
        config : AnalysisConfig, optional
            Indicator parameters and signal policy (default configuration
            if omitted)
        """
        self.config = config or get_default_config()
        self.synthesizer = SignalSynthesizer(self.config.signal_policy)

        logger.info(
            f"TechnicalAnalyzer initialized (RSI {self.config.oscillators.rsi_period}, "
            f"MACD {self.config.macd.fast}/{self.config.macd.slow}/{self.config.macd.signal}, "
            f"BB {self.config.bollinger.period}x{self.config.bollinger.num_std})"
        )

    def analyze(self, series: PriceSeries, symbol: Optional[str] = None) -> AnalysisSnapshot:
        """
        Run the full indicator pipeline on one series.

        Parameters
        ----------
        series : PriceSeries
            Chronological OHLC bars
        symbol : str, optional
            Pair name for the snapshot; taken from provenance if omitted

        Returns
        -------
        AnalysisSnapshot
            All indicator series plus latest readings and classifications
        """
        cfg = self.config
        provenance = series.provenance
        if symbol is None:
            symbol = getattr(provenance, 'symbol', None) or 'UNKNOWN'

        logger.info(f"Analyzing {len(series)} bars for {symbol}")
        close = series.close

        # 1. Moving averages
        ma = cfg.moving_averages
        indicators_df = pd.DataFrame(index=series.index)
        indicators_df['close'] = close
        indicators_df[f'sma_{ma.sma_fast}'] = sma_aligned(close, ma.sma_fast)
        indicators_df[f'sma_{ma.sma_slow}'] = sma_aligned(close, ma.sma_slow)
        indicators_df[f'ema_{ma.ema_fast}'] = ema(close, ma.ema_fast)
        indicators_df[f'ema_{ma.ema_slow}'] = ema(close, ma.ema_slow)

        # 2. Oscillators
        osc = cfg.oscillators
        rsi_value = rsi(close, osc.rsi_period, osc)
        indicators_df['rsi'] = rsi_series(close, osc.rsi_period, osc)

        stoch: StochasticResult = stochastic(series, osc.stoch_period, osc.stoch_d_period, osc)
        indicators_df['stoch_k'] = stoch.k
        indicators_df['stoch_d'] = stoch.d

        # 3. MACD
        macd_result: MACDResult = macd(close, cfg.macd.fast, cfg.macd.slow, cfg.macd.signal)
        indicators_df['macd'] = macd_result.macd_line
        indicators_df['macd_signal'] = macd_result.signal_line
        indicators_df['macd_histogram'] = macd_result.histogram

        # 4. Bollinger Bands
        bands: BollingerBands = bollinger_bands(close, cfg.bollinger.period, cfg.bollinger.num_std)
        indicators_df['bb_upper'] = bands.upper
        indicators_df['bb_middle'] = bands.middle
        indicators_df['bb_lower'] = bands.lower
        indicators_df['bb_std'] = bands.std_dev
        indicators_df['bb_bandwidth'] = bands.bandwidth
        indicators_df['bb_percent_b'] = bands.percent_b

        # 5. Candlestick patterns
        pattern = detect_pattern(series, cfg.patterns)
        indicators_df['pattern'] = scan_patterns(series, cfg.patterns)

        # 6. Trend and signal
        trend = trend_direction(close, cfg.trend.lookback)
        strength = trend_strength(close, cfg.trend.lookback, cfg.trend.neutral_strength)
        summary = self.synthesizer.synthesize(rsi_value, trend, macd_result.latest)

        price = float(close.iloc[-1])
        key_levels = compute_key_levels(price, cfg.key_levels.step, cfg.key_levels.levels)

        logger.debug(
            f"{symbol}: RSI={rsi_value:.1f} MACD={macd_result.latest:.5f} "
            f"trend={trend.value} pattern={pattern.value if pattern else None}"
        )

        snapshot = AnalysisSnapshot(
            indicators_df=indicators_df,
            price=price,
            rsi=rsi_value,
            rsi_zone=classify_rsi(rsi_value, osc),
            stochastic_k=stoch.latest_k,
            stochastic_d=stoch.latest_d,
            stochastic_zone=classify_stochastic(stoch.latest_k, osc),
            macd=macd_result.latest,
            macd_signal=macd_result.latest_signal,
            macd_histogram=macd_result.latest_histogram,
            macd_bias=macd_result.bias,
            band_position=bands.position(price),
            pattern=pattern,
            trend=trend,
            trend_strength=strength,
            signal=summary,
            key_levels=key_levels,
            symbol=symbol,
            bars=len(series),
            provenance=provenance
        )

        logger.info(f"{symbol}: signal {summary.signal.value}, trend {trend.value} ({strength:.0f}%)")
        return snapshot

    def analyze_source(
        self,
        source: PriceSource,
        symbol: str,
        periods: Optional[int] = None
    ) -> AnalysisSnapshot:
        """Fetch ``periods`` bars from ``source`` and analyze them."""
        periods = periods or self.config.synthetic_feed.periods
        series = source.fetch(symbol, periods)
        return self.analyze(series, symbol=symbol)

    def update(self, series: PriceSeries, sample: Sample,
               symbol: Optional[str] = None) -> AnalysisSnapshot:
        """Append one bar and recompute the full indicator set."""
        return self.analyze(series.append(sample), symbol=symbol)
