"""
Price Sources

Pluggable suppliers of the raw OHLC series. The indicator core only sees the
returned PriceSeries and never knows whether the data is synthetic or live.

    SyntheticPriceSource   Random-walk OHLC bars (demo / offline mode)
    FilePriceSource        Parquet or CSV files in a cache directory
    YahooPriceSource       Yahoo Finance FX tickers via yfinance

Every fetched series carries a FeedProvenance record with the source name,
fetch time, record count and a hash of the closes.
"""

from __future__ import annotations

import hashlib
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union

import numpy as np
import pandas as pd

from forex_ta.config import SYNTHETIC_FEED, SyntheticFeedParameters
from forex_ta.price_series import OHLC_COLUMNS, PriceSeries

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

# Chart timeframe -> pandas frequency of the synthetic index
TIMEFRAME_FREQUENCIES: Dict[str, str] = {
    '15m': '15min',
    '1H': 'h',
    '4H': '4h',
    '1D': 'D',
    '1W': 'W',
}

# Chart timeframe -> (yfinance interval, bar length)
YAHOO_INTERVALS: Dict[str, tuple] = {
    '15m': ('15m', timedelta(minutes=15)),
    '1H': ('1h', timedelta(hours=1)),
    '1D': ('1d', timedelta(days=1)),
    '1W': ('1wk', timedelta(weeks=1)),
}


# =============================================================================
# PROVENANCE
# =============================================================================

@dataclass
class FeedProvenance:
    """
    Tracks the origin of a fetched price series.

    Every fetch is recorded with its source, timestamp, and a hash of the
    closing prices so two analyses can be traced to the same input.
    """
    source: str                     # Data source identifier
    symbol: str                     # Currency pair
    fetch_timestamp: str            # ISO format timestamp
    record_count: int               # Number of bars fetched
    data_hash: str                  # SHA-256 prefix of Close prices

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "source": self.source,
            "symbol": self.symbol,
            "fetch_timestamp": self.fetch_timestamp,
            "record_count": self.record_count,
            "data_hash": self.data_hash
        }


def make_provenance(source: str, symbol: str, df: pd.DataFrame) -> FeedProvenance:
    """Build a provenance record for a fetched frame."""
    data_hash = hashlib.sha256(
        pd.util.hash_pandas_object(df['Close'], index=False).values.tobytes()
    ).hexdigest()[:16]

    return FeedProvenance(
        source=source,
        symbol=symbol,
        fetch_timestamp=datetime.now().isoformat(),
        record_count=len(df),
        data_hash=data_hash
    )


# =============================================================================
# BASE CLASS
# =============================================================================

class PriceSource(ABC):
    """Supplier of chronological OHLC bars for a currency pair."""

    name: str = "abstract"

    @abstractmethod
    def fetch(self, symbol: str, periods: int) -> PriceSeries:
        """
        Fetch the most recent ``periods`` bars for ``symbol``.

        Args:
            symbol: Currency pair, e.g. 'EUR/USD'
            periods: Number of bars wanted

        Returns:
            PriceSeries with provenance attached
        """

    def _to_series(self, symbol: str, df: pd.DataFrame) -> PriceSeries:
        provenance = make_provenance(self.name, symbol, df)
        logger.info(f"Fetched {len(df)} bars for {symbol} from {self.name}")
        return PriceSeries.from_frame(df, provenance=provenance)


# =============================================================================
# SYNTHETIC FEED
# =============================================================================

class SyntheticPriceSource(PriceSource):
    """
    Random-walk OHLC generator.

    Each bar opens at the previous close, moves by up to ``volatility/2`` of
    the price, and extends its wicks by up to ``wick`` of the price beyond
    the body. JPY pairs start at 150.5, other pairs at 1.0850.

    Usage
    -----
    >>> source = SyntheticPriceSource(seed=7)
    >>> series = source.fetch("EUR/USD", periods=50)
    >>> len(series)
    50
    """

    name = "synthetic"

    def __init__(
        self,
        params: SyntheticFeedParameters = SYNTHETIC_FEED,
        timeframe: str = '1H',
        seed: Optional[int] = None,
        end: Optional[datetime] = None
    ):
        """
        Initialize the generator.

        Args:
            params: Volatility, wick size and base prices
            timeframe: Chart timeframe, one of TIMEFRAME_FREQUENCIES
            seed: Seed for reproducible bars
            end: Timestamp of the last bar (default: now, floored to the hour)
        """
        if timeframe not in TIMEFRAME_FREQUENCIES:
            raise ValueError(
                f"Unknown timeframe '{timeframe}', expected one of {list(TIMEFRAME_FREQUENCIES)}"
            )
        self.params = params
        self.timeframe = timeframe
        self.rng = np.random.default_rng(seed)
        self.end = end

    def base_price(self, symbol: str) -> float:
        """Starting price for a pair."""
        if 'JPY' in symbol.upper():
            return self.params.jpy_base_price
        return self.params.default_base_price

    def generate(self, base_price: float, periods: int) -> pd.DataFrame:
        """Generate ``periods`` bars starting from ``base_price``."""
        if periods < 1:
            raise ValueError(f"periods must be >= 1, got {periods}")

        p = self.params
        rows = []
        price = base_price

        for _ in range(periods):
            open_ = price
            change = (self.rng.random() - 0.5) * price * p.volatility
            close = price + change
            high = max(open_, close) + self.rng.random() * price * p.wick
            low = min(open_, close) - self.rng.random() * price * p.wick
            rows.append({'Open': open_, 'High': high, 'Low': low, 'Close': close})
            price = close

        end = self.end or pd.Timestamp.now().floor('h')
        index = pd.date_range(end=end, periods=periods, freq=TIMEFRAME_FREQUENCIES[self.timeframe])
        return pd.DataFrame(rows, index=index, columns=OHLC_COLUMNS)

    def fetch(self, symbol: str, periods: int = SYNTHETIC_FEED.periods) -> PriceSeries:
        df = self.generate(self.base_price(symbol), periods)
        return self._to_series(symbol, df)


# =============================================================================
# FILE CACHE
# =============================================================================

class FilePriceSource(PriceSource):
    """
    Parquet/CSV-based price cache.

    Files are named after the pair with the separator removed and lower-cased,
    e.g. ``eurusd.parquet`` or ``eurusd.csv``.
    """

    name = "file"

    def __init__(self, cache_dir: Union[str, Path] = "data"):
        self.cache_dir = Path(cache_dir)

    @staticmethod
    def file_stem(symbol: str) -> str:
        return symbol.replace('/', '').replace('=X', '').lower()

    def path_for(self, symbol: str) -> Optional[Path]:
        """Existing cache file for ``symbol``, parquet preferred."""
        stem = self.file_stem(symbol)
        for suffix in ('.parquet', '.csv'):
            path = self.cache_dir / f"{stem}{suffix}"
            if path.exists():
                return path
        return None

    def fetch(self, symbol: str, periods: int) -> PriceSeries:
        path = self.path_for(symbol)
        if path is None:
            raise ValueError(f"No cached data for {symbol} in {self.cache_dir}")

        if path.suffix == '.parquet':
            df = pd.read_parquet(path)
        else:
            df = pd.read_csv(path, index_col=0, parse_dates=True)

        if len(df) == 0:
            raise ValueError(f"Cached file is empty: {path}")

        return self._to_series(symbol, df.tail(periods))

    def save(self, series: PriceSeries, symbol: str) -> Path:
        """Save a series to Parquet."""
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        path = self.cache_dir / f"{self.file_stem(symbol)}.parquet"
        series.frame.to_parquet(path, compression='snappy')
        logger.info(f"Cached: {path} ({len(series):,} rows)")
        return path


# =============================================================================
# YAHOO FINANCE
# =============================================================================

class YahooPriceSource(PriceSource):
    """
    Yahoo Finance FX data with retry logic.

    Pairs are mapped to Yahoo tickers ('EUR/USD' -> 'EURUSD=X'). Failed or
    empty downloads are retried with exponential backoff.
    """

    name = "yahoo_finance"

    def __init__(self, timeframe: str = '1D', max_retries: int = 3, timeout: int = 30):
        """
        Initialize data acquisition.

        Args:
            timeframe: Chart timeframe, one of YAHOO_INTERVALS
            max_retries: Maximum retry attempts for failed fetches
            timeout: Request timeout in seconds
        """
        if timeframe not in YAHOO_INTERVALS:
            raise ValueError(
                f"Unsupported timeframe '{timeframe}' for Yahoo, expected one of {list(YAHOO_INTERVALS)}"
            )
        self._yf = None
        self.timeframe = timeframe
        self.max_retries = max_retries
        self.timeout = timeout

    def _get_yf(self):
        """Lazy load yfinance to avoid import overhead."""
        if self._yf is None:
            import yfinance as yf
            self._yf = yf
        return self._yf

    @staticmethod
    def yahoo_ticker(symbol: str) -> str:
        """Map 'EUR/USD' to the Yahoo FX ticker 'EURUSD=X'."""
        if symbol.endswith('=X'):
            return symbol
        return f"{symbol.replace('/', '').upper()}=X"

    def fetch(self, symbol: str, periods: int) -> PriceSeries:
        yf = self._get_yf()
        ticker = self.yahoo_ticker(symbol)
        interval, bar_length = YAHOO_INTERVALS[self.timeframe]

        # FX trades five days a week; over-fetch to cover weekends and gaps
        start = datetime.now() - bar_length * int(periods * 1.6 + 5)
        logger.info(f"Fetching {ticker} ({interval}) since {start:%Y-%m-%d}")

        data = None
        for attempt in range(self.max_retries):
            try:
                data = yf.download(
                    ticker,
                    start=start.strftime('%Y-%m-%d'),
                    interval=interval,
                    auto_adjust=False,
                    progress=False,
                    timeout=self.timeout
                )

                if data is None or len(data) == 0:
                    if attempt < self.max_retries - 1:
                        wait_time = 2 ** attempt
                        logger.warning(f"Empty data, retrying in {wait_time}s...")
                        time.sleep(wait_time)
                        continue
                    raise ValueError(f"No data returned for {ticker}")
                break

            except Exception as e:
                if attempt < self.max_retries - 1:
                    wait_time = 2 ** attempt
                    logger.warning(f"Fetch failed: {e}, retrying in {wait_time}s...")
                    time.sleep(wait_time)
                else:
                    raise

        df = self._normalize_dataframe(data)
        if df is None:
            raise ValueError(f"Unusable data returned for {ticker}")

        return self._to_series(symbol, df.tail(periods))

    @staticmethod
    def _normalize_dataframe(df: pd.DataFrame) -> Optional[pd.DataFrame]:
        """Normalize DataFrame structure."""
        if df is None or len(df) == 0:
            return None

        df = df.copy()

        # Handle MultiIndex columns (price field, ticker)
        if isinstance(df.columns, pd.MultiIndex):
            df.columns = df.columns.get_level_values(0)

        # Remove timezone
        if hasattr(df.index, 'tz') and df.index.tz is not None:
            df.index = df.index.tz_localize(None)

        df = df.dropna(how='all')

        missing = [col for col in OHLC_COLUMNS if col not in df.columns]
        if missing:
            logger.warning(f"Missing required columns: {missing}")
            return None

        return df[OHLC_COLUMNS]


# =============================================================================
# FACTORY
# =============================================================================

def create_price_source(kind: str, **kwargs: Any) -> PriceSource:
    """
    Build a price source by name.

    Args:
        kind: 'synthetic', 'file' or 'yahoo'
        **kwargs: Passed to the source constructor

    Raises:
        ValueError: If ``kind`` is unknown
    """
    sources = {
        'synthetic': SyntheticPriceSource,
        'file': FilePriceSource,
        'yahoo': YahooPriceSource,
    }
    if kind not in sources:
        raise ValueError(f"Unknown price source '{kind}', expected one of {list(sources)}")
    return sources[kind](**kwargs)
