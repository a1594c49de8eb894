"""
Price Series Container

Ordered, immutable OHLC samples shared by every indicator. The series wraps
a pandas DataFrame with the columns Open, High, Low, Close (chronological
order, one row per bar). Closes-only input is accepted: missing Open, High
and Low columns are filled from Close.

Indicator functions accept a PriceSeries, a pandas Series, a numpy array or
a plain sequence of closes; ``to_close_series`` and ``to_ohlc_frame`` perform
that normalisation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

OHLC_COLUMNS: List[str] = ['Open', 'High', 'Low', 'Close']

# Lower-case keys accepted in sample mappings
_SAMPLE_KEYS: Dict[str, str] = {
    'open': 'Open',
    'high': 'High',
    'low': 'Low',
    'close': 'Close',
}


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class Sample:
    """
    One OHLC bar.

    ``timestamp`` is either a datetime or an integer position; it becomes the
    row label of the series.
    """
    timestamp: Union[datetime, pd.Timestamp, int]
    open: float
    high: float
    low: float
    close: float


class PriceSeries:
    """
    Immutable chronological sequence of OHLC samples.

    Usage
    -----
    >>> series = PriceSeries.from_closes([1.0850, 1.0861, 1.0857])
    >>> series.close.iloc[-1]
    1.0857
    """

    def __init__(self, frame: pd.DataFrame, provenance: Optional[Any] = None):
        """
        Initialize from a frame already holding the four OHLC columns.

        Prefer the ``from_*`` constructors, which normalise their input.

        Parameters
        ----------
        frame : pd.DataFrame
            OHLC data with columns Open, High, Low, Close
        provenance : FeedProvenance, optional
            Where the data came from
        """
        if len(frame) == 0:
            raise ValueError("PriceSeries requires at least one sample")

        missing = [c for c in OHLC_COLUMNS if c not in frame.columns]
        if missing:
            raise ValueError(f"Missing required columns: {missing}")

        self._frame = frame[OHLC_COLUMNS].astype(float).copy()
        self.provenance = provenance

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_closes(
        cls,
        closes: Iterable[float],
        index: Optional[Sequence[Any]] = None
    ) -> 'PriceSeries':
        """Build a closes-only series; Open, High and Low equal Close."""
        values = np.asarray(list(closes), dtype=float)
        frame = pd.DataFrame({'Close': values}, index=index)
        return cls.from_frame(frame)

    @classmethod
    def from_samples(
        cls,
        samples: Iterable[Union[Sample, Mapping[str, Any]]]
    ) -> 'PriceSeries':
        """
        Build a series from Sample objects or mappings.

        Mappings use lower-case keys ``open``, ``high``, ``low``, ``close``
        and optionally ``timestamp`` (or ``time``); only ``close`` is required.
        """
        rows = []
        labels = []

        for position, sample in enumerate(samples):
            if isinstance(sample, Sample):
                labels.append(sample.timestamp)
                rows.append({
                    'Open': sample.open,
                    'High': sample.high,
                    'Low': sample.low,
                    'Close': sample.close
                })
                continue

            if 'close' not in sample:
                raise ValueError(f"Sample {position} has no close price")

            labels.append(sample.get('timestamp', sample.get('time', position)))
            rows.append({
                column: sample[key] for key, column in _SAMPLE_KEYS.items()
                if key in sample
            })

        return cls.from_frame(pd.DataFrame(rows, index=labels))

    @classmethod
    def from_frame(
        cls,
        df: pd.DataFrame,
        provenance: Optional[Any] = None
    ) -> 'PriceSeries':
        """
        Build a series from a DataFrame.

        Column names are matched case-insensitively. Missing Open/High/Low
        columns are filled from Close. Rows with no close are dropped.

        Raises
        ------
        ValueError
            If there is no Close column or no usable rows
        """
        if df is None or len(df) == 0:
            raise ValueError("PriceSeries requires at least one sample")

        renamed = df.rename(columns={
            col: _SAMPLE_KEYS[col.lower()] for col in df.columns
            if isinstance(col, str) and col.lower() in _SAMPLE_KEYS
        })

        if 'Close' not in renamed.columns:
            raise ValueError("Missing required columns: ['Close']")

        frame = renamed.dropna(subset=['Close']).copy()
        for column in ('Open', 'High', 'Low'):
            if column not in frame.columns:
                frame[column] = frame['Close']
            else:
                frame[column] = frame[column].fillna(frame['Close'])

        series = cls(frame, provenance=provenance)
        series._check_integrity()
        return series

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def frame(self) -> pd.DataFrame:
        """Copy of the underlying OHLC frame."""
        return self._frame.copy()

    @property
    def index(self) -> pd.Index:
        return self._frame.index

    @property
    def open(self) -> pd.Series:
        return self._frame['Open'].copy()

    @property
    def high(self) -> pd.Series:
        return self._frame['High'].copy()

    @property
    def low(self) -> pd.Series:
        return self._frame['Low'].copy()

    @property
    def close(self) -> pd.Series:
        return self._frame['Close'].copy()

    def __len__(self) -> int:
        return len(self._frame)

    def __repr__(self) -> str:
        return (
            f"PriceSeries(bars={len(self)}, "
            f"first_close={self._frame['Close'].iloc[0]:.5f}, "
            f"last_close={self._frame['Close'].iloc[-1]:.5f})"
        )

    def samples(self) -> List[Sample]:
        """All bars as Sample objects."""
        return [
            Sample(timestamp=label, open=row.Open, high=row.High, low=row.Low, close=row.Close)
            for label, row in zip(self._frame.index, self._frame.itertuples(index=False))
        ]

    def last(self) -> Sample:
        """The most recent bar."""
        return self.tail(1).samples()[0]

    def tail(self, n: int) -> 'PriceSeries':
        """New series holding the last ``n`` bars."""
        if n < 1:
            raise ValueError(f"tail() needs n >= 1, got {n}")
        return PriceSeries(self._frame.tail(n), provenance=self.provenance)

    def append(self, sample: Sample) -> 'PriceSeries':
        """
        Return a new series with one more bar at the end.

        The original series is left untouched; indicators are recomputed
        on the returned series.
        """
        row = pd.DataFrame(
            [{'Open': sample.open, 'High': sample.high, 'Low': sample.low, 'Close': sample.close}],
            index=[sample.timestamp]
        )
        frame = pd.concat([self._frame, row])
        return PriceSeries(frame, provenance=self.provenance)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _check_integrity(self) -> None:
        """Log bars whose high/low do not bracket open and close."""
        f = self._frame
        body_top = f[['Open', 'Close']].max(axis=1)
        body_bottom = f[['Open', 'Close']].min(axis=1)
        bad = (f['High'] < body_top) | (f['Low'] > body_bottom)
        if bad.any():
            logger.warning(
                f"{int(bad.sum())} bar(s) with high/low outside open/close; "
                f"first at {f.index[bad.to_numpy()][0]}"
            )


# =============================================================================
# INPUT NORMALISATION
# =============================================================================

PriceInput = Union[PriceSeries, pd.Series, np.ndarray, Sequence[float]]


def to_close_series(prices: PriceInput) -> pd.Series:
    """
    Normalise any accepted price input to a float Series of closes.

    Empty input gives an empty Series rather than an error.
    """
    if isinstance(prices, PriceSeries):
        return prices.close
    if isinstance(prices, pd.Series):
        return prices.astype(float)
    return pd.Series(np.asarray(prices, dtype=float))


def to_ohlc_frame(ohlc: Union[PriceSeries, pd.DataFrame, Sequence[Any]]) -> pd.DataFrame:
    """
    Normalise OHLC input to a frame with Open, High, Low, Close columns.

    Accepts a PriceSeries, a DataFrame, or a sequence of Sample objects or
    mappings. Empty input gives an empty frame.
    """
    if isinstance(ohlc, PriceSeries):
        return ohlc.frame
    if isinstance(ohlc, pd.DataFrame):
        if len(ohlc) == 0:
            return pd.DataFrame(columns=OHLC_COLUMNS, dtype=float)
        return PriceSeries.from_frame(ohlc).frame
    if len(ohlc) == 0:
        return pd.DataFrame(columns=OHLC_COLUMNS, dtype=float)
    return PriceSeries.from_samples(ohlc).frame
