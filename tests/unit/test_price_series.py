"""
Unit tests for forex_ta/price_series.py
"""

import logging

import numpy as np
import pandas as pd
import pytest

from forex_ta.price_series import (
    OHLC_COLUMNS,
    PriceSeries,
    Sample,
    to_close_series,
    to_ohlc_frame,
)


class TestConstruction:
    """Tests for the PriceSeries constructors."""

    def test_from_closes_fills_ohlc(self):
        series = PriceSeries.from_closes([1.0850, 1.0861, 1.0857])
        assert len(series) == 3
        assert list(series.frame.columns) == OHLC_COLUMNS
        assert series.open.tolist() == series.close.tolist()
        assert series.high.tolist() == series.close.tolist()

    def test_empty_input_raises(self):
        with pytest.raises(ValueError):
            PriceSeries.from_closes([])

    def test_missing_close_raises(self):
        df = pd.DataFrame({"Open": [1.0], "High": [1.1]})
        with pytest.raises(ValueError, match="Close"):
            PriceSeries.from_frame(df)

    def test_from_frame_is_case_insensitive(self):
        df = pd.DataFrame({"open": [1.0, 1.1], "HIGH": [1.2, 1.2], "low": [0.9, 1.0], "close": [1.1, 1.15]})
        series = PriceSeries.from_frame(df)
        assert series.high.tolist() == [1.2, 1.2]
        assert series.close.iloc[-1] == pytest.approx(1.15)

    def test_from_samples_mappings(self, sample_bars):
        series = PriceSeries.from_samples(sample_bars)
        assert len(series) == 4
        assert series.index[0] == pd.Timestamp("2024-01-01 00:00")
        assert series.last().close == 4.0

    def test_from_samples_requires_close(self):
        with pytest.raises(ValueError, match="no close"):
            PriceSeries.from_samples([{"open": 1.0}])

    def test_from_sample_objects(self):
        samples = [Sample(0, 1.0, 1.2, 0.9, 1.1), Sample(1, 1.1, 1.3, 1.0, 1.2)]
        series = PriceSeries.from_samples(samples)
        assert series.samples() == samples

    def test_integrity_warning(self, caplog):
        df = pd.DataFrame({"Open": [1.0], "High": [1.05], "Low": [0.9], "Close": [1.1]})
        with caplog.at_level(logging.WARNING, logger="forex_ta.price_series"):
            PriceSeries.from_frame(df)
        assert "outside open/close" in caplog.text


class TestImmutability:
    """Tests that series operations never mutate the original."""

    def test_append_returns_new_series(self):
        series = PriceSeries.from_closes([1.0, 1.1])
        longer = series.append(Sample(2, 1.1, 1.25, 1.05, 1.2))
        assert len(series) == 2
        assert len(longer) == 3
        assert longer.close.iloc[-1] == 1.2

    def test_accessors_return_copies(self):
        series = PriceSeries.from_closes([1.0, 1.1])
        close = series.close
        close.iloc[0] = 99.0
        assert series.close.iloc[0] == 1.0

    def test_tail(self):
        series = PriceSeries.from_closes([1.0, 1.1, 1.2, 1.3])
        assert series.tail(2).close.tolist() == [1.2, 1.3]
        with pytest.raises(ValueError):
            series.tail(0)


class TestNormalisation:
    """Tests for to_close_series and to_ohlc_frame."""

    def test_close_series_from_list(self):
        result = to_close_series([1, 2, 3])
        assert result.dtype == float
        assert result.tolist() == [1.0, 2.0, 3.0]

    def test_close_series_from_array(self):
        assert len(to_close_series(np.array([1.0, 2.0]))) == 2

    def test_close_series_empty(self):
        assert len(to_close_series([])) == 0

    def test_ohlc_frame_empty(self):
        frame = to_ohlc_frame([])
        assert len(frame) == 0
        assert list(frame.columns) == OHLC_COLUMNS

    def test_ohlc_frame_from_mappings(self, sample_bars):
        frame = to_ohlc_frame(sample_bars)
        assert frame["High"].tolist() == [2.0, 3.0, 4.0, 5.0]
