"""
Pytest fixtures for the Forex Technical Analysis tests.
"""

import sys
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def rising_closes():
    """30 strictly rising EUR/USD closes from 1.0800 to 1.0870."""
    return list(np.linspace(1.0800, 1.0870, 30))


@pytest.fixture
def falling_closes():
    """30 strictly falling EUR/USD closes from 1.0870 to 1.0800."""
    return list(np.linspace(1.0870, 1.0800, 30))


@pytest.fixture
def flat_closes():
    """40 identical closes."""
    return [1.25] * 40


@pytest.fixture
def synthetic_series():
    """Reproducible 60-bar synthetic EUR/USD series with a fixed end time."""
    from forex_ta.price_source import SyntheticPriceSource

    source = SyntheticPriceSource(seed=42, end=pd.Timestamp("2024-01-05 12:00"))
    return source.fetch("EUR/USD", 60)


@pytest.fixture
def sample_bars():
    """Four OHLC bars as lower-case mappings."""
    return [
        {"timestamp": pd.Timestamp("2024-01-01 00:00"), "open": 1.0, "high": 2.0, "low": 1.0, "close": 1.5},
        {"timestamp": pd.Timestamp("2024-01-01 01:00"), "open": 1.5, "high": 3.0, "low": 1.0, "close": 2.5},
        {"timestamp": pd.Timestamp("2024-01-01 02:00"), "open": 2.5, "high": 4.0, "low": 2.0, "close": 3.5},
        {"timestamp": pd.Timestamp("2024-01-01 03:00"), "open": 3.5, "high": 5.0, "low": 3.0, "close": 4.0},
    ]
