"""
Pytest configuration and fixtures for psp-analytics tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest
from pyspark.sql import SparkSession

from psp_analytics.core.journeys import JourneyBuilder
from psp_analytics.core.models import Transaction


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that need a local Spark session"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run the command line interface"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# SPARK FIXTURES
# =======================

@pytest.fixture(scope="session")
def spark_session() -> Generator[SparkSession, None, None]:
    """
    Create a Spark session for testing with local mode

    Yields:
        SparkSession configured for local testing
    """
    spark = (
        SparkSession.builder
        .appName("psp-analytics-test")
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.driver.memory", "1g")
        .config("spark.ui.enabled", "false")  # Disable UI for tests
        .getOrCreate()
    )

    # Set log level to WARN to reduce test output noise
    spark.sparkContext.setLogLevel("WARN")

    yield spark

    spark.stop()


# =======================
# TRANSACTION FIXTURES
# =======================

BASE_TIME = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_transaction() -> Callable[..., Transaction]:
    """
    Factory for Transaction rows

    ``minutes`` offsets the processing date from a fixed base time;
    pass ``processing_date=None`` for an undated row.
    """
    def _make(
        order: str | None,
        psp: str | None,
        status: str | None,
        minutes: int = 0,
        country: str | None = "DE",
        **fields,
    ) -> Transaction:
        fields.setdefault("processing_date", BASE_TIME + timedelta(minutes=minutes))
        fields.setdefault("transaction_id", f"TX-{order}-{psp}-{minutes}")
        return Transaction(
            merchant_order_id=order,
            psp_name=psp,
            status=status,
            country=country,
            **fields,
        )

    return _make


@pytest.fixture
def example_transactions(make_transaction) -> list[Transaction]:
    """
    Order 1: A declines, then B approves. Order 2: A approves.
    """
    return [
        make_transaction("1", "A", "credit_card_declined", minutes=0),
        make_transaction("1", "B", "credit_card_approved", minutes=5),
        make_transaction("2", "A", "credit_card_approved", minutes=10),
    ]


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Clock returning a fixed instant for journeys without a date"""
    instant = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
    return lambda: instant


@pytest.fixture
def build_journeys(fixed_clock):
    """Build journeys with the default vocabulary and a fixed clock"""
    builder = JourneyBuilder(clock=fixed_clock)
    return builder.build


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> str:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return os.path.join(os.path.dirname(__file__), "fixtures")


@pytest.fixture(scope="session")
def vocabulary_path() -> str:
    """Path to the default status vocabulary shipped in config/"""
    return os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "status_vocabulary.yaml"
    )


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_env_vars():
    """
    Set test environment variables

    This fixture loads test.env and sets environment variables
    """
    from dotenv import load_dotenv

    env_path = os.path.join(
        os.path.dirname(os.path.dirname(__file__)),
        "config",
        "test.env"
    )

    if os.path.exists(env_path):
        load_dotenv(env_path, override=True)
