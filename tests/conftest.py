"""
Pytest fixtures for the marketplace kernel test suite.

Provides:
- A fresh in-memory SQLite store per test (nothing touches disk)
- Deterministic clock and in-memory payout wallet
- Actor identities and a ready Marketplace facade
- Captured structured logs
"""

import json
import logging
from io import StringIO
from typing import Generator

import pytest
from sqlalchemy.orm import Session, sessionmaker

from marketplace_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
)
from marketplace_kernel.db.immutability import register_immutability_listeners
from marketplace_kernel.domain.clock import DeterministicClock
from marketplace_kernel.domain.payout import InMemoryWallet
from marketplace_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from marketplace_kernel.marketplace import Marketplace
from marketplace_kernel.services.access_controller import AccessController
from marketplace_kernel.services.fund_custody import FundCustody

SYSTEM_OWNER = "0x00000000000000000000000000000000000000a1"
ALICE = "0x000000000000000000000000000000000000a11c"
BOB = "0x0000000000000000000000000000000000000b0b"
CAROL = "0x00000000000000000000000000000000000ca201"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture marketplace_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, marketplace):
            marketplace.create_project("n", "d", 1, caller=ALICE)
            logs = captured_logs()
            assert any(r["message"] == "project_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("marketplace_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "concurrency: mark test as running multiple threads"
    )
    config.addinivalue_line(
        "markers", "scenario: mark test as an end-to-end marketplace scenario"
    )


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory store with immutability listeners active."""
    engine = init_engine_from_url("sqlite://")
    create_tables()
    register_immutability_listeners()
    yield engine
    drop_tables()
    reset_engine()


@pytest.fixture
def session_factory(db_engine) -> sessionmaker[Session]:
    return get_session_factory()


@pytest.fixture
def session(session_factory) -> Generator[Session, None, None]:
    """
    A raw session for service-level tests, with access control and the
    escrow pool already initialized.  Rolled back at teardown.
    """
    sess = session_factory()
    AccessController(sess).initialize(SYSTEM_OWNER)
    FundCustody(sess).initialize()
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Domain collaborators
# =============================================================================


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def wallet() -> InMemoryWallet:
    return InMemoryWallet()


@pytest.fixture
def system_owner() -> str:
    return SYSTEM_OWNER


@pytest.fixture
def alice() -> str:
    return ALICE


@pytest.fixture
def bob() -> str:
    return BOB


@pytest.fixture
def carol() -> str:
    return CAROL


@pytest.fixture
def marketplace(session_factory, deterministic_clock, wallet) -> Marketplace:
    return Marketplace(
        owner=SYSTEM_OWNER,
        clock=deterministic_clock,
        payout=wallet,
        session_factory=session_factory,
    )
