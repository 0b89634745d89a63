"""
Pytest configuration and shared fixtures for all jsrename tests.

Building the LALR tables is the expensive part of the engine, so one
parser instance is shared by the whole session. Parsers are stateless
between `parse` calls; buffers are not and are created per test.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from jsrename.engine.buffer import JavaScriptBuffer
from jsrename.frontend.parser import Parser


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_parser():
    """
    Session-scoped tolerant parser shared across ALL tests.

    - Grammar is loaded once with Lark native caching
    - Safe to share: `parse` keeps no state between calls
    """
    return Parser()


@pytest.fixture(scope="session")
def strict_parser():
    """Session-scoped parser that raises instead of skipping bad tokens."""
    return Parser(tolerant=False)


# =============================================================================
# Class-scoped fixtures (shared within a test class)
# =============================================================================

@pytest.fixture(scope="class")
def parser(session_parser):
    """Class-scoped parser - returns session parser (stateless, safe to share)."""
    return session_parser


# =============================================================================
# Function-scoped fixtures (default - one per test)
# =============================================================================

@pytest.fixture
def buffer(session_parser):
    """Fresh buffer per test; loaded files are buffer state."""
    return JavaScriptBuffer(parser=session_parser)


def pytest_configure(config):
    """Register custom markers for test organization."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
