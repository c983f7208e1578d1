"""
Pytest configuration and shared fixtures for cycletime tests.

Provides sample programs for both machine classes and the custom markers
used across the suite.
"""

import os
import sys
import logging

import pytest

# Add the parent directory to Python path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

logger = logging.getLogger(__name__)


# ============================================================================
# SAMPLE PROGRAMS
# ============================================================================

@pytest.fixture
def lathe_css_program() -> str:
    """Rapid to diameter 20, then a constant-surface-speed turning pass."""
    return "G0 X20 Z0\nG96 S200\nG1 Z-50 F0.2"


@pytest.fixture
def lathe_thread_program() -> str:
    """Two-block G76 threading at a fixed 500 RPM, 30 mm of axial travel."""
    return "\n".join([
        "O1000 (THREAD M20)",
        "N10 G97 S500 M3",
        "N20 G0 X20 Z5",
        "N30 G76 P010060 Q50 R0.05",
        "N40 G76 X17.5 Z-25 P1000 Q200 F1.5",
        "N50 M5",
        "N60 M30",
    ])


@pytest.fixture
def mill_drill_program() -> str:
    """One hole drilled through a modal CYCLE81 call."""
    return "\n".join([
        "F100",
        "G0 X0 Y0 Z50",
        "MCALL CYCLE81(10, 0, 2, -5)",
        "X10 Y0",
        "MCALL",
        "M30",
    ])


# ============================================================================
# PYTEST CONFIGURATION HOOKS
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "gcode: Tests specifically for GCODE parsing and interpretation functionality"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that run a whole program through the pipeline"
    )


def pytest_sessionstart(session):
    """Called after the Session object has been created."""
    logger.info("Starting cycletime test session")
