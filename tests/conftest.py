"""
Pytest configuration and fixtures for the LLM output repair tests.
Ensures all tests run with the test environment configuration.
"""

import os
import sys
import pytest
from pathlib import Path

# Add project root to PYTHONPATH
project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)


def pytest_configure(config):
    """
    Configure pytest to use test environment.
    This runs before any tests are collected or executed.
    """
    os.environ["APP_ENV"] = "test"
    os.environ["REPAIR_PROFILE"] = "standard"
    os.environ["REPAIR_ENABLED"] = "true"


@pytest.fixture
def repair_config():
    """Standard configuration, independent of the environment"""
    from llm_output_repair.repair.config import RepairConfig
    return RepairConfig()


@pytest.fixture
def engine(repair_config):
    """Engine with the standard configuration"""
    from llm_output_repair.repair.engine import RepairEngine
    return RepairEngine(repair_config)


@pytest.fixture
def strict_engine():
    """Engine with the strict profile: no key fragment inference"""
    from llm_output_repair.repair.config import RepairProfile, get_repair_config
    from llm_output_repair.repair.engine import RepairEngine
    return RepairEngine(get_repair_config(RepairProfile.STRICT))


@pytest.fixture
def recorder():
    from llm_output_repair.repair.diagnostics import DiagnosticsRecorder
    return DiagnosticsRecorder()
