"""Common test fixtures for fst2pprof tests."""

import pytest

from fst2pprof.data_model import TraceHeader, ValueChange
from .test_utils import (
    ALIAS_VCD, SIMPLE_VCD, FakeTraceSource, simple_hierarchy, write_vcd
)


@pytest.fixture
def simple_vcd(tmp_path):
    """Path to a VCD with top.clk and top.sub.valid."""
    return write_vcd(tmp_path, SIMPLE_VCD, "simple.vcd")


@pytest.fixture
def alias_vcd(tmp_path):
    """Path to a VCD where top.clk and top.sub.clk are aliases."""
    return write_vcd(tmp_path, ALIAS_VCD, "alias.vcd")


@pytest.fixture
def simple_source():
    """In-memory trace equivalent to SIMPLE_VCD."""
    changes = [
        ValueChange(0, 0, "1"),
        ValueChange(5, 1, "0"),
        ValueChange(10, 0, "0"),
    ]
    return FakeTraceSource(simple_hierarchy(), changes, TraceHeader(start_time=0, end_time=10))


@pytest.fixture
def in_tmp_cwd(tmp_path, monkeypatch):
    """Run the test with tmp_path as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
