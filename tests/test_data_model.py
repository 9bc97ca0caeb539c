"""Tests for data model helpers."""

import pytest

from fst2pprof.data_model import (
    CommentEntry, EnumTableEntry, ScopeEntry, SignalMetadata, TimeUnit,
    TraceHeader, UpScopeEntry, ValueChange, VarEntry, describe_entry
)
from fst2pprof.errors import HierarchyError


@pytest.mark.parametrize("text, unit", [
    ("ns", TimeUnit.NANOSECONDS),
    (" ps ", TimeUnit.PICOSECONDS),
    ("μs", TimeUnit.MICROSECONDS),
    ("TimescaleUnit.NanoSeconds", TimeUnit.NANOSECONDS),
    ("femtoseconds", TimeUnit.FEMTOSECONDS),
])
def test_time_unit_from_string(text, unit):
    assert TimeUnit.from_string(text) is unit


def test_time_unit_unknown():
    assert TimeUnit.from_string("fortnights") is None


def test_time_unit_from_exponent():
    assert TimeUnit.from_exponent(-9) is TimeUnit.NANOSECONDS
    assert TimeUnit.from_exponent(0) is TimeUnit.SECONDS
    assert TimeUnit.from_exponent(-7) is None
    assert TimeUnit.from_exponent(None) is None


def test_trace_header_duration():
    assert TraceHeader(start_time=100, end_time=350).duration == 250


def test_value_change_is_real():
    assert ValueChange(0, 1, 1.5).is_real
    assert not ValueChange(0, 1, "1").is_real


def test_signal_metadata_names():
    meta = SignalMetadata(path=(), name="rst", handle=3)
    assert meta.module_path == ""
    assert meta.full_name == "rst"


def test_describe_entry():
    assert describe_entry(ScopeEntry("top", "module")) == "Scope: top (module)"
    assert describe_entry(UpScopeEntry()) == "UpScope"
    assert describe_entry(VarEntry("clk", 4)) == "(4): clk"
    assert describe_entry(VarEntry("clk", 4, is_alias=True)) == "(4): clk [alias]"
    assert describe_entry(CommentEntry("hello")) == "Comment: hello"
    table = EnumTableEntry("state_t", 2, (("0", "IDLE"), ("1", "BUSY")))
    assert describe_entry(table) == "EnumTable: state_t 2 IDLE BUSY 0 1 (2)"


def test_describe_unknown_entry():
    with pytest.raises(HierarchyError):
        describe_entry("not an entry")
