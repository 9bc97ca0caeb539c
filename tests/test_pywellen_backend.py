"""Tests for the pywellen backend and WaveformDB."""

from types import SimpleNamespace

import pytest

from fst2pprof.backends import BackendFactory
from fst2pprof.backends import pywellen_backend
from fst2pprof.backends.pywellen_backend import PywellenBackend, format_value
from fst2pprof.data_model import ScopeEntry, TimeUnit, UpScopeEntry, VarEntry
from fst2pprof.errors import DecodeError, WaveformOpenError
from fst2pprof.waveform_db import WaveformDB


def test_format_value_pads_ints_to_width():
    assert format_value(5, 4) == "0101"
    assert format_value(1, 1) == "1"
    assert format_value(0, 8) == "00000000"


def test_format_value_passes_text_and_reals_through():
    assert format_value("x1z0", 4) == "x1z0"
    assert format_value(2.5, 64) == 2.5
    assert format_value(7, None) == "7"


def test_factory_selects_pywellen_for_fst_and_vcd():
    assert isinstance(BackendFactory.create_backend("sim.fst"), PywellenBackend)
    assert isinstance(BackendFactory.create_backend("sim.VCD"), PywellenBackend)


def test_factory_rejects_unknown_format():
    with pytest.raises(WaveformOpenError):
        BackendFactory.create_backend("sim.ghw")


def test_db_requires_open():
    db = WaveformDB()
    with pytest.raises(WaveformOpenError):
        db.iter_hierarchy()


# Reader stand-in with the same surface as pywellen.Waveform

class FakeSignalId:
    """Compares by value; a new object is returned on every access."""

    def __init__(self, index):
        self.index = index

    def __eq__(self, other):
        return isinstance(other, FakeSignalId) and other.index == self.index

    def __hash__(self):
        return hash(self.index)


class FakeVar:

    def __init__(self, name, full_name, index, bitwidth=1):
        self.name = name
        self.full_name = full_name
        self.bitwidth = bitwidth
        self.var_type = "VarType.Wire"
        self.direction = "VarDirection.Implicit"
        self._index = index

    @property
    def signal_id(self):
        return FakeSignalId(self._index)


class FakeScope:

    def __init__(self, name, full_name, vars=(), scopes=()):
        self.name = name
        self.full_name = full_name
        self.scope_type = "module"
        self._vars = list(vars)
        self._scopes = list(scopes)

    def vars(self):
        return iter(self._vars)

    def scopes(self):
        return iter(self._scopes)


class FakeUnit:
    """A unit whose text form is not recognised, only its exponent."""

    def __str__(self):
        return "Unit"

    def to_exponent(self):
        return -12


def fake_design():
    rst = FakeVar("rst", "rst", 7)
    clk = FakeVar("clk", "top.clk", 3)
    sub_clk = FakeVar("clk", "top.sub.clk", 3)
    data = FakeVar("data", "top.sub.data", 5, bitwidth=4)
    sub = FakeScope("sub", "top.sub", vars=[sub_clk, data])
    top = FakeScope("top", "top", vars=[clk], scopes=[sub])
    return [rst], [top]


# (time, signal index, value) in file order
FAKE_CHANGES = [
    (0, 5, 5),
    (0, 3, 0),
    (2, 7, "1"),
    (4, 5, "x01z"),
    (4, 3, 1),
]


class FakeReader:
    """Records how the backend drives pywellen.Waveform."""

    def __init__(self, changes=FAKE_CHANGES, fail=None, timescale=None):
        self.changes = changes
        self.fail = fail
        self.timescale = timescale
        self.opened = []
        self.includes = []

    def Waveform(self, path, multi_threaded=True, remove_scopes_with_empty_name=True, stream_only=False):
        if self.fail == "open":
            raise RuntimeError("bad header")
        self.opened.append(dict(
            path=path,
            multi_threaded=multi_threaded,
            remove_scopes_with_empty_name=remove_scopes_with_empty_name,
            stream_only=stream_only,
        ))
        top_vars, top_scopes = fake_design()
        reader = self

        class Waveform:
            timescale = reader.timescale
            file_format = "FileFormat.Vcd"

            def vars(self):
                return iter(top_vars)

            def scopes(self):
                return iter(top_scopes)

            def all_vars(self):
                found = list(top_vars)
                pending = list(top_scopes)
                while pending:
                    scope = pending.pop(0)
                    found.extend(scope.vars())
                    pending.extend(scope.scopes())
                return iter(found)

            def stream_changes(self, callback, include):
                reader.includes.append([var.full_name for var in include])
                if reader.fail == "stream":
                    raise RuntimeError("truncated body")
                wanted = {var.signal_id for var in include}
                for time, index, value in reader.changes:
                    if FakeSignalId(index) in wanted:
                        callback(time, FakeSignalId(index), value)

            def stream_time_steps(self, callback, include):
                for time in sorted({time for time, _index, _value in reader.changes}):
                    callback(time, None, [])

        return Waveform()


@pytest.fixture
def fake_reader(monkeypatch):
    reader = FakeReader(timescale=SimpleNamespace(factor=10, unit="TimescaleUnit.NanoSeconds"))
    monkeypatch.setattr(pywellen_backend, "pywellen", reader)
    return reader


def loaded_backend(**options):
    backend = PywellenBackend("sim.vcd")
    backend.load_waveform(**options)
    return backend


def test_opens_reader_in_stream_only_mode(fake_reader):
    backend = loaded_backend(multi_threaded=True)
    list(backend.iter_changes([0]))

    assert len(fake_reader.opened) == 2
    for options in fake_reader.opened:
        assert options == dict(
            path="sim.vcd",
            multi_threaded=True,
            remove_scopes_with_empty_name=False,
            stream_only=True,
        )


def test_hierarchy_numbers_signals_in_walk_order(fake_reader):
    entries = list(loaded_backend().iter_hierarchy())

    assert [type(e) for e in entries] == [
        VarEntry, ScopeEntry, VarEntry, ScopeEntry, VarEntry, VarEntry, UpScopeEntry, UpScopeEntry,
    ]
    var_entries = [e for e in entries if isinstance(e, VarEntry)]
    assert [(e.name, e.handle, e.is_alias) for e in var_entries] == [
        ("rst", 0, False),
        ("clk", 1, False),
        ("clk", 1, True),
        ("data", 2, False),
    ]
    assert var_entries[3].bitwidth == 4
    assert var_entries[3].var_type == "VarType.Wire"
    assert entries[1] == ScopeEntry("top", "module")


def test_changes_are_restricted_and_sorted(fake_reader):
    backend = loaded_backend()
    list(backend.iter_hierarchy())
    changes = list(backend.iter_changes([2, 1]))

    assert fake_reader.includes == [["top.clk", "top.sub.data"]]
    assert [tuple(c) for c in changes] == [
        (0, 1, "0"),
        (0, 2, "0101"),
        (4, 1, "1"),
        (4, 2, "x01z"),
    ]


def test_changes_walk_hierarchy_when_needed(fake_reader):
    changes = list(loaded_backend().iter_changes([0]))
    assert [tuple(c) for c in changes] == [(2, 0, "1")]


def test_no_handles_skip_the_body(fake_reader):
    backend = loaded_backend()
    assert list(backend.iter_changes([])) == []
    assert len(fake_reader.opened) == 1


def test_unknown_handle_raises(fake_reader):
    with pytest.raises(DecodeError):
        loaded_backend().iter_changes([42])


def test_header_scans_time_steps(fake_reader):
    header = loaded_backend().read_header()

    assert (header.start_time, header.end_time) == (0, 4)
    assert header.timescale.factor == 10
    assert header.timescale.unit is TimeUnit.NANOSECONDS
    assert header.file_format == "FileFormat.Vcd"


def test_timescale_from_unit_exponent(monkeypatch):
    reader = FakeReader(timescale=SimpleNamespace(factor=1, unit=FakeUnit()))
    monkeypatch.setattr(pywellen_backend, "pywellen", reader)
    assert loaded_backend().read_header().timescale.unit is TimeUnit.PICOSECONDS


@pytest.mark.parametrize("fail", ["open", "stream"])
def test_reader_failures_become_decode_errors(monkeypatch, fail):
    monkeypatch.setattr(pywellen_backend, "pywellen", FakeReader(fail=fail))
    with pytest.raises(DecodeError):
        backend = loaded_backend()
        list(backend.iter_changes([1]))


# End-to-end with the real reader

def test_header_from_vcd(simple_vcd):
    with WaveformDB() as db:
        db.open(str(simple_vcd))
        header = db.header
        assert db.file_path == str(simple_vcd)
    assert (header.start_time, header.end_time) == (0, 10)
    assert header.duration == 10
    assert header.timescale.unit is TimeUnit.NANOSECONDS
    assert db.file_path is None


def test_hierarchy_entries_from_vcd(simple_vcd):
    with WaveformDB() as db:
        db.open(str(simple_vcd))
        entries = list(db.iter_hierarchy())

    kinds = [type(e) for e in entries]
    assert kinds == [ScopeEntry, VarEntry, ScopeEntry, VarEntry, UpScopeEntry, UpScopeEntry]
    assert [e.name for e in entries if isinstance(e, ScopeEntry)] == ["top", "sub"]
    var_entries = [e for e in entries if isinstance(e, VarEntry)]
    assert [e.name for e in var_entries] == ["clk", "valid"]
    assert var_entries[0].handle != var_entries[1].handle
    assert not any(e.is_alias for e in var_entries)


def test_alias_entries_share_handle(alias_vcd):
    with WaveformDB() as db:
        db.open(str(alias_vcd))
        clks = [e for e in db.iter_hierarchy() if isinstance(e, VarEntry) and e.name == "clk"]

    assert len(clks) == 2
    assert clks[0].handle == clks[1].handle
    assert [e.is_alias for e in clks] == [False, True]


def test_changes_filtered_and_time_ordered(simple_vcd):
    with WaveformDB() as db:
        db.open(str(simple_vcd))
        handles = {e.name: e.handle for e in db.iter_hierarchy() if isinstance(e, VarEntry)}
        clk_only = list(db.iter_changes([handles["clk"]]))
        both = list(db.iter_changes(handles.values()))
        nothing = list(db.iter_changes([]))

    assert [(c.time, c.value) for c in clk_only] == [(0, "1"), (10, "0")]
    assert {c.handle for c in clk_only} == {handles["clk"]}
    assert [c.time for c in both] == sorted(c.time for c in both)
    assert (5, handles["valid"], "0") in both
    assert nothing == []
