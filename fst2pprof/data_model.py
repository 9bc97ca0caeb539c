"""Core data structures for fst2pprof.

This module defines the records that flow through one extraction run. The
waveform reader produces hierarchy entries and value changes; the resolver
turns the entries into SignalMetadata; the synthesizer turns value changes
into profile samples.

    hierarchy pass                       value-change pass
    ──────────────                       ─────────────────
    ScopeEntry("top")      ─┐
      VarEntry("clk", 0)    ├─► SignalMetadata(("top",), "clk", 0)
      ScopeEntry("sub")     │                                   ValueChange(0, 0, "1")
        VarEntry("valid",1) ├─► SignalMetadata(("top","sub"),   ValueChange(5, 1, "0")
      UpScopeEntry()        │                  "valid", 1)               │
    UpScopeEntry()         ─┘                                            ▼
                                                                   Sample(...)

Nothing here outlives a single invocation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple, Union

from .errors import HierarchyError

Time = int  # In Timescale units

# SignalHandle is the opaque identifier the reader assigns to a signal. It is
# what correlates a variable declaration in the hierarchy with the value
# changes replayed later. Several declarations (aliases) may share one handle.
SignalHandle = int

# A value as delivered by the reader: the logic string ("1", "x", "0101")
# or a real number.
SignalValue = Union[str, float]


class TimeUnit(Enum):
    ZEPTOSECONDS = "zs"  # 10^-21 seconds
    ATTOSECONDS = "as"   # 10^-18 seconds
    FEMTOSECONDS = "fs"  # 10^-15 seconds
    PICOSECONDS = "ps"   # 10^-12 seconds
    NANOSECONDS = "ns"   # 10^-9 seconds
    MICROSECONDS = "us"  # 10^-6 seconds
    MILLISECONDS = "ms"  # 10^-3 seconds
    SECONDS = "s"        # 10^0 seconds

    @classmethod
    def from_string(cls, s: str) -> Optional['TimeUnit']:
        """Convert string representation to TimeUnit."""
        mapping = {
            'zs': cls.ZEPTOSECONDS,
            'as': cls.ATTOSECONDS,
            'fs': cls.FEMTOSECONDS,
            'ps': cls.PICOSECONDS,
            'ns': cls.NANOSECONDS,
            'us': cls.MICROSECONDS,
            'μs': cls.MICROSECONDS,
            'ms': cls.MILLISECONDS,
            's': cls.SECONDS,
            # Enum-style names, e.g. "TimescaleUnit.NanoSeconds"
            'zeptoseconds': cls.ZEPTOSECONDS,
            'attoseconds': cls.ATTOSECONDS,
            'femtoseconds': cls.FEMTOSECONDS,
            'picoseconds': cls.PICOSECONDS,
            'nanoseconds': cls.NANOSECONDS,
            'microseconds': cls.MICROSECONDS,
            'milliseconds': cls.MILLISECONDS,
            'seconds': cls.SECONDS,
        }
        key = s.strip().rsplit('.', 1)[-1]
        return mapping.get(key) or mapping.get(key.lower())

    @classmethod
    def from_exponent(cls, exponent: Optional[int]) -> Optional['TimeUnit']:
        """Convert a power of 10 exponent (e.g. -9) to TimeUnit."""
        units = {
            -21: cls.ZEPTOSECONDS,
            -18: cls.ATTOSECONDS,
            -15: cls.FEMTOSECONDS,
            -12: cls.PICOSECONDS,
            -9: cls.NANOSECONDS,
            -6: cls.MICROSECONDS,
            -3: cls.MILLISECONDS,
            0: cls.SECONDS,
        }
        return units.get(exponent) if exponent is not None else None


@dataclass(frozen=True)
class Timescale:
    """Timescale of a trace, e.g. ``10ns`` is ``Timescale(10, NANOSECONDS)``."""
    factor: int = 1
    unit: TimeUnit = TimeUnit.PICOSECONDS

    def to_str(self) -> str:
        return f"{self.factor}{self.unit.value}"


@dataclass(frozen=True)
class TraceHeader:
    """Global information about an opened trace."""
    start_time: Time
    end_time: Time
    timescale: Optional[Timescale] = None
    file_format: str = "Unknown"

    @property
    def duration(self) -> Time:
        # Header times and change timestamps share the trace's time unit.
        return self.end_time - self.start_time


# Hierarchy entries
#
# One class per entry kind of the trace's declaration stream. Consumers
# dispatch on the concrete type and must treat every kind explicitly;
# HierarchyEntry is the closed set.

@dataclass(frozen=True)
class ScopeEntry:
    """Opens a scope (module, task, generate block, ...)."""
    name: str
    scope_type: str = "module"
    component: str = ""


@dataclass(frozen=True)
class UpScopeEntry:
    """Closes the innermost open scope."""


@dataclass(frozen=True)
class VarEntry:
    """Declares a variable inside the current scope."""
    name: str
    handle: SignalHandle
    var_type: str = "Wire"
    direction: str = "Implicit"
    bitwidth: Optional[int] = None
    is_alias: bool = False


@dataclass(frozen=True)
class AttributeBeginEntry:
    name: str
    value: str = ""


@dataclass(frozen=True)
class AttributeEndEntry:
    pass


@dataclass(frozen=True)
class PathNameEntry:
    name: str
    path_id: int


@dataclass(frozen=True)
class SourceStemEntry:
    is_instantiation: bool
    path_id: int
    line: int


@dataclass(frozen=True)
class CommentEntry:
    text: str


@dataclass(frozen=True)
class EnumTableEntry:
    name: str
    handle: int
    mapping: Tuple[Tuple[str, str], ...] = ()


@dataclass(frozen=True)
class EnumTableRefEntry:
    handle: int


HierarchyEntry = Union[
    ScopeEntry, UpScopeEntry, VarEntry, AttributeBeginEntry, AttributeEndEntry,
    PathNameEntry, SourceStemEntry, CommentEntry, EnumTableEntry, EnumTableRefEntry,
]


def describe_entry(entry: HierarchyEntry) -> str:
    """Render a hierarchy entry as a single line for ``--list-hierarchy``."""
    if isinstance(entry, ScopeEntry):
        return f"Scope: {entry.name} ({entry.scope_type}) {entry.component}".rstrip()
    if isinstance(entry, UpScopeEntry):
        return "UpScope"
    if isinstance(entry, VarEntry):
        alias = " [alias]" if entry.is_alias else ""
        return f"({entry.handle}): {entry.name}{alias}"
    if isinstance(entry, AttributeBeginEntry):
        return f"Attr: {entry.name} {entry.value}".rstrip()
    if isinstance(entry, AttributeEndEntry):
        return "EndAttr"
    if isinstance(entry, PathNameEntry):
        return f"PathName: {entry.path_id} -> {entry.name}"
    if isinstance(entry, SourceStemEntry):
        return f"SourceStem:: {entry.is_instantiation}, {entry.path_id}, {entry.line}"
    if isinstance(entry, CommentEntry):
        return f"Comment: {entry.text}"
    if isinstance(entry, EnumTableEntry):
        names = " ".join(name for _value, name in entry.mapping)
        values = " ".join(value for value, _name in entry.mapping)
        return f"EnumTable: {entry.name} {len(entry.mapping)} {names} {values} ({entry.handle})"
    if isinstance(entry, EnumTableRefEntry):
        return f"EnumTableRef: {entry.handle}"
    raise HierarchyError(f"Unknown hierarchy entry kind: {type(entry).__name__}")


class ScopePath:
    """Live path from the root scope to the current traversal position."""

    def __init__(self) -> None:
        self._names: List[str] = []

    def push(self, name: str) -> None:
        self._names.append(name)

    def pop(self) -> str:
        if not self._names:
            raise HierarchyError("Scope closed while no scope is open (malformed hierarchy)")
        return self._names.pop()

    def snapshot(self) -> Tuple[str, ...]:
        """Return an independent copy of the current path."""
        return tuple(self._names)

    def joined(self, sep: str = ".") -> str:
        return sep.join(self._names)

    @property
    def depth(self) -> int:
        return len(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ScopePath({self._names!r})"


@dataclass(frozen=True)
class SignalMetadata:
    """A requested signal found in the hierarchy.

    ``path`` is a snapshot of the scope path at the declaration, so it does not
    follow the live ScopePath after the entry has been recorded.
    """
    path: Tuple[str, ...]
    name: str
    handle: SignalHandle
    bitwidth: Optional[int] = None
    var_type: str = "Wire"

    @property
    def module_path(self) -> str:
        return ".".join(self.path)

    @property
    def full_name(self) -> str:
        return ".".join(self.path + (self.name,))


class ValueChange(NamedTuple):
    """A signal's new value at a point in simulated time."""
    time: Time
    handle: SignalHandle
    value: SignalValue

    @property
    def is_real(self) -> bool:
        return isinstance(self.value, float)


@dataclass
class ExtractionResult:
    """Summary of one run, returned by the pipeline."""
    output_path: str
    signals: List[SignalMetadata] = field(default_factory=list)
    unresolved: List[str] = field(default_factory=list)
    sample_count: int = 0
