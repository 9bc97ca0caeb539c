"""Structural protocol types for objects returned by a waveform reader.

The "W" prefix (for Waveform) marks types that describe what fst2pprof needs
from the reader library, without importing it. Backends return the reader's
own objects cast to these protocols; only the backend modules know which
library is underneath.
"""

from typing import Any, Callable, Hashable, Iterable, List, Optional, Protocol, Sequence, Union, runtime_checkable

# Opaque, hashable signal identifier. Aliased variables share one.
WSignalId = Hashable

# A value as delivered by the reader: two-state bit vectors as int, four-state
# vectors and strings as str, reals as float.
WValue = Union[int, str, float]


@runtime_checkable
class WVar(Protocol):
    """A variable declaration in the hierarchy."""

    @property
    def name(self) -> str:
        """Local name of the variable."""
        ...

    @property
    def full_name(self) -> str:
        """Full hierarchical path of the variable."""
        ...

    @property
    def bitwidth(self) -> Optional[int]:
        ...

    @property
    def signal_id(self) -> WSignalId:
        """Identifier shared by all aliases of one signal."""
        ...


@runtime_checkable
class WScope(Protocol):
    """A scope (module, task, function, etc.) in the hierarchy."""

    @property
    def name(self) -> str:
        ...

    @property
    def full_name(self) -> str:
        ...

    @property
    def scope_type(self) -> Any:
        ...

    def vars(self) -> Iterable[WVar]:
        """Variables declared directly in this scope."""
        ...

    def scopes(self) -> Iterable['WScope']:
        """Child scopes."""
        ...


@runtime_checkable
class WTimescale(Protocol):

    @property
    def factor(self) -> int:
        ...

    @property
    def unit(self) -> Any:
        ...


ChangeCallback = Callable[[int, WSignalId, WValue], None]
TimeStepCallback = Callable[[int, Any, List[WSignalId]], None]


@runtime_checkable
class WWaveform(Protocol):
    """The reader's handle on an opened trace."""

    @property
    def timescale(self) -> Optional[WTimescale]:
        ...

    @property
    def file_format(self) -> Any:
        ...

    def scopes(self) -> Iterable[WScope]:
        """Top-level scopes."""
        ...

    def vars(self) -> Iterable[WVar]:
        """Variables declared outside of any scope."""
        ...

    def all_vars(self) -> Iterable[WVar]:
        ...

    def stream_changes(self, callback: ChangeCallback, include: Optional[Sequence[WVar]]) -> None:
        """Scan the body once, calling ``callback(time, signal_id, value)``
        for every change of an included signal."""
        ...

    def stream_time_steps(self, callback: TimeStepCallback, include: Optional[Sequence[WVar]]) -> None:
        """Scan the body once, calling ``callback`` once per time step at
        which an included signal changes."""
        ...
