"""Pywellen backend implementation."""

import logging
from typing import Collection, Dict, Hashable, Iterator, List, Optional, Tuple, cast
from pathlib import Path

try:
    import pywellen
except ImportError:
    raise ImportError("pywellen is required for the pywellen backend. Install it with: pip install pywellen")

from .base import WaveformBackend, BackendType, BackendFactory
from ..backend_types import WScope, WValue, WVar, WWaveform
from ..config import READER
from ..data_model import (
    HierarchyEntry, ScopeEntry, SignalHandle, SignalValue, Timescale, TimeUnit,
    TraceHeader, UpScopeEntry, ValueChange, VarEntry
)
from ..errors import DecodeError

logger = logging.getLogger(__name__)


def format_value(value: WValue, bitwidth: Optional[int]) -> SignalValue:
    """Convert a value delivered by pywellen to the text/real form used downstream.

    pywellen returns two-state bit vectors as Python ints; they are rendered
    back to the binary string the trace stores, padded to the signal width.
    Four-state and string values already arrive as text.
    """
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        if bitwidth:
            return format(value, f"0{bitwidth}b")
        return str(value)
    return str(value)


def _var_type(var: WVar) -> str:
    var_type = getattr(var, "var_type", None)
    if var_type is None:
        var_type = getattr(var, "type", "Wire")
    return str(var_type)


class PywellenBackend(WaveformBackend):
    """Backend implementation using pywellen library.

    This backend supports both VCD and FST file formats using the
    Rust-based wellen library through Python bindings.

    pywellen identifies signals by opaque ``SignalId`` objects. The backend
    numbers them densely in the order the hierarchy walk first meets them;
    that number is the SignalHandle seen by the rest of fst2pprof.

    The trace is opened in stream-only mode, so the body is never held in
    memory. Each scan of the body (header bounds, value changes) opens its
    own reader on the file.
    """

    def __init__(self, file_path: str):
        super().__init__(file_path)
        self._backend_type = BackendType.PYWELLEN
        self._multi_threaded = READER.MULTI_THREADED
        self._remove_scopes_with_empty_name = READER.REMOVE_SCOPES_WITH_EMPTY_NAME
        # First declaration seen for each signal; aliases resolve to it
        self._vars_by_handle: Dict[SignalHandle, WVar] = {}
        self._handles_by_id: Dict[Hashable, SignalHandle] = {}

    def _open(self) -> WWaveform:
        try:
            waveform = pywellen.Waveform(
                self.file_path,
                multi_threaded=self._multi_threaded,
                remove_scopes_with_empty_name=self._remove_scopes_with_empty_name,
                stream_only=True,
            )
        except Exception as exc:
            raise DecodeError(f"Failed to read waveform {self.file_path}: {exc}") from exc
        return cast(WWaveform, waveform)

    def load_waveform(
        self,
        multi_threaded: bool = False,
        remove_scopes_with_empty_name: bool = False,
    ) -> WWaveform:
        """Load the waveform file using pywellen.

        Returns:
            Loaded waveform object (pywellen.Waveform implements WWaveform protocol)
        """
        self._multi_threaded = multi_threaded
        self._remove_scopes_with_empty_name = remove_scopes_with_empty_name
        self._waveform = self._open()
        return self._waveform

    def _require_waveform(self) -> WWaveform:
        if self._waveform is None:
            raise DecodeError(f"Waveform {self.file_path} is not loaded")
        return self._waveform

    def read_header(self) -> TraceHeader:
        """Read timescale and format, and scan the body for the first and
        last time step."""
        waveform = self._require_waveform()
        start_time, end_time = self._time_bounds()
        return TraceHeader(
            start_time=start_time,
            end_time=end_time,
            timescale=self._extract_timescale(waveform),
            file_format=str(waveform.file_format),
        )

    def _time_bounds(self) -> Tuple[int, int]:
        all_vars = list(self._require_waveform().all_vars())
        if not all_vars:
            return 0, 0

        times: List[int] = []

        def on_time_step(time, _values, _signal_ids) -> None:
            times.append(int(time))

        try:
            self._open().stream_time_steps(on_time_step, all_vars)
        except Exception as exc:
            raise DecodeError(f"Failed to scan time steps of {self.file_path}: {exc}") from exc

        if not times:
            return 0, 0
        return min(times), max(times)

    @staticmethod
    def _extract_timescale(waveform: WWaveform) -> Optional[Timescale]:
        pywellen_timescale = waveform.timescale
        if not pywellen_timescale:
            return None
        # pywellen's Timescale has unit and factor attributes
        try:
            unit = getattr(pywellen_timescale, 'unit', None)
            factor = int(getattr(pywellen_timescale, 'factor', 1))
        except (AttributeError, TypeError, ValueError):
            return None
        time_unit = TimeUnit.from_string(str(unit))
        if time_unit is None and hasattr(unit, 'to_exponent'):
            time_unit = TimeUnit.from_exponent(unit.to_exponent())
        if time_unit is None:
            logger.debug("Unrecognized timescale unit %r", unit)
            return None
        return Timescale(factor=factor, unit=time_unit)

    def iter_hierarchy(self) -> Iterator[HierarchyEntry]:
        """Walk the hierarchy depth first.

        pywellen exposes a scope's variables and its child scopes as two
        separate lists, so within each scope all variables are reported
        before the child scopes. When a signal is declared under several
        names, the first name in this order is the one that is not marked
        as an alias, which may differ from the first declaration in the file.
        Variables declared outside of any scope come first.
        """
        waveform = self._require_waveform()
        self._vars_by_handle.clear()
        self._handles_by_id.clear()
        for var in waveform.vars():
            yield self._var_entry(var)
        for scope in waveform.scopes():
            yield from self._walk_scope(scope)

    def _walk_scope(self, scope: WScope) -> Iterator[HierarchyEntry]:
        yield ScopeEntry(name=scope.name, scope_type=str(scope.scope_type))
        for var in scope.vars():
            yield self._var_entry(var)
        for child in scope.scopes():
            yield from self._walk_scope(child)
        yield UpScopeEntry()

    def _var_entry(self, var: WVar) -> VarEntry:
        is_alias = var.signal_id in self._handles_by_id
        handle = self._register(var)
        return VarEntry(
            name=var.name,
            handle=handle,
            var_type=_var_type(var),
            direction=str(getattr(var, "direction", "Implicit")),
            bitwidth=var.bitwidth,
            is_alias=is_alias,
        )

    def _register(self, var: WVar) -> SignalHandle:
        handle = self._handles_by_id.get(var.signal_id)
        if handle is None:
            handle = len(self._handles_by_id)
            self._handles_by_id[var.signal_id] = handle
            self._vars_by_handle[handle] = var
        return handle

    def iter_changes(self, handles: Collection[SignalHandle]) -> Iterator[ValueChange]:
        wanted = set(handles)
        if not wanted:
            return iter(())

        if not self._handles_by_id:
            # Handles are assigned by the hierarchy walk
            for _entry in self.iter_hierarchy():
                pass
        missing = sorted(h for h in wanted if h not in self._vars_by_handle)
        if missing:
            raise DecodeError(f"Unknown signal handles: {missing}")

        include = [self._vars_by_handle[h] for h in sorted(wanted)]
        widths = {h: self._vars_by_handle[h].bitwidth for h in wanted}
        changes: List[ValueChange] = []

        def on_change(time, signal_id, value) -> None:
            handle = self._handles_by_id.get(signal_id)
            if handle in wanted:
                changes.append(ValueChange(int(time), handle, format_value(value, widths[handle])))

        try:
            self._open().stream_changes(on_change, include)
        except Exception as exc:
            raise DecodeError(f"Failed to load signals from {self.file_path}: {exc}") from exc

        # Stable sort: non-decreasing time, ascending handle within a time step
        changes.sort(key=lambda change: (change.time, change.handle))
        logger.debug("Replayed %d change(s) of %d signal(s)", len(changes), len(include))
        return iter(changes)

    def supports_file_format(self, file_path: str) -> bool:
        """Check if pywellen supports the given file format.

        Returns:
            True for VCD and FST files, False otherwise
        """
        ext = Path(file_path).suffix.lower()
        return ext in READER.SUPPORTED_EXTENSIONS


# Register the pywellen backend with the factory
BackendFactory.register_backend(BackendType.PYWELLEN, PywellenBackend)
