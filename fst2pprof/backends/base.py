"""Base classes and factory for waveform backend implementations."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Collection, Iterator, Optional
from pathlib import Path

from ..backend_types import WWaveform
from ..data_model import HierarchyEntry, SignalHandle, TraceHeader, ValueChange
from ..errors import WaveformOpenError


class BackendType(Enum):
    """Supported waveform backend types."""
    PYWELLEN = "pywellen"


class WaveformBackend(ABC):
    """Abstract base class for waveform backend implementations.

    A backend adapts one reader library to the two passes fst2pprof makes over
    a trace: one traversal of the hierarchy in declaration order, and one
    replay of the value changes of selected signals in time order.
    """

    def __init__(self, file_path: str):
        """Initialize the backend with a waveform file path.

        Args:
            file_path: Path to the waveform file
        """
        self.file_path = file_path
        self._waveform: Optional[WWaveform] = None
        self._backend_type: BackendType

    @abstractmethod
    def load_waveform(
        self,
        multi_threaded: bool = False,
        remove_scopes_with_empty_name: bool = False,
    ) -> WWaveform:
        """Load the waveform file's header and hierarchy.

        The value-change body is only read by read_header() and
        iter_changes().

        Args:
            multi_threaded: Whether the reader may use multiple threads
            remove_scopes_with_empty_name: Whether to filter out unnamed scopes

        Returns:
            Loaded waveform object conforming to WWaveform protocol

        Raises:
            DecodeError: If the reader rejects the file
        """
        ...

    @abstractmethod
    def read_header(self) -> TraceHeader:
        """Get start/end time, timescale and format of the loaded trace.

        Raises:
            DecodeError: If the reader fails while scanning the body
        """
        ...

    @abstractmethod
    def iter_hierarchy(self) -> Iterator[HierarchyEntry]:
        """Iterate over all hierarchy entries once.

        Every scope is reported as a ScopeEntry, followed by its contents and
        a matching UpScopeEntry. Entries follow declaration order as far as
        the reader exposes it; see the backend for its exact ordering.
        """
        ...

    @abstractmethod
    def iter_changes(self, handles: Collection[SignalHandle]) -> Iterator[ValueChange]:
        """Replay the value changes of ``handles`` in non-decreasing time order.

        Only the listed signals are loaded from the trace body. Changes at the
        same timestamp are reported in ascending handle order.

        Raises:
            DecodeError: If loading or iterating the signals fails
        """
        ...

    @abstractmethod
    def supports_file_format(self, file_path: str) -> bool:
        """Check if this backend supports the given file format.

        Args:
            file_path: Path to the waveform file

        Returns:
            True if this backend can read the file, False otherwise
        """
        ...

    @property
    def backend_type(self) -> BackendType:
        return self._backend_type

    @property
    def waveform(self) -> Optional[WWaveform]:
        """The loaded waveform object, None before load_waveform()."""
        return self._waveform


class BackendFactory:
    """Factory for creating waveform backend instances."""

    _backends: dict[BackendType, type[WaveformBackend]] = {}

    @classmethod
    def register_backend(cls, backend_type: BackendType, backend_class: type[WaveformBackend]) -> None:
        """Register a backend implementation.

        Args:
            backend_type: The type of backend
            backend_class: The backend class to register
        """
        cls._backends[backend_type] = backend_class

    @classmethod
    def create_backend(
        cls,
        file_path: str,
        backend_type: Optional[BackendType] = None
    ) -> WaveformBackend:
        """Create a backend instance for the given file.

        Args:
            file_path: Path to the waveform file
            backend_type: Explicitly specify which backend to use

        Returns:
            Backend instance appropriate for the file

        Raises:
            WaveformOpenError: If no suitable backend is found
        """
        if backend_type:
            if backend_type not in cls._backends:
                raise WaveformOpenError(f"Backend {backend_type.value} not registered")
            return cls._backends[backend_type](file_path)

        for backend_class in cls._backends.values():
            backend = backend_class(file_path)
            if backend.supports_file_format(file_path):
                return backend

        raise WaveformOpenError(
            f"Unsupported waveform format '{Path(file_path).suffix}': {file_path}"
        )
