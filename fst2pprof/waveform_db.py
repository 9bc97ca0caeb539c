"""WaveformDB: the opened trace for one extraction run."""

import logging
import os
import time
from typing import Collection, Iterator, Optional

from .config import READER
from .data_model import HierarchyEntry, SignalHandle, TraceHeader, ValueChange
from .backends import BackendFactory, BackendType, WaveformBackend
from .errors import WaveformOpenError

logger = logging.getLogger(__name__)


class WaveformDB:
    """Owns the reader for one trace and exposes its two passes.

    Usage::

        with WaveformDB() as db:
            db.open("sim.fst")
            for entry in db.iter_hierarchy():
                ...
            for change in db.iter_changes(handles):
                ...
    """

    def __init__(
        self,
        backend_type: Optional[BackendType] = None,
        multi_threaded: bool = READER.MULTI_THREADED,
    ) -> None:
        self.uri: Optional[str] = None
        self._backend: Optional[WaveformBackend] = None
        self._backend_type = backend_type
        self._multi_threaded = multi_threaded
        self._header: Optional[TraceHeader] = None

    @property
    def file_path(self) -> Optional[str]:
        """Get the file path of the opened waveform."""
        return self.uri

    def open(self, uri: str) -> None:
        """Open a waveform file using the configured backend.

        Only the header and hierarchy are read here. The trace's start and
        end times need a scan of the body and are read on first access to
        ``header``.

        Args:
            uri: Path to a .fst or .vcd file

        Raises:
            WaveformOpenError: If the file does not exist, is unreadable or has
                an unsupported format
            DecodeError: If the reader fails to parse the file
        """
        start_time = time.time()

        if not os.path.isfile(uri):
            raise WaveformOpenError(f"Waveform file not found: {uri}")
        if not os.access(uri, os.R_OK):
            raise WaveformOpenError(f"Waveform file is not readable: {uri}")

        file_size_mb = os.path.getsize(uri) / (1024 * 1024)
        logger.info("Loading %s (%.1f MB)...", os.path.basename(uri), file_size_mb)

        backend = BackendFactory.create_backend(file_path=uri, backend_type=self._backend_type)
        logger.debug("Using %s backend", backend.backend_type.value)

        backend.load_waveform(
            multi_threaded=self._multi_threaded,
            remove_scopes_with_empty_name=READER.REMOVE_SCOPES_WITH_EMPTY_NAME,
        )
        self._backend = backend
        self._header = None
        self.uri = uri

        logger.info("Waveform loaded in %.2f seconds", time.time() - start_time)

    def _require_backend(self) -> WaveformBackend:
        if self._backend is None:
            raise WaveformOpenError("No waveform is open")
        return self._backend

    @property
    def header(self) -> TraceHeader:
        if self._header is None:
            start_time = time.time()
            self._header = self._require_backend().read_header()
            logger.info(
                "Trace start time: %d, end time: %d%s (scanned in %.2f seconds)",
                self._header.start_time,
                self._header.end_time,
                f" ({self._header.timescale.to_str()})" if self._header.timescale else "",
                time.time() - start_time,
            )
        return self._header

    def iter_hierarchy(self) -> Iterator[HierarchyEntry]:
        """Iterate over the hierarchy entries of the open trace, in file order."""
        return self._require_backend().iter_hierarchy()

    def iter_changes(self, handles: Collection[SignalHandle]) -> Iterator[ValueChange]:
        """Replay value changes restricted to ``handles``, in time order."""
        return self._require_backend().iter_changes(handles)

    def close(self) -> None:
        """Close the waveform file."""
        self._backend = None
        self._header = None
        self.uri = None

    def __enter__(self) -> "WaveformDB":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
