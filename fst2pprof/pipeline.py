"""End-to-end extraction: trace in, ``.pprof.gz`` out."""

import logging
import time
from typing import Collection, Iterable, Iterator, List, Optional, Protocol, Tuple

from .collector import ValueChangeCollector
from .config import READER
from .data_model import (
    ExtractionResult, HierarchyEntry, SignalHandle, SignalMetadata, TraceHeader,
    ValueChange, describe_entry
)
from .errors import UnresolvedSignalError
from .hierarchy_resolver import HierarchyResolver
from .profile_proto import Profile
from .synthesizer import ProfileSynthesizer
from .waveform_db import WaveformDB
from .writer import PathLike, default_output_path, write_profile

logger = logging.getLogger(__name__)


class TraceSource(Protocol):
    """What build_profile needs from an opened trace. WaveformDB implements it."""

    @property
    def header(self) -> TraceHeader:
        ...

    def iter_hierarchy(self) -> Iterator[HierarchyEntry]:
        ...

    def iter_changes(self, handles: Collection[SignalHandle]) -> Iterator[ValueChange]:
        ...


def build_profile(
    source: TraceSource,
    requested: Iterable[str],
    strict: bool = False,
) -> Tuple[Profile, List[SignalMetadata], List[str], int]:
    """Resolve ``requested`` in ``source`` and build the finished Profile.

    Args:
        source: An opened trace
        requested: Signal names to extract
        strict: Treat requested names missing from the hierarchy as an error

    Returns:
        Tuple of (profile, resolved signals, unresolved names, sample count)

    Raises:
        UnresolvedSignalError: In strict mode, if any name did not resolve
        DecodeError: If either pass over the trace fails
    """
    resolver = HierarchyResolver(requested)
    for entry in source.iter_hierarchy():
        resolver.visit(entry)
    signals = resolver.finish()
    unresolved = resolver.unresolved_names()
    logger.info(
        "Resolved %d signal(s) from %d hierarchy entries",
        len(signals), resolver.entries_visited,
    )

    if unresolved:
        if strict:
            raise UnresolvedSignalError(unresolved)
        logger.warning("Signals not found in hierarchy: %s", ", ".join(unresolved))

    synthesizer = ProfileSynthesizer(source.header)
    sample_count = ValueChangeCollector(signals).collect(source, synthesizer)
    return synthesizer.finalize(), signals, unresolved, sample_count


def run_extraction(
    waveform_path: str,
    requested: Iterable[str],
    output_path: Optional[PathLike] = None,
    strict: bool = False,
    multi_threaded: bool = READER.MULTI_THREADED,
) -> ExtractionResult:
    """Extract ``requested`` signals from a trace and write the profile.

    Nothing is written unless both passes over the trace succeed.

    Args:
        waveform_path: Path to the .fst (or .vcd) trace
        requested: Signal names to extract
        output_path: Destination, defaults to ``<trace-stem>.pprof.gz``
        strict: Fail if a requested name is not in the hierarchy
        multi_threaded: Let the reader use multiple threads

    Returns:
        Summary of the run
    """
    start = time.time()
    requested = list(requested)
    destination = output_path if output_path is not None else default_output_path(waveform_path)

    with WaveformDB(multi_threaded=multi_threaded) as db:
        db.open(waveform_path)
        profile, signals, unresolved, sample_count = build_profile(db, requested, strict=strict)

    written = write_profile(profile, destination)
    logger.info("Extraction finished in %.2f seconds", time.time() - start)
    return ExtractionResult(
        output_path=str(written),
        signals=signals,
        unresolved=unresolved,
        sample_count=sample_count,
    )


def list_hierarchy(waveform_path: str) -> Iterator[str]:
    """Yield one line per hierarchy entry of the trace."""
    with WaveformDB() as db:
        db.open(waveform_path)
        for entry in db.iter_hierarchy():
            yield describe_entry(entry)
