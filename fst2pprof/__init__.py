"""fst2pprof - Turn waveform signal activity into pprof profiles."""

__version__ = "0.1.0"

from .data_model import (
    ScopePath, SignalMetadata, ValueChange, TraceHeader, Timescale, TimeUnit,
    ExtractionResult
)
from .errors import (
    Fst2PprofError, ConfigError, WaveformOpenError, DecodeError, HierarchyError,
    StringTableFrozenError, UnresolvedSignalError, OutputError
)
from .string_table import StringTable
from .hierarchy_resolver import HierarchyResolver, resolve_signals
from .synthesizer import ProfileSynthesizer
from .collector import ValueChangeCollector
from .writer import encode_profile, write_profile, default_output_path
from .waveform_db import WaveformDB
from .pipeline import build_profile, run_extraction, list_hierarchy

__all__ = [
    'ScopePath', 'SignalMetadata', 'ValueChange', 'TraceHeader', 'Timescale', 'TimeUnit',
    'ExtractionResult',
    'Fst2PprofError', 'ConfigError', 'WaveformOpenError', 'DecodeError', 'HierarchyError',
    'StringTableFrozenError', 'UnresolvedSignalError', 'OutputError',
    'StringTable', 'HierarchyResolver', 'resolve_signals', 'ProfileSynthesizer',
    'ValueChangeCollector', 'encode_profile', 'write_profile', 'default_output_path',
    'WaveformDB', 'build_profile', 'run_extraction', 'list_hierarchy',
]
