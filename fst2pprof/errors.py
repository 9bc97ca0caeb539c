"""Exception hierarchy for fst2pprof.

Every failure that should abort a run derives from Fst2PprofError, so the
command-line entry point can report it and exit non-zero without a traceback.
"""


class Fst2PprofError(Exception):
    """Base class for all fst2pprof errors."""


class ConfigError(Fst2PprofError):
    """The signal configuration is missing, malformed or has the wrong shape."""


class WaveformOpenError(Fst2PprofError):
    """The waveform file could not be opened (missing, unreadable, unsupported)."""


class DecodeError(Fst2PprofError):
    """The reader failed while decoding the header, hierarchy or value changes."""


class HierarchyError(DecodeError):
    """The hierarchy stream is malformed (unbalanced scopes, unknown entry kind)."""


class StringTableFrozenError(Fst2PprofError):
    """A string was interned after the profile was finalized."""


class UnresolvedSignalError(Fst2PprofError):
    """Requested signals were not found in the hierarchy (strict mode only)."""

    def __init__(self, names):
        self.names = list(names)
        super().__init__(f"Signals not found in hierarchy: {', '.join(self.names)}")


class OutputError(Fst2PprofError):
    """Encoding or writing the output profile failed."""
