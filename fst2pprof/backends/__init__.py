"""Backend implementations for waveform reading.

This package provides adapters for waveform reader libraries that expose a
trace as a hierarchy pass and a filtered value-change replay, using the
types in fst2pprof.data_model.
"""

from .base import WaveformBackend, BackendFactory, BackendType

# Import backend implementations to trigger their registration
from . import pywellen_backend

__all__ = [
    'WaveformBackend',
    'BackendFactory',
    'BackendType',
]
