"""Assemble a pprof Profile from resolved signals and their value changes."""

import logging
import math
from typing import Dict, List, Optional, Tuple

from .config import PROFILE, ProfileConfig
from .data_model import SignalHandle, SignalMetadata, TraceHeader, ValueChange
from .errors import StringTableFrozenError
from .profile_proto import Profile
from .string_table import StringTable

logger = logging.getLogger(__name__)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ProfileSynthesizer:
    """Builds one Profile incrementally.

    The envelope is filled in at construction from the trace header. Each
    value change becomes one Sample whose stack is the signal's scope path
    (leaf first: signal, innermost scope, ..., top scope), so flamegraph
    views group activity by design hierarchy. finalize() attaches the string
    table and freezes it; no sample can be added afterwards.
    """

    def __init__(
        self,
        header: TraceHeader,
        string_table: Optional[StringTable] = None,
        config: ProfileConfig = PROFILE,
    ) -> None:
        self._table = string_table if string_table is not None else StringTable()
        self._config = config
        self._profile = Profile()
        self._finalized = False

        # Location and function ids both start at 1; 0 means "none" in pprof
        self._location_ids: Dict[str, int] = {}
        self._stacks: Dict[SignalHandle, List[int]] = {}

        self._signal_key = self._table.id(config.SIGNAL_LABEL)
        self._module_key = self._table.id(config.MODULE_LABEL)
        self._value_key = self._table.id(config.VALUE_LABEL)
        self._time_key = self._table.id(config.TIME_LABEL)
        time_unit = header.timescale.unit.value if header.timescale else config.DEFAULT_TIME_UNIT
        self._time_unit = self._table.id(time_unit)

        self._fill_envelope(header)

    def _fill_envelope(self, header: TraceHeader) -> None:
        profile = self._profile
        profile.time_nanos = 0
        profile.duration_nanos = header.duration
        profile.period = self._config.PERIOD
        profile.period_type.type = self._table.id(self._config.PERIOD_TYPE)
        profile.period_type.unit = self._table.id(self._config.PERIOD_UNIT)
        profile.sample_type.add(
            type=self._table.id(self._config.SAMPLE_TYPE),
            unit=self._table.id(self._config.SAMPLE_UNIT),
        )

    @property
    def string_table(self) -> StringTable:
        return self._table

    @property
    def sample_count(self) -> int:
        return len(self._profile.sample)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def _location(self, frame_name: str, full_name: str) -> int:
        location_id = self._location_ids.get(full_name)
        if location_id is not None:
            return location_id

        location_id = len(self._location_ids) + 1
        self._location_ids[full_name] = location_id
        self._profile.function.add(
            id=location_id,
            name=self._table.id(frame_name),
            system_name=self._table.id(full_name),
        )
        location = self._profile.location.add(id=location_id)
        location.line.add(function_id=location_id)
        return location_id

    def _stack(self, meta: SignalMetadata) -> List[int]:
        stack = self._stacks.get(meta.handle)
        if stack is not None:
            return stack

        frames: List[Tuple[str, str]] = []
        for depth, scope in enumerate(meta.path, start=1):
            frames.append((scope, ".".join(meta.path[:depth])))
        frames.append((meta.name, meta.full_name))

        stack = [self._location(name, full_name) for name, full_name in reversed(frames)]
        self._stacks[meta.handle] = stack
        return stack

    @staticmethod
    def sample_value(change: ValueChange) -> int:
        """Numeric sample value: the rounded real for real signals, else 1.

        Reals are clamped to the int64 range of pprof sample values; NaN
        and infinities count as 0.
        """
        if isinstance(change.value, float):
            if not math.isfinite(change.value):
                return 0
            return max(INT64_MIN, min(INT64_MAX, int(round(change.value))))
        return 1

    def add_sample(self, meta: SignalMetadata, change: ValueChange) -> None:
        """Append one Sample for ``change`` of the signal described by ``meta``.

        Raises:
            StringTableFrozenError: If the profile was already finalized
        """
        if self._finalized:
            raise StringTableFrozenError("Cannot add samples to a finalized profile")

        sample = self._profile.sample.add()
        sample.location_id.extend(self._stack(meta))
        sample.value.append(self.sample_value(change))
        sample.label.add(key=self._signal_key, str=self._table.id(meta.name))
        sample.label.add(key=self._module_key, str=self._table.id(meta.module_path))
        sample.label.add(key=self._value_key, str=self._table.id(str(change.value)))
        sample.label.add(key=self._time_key, num=change.time, num_unit=self._time_unit)

    def finalize(self) -> Profile:
        """Attach the string table, freeze it and return the finished Profile."""
        if not self._finalized:
            self._profile.string_table.extend(self._table.to_table())
            self._table.freeze()
            self._finalized = True
            logger.debug(
                "Profile finalized: %d samples, %d locations, %d strings",
                self.sample_count, len(self._location_ids), len(self._table),
            )
        return self._profile
