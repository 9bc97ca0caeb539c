"""Replay the value changes of resolved signals into a ProfileSynthesizer."""

import logging
from typing import Collection, Dict, Iterable, Iterator, List, Protocol

from .data_model import SignalHandle, SignalMetadata, ValueChange
from .synthesizer import ProfileSynthesizer

logger = logging.getLogger(__name__)


class ValueChangeSource(Protocol):
    """Anything that can replay value changes for a set of handles in time order."""

    def iter_changes(self, handles: Collection[SignalHandle]) -> Iterator[ValueChange]:
        ...


class ValueChangeCollector:
    """Turns every value change of the resolved signals into one sample.

    The replay is requested for exactly the resolved handles, so other
    signals are never decoded. Events are forwarded in the order the source
    yields them.
    """

    def __init__(self, signals: Iterable[SignalMetadata]) -> None:
        self._by_handle: Dict[SignalHandle, SignalMetadata] = {}
        for meta in signals:
            self._by_handle.setdefault(meta.handle, meta)

    @property
    def handles(self) -> List[SignalHandle]:
        return sorted(self._by_handle)

    def collect(self, source: ValueChangeSource, synthesizer: ProfileSynthesizer) -> int:
        """Run the replay and feed each event to ``synthesizer``.

        Returns:
            Number of samples added

        Raises:
            DecodeError: Propagated from the source if the replay fails
        """
        if not self._by_handle:
            logger.info("No signals resolved; skipping value-change replay")
            return 0

        count = 0
        for change in source.iter_changes(self.handles):
            meta = self._by_handle.get(change.handle)
            if meta is None:
                continue
            synthesizer.add_sample(meta, change)
            count += 1

        logger.info("Collected %d value changes from %d signal(s)", count, len(self._by_handle))
        return count
