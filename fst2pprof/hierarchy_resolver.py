"""Resolve requested signal names to handles in one pass over the hierarchy."""

import logging
from typing import Iterable, List, Set

from .data_model import (
    AttributeBeginEntry, AttributeEndEntry, CommentEntry, EnumTableEntry,
    EnumTableRefEntry, HierarchyEntry, PathNameEntry, ScopeEntry, ScopePath,
    SignalHandle, SignalMetadata, SourceStemEntry, UpScopeEntry, VarEntry
)
from .errors import HierarchyError

logger = logging.getLogger(__name__)

# Entry kinds that carry nothing the resolver needs
_IGNORED_ENTRY_TYPES = (
    AttributeBeginEntry, AttributeEndEntry, PathNameEntry, SourceStemEntry,
    CommentEntry, EnumTableEntry, EnumTableRefEntry,
)


class HierarchyResolver:
    """Visitor that collects SignalMetadata while walking the hierarchy.

    A variable is selected when its declared name is requested, or when a
    requested name containing a dot equals the variable's full dotted path.
    Each handle is recorded once, at its first selected declaration; later
    declarations of the same handle (aliases, or a name requested twice) are
    skipped.
    """

    def __init__(self, requested: Iterable[str]) -> None:
        self._requested: Set[str] = set(requested)
        self._paths_requested: Set[str] = {name for name in self._requested if "." in name}
        self._path = ScopePath()
        self._seen_handles: Set[SignalHandle] = set()
        self._matched: Set[str] = set()
        self._signals: List[SignalMetadata] = []
        self.entries_visited = 0

    @property
    def scope_path(self) -> ScopePath:
        return self._path

    @property
    def signals(self) -> List[SignalMetadata]:
        return list(self._signals)

    def visit(self, entry: HierarchyEntry) -> None:
        self.entries_visited += 1
        if isinstance(entry, ScopeEntry):
            self._path.push(entry.name)
        elif isinstance(entry, UpScopeEntry):
            self._path.pop()
        elif isinstance(entry, VarEntry):
            self._visit_var(entry)
        elif isinstance(entry, _IGNORED_ENTRY_TYPES):
            pass
        else:
            raise HierarchyError(f"Unknown hierarchy entry kind: {type(entry).__name__}")

    def _visit_var(self, entry: VarEntry) -> None:
        matched_name = None
        if entry.name in self._requested:
            matched_name = entry.name
        elif self._paths_requested:
            full_name = ".".join(self._path.snapshot() + (entry.name,))
            if full_name in self._paths_requested:
                matched_name = full_name
        if matched_name is None:
            return

        self._matched.add(matched_name)
        if entry.handle in self._seen_handles:
            return
        self._seen_handles.add(entry.handle)
        meta = SignalMetadata(
            path=self._path.snapshot(),
            name=entry.name,
            handle=entry.handle,
            bitwidth=entry.bitwidth,
            var_type=entry.var_type,
        )
        self._signals.append(meta)
        logger.debug("Resolved %s -> handle %d", meta.full_name, meta.handle)

    def finish(self) -> List[SignalMetadata]:
        """End the traversal and return the resolved signals.

        Raises:
            HierarchyError: If some scope was never closed
        """
        if self._path.depth != 0:
            raise HierarchyError(
                f"Hierarchy ended inside scope '{self._path.joined()}' "
                f"({self._path.depth} scope(s) left open)"
            )
        return self.signals

    def unresolved_names(self) -> List[str]:
        """Requested names that matched no variable, sorted."""
        return sorted(self._requested - self._matched)


def resolve_signals(entries: Iterable[HierarchyEntry], requested: Iterable[str]) -> List[SignalMetadata]:
    """Run a HierarchyResolver over ``entries`` and return the resolved signals."""
    resolver = HierarchyResolver(requested)
    for entry in entries:
        resolver.visit(entry)
    return resolver.finish()
