"""Deduplicated string pool in the layout required by pprof's string_table."""

from typing import Dict, List

from .errors import StringTableFrozenError


class StringTable:
    """Append-only string interning table.

    Id 0 is reserved for the empty string, which pprof reads as "absent".
    Every other string gets the next free id on first use and keeps it for the
    lifetime of the table.
    """

    def __init__(self) -> None:
        self._ids: Dict[str, int] = {"": 0}
        self._strings: List[str] = [""]
        self._frozen = False

    def id(self, s: str) -> int:
        """Return the id of ``s``, allocating one on first use."""
        existing = self._ids.get(s)
        if existing is not None:
            return existing
        if self._frozen:
            raise StringTableFrozenError(f"Cannot intern {s!r}: string table is frozen")
        new_id = len(self._strings)
        self._ids[s] = new_id
        self._strings.append(s)
        return new_id

    def to_table(self) -> List[str]:
        """Return the strings ordered by id."""
        return list(self._strings)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, s: object) -> bool:
        return s in self._ids

    def __len__(self) -> int:
        return len(self._strings)
