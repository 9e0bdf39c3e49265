from __future__ import annotations

from typing import Dict, Iterable, Iterator, Mapping, Optional

from .item import Item


class PositionIndex:
    """Per-row occupancy of the grid: row -> {col -> item id}.

    Only rows 1..rows are indexed; cells of items that fall outside are
    dropped. Treat instances as read-only once built.
    """

    __slots__ = ('rows', '_by_row')

    def __init__(self, rows: int, by_row: Dict[int, Dict[int, str]]):
        self.rows = rows
        self._by_row = by_row

    def row(self, r: int) -> Optional[Mapping[int, str]]:
        return self._by_row.get(r)

    def at(self, r: int, c: int) -> Optional[str]:
        row = self._by_row.get(r)
        return row.get(c) if row is not None else None

    def is_occupied(self, r: int, c: int) -> bool:
        return self.at(r, c) is not None

    def ids_in_row(self, r: int) -> Iterator[str]:
        row = self._by_row.get(r)
        if row is None:
            return iter(())
        return iter(row.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PositionIndex):
            return NotImplemented
        return self.rows == other.rows and self._by_row == other._by_row

    def __repr__(self) -> str:
        return f'PositionIndex(rows={self.rows}, cells={sum(len(v) for v in self._by_row.values())})'


def create_position_index(items: Iterable[Item], rows: int) -> PositionIndex:
    """Builds the occupancy index from scratch. Multi-row items appear in every row they span."""
    by_row: Dict[int, Dict[int, str]] = {r: {} for r in range(1, rows + 1)}
    # Later order wins if two items claim a cell.
    for item in sorted(items, key=lambda it: it.order):
        for r in item.row_range():
            x_index = by_row.get(r)
            if x_index is None:
                continue
            for c in item.col_range():
                x_index[c] = item.id
    return PositionIndex(rows, by_row)
