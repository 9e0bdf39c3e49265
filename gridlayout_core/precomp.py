from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from .item import Item
from .positions import PositionIndex
from .state import GridState


@dataclass(frozen=True)
class Segment:
    """A contiguous run of cells in one row owned by a single item."""
    id: str
    start: int
    end: int


@dataclass(frozen=True)
class MoveIndex:
    """Precomputed occupancy for repeated move evaluations of one item against one state.

    occ_by_row[r][c] is the id occupying (r, c) or None, with the moving item
    removed; index 0 is unused. next_occ_east[r][c] is the first occupied
    column >= c (0 if none), next_occ_west[r][c] the last occupied column <= c.
    """
    item_id: str
    columns: int
    rows: int
    occ_by_row: Dict[int, List[Optional[str]]]
    row_index_by_row: PositionIndex
    next_occ_east: Dict[int, List[int]]
    next_occ_west: Dict[int, List[int]]
    segments_by_row: Dict[int, List[Segment]]

    def matches(self, state: GridState, item: Item) -> bool:
        return (
            self.item_id == item.id
            and self.columns == state.columns
            and self.rows == state.rows
            and self.row_index_by_row is state.positions
        )


def prepare_move_index(state: GridState, item: Item) -> MoveIndex:
    max_columns = state.columns
    max_rows = state.rows
    positions = state.positions

    occ_by_row: Dict[int, List[Optional[str]]] = {}
    for r in range(1, max_rows + 1):
        row_index = positions.row(r) or {}
        arr: List[Optional[str]] = [None] * (max_columns + 1)
        for c in range(1, max_columns + 1):
            item_id = row_index.get(c)
            arr[c] = None if item_id == item.id else item_id
        occ_by_row[r] = arr

    next_occ_east: Dict[int, List[int]] = {}
    next_occ_west: Dict[int, List[int]] = {}
    for r, arr in occ_by_row.items():
        east = [0] * (max_columns + 2)
        west = [0] * (max_columns + 2)
        nxt = 0
        for c in range(max_columns, 0, -1):
            if arr[c] is not None:
                nxt = c
            east[c] = nxt
        prev = 0
        for c in range(1, max_columns + 1):
            if arr[c] is not None:
                prev = c
            west[c] = prev
        next_occ_east[r] = east
        next_occ_west[r] = west

    segments_by_row: Dict[int, List[Segment]] = {}
    for r, arr in occ_by_row.items():
        segs: List[Segment] = []
        c = 1
        while c <= max_columns:
            item_id = arr[c]
            if item_id is None:
                c += 1
                continue
            start = end = c
            while end + 1 <= max_columns and arr[end + 1] == item_id:
                end += 1
            segs.append(Segment(item_id, start, end))
            c = end + 1
        segments_by_row[r] = segs

    return MoveIndex(
        item_id=item.id,
        columns=max_columns,
        rows=max_rows,
        occ_by_row=occ_by_row,
        row_index_by_row=positions,
        next_occ_east=next_occ_east,
        next_occ_west=next_occ_west,
        segments_by_row=segments_by_row,
    )
