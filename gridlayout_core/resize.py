from __future__ import annotations

from typing import Dict, List, Optional

from .item import Item, Patch, ResizeRequest
from .positions import PositionIndex
from .state import GridState


def _count_free(row_index, start: int, stop: int) -> int:
    """Number of unoccupied columns in [start, stop] for one row."""
    if row_index is None:
        return max(0, stop - start + 1)
    return sum(1 for c in range(start, stop + 1) if c not in row_index)


def validate_resize_x(
    item: Optional[Item],
    side: str,
    direction: str,
    new_colspan: int,
    positions: PositionIndex,
    max_columns: int,
    min_span: Optional[int] = 1,
) -> Dict[str, object]:
    """Clamps a requested horizontal resize to what the grid allows.

    Shrinking keeps the opposite edge fixed and never goes below min_span.
    Expanding is limited by the free cells in the resize direction, taking
    the minimum across every row the item spans. The item's position is
    assumed to be valid. Called on every pointer move, so it stays cheap.
    """
    if item is None:
        raise ValueError('Item is required for resizing validation')
    applied_min = max(1, min_span or 1)
    delta = new_colspan - item.colspan
    if delta == 0:
        return {'_id': item.id, 'colspan': item.colspan, 'colstart': item.colstart}

    if delta < 0:
        target = max(new_colspan, applied_min)
        applied_delta = target - item.colspan
        start = item.colstart - applied_delta if side == 'west' else item.colstart
        max_start = max(1, max_columns - target + 1)
        return {'_id': item.id, 'colspan': target, 'colstart': min(max(start, 1), max_start)}

    if direction == 'east':
        scan_from, scan_to = item.colend + 1, max_columns
    else:
        scan_from, scan_to = 1, item.colstart - 1

    max_extra = min(_count_free(positions.row(r), scan_from, scan_to) for r in item.row_range())
    max_extra = max(0, max_extra)

    target = max(applied_min, min(new_colspan, item.colspan + max_extra))
    start = item.colstart
    if side == 'west' and direction == 'west':
        start = item.colstart - (target - item.colspan)
    max_start = max(1, max_columns - target + 1)
    return {'_id': item.id, 'colspan': target, 'colstart': min(max(start, 1), max_start)}


def get_resize_changes(data: ResizeRequest, state: GridState, item: Optional[Item]) -> List[Patch]:
    """Patches for the end of a horizontal resize: the item plus any neighbors it pushes.

    `data` should already be validated with validate_resize_x; neighbor
    nudges are clamped at the grid edge rather than rejected.
    """
    if item is None or not data.direction:
        return []

    max_columns = state.columns
    direction = data.direction
    expanded = max(0, data.colspan - item.colspan)
    patches: List[Patch] = [{'_id': item.id, 'colspan': data.colspan, 'colstart': data.colstart}]
    if not expanded:
        return patches

    step = 1 if direction == 'east' else -1
    neighbor_shift: Dict[str, int] = {}
    for r in item.row_range():
        x_index = state.positions.row(r)
        if x_index is None:
            continue
        if direction == 'east':
            col = min(item.colend + 1, max_columns + 1)
        else:
            col = max(item.colstart - 1, 1)

        since_last_empty = 0
        current_shift = expanded
        while 1 <= col <= max_columns and current_shift > 0:
            occ_id = x_index.get(col)
            if occ_id is None:
                since_last_empty += 1
                col += step
                continue
            # Free cells between neighbors absorb part of the expansion.
            current_shift = max(0, current_shift - since_last_empty)
            if not current_shift:
                break
            neighbor = state.lookup.get(occ_id)
            if neighbor is None or occ_id == item.id:
                col += step
                continue
            neighbor_shift[occ_id] = max(neighbor_shift.get(occ_id, 0), current_shift)
            col = neighbor.colend + 1 if direction == 'east' else neighbor.colstart - 1
            since_last_empty = 0

    for occ_id, shift in neighbor_shift.items():
        n = state.lookup[occ_id]
        if direction == 'east':
            new_start = min(max_columns - n.colspan + 1, n.colstart + shift)
        else:
            new_start = max(1, n.colstart - shift)
        patches.append({'_id': occ_id, 'colstart': new_start})
    return patches
