from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .item import Item, MoveRequest, Patch
from .precomp import MoveIndex
from .state import GridState

logger = logging.getLogger(__name__)

EAST = 'east'
WEST = 'west'


def get_move_changes(
    data: MoveRequest,
    state: GridState,
    item: Item,
    precomp: Optional[MoveIndex] = None,
) -> List[Patch]:
    """Computes the patches that move `item` to the position requested in `data`.

    The moving item's patch comes first, followed by any nudged neighbors.
    Only fields whose value changes are included. An empty list means the
    move is a no-op or was rejected; nothing should be applied.
    """
    decided = _decide_move(data, state, item, precomp)
    if decided is None:
        return []
    new_col, new_row, nudges = decided
    moving: Patch = {'_id': item.id}
    if new_col != item.colstart:
        moving['colstart'] = new_col
    if new_row != item.rowstart:
        moving['rowstart'] = new_row
    return [moving] + nudges


def preview_move_changes(
    data: MoveRequest,
    state: GridState,
    item: Item,
    precomp: Optional[MoveIndex] = None,
) -> Optional[Dict[str, object]]:
    """Cheap variant of get_move_changes for ghost snapping.

    Returns the moving item's prospective position or None if the move would
    be rejected. Shares the decision logic with get_move_changes.
    """
    decided = _decide_move(data, state, item, precomp)
    if decided is None:
        return None
    new_col, new_row, _ = decided
    return {'_id': item.id, 'colstart': new_col, 'rowstart': new_row}


def _decide_move(
    data: MoveRequest,
    state: GridState,
    item: Item,
    precomp: Optional[MoveIndex],
) -> Optional[Tuple[int, int, List[Patch]]]:
    """Returns (colstart, rowstart, neighbor patches) for an accepted move, else None."""
    if data.id and data.id != item.id and data.id in state.lookup:
        logger.debug('move rejected: request for %s evaluated against item %s', data.id, item.id)
        return None
    new_col = item.colstart if data.colstart is None else int(data.colstart)
    new_row = item.rowstart if data.rowstart is None else int(data.rowstart)
    if new_col == item.colstart and new_row == item.rowstart:
        return None
    if (data.colspan is not None and data.colspan != item.colspan) or \
            (data.rowspan is not None and data.rowspan != item.rowspan):
        logger.debug('move rejected: span change requested for %s', item.id)
        return None

    width = item.colspan
    height = max(1, item.rowspan)
    new_end_col = new_col + width - 1
    new_end_row = new_row + height - 1
    if new_col < 1 or new_end_col > state.columns or new_row < 1 or new_end_row > state.rows:
        logger.debug('move rejected: %s at (%d, %d) leaves the grid', item.id, new_col, new_row)
        return None

    if precomp is not None and not precomp.matches(state, item):
        logger.warning('ignoring move index built for %s; it does not match the current state', precomp.item_id)
        precomp = None

    if _is_free(state, item, new_col, new_row, precomp):
        return new_col, new_row, []

    if new_col > item.colstart:
        primary = EAST
    elif new_col < item.colstart:
        primary = WEST
    else:
        # Vertical-only moves never cascade.
        logger.debug('move rejected: destination band of %s is occupied', item.id)
        return None

    target = _find_primary_target(state, item, new_col, new_row, primary, precomp)
    for direction in _nudge_order(primary, target, new_col, new_end_col):
        nudges = _attempt_horizontal_nudge(state, item, new_col, new_row, direction, precomp)
        if nudges is None:
            continue
        moving = {'_id': item.id, 'colstart': new_col, 'rowstart': new_row}
        if not _placement_is_valid(state, [moving] + nudges):
            logger.debug('nudge %s for %s leaves overlaps in other rows', direction, item.id)
            continue
        logger.debug('move %s -> (%d, %d) accepted, nudging %s %s',
                     item.id, new_col, new_row, [p['_id'] for p in nudges], direction)
        return new_col, new_row, nudges

    logger.debug('move rejected: no nudge strategy for %s at (%d, %d)', item.id, new_col, new_row)
    return None


def _nudge_order(primary: str, target: Optional[Item], ghost_start: int, ghost_end: int) -> List[str]:
    """Direction attempt order. Reaching or passing the target's far edge tries the opposite side first."""
    if target is None:
        return [primary]
    if primary == EAST:
        if ghost_end < target.colend:
            return [EAST]
        return [WEST, EAST]
    if ghost_start > target.colstart:
        return [WEST]
    return [EAST, WEST]


def _is_free(state: GridState, item: Item, col: int, row: int, precomp: Optional[MoveIndex]) -> bool:
    end_col = col + item.colspan - 1
    for r in range(row, row + max(1, item.rowspan)):
        if precomp is not None:
            first = precomp.next_occ_east[r][col]
            if first and first <= end_col:
                return False
            continue
        row_index = state.positions.row(r)
        if row_index is None:
            continue
        for c in range(col, end_col + 1):
            occ = row_index.get(c)
            if occ is not None and occ != item.id:
                return False
    return True


def _find_primary_target(
    state: GridState,
    item: Item,
    col: int,
    row: int,
    direction: str,
    precomp: Optional[MoveIndex],
) -> Optional[Item]:
    """First overlapped neighbor in scan order: the one hit by the leading edge."""
    end_col = col + item.colspan - 1
    best_col: Optional[int] = None
    best_id: Optional[str] = None
    for r in range(row, row + max(1, item.rowspan)):
        hit: Optional[Tuple[int, str]] = None
        if precomp is not None:
            occ = precomp.occ_by_row[r]
            if direction == WEST:
                c = precomp.next_occ_west[r][end_col]
                if c and c >= col:
                    hit = (c, occ[c])  # type: ignore[assignment]
            else:
                c = precomp.next_occ_east[r][col]
                if c and c <= end_col:
                    hit = (c, occ[c])  # type: ignore[assignment]
        else:
            row_index = state.positions.row(r)
            if row_index is None:
                continue
            scan = range(end_col, col - 1, -1) if direction == WEST else range(col, end_col + 1)
            for c in scan:
                occ_id = row_index.get(c)
                if occ_id is not None and occ_id != item.id:
                    hit = (c, occ_id)
                    break
        if hit is None or hit[1] not in state.lookup:
            continue
        c, occ_id = hit
        if best_col is None or (c > best_col if direction == WEST else c < best_col):
            best_col, best_id = c, occ_id
    return state.lookup.get(best_id) if best_id is not None else None


def _neighbor_candidates(state: GridState, item: Item, row: int, precomp: Optional[MoveIndex]) -> List[Item]:
    seen: Dict[str, None] = {}
    for r in range(row, row + max(1, item.rowspan)):
        if precomp is not None:
            for seg in precomp.segments_by_row.get(r, ()):
                seen.setdefault(seg.id, None)
            continue
        for item_id in state.positions.ids_in_row(r):
            if item_id != item.id:
                seen.setdefault(item_id, None)
    return [state.lookup[i] for i in seen if i in state.lookup]


def _attempt_horizontal_nudge(
    state: GridState,
    item: Item,
    col: int,
    row: int,
    direction: str,
    precomp: Optional[MoveIndex],
) -> Optional[List[Patch]]:
    """Pushes neighbors in `direction` just enough to clear the destination, cascading.

    Returns colstart patches for the nudged neighbors, or None when the
    cascade would leave the grid or nothing needs to move.
    """
    end_col = col + item.colspan - 1
    max_columns = state.columns
    candidates = _neighbor_candidates(state, item, row, precomp)
    if not candidates:
        return None

    if direction == EAST:
        candidates.sort(key=lambda n: (n.colstart, n.order, n.id))
    else:
        candidates.sort(key=lambda n: (-n.colend, n.order, n.id))

    shift_by_id: Dict[str, int] = {}
    if direction == EAST:
        needed_start = end_col + 1
        for n in candidates:
            if n.colstart < needed_start and n.colend >= col:
                new_start = needed_start
                new_end = new_start + n.colspan - 1
                if new_end > max_columns:
                    return None
                shift_by_id[n.id] = max(shift_by_id.get(n.id, 0), new_start - n.colstart)
                needed_start = new_end + 1
            else:
                needed_start = max(needed_start, n.colend + 1)
    else:
        needed_end = col - 1
        for n in candidates:
            if n.colend > needed_end and n.colstart <= end_col:
                new_end = needed_end
                new_start = new_end - n.colspan + 1
                if new_start < 1:
                    return None
                shift_by_id[n.id] = max(shift_by_id.get(n.id, 0), n.colstart - new_start)
                needed_end = new_start - 1
            else:
                needed_end = min(needed_end, n.colstart - 1)

    if not shift_by_id:
        return None

    patches: List[Patch] = []
    for item_id, shift in shift_by_id.items():
        n = state.lookup[item_id]
        if not shift:
            continue
        if direction == EAST:
            new_start = min(max_columns - n.colspan + 1, n.colstart + shift)
        else:
            new_start = max(1, n.colstart - shift)
        if new_start == n.colstart:
            return None
        patches.append({'_id': item_id, 'colstart': new_start})
    return patches


def _placement_is_valid(state: GridState, pos_patches: List[Patch]) -> bool:
    """Checks that every patched item is in bounds and overlaps nothing once all patches apply."""
    patched: Dict[str, Item] = {}
    for p in pos_patches:
        base = state.lookup.get(p['_id'])
        if base is None:
            return False
        patched[p['_id']] = base.with_patch(p)

    occupied: Dict[Tuple[int, int], str] = {}
    for it in state.items:
        if it.id in patched:
            continue
        for r in it.row_range():
            for c in it.col_range():
                occupied[(r, c)] = it.id

    for it in patched.values():
        if it.colstart < 1 or it.colend > state.columns or it.rowstart < 1 or it.rowend > state.rows:
            return False
        for r in it.row_range():
            for c in it.col_range():
                if (r, c) in occupied:
                    return False
                occupied[(r, c)] = it.id
    return True
