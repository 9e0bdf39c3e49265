from __future__ import annotations

import math
from typing import Any, Dict, Optional, Tuple

from .item import Item, MoveRequest
from .moves import EAST, WEST, preview_move_changes
from .precomp import MoveIndex, Segment, prepare_move_index
from .state import GridState

DEFAULT_THRESHOLD = 0.6


def _clamp(v: float, lo: float, hi: float) -> float:
    return min(hi, max(lo, v))


def _threshold(threshold: Optional[float]) -> float:
    try:
        t = float(DEFAULT_THRESHOLD if threshold is None else threshold)
    except (TypeError, ValueError):
        t = DEFAULT_THRESHOLD
    if not math.isfinite(t):
        t = DEFAULT_THRESHOLD
    return _clamp(t, 0.05, 0.95)


def _coarse_cell(
    left: float, top: float, item: Item, columns: int, rows: int,
    step_x: float, step_y: float, t: float,
) -> Tuple[int, int]:
    """Track-based cell under the ghost, clamped so the item stays inside the grid."""
    max_start_x = max(1, columns - max(1, item.colspan) + 1)
    max_start_y = max(1, rows - max(1, item.rowspan) + 1)
    c = math.floor((left + (1 - t) * step_x) / step_x) + 1
    r = math.floor((top + (1 - t) * step_y) / step_y) + 1
    return max(1, min(c, max_start_x)), max(1, min(r, max_start_y))


def _direction(c: int, item: Item) -> Optional[str]:
    if c > item.colstart:
        return EAST
    if c < item.colstart:
        return WEST
    return None


def _flip_px(direction: Optional[str], n_start: int, n_end: int, step_x: float, t: float) -> float:
    # east flips when the right edge crosses start + t * width,
    # west when the left edge crosses end - t * width
    start_px = (n_start - 1) * step_x
    width_px = (n_end - n_start + 1) * step_x
    if direction == WEST:
        return start_px + width_px - t * width_px
    return start_px + t * width_px


def compute_ghost_move_snap(
    left: float,
    top: float,
    state: Optional[GridState],
    item: Optional[Item],
    columns: int,
    rows: int,
    step_x: float,
    step_y: float,
    threshold: Optional[float] = None,
    precomp: Optional[MoveIndex] = None,
) -> Optional[Dict[str, Any]]:
    """Snaps a drag ghost at pixel offset (left, top) to a legal grid cell.

    step_x/step_y are the column/row track sizes including the gap. When the
    ghost's leading edge crosses the hovered neighbor's threshold the swap
    position is preferred; the final cell is always validated with
    preview_move_changes and falls back to the item's current cell.
    """
    if state is None or item is None:
        return None
    t = _threshold(threshold)
    c, r = _coarse_cell(left, top, item, columns, rows, step_x, step_y, t)
    colstart, rowstart = c, r
    width = max(1, item.colspan)
    max_start_x = max(1, columns - width + 1)

    pre = precomp or prepare_move_index(state, item)
    direction = _direction(c, item)
    lead_px = left + width * step_x if direction == EAST else left
    hover_col = max(1, min(columns, math.floor(lead_px / step_x) + 1))

    hovered: Optional[Segment] = None
    if direction is not None:
        for seg in pre.segments_by_row.get(r, ()):
            if seg.start <= hover_col <= seg.end and seg.id != item.id:
                hovered = seg
                break

    validated = False
    if hovered is not None:
        if direction == WEST:
            swap_start = hovered.start
        else:
            # align the ghost's end with the neighbor's end
            swap_start = max(1, hovered.end - width + 1)
        swap_start = max(1, min(swap_start, max_start_x))
        flip = _flip_px(direction, hovered.start, hovered.end, step_x, t)
        on_swap_side = lead_px <= flip if direction == WEST else lead_px >= flip
        if on_swap_side:
            p = preview_move_changes(MoveRequest(item.id, swap_start, rowstart), state, item, pre)
            if p is not None:
                colstart, rowstart = int(p['colstart']), int(p['rowstart'])  # type: ignore[arg-type]
                validated = True

    if not validated:
        p = preview_move_changes(MoveRequest(item.id, colstart, rowstart), state, item, pre)
        if p is not None:
            colstart, rowstart = int(p['colstart']), int(p['rowstart'])  # type: ignore[arg-type]
        else:
            colstart, rowstart = item.colstart, item.rowstart

    return {
        'colstart': colstart,
        'rowstart': rowstart,
        'snapLeft': math.floor((colstart - 1) * step_x + 0.5),
        'snapTop': math.floor((rowstart - 1) * step_y + 0.5),
    }


def should_compute_move_snap(
    left: float,
    top: float,
    state: GridState,
    item: Item,
    columns: int,
    rows: int,
    step_x: float,
    step_y: float,
    threshold: Optional[float] = None,
    prev_memo: Optional[str] = None,
) -> Dict[str, Any]:
    """Coarse signature of a ghost position; compute_ghost_move_snap only needs to run when it changes.

    The memo is 'row|col|hoveredId|dir|swapSide'. Callers keep the previous memo.
    """
    t = _threshold(threshold)
    c, r = _coarse_cell(left, top, item, columns, rows, step_x, step_y, t)
    direction = _direction(c, item)

    hovered_id = '-'
    on_swap_side = 0
    lead_px = left if direction == WEST else left + max(1, item.colspan) * step_x
    hover_col = max(1, min(columns, math.floor(lead_px / step_x) + 1))
    center_id = state.positions.at(r, hover_col)
    if center_id is not None and center_id != item.id:
        seg_start = seg_end = hover_col
        while seg_start - 1 >= 1 and state.positions.at(r, seg_start - 1) == center_id:
            seg_start -= 1
        while seg_end + 1 <= columns and state.positions.at(r, seg_end + 1) == center_id:
            seg_end += 1
        hovered_id = center_id
        flip = _flip_px(direction, seg_start, seg_end, step_x, t)
        if direction == WEST:
            on_swap_side = 1 if lead_px <= flip else 0
        else:
            on_swap_side = 1 if lead_px >= flip else 0

    memo = f"{r}|{c}|{hovered_id}|{direction or '-'}|{on_swap_side}"
    return {'compute': memo != prev_memo, 'memo': memo}
