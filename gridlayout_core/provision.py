from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Tuple

from .item import Item
from .state import GridState
from .ordering import UNORDERED


def _to_positive_int(value: Any, fallback: int) -> int:
    try:
        n = int(math.floor(float(value)))
    except (TypeError, ValueError, OverflowError):
        return fallback
    return n if n else fallback


def _row_item(row: int, colstart: int, colspan: int, order: int) -> Dict[str, int]:
    return {'rowstart': row, 'rowspan': 1, 'colstart': colstart, 'colspan': colspan, 'order': order}


def provision_row(
    columns: Any,
    min_colspan: Any = 2,
    default_colspan: Any = 3,
    row: int = 1,
) -> List[Dict[str, int]]:
    """Splits a fresh row into items that fill it exactly.

    Each span is at least min_colspan and as close to default_colspan as the
    column count allows; leftover columns are spread symmetrically from the
    centre. Columns may be given as a numeric string.
    """
    total = max(1, _to_positive_int(columns, 1))
    min_span = max(1, _to_positive_int(min_colspan, 1))
    ideal = max(min_span, _to_positive_int(default_colspan, min_span))

    if total <= min_span:
        return [_row_item(row, 1, total, 0)]

    n_max = max(1, total // min_span)
    target_n = max(1, int(math.floor(total / ideal + 0.5)))
    best: Optional[Tuple[int, int, int, float]] = None  # (n, base, rem, score)

    for n in range(1, n_max + 1):
        base = total // n
        if base < min_span:
            continue
        rem = total - base * n
        avg = base + (rem / n)
        closeness = abs(avg - ideal)
        even_penalty = 0 if rem == 0 else 0.05
        n_penalty = abs(n - target_n) / target_n * 0.1
        density_penalty = (n - 8) * 0.02 if n > 8 else 0
        score = closeness + even_penalty + n_penalty + density_penalty
        if best is None or score < best[3] or (
            score == best[3] and (rem < best[2] or (rem == best[2] and abs(n - target_n) < abs(best[0] - target_n)))
        ):
            best = (n, base, rem, score)

    if best is None:
        return [_row_item(row, 1, total, 0)]

    n, base, rem, _ = best
    sizes = [base] * n
    r = rem
    if n == 1:
        sizes[0] = total
    elif n % 2 == 1:
        c = n // 2
        if r > 0:
            sizes[c] += 1
            r -= 1
        k = 1
        while r >= 2 and c - k >= 0 and c + k < n:
            sizes[c - k] += 1
            sizes[c + k] += 1
            r -= 2
            k += 1
        if r == 1:
            left, right = 0, n - 1
            add_left = abs(sizes[left] + 1 - ideal) <= abs(sizes[right] + 1 - ideal)
            sizes[left if add_left else right] += 1
    else:
        rc = n // 2
        lc = rc - 1
        k = 0
        while r >= 2 and lc - k >= 0 and rc + k < n:
            sizes[lc - k] += 1
            sizes[rc + k] += 1
            r -= 2
            k += 1
        if r == 1:
            reach = math.ceil((n - 2) / 2)
            left = max(0, lc - reach)
            right = min(n - 1, rc + reach)
            add_left = abs(sizes[left] + 1 - ideal) <= abs(sizes[right] + 1 - ideal)
            sizes[left if add_left else right] += 1

    items: List[Dict[str, int]] = []
    colstart = 1
    for i, span in enumerate(sizes):
        items.append(_row_item(row, colstart, span, i))
        colstart += span
    return items


def can_fit_x(item: Optional[Item], side: str, state: GridState) -> Dict[str, Any]:
    """Answers whether a new item can be inserted right before (west) or after (east) `item`.

    Counts contiguous free columns next to the item, aligned across all rows
    it spans. Fits when at least options.min_span columns are free; the new
    item gets min(options.default_span, available) columns.
    """
    if item is None:
        return {'result': False, 'colstart': 0, 'colspan': 0}
    min_span = state.options.min_span or 1
    default_span = state.options.default_span or 1
    rows = [r for r in item.row_range() if 1 <= r <= state.rows]
    step = -1 if side == 'west' else 1
    cursor = item.colstart - 1 if side == 'west' else item.colend + 1

    available = 0
    while 1 <= cursor <= state.columns:
        if any(state.positions.is_occupied(r, cursor) for r in rows):
            break
        available += 1
        cursor += step

    if available < min_span:
        return {'result': False, 'colstart': 0, 'colspan': 0}
    chosen = min(default_span, available)
    start = item.colend + 1 if side == 'east' else item.colstart - chosen
    return {'result': True, 'colstart': start, 'colspan': chosen}


def compute_synthetic_slots(state: Optional[GridState]) -> List[Dict[str, Any]]:
    """Placeholder items covering every free run of every row.

    Runs are cut into slots of up to options.default_span columns; a slot is
    flagged `toosmall` when what remained of its run was narrower than
    options.min_span. Slot order is consistent with the real items' order.
    """
    if state is None:
        return []
    max_rows = max(1, state.rows)
    max_columns = max(1, state.columns)
    min_span = max(1, state.options.min_span)
    default_span = max(1, state.options.default_span)

    drafts: List[Dict[str, Any]] = []
    for r in range(1, max_rows + 1):
        c = 1
        while c <= max_columns:
            if state.positions.is_occupied(r, c):
                c += 1
                continue
            start = c
            while c <= max_columns and not state.positions.is_occupied(r, c):
                c += 1
            end = c - 1
            cur = start
            while cur <= end:
                remaining = end - cur + 1
                span = min(default_span, remaining)
                drafts.append({
                    '_id': f'syn-r{r}-c{cur}-w{span}',
                    'synthetic': True,
                    'toosmall': remaining < min_span,
                    'colstart': cur,
                    'colspan': span,
                    'rowstart': r,
                    'rowspan': 1,
                    'order': UNORDERED,
                    'align': 'stretch',
                    'justify': 'stretch',
                })
                cur += span

    if not drafts:
        return []

    merged = [(it.rowstart, it.colstart, it.order, it.id, False) for it in state.items]
    merged.extend((d['rowstart'], d['colstart'], UNORDERED, d['_id'], True) for d in drafts)
    merged.sort(key=lambda e: (e[0], e[1], e[2]))
    order_by_id = {e[3]: index for index, e in enumerate(merged) if e[4]}
    for d in drafts:
        d['order'] = order_by_id.get(d['_id'], UNORDERED)
    return drafts
