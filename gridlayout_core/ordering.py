from __future__ import annotations

import sys
from typing import Any, Dict, List, Optional, Tuple

from .item import Item, Patch, item_to_json
from .state import GridState

UNORDERED = sys.maxsize


def _grid_order_key(entry: Dict[str, Any]) -> Tuple[int, int, int]:
    # top-to-bottom, then left-to-right, then previous order
    return entry['rowstart'], entry['colstart'], entry['order']


def get_reorder_patch(
    state: GridState,
    item: Optional[Item] = None,
    deleted: Optional[Item] = None,
) -> List[Patch]:
    """Zero-based `order` patches for every item, following grid reading order.

    `item` is a new item to be inserted; it is ordered virtually and returned
    as its full JSON document with the computed order. `deleted` is left out
    of the ordering.
    """
    entries: List[Dict[str, Any]] = [
        {'_id': it.id, 'rowstart': it.rowstart, 'colstart': it.colstart, 'order': it.order, 'new': False}
        for it in state.items
    ]
    if item is not None:
        entries.append({
            '_id': item.id,
            'rowstart': item.rowstart,
            'colstart': item.colstart,
            'order': UNORDERED,
            'new': True,
        })
    if deleted is not None:
        for i, e in enumerate(entries):
            if e['_id'] == deleted.id and not e['new']:
                del entries[i]
                break

    entries.sort(key=_grid_order_key)

    patches: List[Patch] = []
    for index, e in enumerate(entries):
        if e['new'] and item is not None:
            doc = item_to_json(item)
            doc['order'] = index
            patches.append(doc)
        else:
            patches.append({'_id': e['_id'], 'order': index})
    return patches
