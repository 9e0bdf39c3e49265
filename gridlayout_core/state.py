from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .item import Item, Patch, item_from_json, item_to_json
from .positions import PositionIndex, create_position_index

DEVICES: Tuple[str, ...] = ('desktop', 'tablet', 'mobile')


@dataclass(frozen=True)
class GridOptions:
    """Spans used when inserting or provisioning items."""
    min_span: int = 1
    default_span: int = 1


@dataclass(frozen=True)
class GridState:
    """Immutable snapshot of one device's grid: items plus derived lookup and position index.

    The evaluators never mutate a state; apply patches with apply_patches()
    and use the returned state for the next evaluation.
    """
    columns: int
    rows: int
    items: Tuple[Item, ...]
    lookup: Mapping[str, Item]
    positions: PositionIndex
    options: GridOptions = field(default_factory=GridOptions)
    device_mode: str = 'desktop'

    def get(self, item_id: str) -> Optional[Item]:
        return self.lookup.get(item_id)

    def pretty(self, highlight: Optional[str] = None) -> str:
        """Renders the grid one row per line; each cell shows the first letter of its item id."""
        lines: List[str] = []
        for r in range(1, self.rows + 1):
            row: List[str] = []
            for c in range(1, self.columns + 1):
                item_id = self.positions.at(r, c)
                if item_id is None:
                    row.append('.')
                elif highlight is not None and item_id == highlight:
                    row.append('*')
                else:
                    row.append(item_id[:1] or '?')
            lines.append(' '.join(row))
        return '\n'.join(lines)


def build_state(
    items: Iterable[Item],
    columns: int,
    rows: int,
    options: Optional[GridOptions] = None,
    device_mode: str = 'desktop',
) -> GridState:
    """Builds a GridState, deriving the id lookup and the position index."""
    items_t = tuple(items)
    return GridState(
        columns=int(columns),
        rows=max(1, int(rows)),
        items=items_t,
        lookup={it.id: it for it in items_t},
        positions=create_position_index(items_t, max(1, int(rows))),
        options=options or GridOptions(),
        device_mode=device_mode,
    )


def items_to_state(
    items: Sequence[Dict[str, Any]],
    meta: Optional[Dict[str, Any]] = None,
    options: Optional[Dict[str, Any]] = None,
    device_mode: str = 'desktop',
) -> GridState:
    """Builds the state for one device from raw item documents.

    Each raw item may carry per-device geometry under 'desktop', 'tablet'
    or 'mobile'; those override the base fields for the selected device.
    Rows come from meta[device]['rows'], columns from meta or options.
    """
    meta = meta or {}
    options = options or {}
    device = device_mode if device_mode in DEVICES else 'desktop'
    merged: List[Item] = []
    for raw in items:
        overrides = raw.get(device) or {}
        doc = dict(raw)
        doc.update(overrides)
        doc['_id'] = raw.get('_id', raw.get('id'))
        merged.append(item_from_json(doc))
    columns = int(meta.get('columns') or options.get('columns') or 12)
    rows = int((meta.get(device) or {}).get('rows') or 1)
    grid_options = GridOptions(
        min_span=max(1, int(options.get('minSpan') or 1)),
        default_span=max(1, int(options.get('defaultSpan') or 1)),
    )
    return build_state(merged, columns, rows, grid_options, device)


def apply_patches(state: GridState, patches: Iterable[Patch]) -> GridState:
    """Returns a new state with the patches applied to their items. Unknown ids are ignored."""
    by_id: Dict[str, Patch] = {}
    for p in patches:
        by_id.setdefault(p['_id'], {}).update(p)
    new_items = [it.with_patch(by_id[it.id]) if it.id in by_id else it for it in state.items]
    return build_state(new_items, state.columns, state.rows, state.options, state.device_mode)


def state_to_json(state: GridState) -> Dict[str, Any]:
    return {
        'columns': int(state.columns),
        'rows': int(state.rows),
        'deviceMode': state.device_mode,
        'options': {
            'minSpan': int(state.options.min_span),
            'defaultSpan': int(state.options.default_span),
        },
        'items': [item_to_json(it) for it in state.items],
    }


def state_from_json(obj: Dict[str, Any], defaults: Optional[GridOptions] = None, default_columns: int = 12) -> GridState:
    """Inverse of state_to_json. Missing options fall back to the given defaults."""
    base = defaults or GridOptions()
    opts = obj.get('options') or {}
    options = GridOptions(
        min_span=max(1, int(opts.get('minSpan', base.min_span))),
        default_span=max(1, int(opts.get('defaultSpan', base.default_span))),
    )
    items = [item_from_json(it) for it in obj.get('items', [])]
    columns = int(obj.get('columns', default_columns))
    if columns < 1:
        raise ValueError('columns must be >= 1')
    return build_state(items, columns, int(obj.get('rows', 1)), options, str(obj.get('deviceMode', 'desktop')))
