from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

Patch = Dict[str, Any]  # {'_id': str, 'colstart'?: int, 'rowstart'?: int, ...}


@dataclass(frozen=True)
class Item:
    """A rectangle placed on the layout grid. Columns and rows are 1-based and inclusive."""
    id: str
    colstart: int
    rowstart: int = 1
    colspan: int = 1
    rowspan: int = 1
    order: int = 0
    type: Optional[str] = None
    align: str = 'stretch'
    justify: str = 'stretch'

    @property
    def colend(self) -> int:
        return self.colstart + self.colspan - 1

    @property
    def rowend(self) -> int:
        return self.rowstart + max(1, self.rowspan) - 1

    def row_range(self) -> range:
        return range(self.rowstart, self.rowend + 1)

    def col_range(self) -> range:
        return range(self.colstart, self.colend + 1)

    def with_patch(self, patch: Patch) -> 'Item':
        """Returns a copy with the geometry/order fields of a patch applied."""
        fields = {k: int(patch[k]) for k in ('colstart', 'rowstart', 'colspan', 'rowspan', 'order') if k in patch}
        return replace(self, **fields) if fields else self


@dataclass(frozen=True)
class MoveRequest:
    """Proposed new position for one item. Omitted coordinates keep their current value."""
    id: str
    colstart: Optional[int] = None
    rowstart: Optional[int] = None
    colspan: Optional[int] = None
    rowspan: Optional[int] = None


@dataclass(frozen=True)
class ResizeRequest:
    """Horizontal resize ghost: the new span and start for the resized side."""
    id: str
    side: str
    direction: str
    colspan: int
    colstart: int


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def item_from_json(obj: Dict[str, Any]) -> Item:
    """Builds an Item from its JSON form. Accepts either '_id' or 'id'."""
    item_id = obj.get('_id', obj.get('id'))
    if item_id is None:
        raise KeyError('_id')
    return Item(
        id=str(item_id),
        colstart=int(obj['colstart']),
        rowstart=int(obj.get('rowstart', 1)),
        colspan=int(obj.get('colspan', 1)),
        rowspan=int(obj.get('rowspan', 1)),
        order=int(obj.get('order', 0)),
        type=obj.get('type'),
        align=str(obj.get('align', 'stretch')),
        justify=str(obj.get('justify', 'stretch')),
    )


def item_to_json(item: Item) -> Dict[str, Any]:
    return {
        '_id': item.id,
        'type': item.type,
        'order': int(item.order),
        'rowstart': int(item.rowstart),
        'colstart': int(item.colstart),
        'colspan': int(item.colspan),
        'rowspan': int(item.rowspan),
        'align': item.align,
        'justify': item.justify,
    }


def move_request_from_json(obj: Dict[str, Any]) -> MoveRequest:
    item_id = obj.get('id', obj.get('_id'))
    if item_id is None:
        raise KeyError('id')
    return MoveRequest(
        id=str(item_id),
        colstart=_opt_int(obj.get('colstart')),
        rowstart=_opt_int(obj.get('rowstart')),
        colspan=_opt_int(obj.get('colspan')),
        rowspan=_opt_int(obj.get('rowspan')),
    )


def resize_request_from_json(obj: Dict[str, Any]) -> ResizeRequest:
    item_id = obj.get('id', obj.get('_id'))
    if item_id is None:
        raise KeyError('id')
    return ResizeRequest(
        id=str(item_id),
        side=str(obj.get('side', '')),
        direction=str(obj.get('direction', '')),
        colspan=int(obj['colspan']),
        colstart=int(obj['colstart']),
    )
