from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from .config import default_columns, default_options
from .item import Item, MoveRequest
from .moves import get_move_changes
from .ordering import get_reorder_patch
from .provision import provision_row
from .state import GridOptions, GridState, apply_patches, build_state, state_from_json


def _load_state(args: argparse.Namespace) -> GridState:
    defaults = default_options()
    options = GridOptions(
        min_span=args.min_span or defaults.min_span,
        default_span=args.default_span or defaults.default_span,
    )
    if args.layout:
        with open(args.layout, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return state_from_json(data, defaults=options, default_columns=args.columns)
    # No layout file: provision one fresh row per requested row.
    items: List[Item] = []
    for r in range(1, args.rows + 1):
        for cell in provision_row(args.columns, options.min_span, options.default_span, row=r):
            items.append(Item(
                id=f'{chr(97 + len(items) % 26)}{len(items) // 26 or ""}',
                colstart=cell['colstart'],
                rowstart=cell['rowstart'],
                colspan=cell['colspan'],
                rowspan=cell['rowspan'],
                order=len(items),
            ))
    return build_state(items, args.columns, args.rows, options)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Grid layout move evaluator')
    parser.add_argument('--layout', default=None, help='JSON layout file (columns, rows, items)')
    parser.add_argument('--columns', type=int, default=default_columns(), help='Grid columns when no layout is given')
    parser.add_argument('--rows', type=int, default=1, help='Grid rows when no layout is given')
    parser.add_argument('--min-span', type=int, default=None, help='Minimum item span')
    parser.add_argument('--default-span', type=int, default=None, help='Preferred item span')
    parser.add_argument('--move', nargs=3, metavar=('ID', 'COLSTART', 'ROWSTART'), help='Evaluate moving an item')
    parser.add_argument('--reorder', action='store_true', help='Also print order patches after the move')
    parser.add_argument('--json', action='store_true', help='Print patches as JSON only')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log move decisions')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    state = _load_state(args)
    if not args.json:
        print(f'Grid {state.columns}x{state.rows}:')
        print(state.pretty())

    if not args.move:
        return

    item_id, col_s, row_s = args.move
    item = state.get(item_id)
    if item is None:
        parser.error(f'unknown item id: {item_id}')
    patches = get_move_changes(MoveRequest(item_id, int(col_s), int(row_s)), state, item)
    next_state = apply_patches(state, patches)
    order_patches = get_reorder_patch(next_state) if args.reorder and patches else []

    if args.json:
        print(json.dumps({'patches': patches, 'order': order_patches}))
        return
    if not patches:
        print(f'\nMove of {item_id} to ({col_s}, {row_s}) rejected: nothing to apply.')
        return
    print('\nPatches:')
    for p in patches:
        print(' ', p)
    if order_patches:
        print('Order:', [(p['_id'], p['order']) for p in order_patches])
    print('\nResult:')
    print(next_state.pretty(highlight=item_id))
