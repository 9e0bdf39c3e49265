from __future__ import annotations

# Facade module that re-exports the grid layout core.
# Used by the Flask app, the CLI and the tests.
# Single-responsibility modules live under gridlayout_core/*.

from gridlayout_core.item import (
    Item,
    MoveRequest,
    ResizeRequest,
    Patch,
    item_from_json,
    item_to_json,
    move_request_from_json,
    resize_request_from_json,
)
from gridlayout_core.positions import PositionIndex, create_position_index
from gridlayout_core.state import (
    DEVICES,
    GridOptions,
    GridState,
    build_state,
    items_to_state,
    apply_patches,
    state_to_json,
    state_from_json,
)
from gridlayout_core.precomp import MoveIndex, Segment, prepare_move_index
from gridlayout_core.moves import get_move_changes, preview_move_changes
from gridlayout_core.resize import validate_resize_x, get_resize_changes
from gridlayout_core.ordering import get_reorder_patch
from gridlayout_core.provision import provision_row, can_fit_x, compute_synthetic_slots
from gridlayout_core.snap import compute_ghost_move_snap, should_compute_move_snap

__all__ = [
    'Item', 'MoveRequest', 'ResizeRequest', 'Patch',
    'item_from_json', 'item_to_json', 'move_request_from_json', 'resize_request_from_json',
    'PositionIndex', 'create_position_index',
    'DEVICES', 'GridOptions', 'GridState', 'build_state', 'items_to_state', 'apply_patches',
    'state_to_json', 'state_from_json',
    'MoveIndex', 'Segment', 'prepare_move_index',
    'get_move_changes', 'preview_move_changes',
    'validate_resize_x', 'get_resize_changes',
    'get_reorder_patch',
    'provision_row', 'can_fit_x', 'compute_synthetic_slots',
    'compute_ghost_move_snap', 'should_compute_move_snap',
    'main',
]


def main() -> None:
    # CLI driver delegated to gridlayout_core.cli
    from gridlayout_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
