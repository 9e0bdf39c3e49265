"""
Grid layout core Python package.

Pure-logic helpers for a layout widget's editing grid: rectangular items
placed on a columns x rows grid, moved, resized and provisioned without
ever overlapping. Nothing here does I/O; every function returns patches or
fresh values and leaves its inputs untouched.
Modules:
- item.py: Item, MoveRequest, ResizeRequest, Patch and JSON converters
- positions.py: PositionIndex, create_position_index
- state.py: GridState, build_state, items_to_state, apply_patches
- precomp.py: prepare_move_index (reusable index for one drag gesture)
- moves.py: get_move_changes, preview_move_changes
- resize.py: validate_resize_x, get_resize_changes
- ordering.py: get_reorder_patch
- provision.py: provision_row, can_fit_x, compute_synthetic_slots
- snap.py: compute_ghost_move_snap, should_compute_move_snap
"""
