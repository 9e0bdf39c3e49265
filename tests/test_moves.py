import unittest

from gridlayout import (
    Item,
    MoveRequest,
    apply_patches,
    build_state,
    get_move_changes,
    prepare_move_index,
    preview_move_changes,
)


def build_item(item_id, colstart, colspan, order, rowstart=1, rowspan=1):
    return Item(
        id=item_id,
        colstart=colstart,
        colspan=colspan,
        rowstart=rowstart,
        rowspan=rowspan,
        order=order,
        type='test',
    )


def make_state(items, columns=12, rows=1):
    return build_state(items, columns, rows)


def patch_map(patches):
    return {p['_id']: p for p in patches}


class TestMoveScenarios(unittest.TestCase):
    def test_given_item_at_requested_position_when_moving_then_no_patches(self):
        item = build_item('test-item', 1, 2, 0)
        state = make_state([item], 12, 6)
        data = MoveRequest('test-item', colstart=1, rowstart=1, colspan=2, rowspan=1)
        self.assertEqual(get_move_changes(data, state, item), [])
        # omitted coordinates default to the current ones
        self.assertEqual(get_move_changes(MoveRequest('test-item'), state, item), [])
        self.assertEqual(get_move_changes(MoveRequest('test-item', colstart=1), state, item), [])

    def test_given_free_gap_when_moving_then_single_patch_for_mover(self):
        items = [build_item('a', 1, 3, 0), build_item('b', 6, 2, 1)]
        state = make_state(items)
        patches = get_move_changes(MoveRequest('b', colstart=4, rowstart=1), state, items[1])
        self.assertEqual(patches, [{'_id': 'b', 'colstart': 4}])

    def test_given_wide_neighbor_when_overlapping_then_reject_until_equal_edge_swap(self):
        items = [build_item('a', 1, 5, 0), build_item('b', 9, 4, 1)]
        state = make_state(items)
        for start in (5, 4, 3, 2):
            patches = get_move_changes(MoveRequest('b', colstart=start, rowstart=1), state, items[1])
            self.assertEqual(patches, [], f'move to {start} should be rejected')
        patches = get_move_changes(MoveRequest('b', colstart=1, rowstart=1), state, items[1])
        self.assertEqual(patches, [{'_id': 'b', 'colstart': 1}, {'_id': 'a', 'colstart': 5}])

    def test_given_overlaps_when_moving_b_west_then_rejected_and_free_move_for_a_allowed(self):
        items = [build_item('a', 1, 4, 0), build_item('b', 8, 5, 1)]
        state = make_state(items)
        for start in (4, 3, 2):
            self.assertEqual(get_move_changes(MoveRequest('b', start, 1), state, items[1]), [])
        pm = patch_map(get_move_changes(MoveRequest('a', 2, 1), state, items[0]))
        self.assertEqual(pm['a']['colstart'], 2)
        self.assertNotIn('b', pm)

    def test_given_request_for_other_item_when_moving_then_rejected(self):
        items = [build_item('a', 1, 5, 0), build_item('b', 9, 4, 1)]
        state = make_state(items)
        for start in (5, 6, 7):
            self.assertEqual(get_move_changes(MoveRequest('a', start, 1), state, items[1]), [])

    def test_given_equal_edge_when_moving_east_then_neighbor_nudged_west_first(self):
        items = [build_item('a', 1, 4, 0), build_item('b', 7, 2, 1)]
        state = make_state(items)
        patches = get_move_changes(MoveRequest('a', 5, 1), state, items[0])
        self.assertEqual(patches, [{'_id': 'a', 'colstart': 5}, {'_id': 'b', 'colstart': 3}])

    def test_given_move_past_neighbor_end_when_moving_east_then_neighbor_nudged_west(self):
        items = [build_item('a', 1, 4, 0), build_item('b', 5, 5, 1)]
        state = make_state(items)
        pm = patch_map(get_move_changes(MoveRequest('a', 7, 1), state, items[0]))
        self.assertEqual(pm['a']['colstart'], 7)
        self.assertEqual(pm['b']['colstart'], 2)

    def test_given_partial_overlap_when_moving_east_then_same_direction_cascade(self):
        items = [build_item('a', 1, 4, 0), build_item('b', 5, 5, 1)]
        state = make_state(items)
        for start, expected_b in ((2, 6), (3, 7), (4, 8)):
            pm = patch_map(get_move_changes(MoveRequest('a', start, 1), state, items[0]))
            self.assertEqual(pm['a']['colstart'], start)
            self.assertEqual(pm['b']['colstart'], expected_b)
        # b would be pushed to 9..13
        self.assertEqual(get_move_changes(MoveRequest('a', 5, 1), state, items[0]), [])

    def test_given_cascade_over_two_neighbors_when_moving_east_then_both_nudged(self):
        items = [build_item('a', 1, 3, 0), build_item('b', 4, 3, 1), build_item('c', 7, 3, 2)]
        state = make_state(items)
        patches = get_move_changes(MoveRequest('a', 3, 1), state, items[0])
        self.assertEqual(patches, [
            {'_id': 'a', 'colstart': 3},
            {'_id': 'b', 'colstart': 6},
            {'_id': 'c', 'colstart': 9},
        ])
        # reaching b's far edge swaps it into the vacated cells instead
        self.assertEqual(get_move_changes(MoveRequest('a', 4, 1), state, items[0]),
                         [{'_id': 'a', 'colstart': 4}, {'_id': 'b', 'colstart': 1}])
        # neither direction fits: c would end at 13, b would start at -1
        self.assertEqual(get_move_changes(MoveRequest('a', 5, 1), state, items[0]), [])

    def test_given_neighbor_at_west_edge_when_nudge_needed_then_rejected(self):
        items = [build_item('a', 1, 7, 0), build_item('b', 8, 5, 1)]
        state = make_state(items)
        self.assertEqual(get_move_changes(MoveRequest('b', 7, 1), state, items[1]), [])

    def test_given_out_of_grid_destination_when_moving_then_rejected(self):
        items = [build_item('a', 1, 4, 0)]
        state = make_state(items, 12, 2)
        self.assertEqual(get_move_changes(MoveRequest('a', 10, 1), state, items[0]), [])
        self.assertEqual(get_move_changes(MoveRequest('a', 0, 1), state, items[0]), [])
        self.assertEqual(get_move_changes(MoveRequest('a', 1, 3), state, items[0]), [])

    def test_given_span_change_when_moving_then_rejected(self):
        items = [build_item('a', 1, 4, 0)]
        state = make_state(items)
        self.assertEqual(get_move_changes(MoveRequest('a', 3, 1, colspan=2), state, items[0]), [])
        self.assertEqual(get_move_changes(MoveRequest('a', 3, 1, colspan=4), state, items[0]),
                         [{'_id': 'a', 'colstart': 3}])


class TestVerticalMoves(unittest.TestCase):
    def test_given_free_row_when_moving_vertically_then_rowstart_patch_only(self):
        items = [build_item('a', 1, 3, 0, 1, 1)]
        state = make_state(items, 12, 2)
        patches = get_move_changes(MoveRequest('a', 1, 2), state, items[0])
        self.assertEqual(patches, [{'_id': 'a', 'rowstart': 2}])

    def test_given_occupied_row_when_moving_vertically_then_rejected_without_cascade(self):
        items = [build_item('a', 1, 3, 0, 1), build_item('b', 2, 3, 1, 2)]
        state = make_state(items, 12, 2)
        self.assertEqual(get_move_changes(MoveRequest('a', 1, 2), state, items[0]), [])

    def test_given_diagonal_move_when_neighbor_in_target_row_then_nudged_in_that_row(self):
        items = [build_item('a', 1, 3, 0, 1), build_item('b', 5, 3, 1, 2)]
        state = make_state(items, 12, 2)
        patches = get_move_changes(MoveRequest('a', 3, 2), state, items[0])
        self.assertEqual(patches, [{'_id': 'a', 'colstart': 3, 'rowstart': 2}, {'_id': 'b', 'colstart': 6}])

    def test_given_tall_neighbor_when_nudge_collides_in_other_row_then_rejected(self):
        a = build_item('a', 1, 4, 0, 1)
        tall = build_item('b', 5, 3, 1, 1, 2)
        blocker = build_item('c', 8, 2, 2, 2)
        state = make_state([a, tall, blocker], 12, 2)
        self.assertEqual(get_move_changes(MoveRequest('a', 2, 1), state, a), [])

        clear = build_item('c', 10, 2, 2, 2)
        state = make_state([a, tall, clear], 12, 2)
        self.assertEqual(get_move_changes(MoveRequest('a', 2, 1), state, a),
                         [{'_id': 'a', 'colstart': 2}, {'_id': 'b', 'colstart': 6}])


class TestPrecompAndPreview(unittest.TestCase):
    def test_given_precomputed_index_when_swapping_then_same_patches(self):
        items = [build_item('a', 1, 5, 0), build_item('b', 9, 4, 1)]
        state = make_state(items)
        precomp = prepare_move_index(state, items[1])
        pm = patch_map(get_move_changes(MoveRequest('b', 1, 1), state, items[1], precomp))
        self.assertEqual(pm['b']['colstart'], 1)
        self.assertEqual(pm['a']['colstart'], 5)

    def test_given_stale_precomp_when_moving_other_item_then_ignored(self):
        items = [build_item('a', 1, 4, 0), build_item('b', 5, 5, 1)]
        state = make_state(items)
        wrong = prepare_move_index(state, items[1])
        with self.assertLogs('gridlayout_core.moves', level='WARNING'):
            with_wrong = get_move_changes(MoveRequest('a', 2, 1), state, items[0], wrong)
        self.assertEqual(with_wrong, get_move_changes(MoveRequest('a', 2, 1), state, items[0]))

    def test_given_free_move_when_previewing_then_mirrors_full_patches(self):
        items = [build_item('a', 1, 3, 0), build_item('b', 6, 2, 1)]
        state = make_state(items)
        preview = preview_move_changes(MoveRequest('b', 4, 1), state, items[1])
        self.assertEqual(preview, {'_id': 'b', 'colstart': 4, 'rowstart': 1})
        pm = patch_map(get_move_changes(MoveRequest('b', 4, 1), state, items[1]))
        self.assertEqual(pm['b']['colstart'], preview['colstart'])

    def test_given_nudging_move_when_previewing_then_mirrors_mover_placement(self):
        items = [build_item('a', 1, 4, 0), build_item('b', 5, 5, 1)]
        state = make_state(items)
        preview = preview_move_changes(MoveRequest('a', 2, 1), state, items[0])
        self.assertEqual(preview['colstart'], 2)
        self.assertIsNone(preview_move_changes(MoveRequest('a', 5, 1), state, items[0]))


LAYOUTS = [
    ([build_item('a', 1, 3, 0), build_item('b', 6, 2, 1)], 12, 1),
    ([build_item('a', 1, 5, 0), build_item('b', 9, 4, 1)], 12, 1),
    ([build_item('a', 1, 4, 0), build_item('b', 5, 5, 1)], 12, 1),
    ([build_item('a', 1, 3, 0), build_item('b', 4, 3, 1), build_item('c', 7, 3, 2), build_item('d', 10, 3, 3)], 12, 1),
    ([build_item('a', 1, 4, 0, 1), build_item('b', 5, 3, 1, 1, 2), build_item('c', 8, 2, 2, 2),
      build_item('d', 1, 2, 3, 3), build_item('e', 4, 6, 4, 3)], 10, 3),
]


class TestMoveProperties(unittest.TestCase):
    def _all_moves(self):
        for items, columns, rows in LAYOUTS:
            state = make_state(items, columns, rows)
            for item in items:
                precomp = prepare_move_index(state, item)
                for r in range(1, rows + 1):
                    for c in range(1, columns + 1):
                        yield state, item, MoveRequest(item.id, c, r), precomp

    def test_given_any_move_when_using_precomp_then_result_identical(self):
        for state, item, data, precomp in self._all_moves():
            self.assertEqual(
                get_move_changes(data, state, item, precomp),
                get_move_changes(data, state, item),
                f'{item.id} -> ({data.colstart}, {data.rowstart})',
            )

    def test_given_current_position_when_moving_then_always_empty(self):
        for items, columns, rows in LAYOUTS:
            state = make_state(items, columns, rows)
            for item in items:
                data = MoveRequest(item.id, item.colstart, item.rowstart)
                self.assertEqual(get_move_changes(data, state, item), [])

    def test_given_accepted_move_when_applied_then_in_bounds_and_overlap_free(self):
        for state, item, data, _ in self._all_moves():
            patches = get_move_changes(data, state, item)
            if not patches:
                continue
            self.assertEqual(patches[0]['_id'], item.id)
            for p in patches:
                self.assertTrue(set(p) <= {'_id', 'colstart', 'rowstart'})
            after = apply_patches(state, patches)
            moved = after.get(item.id)
            self.assertEqual((moved.colstart, moved.rowstart), (data.colstart, data.rowstart))
            seen = {}
            for it in after.items:
                self.assertGreaterEqual(it.colstart, 1)
                self.assertLessEqual(it.colend, after.columns)
                self.assertGreaterEqual(it.rowstart, 1)
                self.assertLessEqual(it.rowend, after.rows)
                for r in it.row_range():
                    for c in it.col_range():
                        self.assertNotIn((r, c), seen, f'{it.id} overlaps {seen.get((r, c))}')
                        seen[(r, c)] = it.id

    def test_given_move_when_evaluated_then_state_untouched(self):
        items, columns, rows = LAYOUTS[2]
        state = make_state(items, columns, rows)
        before = (state.items, dict(state.lookup), state.positions)
        get_move_changes(MoveRequest('a', 2, 1), state, items[0])
        self.assertEqual((state.items, dict(state.lookup), state.positions), before)


if __name__ == '__main__':
    unittest.main()
