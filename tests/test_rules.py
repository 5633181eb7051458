import random

import pytest

from tetris_ai.game.grid import GameGrid
from tetris_ai.game.pieces import BlockColor, Position, create_piece
from tetris_ai.game.rules import DOWN, GameRules, LevelRules
from tetris_ai.game.state import GameConfig


@pytest.fixture
def rules():
    return GameRules(GameConfig(random_seed=42))


def test_can_place_bounds(rules):
    board = GameGrid()
    i = create_piece(BlockColor.I)
    assert rules.can_place(board, i, Position(0, 6))
    assert not rules.can_place(board, i, Position(0, 7))
    assert not rules.can_place(board, i, Position(0, -1))
    assert not rules.can_place(board, i, Position(20, 0))
    assert rules.can_place(board, i, Position(19, 0))


def test_can_place_allows_rows_above_board(rules):
    board = GameGrid()
    vertical = create_piece(BlockColor.I).rotated(1)
    # blocks at rows -2..1
    assert rules.can_place(board, vertical, Position(0, 4))
    assert not rules.can_place(board, vertical, Position(0, 9))


def test_can_place_rejects_occupied_cell(rules):
    board = GameGrid()
    board.grid[5, 3] = BlockColor.T
    i = create_piece(BlockColor.I)
    assert not rules.can_place(board, i, Position(5, 0))
    assert rules.can_place(board, i, Position(4, 0))


def test_can_move_requires_piece(rules):
    state = rules.new_state()
    assert not rules.can_move(state, DOWN)
    state.current_piece = create_piece(BlockColor.O)
    state.anchor = Position(18, 0)
    assert not rules.can_move(state, DOWN)
    assert rules.can_move(state, Position(0, 1))


def test_spawn_locks_and_promotes(rules):
    state = rules.new_state()
    state.current_piece = create_piece(BlockColor.O)
    state.next_piece = create_piece(BlockColor.T)
    state.anchor = Position(18, 0)
    assert rules.spawn(state)
    assert state.board.grid[18, 0] == BlockColor.O
    assert state.board.grid[19, 1] == BlockColor.O
    assert state.current_piece.kind == BlockColor.T
    assert state.next_piece is not None
    assert state.anchor == Position(0, 4)


def test_spawn_uses_per_shape_row(rules):
    state = rules.new_state()
    state.current_piece = create_piece(BlockColor.O)
    state.next_piece = create_piece(BlockColor.I)
    state.anchor = Position(18, 0)
    assert rules.spawn(state)
    assert state.anchor == Position(2, 4)


def test_spawn_game_over_when_piece_never_moved(rules):
    state = rules.new_state()
    state.board.grid[0, 4] = BlockColor.Z
    state.current_piece = create_piece(BlockColor.O)
    upcoming = create_piece(BlockColor.T)
    state.next_piece = upcoming
    state.anchor = Position(0, 4)
    assert not rules.spawn(state)
    # checked before the next piece is promoted
    assert state.next_piece is upcoming
    assert state.current_piece.kind == BlockColor.O


def test_spawn_fails_when_promoted_piece_is_blocked(rules):
    state = rules.new_state()
    state.board.grid[0:2, 3:6] = BlockColor.J
    state.current_piece = create_piece(BlockColor.O)
    state.next_piece = create_piece(BlockColor.T)
    state.anchor = Position(10, 0)
    assert not rules.spawn(state)


def test_spawn_ignores_cells_above_the_board(rules):
    state = rules.new_state()
    state.current_piece = create_piece(BlockColor.I).rotated(1)
    state.next_piece = create_piece(BlockColor.O)
    state.anchor = Position(1, 0)
    assert rules.spawn(state)
    # rows -1..2 in column 1; row -1 is dropped
    assert (state.board.grid[0:3, 1] == BlockColor.I).all()
    assert int((state.board.grid != 0).sum()) == 3


def test_random_piece_never_gray():
    rules = GameRules(rng=random.Random(0))
    kinds = {rules.random_piece().kind for _ in range(500)}
    assert BlockColor.GRAY not in kinds
    assert len(kinds) == 7


def test_detect_full_lines_descending(rules):
    board = GameGrid()
    board.grid[5, :] = BlockColor.I
    board.grid[12, :] = BlockColor.S
    assert rules.detect_full_lines(board) == [12, 5]
    board.grid[12, 3] = 0
    assert rules.detect_full_lines(board) == [5]


def test_remove_lines_shifts_rows_in_any_order(rules):
    state = rules.new_state()
    state.board.grid[5, :] = BlockColor.I
    state.board.grid[12, :] = BlockColor.I
    state.board.grid[4, 0] = BlockColor.T
    state.board.grid[8, 0] = BlockColor.Z
    rules.remove_lines([5, 12], state)
    assert state.board.grid[6, 0] == BlockColor.T
    assert state.board.grid[9, 0] == BlockColor.Z
    assert int((state.board.grid != 0).sum()) == 2
    assert state.board.grid.shape == (20, 10)
    assert state.lines_cleared == 2
    assert state.score == 200


@pytest.mark.parametrize(
    "lines,level,expected",
    [(1, 1, 100), (2, 1, 200), (3, 2, 600), (4, 1, 800), (4, 3, 1600)],
)
def test_scoring(rules, lines, level, expected):
    state = rules.new_state()
    state.level = level
    state.board.grid[20 - lines:, :] = BlockColor.L
    rules.remove_lines(rules.detect_full_lines(state.board), state)
    assert state.score == expected
    assert state.lines_cleared == lines


def test_remove_lines_empty_is_noop(rules):
    state = rules.new_state()
    state.board.grid[19, 0] = BlockColor.O
    snapshot = state.board.clone_state()
    assert rules.remove_lines([], state) == 0
    assert state.score == 0 and state.lines_cleared == 0
    assert (state.board.grid == snapshot).all()


def test_clear_bottom_row_scenario(rules):
    state = rules.new_state()
    state.board.grid[19, :] = BlockColor.J
    assert rules.detect_full_lines(state.board) == [19]
    rules.remove_lines([19], state)
    assert state.score == 100
    assert state.lines_cleared == 1
    assert not state.board.grid[0].any()
    assert not state.board.grid.any()


def test_level_progression(rules):
    state = rules.new_state()
    state.lines_cleared = 9
    assert not rules.check_level_progression(state)
    assert state.level == 1 and state.lines_to_next_level == 10

    state.lines_cleared = 10
    assert rules.check_level_progression(state)
    assert state.level == 2
    assert state.lines_to_next_level == 20
    assert state.game_speed == pytest.approx(0.95)


def test_speed_is_floored():
    levels = LevelRules()
    assert levels.speed_for_level(1) == pytest.approx(1.0)
    assert levels.speed_for_level(17) == pytest.approx(0.2)
    assert levels.speed_for_level(40) == pytest.approx(0.2)


def test_deal_sets_spawn_anchor(rules):
    state = rules.new_state()
    rules.deal(state)
    assert state.current_piece is not None and state.next_piece is not None
    assert state.anchor == rules.spawn_anchor(state.current_piece)
