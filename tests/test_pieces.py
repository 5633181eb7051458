import pytest

from tetris_ai.game.pieces import PLAYABLE_COLORS, BlockColor, Position, create_piece, rotate


@pytest.mark.parametrize("kind", list(BlockColor))
def test_four_rotations_restore_block_set(kind):
    piece = create_piece(kind)
    spun = rotate(rotate(rotate(rotate(piece))))
    assert spun.block_set() == piece.block_set()
    assert piece.rotated(4).block_set() == piece.block_set()


def test_rotation_follows_pivot_transform():
    t = create_piece(BlockColor.T)
    assert t.pivot == Position(1, 1)
    assert rotate(t).block_set() == {Position(1, 0), Position(2, 1), Position(1, 1), Position(0, 1)}


def test_i_piece_rotations():
    i = create_piece(BlockColor.I)
    vertical = i.rotated(1)
    assert vertical.block_set() == {Position(1, 1), Position(0, 1), Position(-1, 1), Position(-2, 1)}
    assert vertical.column_span() == (1, 1)
    assert i.rotated(2).column_span() == (-1, 2)


def test_rotation_returns_new_value():
    piece = create_piece(BlockColor.L)
    before = piece.blocks
    rotated = rotate(piece)
    assert piece.blocks == before
    assert rotated is not piece
    assert rotated.kind == piece.kind and rotated.pivot == piece.pivot


def test_cells_at_offsets_blocks():
    o = create_piece(BlockColor.O)
    assert o.cells_at(Position(3, 5)) == [Position(3, 5), Position(3, 6), Position(4, 5), Position(4, 6)]


def test_gray_is_not_playable():
    assert BlockColor.GRAY not in PLAYABLE_COLORS
    assert len(PLAYABLE_COLORS) == 7
    assert len(create_piece(BlockColor.GRAY).blocks) == 1
