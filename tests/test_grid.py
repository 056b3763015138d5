import pytest

from mystery_dungeon.map.grid import DungeonGrid, Size
from mystery_dungeon.map.position import Direction, Position, PositionDelta
from mystery_dungeon.map.tiles import SpriteIndex, ViewStatus


def test_access_is_absent_exactly_outside_bounds():
    grid = DungeonGrid(4, 3)
    for x in range(-2, 7):
        for y in range(-2, 6):
            inside = 0 <= x < 4 and 0 <= y < 3
            assert (grid.get(x, y) is not None) == inside
            assert (grid.get_mut(x, y) is not None) == inside


def test_huge_coordinates_never_raise():
    grid = DungeonGrid(4, 3)
    assert grid.get(10**18, 10**18) is None
    assert grid.get(-(10**18), 0) is None
    assert not grid.is_passable(-1, -1)
    assert grid.sprite_at(99, 99) == SpriteIndex.OUT_OF_BOUNDS


def test_new_grid_is_solid_unexplored_wall():
    grid = DungeonGrid(3, 2)
    for _, tile in grid:
        assert tile.passable is False
        assert tile.view_status is ViewStatus.UNEXPLORED
        assert tile.sprite_index == SpriteIndex.WALL
    assert grid.center == (1, 1)


def test_invalid_dimensions():
    with pytest.raises(ValueError):
        DungeonGrid(0, 5)
    with pytest.raises(ValueError):
        DungeonGrid(5, -1)


def test_carve_then_reset():
    grid = DungeonGrid(3, 3)
    assert grid.carve(1, 1)
    assert not grid.carve(3, 0)
    assert grid.is_passable(1, 1)
    assert grid.sprite_at(1, 1) == SpriteIndex.FLOOR
    grid.get_mut(1, 1).light()

    grid.reset()
    tile = grid.get(1, 1)
    assert not tile.passable
    assert tile.view_status is ViewStatus.UNEXPLORED
    assert grid.passable_cells() == []


def test_degrade_visibility_only_touches_seen():
    grid = DungeonGrid(3, 1)
    grid.get_mut(0, 0).light()
    grid.get_mut(1, 0).view_status = ViewStatus.REVEALED
    grid.degrade_visibility()
    assert grid.get(0, 0).view_status is ViewStatus.REVEALED
    assert grid.get(1, 0).view_status is ViewStatus.REVEALED
    assert grid.get(2, 0).view_status is ViewStatus.UNEXPLORED


def test_from_lines_rows_are_y():
    lines = ["#..#", "...."]
    grid = DungeonGrid.from_lines(lines)
    assert (grid.width, grid.height) == (4, 2)
    assert grid.size == Size(4, 2)
    assert not grid.is_passable(0, 0)
    assert grid.is_passable(1, 0)
    assert grid.is_passable(0, 1)
    assert grid.to_lines() == lines


def test_from_lines_rejects_ragged_rows():
    with pytest.raises(ValueError):
        DungeonGrid.from_lines(["...", ".."])
    with pytest.raises(ValueError):
        DungeonGrid.from_lines([])


def test_fogged_picture():
    grid = DungeonGrid.from_lines(["...", "..."])
    grid.get_mut(0, 0).light()
    grid.get_mut(1, 0).view_status = ViewStatus.REVEALED
    assert grid.to_lines(fog=True) == [".," + " ", " " * 3]


def test_neighbors_edge_safety():
    grid = DungeonGrid(2, 2)
    assert set(grid.neighbors(0, 0)) == {(1, 0), (0, 1)}
    assert set(grid.neighbors(0, 0, diagonals=True)) == {(1, 0), (0, 1), (1, 1)}


def test_position_saturates_at_edges():
    assert Position(0, 0) + PositionDelta(-1, -1) == Position(0, 0)
    assert Position(4, 2).offset(PositionDelta(1, 1), 5, 3) == Position(4, 2)
    assert Position(2, 2).offset(Direction.NORTH.delta, 5, 5) == Position(2, 1)


def test_direction_keys():
    assert Direction.from_key("d") is Direction.EAST
    assert Direction.from_key(" W ") is Direction.NORTH
    assert Direction.from_key("south") is Direction.SOUTH
    assert Direction.from_key("x") is None
