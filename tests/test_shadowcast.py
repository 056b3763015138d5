import pytest

from mystery_dungeon.fov.shadowcast import VisibilityEngine
from mystery_dungeon.map.grid import DungeonGrid
from mystery_dungeon.map.tiles import ViewStatus


def _open(w, h):
    return DungeonGrid.from_lines(["." * w] * h)


def _disc(grid, origin, radius):
    ox, oy = origin
    return {
        (x, y)
        for y in range(grid.height)
        for x in range(grid.width)
        if (x - ox) ** 2 + (y - oy) ** 2 < radius * radius
    }


def test_open_room_lights_the_disc():
    grid = _open(21, 21)
    lit = VisibilityEngine(6).recompute(grid, (10, 10))

    assert lit == _disc(grid, (10, 10), 6)
    assert set(grid.cells_with_status(ViewStatus.SEEN)) == lit
    assert (10, 10) in lit


def test_observer_in_corner_lights_row_and_column_zero():
    grid = _open(5, 5)
    lit = VisibilityEngine(3).recompute(grid, (0, 0))

    assert lit == _disc(grid, (0, 0), 3)
    assert {(1, 0), (2, 0), (0, 1), (0, 2)} <= lit


def test_wall_casts_a_shadow():
    lines = ["." * 15 for _ in range(11)]
    lines[5] = "......." + "#" + "......."
    grid = DungeonGrid.from_lines(lines)
    VisibilityEngine(8).recompute(grid, (5, 5))

    assert grid.get(7, 5).view_status is ViewStatus.SEEN
    assert grid.get(6, 5).view_status is ViewStatus.SEEN
    assert grid.get(8, 5).view_status is ViewStatus.UNEXPLORED
    assert grid.get(9, 5).view_status is ViewStatus.UNEXPLORED


def test_enclosed_observer_sees_only_its_walls():
    grid = DungeonGrid.from_lines(
        [
            "#####",
            "#...#",
            "#.#.#",
            "#...#",
            "#####",
        ]
    )
    walled = DungeonGrid.from_lines(["###", "#.#", "###"])
    lit = VisibilityEngine(10).recompute(walled, (1, 1))
    assert lit == {(x, y) for x in range(3) for y in range(3)}

    # nothing beyond the outer ring can be lit
    lit = VisibilityEngine(10).recompute(grid, (1, 1))
    assert all(grid.is_within(x, y) for x, y in lit)


def test_seen_fades_to_revealed_never_unexplored():
    grid = _open(30, 5)
    engine = VisibilityEngine(4)
    engine.recompute(grid, (2, 2))
    assert grid.get(4, 2).view_status is ViewStatus.SEEN

    engine.recompute(grid, (25, 2))
    assert grid.get(4, 2).view_status is ViewStatus.REVEALED
    assert grid.get(27, 2).view_status is ViewStatus.SEEN
    assert grid.get(15, 2).view_status is ViewStatus.UNEXPLORED

    engine.recompute(grid, (25, 2))
    assert grid.get(4, 2).view_status is ViewStatus.REVEALED


def test_radius_zero_lights_only_observer():
    grid = _open(5, 5)
    assert VisibilityEngine(0).recompute(grid, (2, 2)) == {(2, 2)}


def test_negative_radius_rejected():
    with pytest.raises(ValueError):
        VisibilityEngine(-1)


def test_observer_off_grid_lights_nothing():
    grid = _open(5, 5)
    engine = VisibilityEngine(3)
    engine.recompute(grid, (2, 2))
    assert engine.recompute(grid, (9, 9)) == set()
    assert grid.cells_with_status(ViewStatus.SEEN) == []
    assert grid.get(2, 2).view_status is ViewStatus.REVEALED
