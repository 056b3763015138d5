import logging
import random
from collections import deque

import pytest

from mystery_dungeon.config.settings import CavernSettings, GenerationSettings, RepairSettings
from mystery_dungeon.dungeon.factory import DungeonFactory
from mystery_dungeon.dungeon.generator import CavernGenerator
from mystery_dungeon.dungeon.pathfinding import has_path
from mystery_dungeon.errors import GenerationFailed
from mystery_dungeon.map.grid import DungeonGrid
from mystery_dungeon.map.position import chebyshev_distance
from mystery_dungeon.map.tiles import ViewStatus

SMALL = CavernSettings(cavern_count=4, max_cavern_dist=12, walk_count=20, walk_len=15)


def _flood(grid, start):
    seen = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for nxt in grid.neighbors(x, y, diagonals=True):
            if nxt not in seen and grid.is_passable(*nxt):
                seen.add(nxt)
                queue.append(nxt)
    return seen


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_every_enemy_spawn_reachable_from_player(seed):
    gen = CavernGenerator(60, 40, rng=random.Random(seed))
    grid, player_spawns, enemy_spawns = gen.generate(SMALL)

    player = player_spawns[0]
    assert player == grid.center
    assert grid.is_passable(*player)
    assert len(set(enemy_spawns)) == len(enemy_spawns)
    for spawn in enemy_spawns:
        assert spawn != player
        assert grid.is_passable(*spawn)
        assert has_path(grid, player, spawn)


def test_single_cavern_is_one_region_around_center():
    settings = CavernSettings(cavern_count=1, max_cavern_dist=70, walk_count=30, walk_len=20)
    dungeon = CavernGenerator(50, 30, rng=random.Random(7)).generate(settings)

    assert dungeon.player_spawns == [(25, 15)]
    region = _flood(dungeon.grid, dungeon.player_spawn)
    assert region == set(dungeon.grid.passable_cells())
    assert set(dungeon.enemy_spawns) <= region
    assert len(dungeon.enemy_spawns) <= 4


def test_fresh_grid_is_unexplored():
    dungeon = CavernGenerator(40, 30, rng=random.Random(3)).generate(SMALL)
    assert dungeon.grid.cells_with_status(ViewStatus.SEEN) == []


def test_same_seed_same_layout():
    a = CavernGenerator(60, 40, rng=random.Random(42)).generate(SMALL)
    b = CavernGenerator(60, 40, rng=random.Random(42)).generate(SMALL)
    assert a.grid.to_lines() == b.grid.to_lines()
    assert a.player_spawns == b.player_spawns
    assert a.enemy_spawns == b.enemy_spawns


def test_cavern_centers_are_spaced():
    gen = CavernGenerator(100, 100, rng=random.Random(11))
    settings = CavernSettings(cavern_count=5, max_cavern_dist=20, walk_count=1, walk_len=1)
    centers = gen._place_caverns(DungeonGrid(100, 100), settings)

    assert centers[0] == (50, 50)
    assert len(centers) == 5
    for i, a in enumerate(centers):
        for b in centers[i + 1:]:
            assert chebyshev_distance(a, b) >= 20


def test_placement_gives_up_with_warning(caplog):
    repair = RepairSettings(placement_attempts=50)
    gen = CavernGenerator(10, 10, rng=random.Random(5), repair=repair)
    settings = CavernSettings(cavern_count=5, max_cavern_dist=50, walk_count=5, walk_len=5)
    with caplog.at_level(logging.WARNING):
        dungeon = gen.generate(settings)
    assert "placed 1/5 caverns" in caplog.text
    for spawn in dungeon.enemy_spawns:
        assert has_path(dungeon.grid, dungeon.player_spawn, spawn)


def test_dig_tunnel_connects_two_points():
    grid = DungeonGrid(30, 30)
    grid.carve(2, 2)
    grid.carve(25, 20)
    gen = CavernGenerator(30, 30, rng=random.Random(8))
    tunnel = gen.dig_tunnel(grid, (2, 2), (25, 20))
    assert tunnel
    assert all(grid.is_passable(*p) for p in tunnel)
    assert has_path(grid, (2, 2), (25, 20))


def test_unrepairable_layout_raises():
    repair = RepairSettings(max_tunnel_steps=1, max_repair_rounds=1)
    gen = CavernGenerator(60, 60, rng=random.Random(2), repair=repair)
    settings = CavernSettings(cavern_count=2, max_cavern_dist=20, walk_count=1, walk_len=1)
    with pytest.raises(GenerationFailed) as info:
        gen.generate(settings)
    assert info.value.cavern is not None


def test_generate_into_existing_grid_resets_it():
    grid = DungeonGrid(40, 30)
    for x in range(40):
        grid.carve(x, 0)
        grid.get_mut(x, 0).light()
    gen = CavernGenerator(40, 30, rng=random.Random(9))
    dungeon = gen.generate(CavernSettings(1, 10, 1, 1), grid=grid)

    assert dungeon.grid is grid
    assert grid.cells_with_status(ViewStatus.SEEN) == []
    # one walk of one step: the center plus at most one neighbor
    assert len(grid.passable_cells()) <= 2

    with pytest.raises(ValueError):
        gen.generate(SMALL, grid=DungeonGrid(10, 10))


def test_reset_clears_everything():
    dungeon = CavernGenerator(30, 20, rng=random.Random(1)).generate(SMALL)
    CavernGenerator.reset(dungeon.grid)
    assert dungeon.grid.passable_cells() == []


def test_factory_falls_back_to_cavern(caplog):
    settings = GenerationSettings(algorithm="bsp", width=40, height=30, seed=4, cavern=SMALL)
    with caplog.at_level(logging.WARNING):
        dungeon = DungeonFactory.generate(settings)
    assert "falling back" in caplog.text
    assert dungeon.player_spawn == (20, 15)

    again = DungeonFactory.generate(settings)
    assert again.grid.to_lines() == dungeon.grid.to_lines()
