from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .config.settings import GenerationSettings
from .dungeon.factory import DungeonFactory
from .dungeon.generator import Dungeon
from .fov.shadowcast import VisibilityEngine
from .map.grid import DungeonGrid
from .map.position import Coord, Direction
from .rng import RNGManager, Seed
from .turn.agents import AgentFlags, AgentRegistry, AgentRole
from .turn.engine import EnemyPhaseResult, Listener, TurnEngine, TurnState

logger = logging.getLogger(__name__)


@dataclass
class TurnReport:
    """Outcome of one input event fed through the pipeline."""

    accepted: bool
    state: TurnState
    player_position: Coord
    enemies: EnemyPhaseResult = field(default_factory=EnemyPhaseResult)
    lit: int = 0
    awakened: List[int] = field(default_factory=list)


class Session:
    """One play session: the grid, its agents and the per-turn pipeline.

    Generate -> loop { read input -> resolve player -> resolve enemies ->
    recompute visibility -> wake enemies -> yield to renderer }. The caller
    drives the loop by calling ``step`` once per input event and reads
    ``grid`` and ``positions()`` between steps.
    """

    def __init__(self, settings: GenerationSettings, seed: Seed = None, level: int = 1) -> None:
        self.settings = settings
        self.rngm = RNGManager(seed if seed is not None else settings.seed)
        self.level = level
        self.agents = AgentRegistry()
        self.visibility = VisibilityEngine(settings.vision_radius)
        self.grid: DungeonGrid
        self.turns: TurnEngine
        self.dungeon: Dungeon
        self._listeners: List[Listener] = []
        self._build(grid=None)

    @classmethod
    def new(cls, settings: Optional[GenerationSettings] = None, seed: Seed = None) -> "Session":
        return cls(settings or GenerationSettings(), seed=seed)

    def _build(self, grid: Optional[DungeonGrid]) -> None:
        layout_rng = self.rngm.context_rng("cavern_layout", self.level)
        self.dungeon = DungeonFactory.generate(self.settings, rng=layout_rng, grid=grid)
        self.grid = self.dungeon.grid

        self.agents.clear()
        self.agents.spawn(AgentRole.PLAYER, self.dungeon.player_spawn)
        for point in self.dungeon.enemy_spawns:
            self.agents.spawn(AgentRole.ENEMY, point, dormant=True)

        self.turns = TurnEngine(self.grid, self.agents, rng=self.rngm.context_rng("enemy_movement", self.level))
        for listener in self._listeners:
            self.turns.add_listener(listener)
        self._refresh_visibility()
        logger.info(
            "Session level %d ready: player at %s, %d enemies",
            self.level,
            self.dungeon.player_spawn,
            len(self.dungeon.enemy_spawns),
        )

    def _refresh_visibility(self) -> tuple[int, List[int]]:
        lit = self.visibility.recompute(self.grid, self.player_position)
        woken = self.turns.update_dormancy()
        return len(lit), woken

    def add_listener(self, listener: Listener) -> None:
        """Subscribe to turn events; the subscription survives restarts."""
        self._listeners.append(listener)
        self.turns.add_listener(listener)

    # ---- Turn pipeline --------------------------------------------------
    def step(self, direction: Direction) -> TurnReport:
        accepted = self.turns.submit_player_intent(direction)
        if not accepted:
            return TurnReport(False, self.turns.current_state(), self.player_position)

        enemies = self.turns.resolve_enemy_phase()
        lit, woken = self._refresh_visibility()
        return TurnReport(True, self.turns.current_state(), self.player_position, enemies, lit, woken)

    def run(self, intents: List[Direction], on_turn: Optional[Callable[[TurnReport], None]] = None) -> List[TurnReport]:
        reports = []
        for direction in intents:
            report = self.step(direction)
            reports.append(report)
            if on_turn is not None:
                on_turn(report)
        return reports

    def restart(self) -> None:
        """Wipe the current grid and generate the next level into it."""
        self.level += 1
        logger.info("Restarting session at level %d", self.level)
        self._build(grid=self.grid)

    # ---- Read side ------------------------------------------------------
    @property
    def turn_state(self) -> TurnState:
        return self.turns.current_state()

    @property
    def player_position(self) -> Coord:
        player = self.agents.player
        if player is None:
            raise RuntimeError("Session has no player agent")
        return player.position.as_tuple()

    def positions(self) -> Dict[int, Coord]:
        return self.agents.positions()

    def render_lines(self, fog: bool = True) -> List[str]:
        """ASCII frame: the fogged map with '@' for the player and 'e' for visible enemies."""
        rows = [list(line) for line in self.grid.to_lines(fog=fog)]
        for agent in self.agents:
            x, y = agent.position.as_tuple()
            if agent.role is AgentRole.PLAYER:
                rows[y][x] = "@"
            elif not agent.has(AgentFlags.DORMANT):
                rows[y][x] = "e"
        return ["".join(r) for r in rows]


__all__ = ["Session", "TurnReport"]
