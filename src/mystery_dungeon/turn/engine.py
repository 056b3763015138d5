from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

from ..map.grid import DungeonGrid
from ..map.position import Direction, PositionDelta
from ..map.tiles import ViewStatus
from .agents import Agent, AgentFlags, AgentRegistry

logger = logging.getLogger(__name__)

_AXIS_STEPS = (-1, 0, 1)


class TurnState(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


class TurnEvent(Enum):
    """Events emitted by TurnEngine to notify the camera, renderer or log."""

    PLAYER_MOVED = auto()
    ENEMY_MOVED = auto()
    ENEMY_AWAKENED = auto()
    TURN_CHANGED = auto()


@dataclass
class EnemyPhaseResult:
    moved: List[int] = field(default_factory=list)
    stayed: List[int] = field(default_factory=list)
    blocked: List[int] = field(default_factory=list)


Listener = Callable[[TurnEvent, "TurnEngine", Optional[Agent]], None]


class TurnEngine:
    """Two-phase turn state machine: the player moves, then the enemies do.

    The player phase accepts one cardinal intent. An accepted move hands the
    turn to the enemy phase, which resolves awake enemies one at a time in id
    order: each selected enemy tries a random step of -1/0/1 on each axis and
    stays put if the destination is occupied or not passable. When every
    eligible enemy has had its go, the turn returns to the player.

    Rejected moves never change state. All randomness comes from ``rng``.
    """

    def __init__(self, grid: DungeonGrid, agents: AgentRegistry, rng: Optional[random.Random] = None) -> None:
        self.grid = grid
        self.agents = agents
        self.rng = rng if rng is not None else random.Random()
        self._state = TurnState.PLAYER
        self._player_moved = False
        self._listeners: List[Listener] = []

    # ---- State ----------------------------------------------------------
    def current_state(self) -> TurnState:
        return self._state

    def _transition(self, new_state: TurnState) -> None:
        if new_state is self._state:
            return
        logger.debug("Turn %s -> %s", self._state.value, new_state.value)
        self._state = new_state
        self._emit(TurnEvent.TURN_CHANGED)

    def add_listener(self, listener: Listener) -> None:
        """Subscribe to turn events."""
        self._listeners.append(listener)

    def _emit(self, event: TurnEvent, agent: Optional[Agent] = None) -> None:
        for l in list(self._listeners):
            try:
                l(event, self, agent)
            except Exception as ex:  # pragma: no cover - listeners shouldn't crash engine
                logger.exception("Listener errored on %s: %s", event, ex)

    # ---- Player phase ---------------------------------------------------
    def submit_player_intent(self, direction: Direction) -> bool:
        """Try to move the player one step in ``direction``.

        Returns True and hands the turn to the enemies if the move happened.
        """
        if self._state is not TurnState.PLAYER:
            logger.debug("Ignoring player intent %s during %s phase", direction.name, self._state.value)
            return False
        player = self.agents.player
        if player is None:
            logger.warning("No player agent registered; intent %s ignored", direction.name)
            return False

        candidate = player.position.offset(direction.delta, self.grid.width, self.grid.height)
        if candidate == player.position:
            logger.debug("Blocked player move %s: at grid edge %s", direction.name, candidate)
            return False
        occupant = self.agents.occupant(candidate, exclude=player.id)
        if occupant is not None and not occupant.is_player:
            logger.debug("Blocked player move %s: enemy #%d at %s", direction.name, occupant.id, candidate)
            return False
        if not self.grid.is_passable(candidate.x, candidate.y):
            logger.debug("Blocked player move %s: %s not passable", direction.name, candidate)
            return False

        player.position = candidate
        self._player_moved = True
        logger.debug("Player moved %s to %s", direction.name, candidate)
        self._emit(TurnEvent.PLAYER_MOVED, player)
        self._transition(TurnState.ENEMY)
        return True

    def consume_player_moved(self) -> bool:
        """Return and clear the just-moved flag (read once per frame by the camera)."""
        moved = self._player_moved
        self._player_moved = False
        return moved

    # ---- Dormancy -------------------------------------------------------
    def update_dormancy(self) -> List[int]:
        """Wake every dormant enemy whose tile has been observed; return their ids."""
        woken: List[int] = []
        for enemy in self.agents.enemies():
            if not enemy.has(AgentFlags.DORMANT):
                continue
            tile = self.grid.get(enemy.position.x, enemy.position.y)
            if tile is not None and tile.view_status is not ViewStatus.UNEXPLORED:
                enemy.clear(AgentFlags.DORMANT)
                woken.append(enemy.id)
                logger.debug("Enemy #%d at %s awakened", enemy.id, enemy.position)
                self._emit(TurnEvent.ENEMY_AWAKENED, enemy)
        return woken

    # ---- Enemy phase ----------------------------------------------------
    def resolve_enemy_phase(self) -> EnemyPhaseResult:
        """Move every awake enemy once, one at a time, then return the turn to the player."""
        result = EnemyPhaseResult()
        if self._state is not TurnState.ENEMY:
            logger.debug("resolve_enemy_phase() called during %s phase; ignored", self._state.value)
            return result

        while True:
            enemy = self._select_next_enemy()
            if enemy is None:
                break
            before = enemy.position
            if not self._step_enemy(enemy):
                result.blocked.append(enemy.id)
            elif enemy.position != before:
                result.moved.append(enemy.id)
            else:
                result.stayed.append(enemy.id)
            enemy.clear(AgentFlags.SELECTED)
            enemy.set(AgentFlags.MOVED)

        for enemy in self.agents.enemies():
            enemy.clear(AgentFlags.MOVED | AgentFlags.SELECTED)
        logger.debug("Enemy phase done: %d moved, %d blocked", len(result.moved), len(result.blocked))
        self._transition(TurnState.PLAYER)
        return result

    def _select_next_enemy(self) -> Optional[Agent]:
        for enemy in self.agents.enemies():
            if enemy.has(AgentFlags.DORMANT) or enemy.has(AgentFlags.MOVED):
                continue
            enemy.set(AgentFlags.SELECTED)
            return enemy
        return None

    def _step_enemy(self, enemy: Agent) -> bool:
        delta = PositionDelta(self.rng.choice(_AXIS_STEPS), self.rng.choice(_AXIS_STEPS))
        destination = enemy.position.offset(delta, self.grid.width, self.grid.height)
        if self.agents.occupant(destination, exclude=enemy.id) is not None:
            logger.debug("Enemy #%d blocked: %s occupied", enemy.id, destination)
            return False
        if not self.grid.is_passable(destination.x, destination.y):
            logger.debug("Enemy #%d blocked: %s not passable", enemy.id, destination)
            return False
        if destination != enemy.position:
            enemy.position = destination
            logger.debug("Enemy #%d moved to %s", enemy.id, destination)
            self._emit(TurnEvent.ENEMY_MOVED, enemy)
        return True


__all__ = ["TurnState", "TurnEvent", "TurnEngine", "EnemyPhaseResult", "Listener"]
