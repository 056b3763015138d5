from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntFlag, auto
from typing import Dict, Iterator, List, Optional

from ..map.position import Coord, Position

logger = logging.getLogger(__name__)


class AgentRole(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


class AgentFlags(IntFlag):
    """Transient per-turn state of an agent."""

    NONE = 0
    DORMANT = auto()  # not yet revealed; skipped by the enemy phase
    SELECTED = auto()  # the enemy phase cursor; held by at most one agent
    MOVED = auto()  # already resolved in the current enemy phase


@dataclass
class Agent:
    id: int
    role: AgentRole
    position: Position
    flags: AgentFlags = field(default=AgentFlags.NONE)

    @property
    def is_player(self) -> bool:
        return self.role is AgentRole.PLAYER

    def has(self, flag: AgentFlags) -> bool:
        return bool(self.flags & flag)

    def set(self, flag: AgentFlags) -> None:
        self.flags |= flag

    def clear(self, flag: AgentFlags) -> None:
        self.flags &= ~flag


class AgentRegistry:
    """Agents indexed by a stable integer id, in creation order.

    The registry is the position table read by renderers and the camera:
    ``positions()`` maps id to coordinate.
    """

    def __init__(self) -> None:
        self._agents: Dict[int, Agent] = {}
        self._next_id = 0
        self._player_id: Optional[int] = None

    def spawn(self, role: AgentRole, at: Coord, dormant: bool = False) -> Agent:
        if role is AgentRole.PLAYER and self._player_id is not None:
            raise ValueError("registry already holds a player agent")
        agent = Agent(
            id=self._next_id,
            role=role,
            position=Position.of(at),
            flags=AgentFlags.DORMANT if dormant else AgentFlags.NONE,
        )
        self._agents[agent.id] = agent
        self._next_id += 1
        if role is AgentRole.PLAYER:
            self._player_id = agent.id
        logger.debug("Spawned %s agent #%d at %s", role.value, agent.id, at)
        return agent

    def get(self, agent_id: int) -> Optional[Agent]:
        return self._agents.get(agent_id)

    @property
    def player(self) -> Optional[Agent]:
        if self._player_id is None:
            return None
        return self._agents[self._player_id]

    def enemies(self) -> List[Agent]:
        return [a for a in self._agents.values() if a.role is AgentRole.ENEMY]

    def occupant(self, position: Position, exclude: Optional[int] = None) -> Optional[Agent]:
        """Return the agent standing on ``position``, ignoring ``exclude``."""
        for agent in self._agents.values():
            if agent.id != exclude and agent.position == position:
                return agent
        return None

    def selected(self) -> Optional[Agent]:
        for agent in self._agents.values():
            if agent.has(AgentFlags.SELECTED):
                return agent
        return None

    def positions(self) -> Dict[int, Coord]:
        return {a.id: a.position.as_tuple() for a in self._agents.values()}

    def clear(self) -> None:
        self._agents.clear()
        self._next_id = 0
        self._player_id = None

    def __iter__(self) -> Iterator[Agent]:
        return iter(list(self._agents.values()))

    def __len__(self) -> int:
        return len(self._agents)


__all__ = ["AgentRole", "AgentFlags", "Agent", "AgentRegistry"]
