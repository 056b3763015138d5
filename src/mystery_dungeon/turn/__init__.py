from .agents import Agent, AgentFlags, AgentRegistry, AgentRole
from .engine import EnemyPhaseResult, TurnEngine, TurnEvent, TurnState

__all__ = [
    "Agent",
    "AgentFlags",
    "AgentRegistry",
    "AgentRole",
    "EnemyPhaseResult",
    "TurnEngine",
    "TurnEvent",
    "TurnState",
]
