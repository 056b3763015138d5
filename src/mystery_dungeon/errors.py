from __future__ import annotations


class MysteryDungeonError(Exception):
    """Base exception for the mystery dungeon simulation core."""


class GenerationFailed(MysteryDungeonError):
    """Raised when connectivity repair cannot join a cavern within its bounds."""

    def __init__(self, message: str, cavern: tuple[int, int] | None = None) -> None:
        super().__init__(message)
        self.cavern = cavern


class ConfigError(MysteryDungeonError):
    """Raised when a settings file cannot be parsed into generation settings."""
