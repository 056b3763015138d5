from __future__ import annotations

import logging
import random
from typing import Optional

from ..config.settings import GenerationSettings
from ..map.grid import DungeonGrid
from .generator import CavernGenerator, Dungeon, DungeonGenerator

logger = logging.getLogger(__name__)


class DungeonFactory:
    """Factory to produce dungeons using the selected algorithm.

    Usage:
      settings = GenerationSettings.from_env()
      dungeon = DungeonFactory.generate(settings)
    """

    @staticmethod
    def build_generator(settings: GenerationSettings, rng: Optional[random.Random] = None) -> DungeonGenerator:
        algo = (settings.algorithm or "cavern").lower()
        if algo not in ("cavern", "caverns", "cave"):
            logger.warning("Unknown algorithm '%s', falling back to CavernGenerator", algo)
        else:
            logger.info("DungeonFactory: using CavernGenerator (algorithm=%s)", algo)
        if rng is None:
            rng = random.Random(settings.seed)
        return CavernGenerator(settings.width, settings.height, rng=rng, repair=settings.repair)

    @staticmethod
    def generate(
        settings: GenerationSettings,
        rng: Optional[random.Random] = None,
        grid: Optional[DungeonGrid] = None,
    ) -> Dungeon:
        gen = DungeonFactory.build_generator(settings, rng)
        return gen.generate(settings.cavern, grid=grid)
