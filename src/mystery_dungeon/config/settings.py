from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional

from ..map.grid import DEFAULT_HEIGHT, DEFAULT_WIDTH

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CavernSettings:
    """Parameters of the cavern generator.

    - cavern_count: number of cavern centers, the first one at the grid center.
    - max_cavern_dist: minimum Chebyshev spacing between cavern centers.
    - walk_count / walk_len: random walks carved from each center and their length.

    Values are not validated; extreme values degrade the layout but always
    produce a valid grid.
    """

    cavern_count: int = 6
    max_cavern_dist: int = 70
    walk_count: int = 100
    walk_len: int = 50

    def clamped(self, lo: int = 1, hi: int = 500) -> "CavernSettings":
        """Copy with every field clamped to ``[lo, hi]`` (debug viewer bounds)."""
        return CavernSettings(
            cavern_count=_clamp_int(self.cavern_count, lo, hi),
            max_cavern_dist=_clamp_int(self.max_cavern_dist, lo, hi),
            walk_count=_clamp_int(self.walk_count, lo, hi),
            walk_len=_clamp_int(self.walk_len, lo, hi),
        )


@dataclass(frozen=True)
class RepairSettings:
    """Bounds of the tunnel-carving connectivity repair.

    - max_tunnel_steps: steps a single tunnel may take before it is abandoned.
    - max_repair_rounds: tunnels dug for one cavern before generation fails.
    - path_check_interval: steps between reachability tests while tunnelling.
    - initial_rerolls / reroll_decay: the target bias starts at
      ``initial_rerolls`` rerolls per step and loses one every
      ``reroll_decay`` steps, never dropping below one.
    - placement_attempts: samples tried when spacing cavern centers.
    """

    max_tunnel_steps: int = 20_000
    max_repair_rounds: int = 16
    path_check_interval: int = 128
    initial_rerolls: int = 3
    reroll_decay: int = 64
    placement_attempts: int = 10_000


@dataclass(frozen=True)
class GenerationSettings:
    algorithm: str = "cavern"
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    seed: Optional[int] = None
    vision_radius: int = 10
    cavern: CavernSettings = field(default_factory=CavernSettings)
    repair: RepairSettings = field(default_factory=RepairSettings)

    def with_cavern(self, **changes: Any) -> "GenerationSettings":
        return replace(self, cavern=replace(self.cavern, **changes))

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "GenerationSettings":
        """Build settings from a mapping; missing keys fall back to defaults."""
        defaults = cls()
        cavern_raw = raw.get("cavern") or {}
        repair_raw = raw.get("repair") or {}
        if not isinstance(cavern_raw, Mapping) or not isinstance(repair_raw, Mapping):
            raise TypeError("'cavern' and 'repair' sections must be mappings")
        seed = raw.get("seed", defaults.seed)
        return cls(
            algorithm=str(raw.get("algorithm", defaults.algorithm)),
            width=int(raw.get("width", defaults.width)),
            height=int(raw.get("height", defaults.height)),
            seed=None if seed is None else int(seed),
            vision_radius=int(raw.get("vision_radius", defaults.vision_radius)),
            cavern=CavernSettings(**_ints_for(CavernSettings(), cavern_raw)),
            repair=RepairSettings(**_ints_for(RepairSettings(), repair_raw)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "width": self.width,
            "height": self.height,
            "seed": self.seed,
            "vision_radius": self.vision_radius,
            "cavern": asdict(self.cavern),
            "repair": asdict(self.repair),
        }

    @classmethod
    def from_env(cls, base: Optional["GenerationSettings"] = None) -> "GenerationSettings":
        """Override ``base`` (or the defaults) from MD_* environment variables."""
        s = base or cls()
        s = replace(
            s,
            algorithm=os.getenv("MD_ALGO", s.algorithm),
            width=_env_int("MD_WIDTH", s.width),
            height=_env_int("MD_HEIGHT", s.height),
            seed=_env_int("MD_SEED", s.seed),
            vision_radius=_env_int("MD_VISION_RADIUS", s.vision_radius),
        )
        return s.with_cavern(
            cavern_count=_env_int("MD_CAVERN_COUNT", s.cavern.cavern_count),
            max_cavern_dist=_env_int("MD_MAX_CAVERN_DIST", s.cavern.max_cavern_dist),
            walk_count=_env_int("MD_WALK_COUNT", s.cavern.walk_count),
            walk_len=_env_int("MD_WALK_LEN", s.cavern.walk_len),
        )


def _ints_for(template: Any, raw: Mapping[str, Any]) -> Dict[str, int]:
    known = {f.name for f in fields(template)}
    unknown = set(raw) - known
    if unknown:
        raise KeyError(f"Unknown settings keys: {sorted(unknown)}")
    return {k: int(v) for k, v in raw.items()}


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r; using %s", name, value, default)
        return default


def _clamp_int(val: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, int(val)))


__all__ = ["CavernSettings", "RepairSettings", "GenerationSettings"]
