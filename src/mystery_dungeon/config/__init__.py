from .loader import dump_generation_settings, load_generation_settings
from .settings import CavernSettings, GenerationSettings, RepairSettings

__all__ = [
    "CavernSettings",
    "GenerationSettings",
    "RepairSettings",
    "load_generation_settings",
    "dump_generation_settings",
]
