from .shadowcast import DEFAULT_RADIUS, VisibilityEngine, cast_light

__all__ = ["VisibilityEngine", "cast_light", "DEFAULT_RADIUS"]
