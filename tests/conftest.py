import sys
from pathlib import Path

import pytest

# Import mystery_dungeon straight from src/ when the package is not installed
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))


@pytest.fixture(autouse=True)
def _clean_md_env(monkeypatch):
    for name in (
        "MD_ALGO",
        "MD_WIDTH",
        "MD_HEIGHT",
        "MD_SEED",
        "MD_CAVERN_COUNT",
        "MD_MAX_CAVERN_DIST",
        "MD_WALK_COUNT",
        "MD_WALK_LEN",
        "MD_VISION_RADIUS",
        "MD_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
