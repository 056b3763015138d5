import pytest
import yaml

from mystery_dungeon.config import (
    CavernSettings,
    GenerationSettings,
    RepairSettings,
    dump_generation_settings,
    load_generation_settings,
)
from mystery_dungeon.errors import ConfigError, MysteryDungeonError


def test_bundled_defaults_match_dataclass_defaults():
    settings = load_generation_settings()
    assert settings == GenerationSettings()
    assert settings.cavern == CavernSettings(6, 70, 100, 50)
    assert (settings.width, settings.height) == (500, 250)
    assert settings.seed is None
    assert settings.vision_radius == 10


def test_partial_file_keeps_other_defaults(tmp_path):
    path = tmp_path / "gen.yaml"
    path.write_text("seed: 17\nwidth: 80\ncavern:\n  cavern_count: 3\n", encoding="utf-8")
    settings = load_generation_settings(str(path))
    assert settings.seed == 17
    assert settings.width == 80
    assert settings.height == 250
    assert settings.cavern.cavern_count == 3
    assert settings.cavern.walk_len == 50
    assert settings.repair == RepairSettings()


@pytest.mark.parametrize(
    "text",
    [
        "width: [1, 2\n",
        "- just\n- a list\n",
        "cavern:\n  caverns: 3\n",
        "cavern: 4\n",
        "width: wide\n",
    ],
)
def test_malformed_files_raise_config_error(tmp_path, text):
    path = tmp_path / "bad.yaml"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_generation_settings(str(path))


def test_config_error_is_package_error():
    assert issubclass(ConfigError, MysteryDungeonError)


def test_dump_is_loadable(tmp_path):
    settings = GenerationSettings(seed=3, width=64).with_cavern(walk_len=12)
    path = tmp_path / "out.yaml"
    path.write_text(dump_generation_settings(settings), encoding="utf-8")
    assert yaml.safe_load(path.read_text(encoding="utf-8"))["cavern"]["walk_len"] == 12
    assert load_generation_settings(str(path)) == settings


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("MD_WIDTH", "80")
    monkeypatch.setenv("MD_SEED", "9")
    monkeypatch.setenv("MD_CAVERN_COUNT", "2")
    monkeypatch.setenv("MD_HEIGHT", "tall")
    settings = GenerationSettings.from_env()
    assert settings.width == 80
    assert settings.seed == 9
    assert settings.cavern.cavern_count == 2
    assert settings.height == 250


def test_clamped_to_viewer_range():
    clamped = CavernSettings(cavern_count=0, max_cavern_dist=900, walk_count=5, walk_len=501).clamped()
    assert clamped == CavernSettings(1, 500, 5, 500)
