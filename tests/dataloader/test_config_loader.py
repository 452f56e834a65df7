# tests/dataloader/test_config_loader.py

from pathlib import Path

import pytest
import yaml

from alchemist.dataloader.config_loader import ConfigLoader
from alchemist.errors import ConfigError
from alchemist.schemas.models import Config

REPO_CONFIG = Path(__file__).resolve().parents[2] / "config" / "config.yaml"


@pytest.fixture()
def tmp_yaml(tmp_path: Path) -> Path:
    """Writes a temporary YAML with valid Config fields."""
    path = tmp_path / "config.yaml"
    cfg = {
        "priority_min": 1,
        "priority_max": 3,
        "capacity": {"check_skill_concurrency": False},
        "log_level": "DEBUG",
    }
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(cfg, f)
    return path


def test_load_valid_yaml_returns_config(tmp_yaml: Path):
    """
    @brief
    Verify that valid YAML is correctly parsed and validated.

    @details
    Omitted keys take their defaults, including the untouched switches of
    a partially given nested section.
    """
    # --- Arrange ---
    loader = ConfigLoader()

    # --- Act ---
    cfg = loader.load(tmp_yaml)

    # --- Assert ---
    assert isinstance(cfg, Config)
    assert cfg.priority_max == 3
    assert cfg.capacity.check_skill_concurrency is False
    assert cfg.capacity.check_phase_saturation is True
    assert cfg.report.output_dir == "data/output"
    assert cfg.log_level == "DEBUG"


def test_repository_config_matches_defaults():
    cfg = ConfigLoader().load(REPO_CONFIG)
    assert cfg == Config()


def test_load_or_default_without_path():
    assert ConfigLoader().load_or_default(None) == Config()


def test_missing_file_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    loader = ConfigLoader()
    path = tmp_path / "no_such.yaml"

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader.load(path)

    # --- Assert ---
    assert "Configuration file not found" in str(e.value)


def test_wrong_extension_raises_configerror(tmp_path: Path):
    path = tmp_path / "config.txt"
    path.write_text("priority_max: 4", encoding="utf-8")

    with pytest.raises(ConfigError):
        ConfigLoader().load(path)


def test_empty_yaml_means_defaults(tmp_path: Path):
    path = tmp_path / "config.yml"
    path.write_text("", encoding="utf-8")

    assert ConfigLoader().load(path) == Config()


def test_yaml_with_extra_field_raises_configerror(tmp_yaml: Path):
    """
    @brief
    Extra field in YAML causes validation error.

    @details
    Unknown keys are rejected instead of silently ignored.
    """
    # --- Arrange ---
    data = yaml.safe_load(tmp_yaml.read_text())
    data["extra_field"] = 42
    tmp_yaml.write_text(yaml.safe_dump(data), encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(tmp_yaml)

    # --- Assert ---
    assert "extra" in str(e.value).lower()


def test_inverted_priority_bounds_raise_configerror(tmp_yaml: Path):
    data = yaml.safe_load(tmp_yaml.read_text())
    data["priority_min"] = 5
    tmp_yaml.write_text(yaml.safe_dump(data), encoding="utf-8")

    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(tmp_yaml)

    assert "priority_min" in str(e.value)


def test_invalid_path_type_raises_configerror(tmp_path: Path):
    # --- Arrange ---
    loader = ConfigLoader()
    wrong_type = str(tmp_path / "config.yaml")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        loader._read_yaml(wrong_type)

    # --- Assert ---
    assert "pathlib.Path" in str(e.value)


def test_yaml_parsing_error_raises_configerror(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("priority_max: '4\nlog_level: INFO", encoding="utf-8")

    with pytest.raises(ConfigError) as e:
        ConfigLoader()._read_yaml(path)

    assert "YAML parsing failed" in str(e.value)


def test_unable_to_read_file_raises_configerror(monkeypatch, tmp_path: Path):
    """
    @brief
    Simulates OSError when opening file.

    @details
    Patches `Path.open` to raise `OSError` to ensure ConfigError carries
    the underlying reason.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("priority_max: 4", encoding="utf-8")

    def fake_open(*args, **kwargs):
        raise OSError("Permission denied")

    monkeypatch.setattr(Path, "open", fake_open)

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader()._read_yaml(path)

    # --- Assert ---
    assert "Permission denied" in str(e.value)


def test_yaml_root_not_mapping_raises_configerror(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text("- one\n- two\n", encoding="utf-8")

    with pytest.raises(ConfigError) as e:
        ConfigLoader()._read_yaml(path)

    assert "Configuration root must be a mapping" in str(e.value)


def test_invalid_nested_setting_is_located(tmp_path: Path):
    """
    @brief
    Validation errors name the dotted location of the bad setting.
    """
    # --- Arrange ---
    path = tmp_path / "config.yaml"
    path.write_text("max_phase: -3\ncapacity:\n  check_overload: true\n", encoding="utf-8")

    # --- Act / Assert ---
    with pytest.raises(ConfigError) as e:
        ConfigLoader().load(path)

    # --- Assert ---
    message = e.value.message
    assert message.startswith("Invalid settings in config.yaml: ")
    assert "max_phase: " in message
    assert "capacity.check_overload: " in message
    assert "max_phase" in e.value.suggested_action


def test_max_phase_is_loaded(tmp_path: Path):
    path = tmp_path / "config.yml"
    path.write_text("max_phase: 24\n", encoding="utf-8")

    assert ConfigLoader().load(path).max_phase == 24
