from pathlib import Path

from fastapi.testclient import TestClient

from bom_backend import main
from bom_backend.core.config import Settings


def test_settings_read_startup_toggles_from_env(monkeypatch, tmp_path: Path):
    seed_path = tmp_path / "rules.json"
    monkeypatch.setenv("AUTO_CREATE_DB", "false")
    monkeypatch.setenv("AUTO_RUN_MIGRATIONS", "true")
    monkeypatch.setenv("AUTO_SEED_RULES", "false")
    monkeypatch.setenv("SEED_RULES_PATH", str(seed_path))
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    cfg = Settings()
    assert cfg.auto_create_db is False
    assert cfg.auto_run_migrations is True
    assert cfg.auto_seed_rules is False
    assert cfg.seed_rules_path == str(seed_path)
    assert cfg.log_level == "DEBUG"


def test_startup_seeds_from_configured_path(monkeypatch, tmp_path: Path):
    seed_path = tmp_path / "rules.json"
    calls = []

    def _record_seed(db, path):
        calls.append(path)
        return 0

    monkeypatch.setattr(main, "seed_rules", _record_seed)
    monkeypatch.setattr(main.settings, "auto_seed_rules", True)
    monkeypatch.setattr(main.settings, "seed_rules_path", str(seed_path))
    with TestClient(main.create_app()):
        pass
    assert calls == [seed_path]


def test_startup_skips_seeding_when_disabled(monkeypatch):
    calls = []
    monkeypatch.setattr(main, "seed_rules", lambda db, path: calls.append(path))
    monkeypatch.setattr(main.settings, "auto_seed_rules", False)
    with TestClient(main.create_app()):
        pass
    assert calls == []
