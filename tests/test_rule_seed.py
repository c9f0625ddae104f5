import json
import logging
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from bom_backend.models import Base
from bom_backend.models.dependency_rule import BomDependencyRule
from bom_backend.services.bom_validator import validate_bom
from bom_backend.services.dependency_engine import Material
from bom_backend.services.rule_seed import DEFAULT_SEED_PATH, seed_rules


def _make_session():
    engine = create_engine("sqlite+pysqlite:///:memory:", future=True)
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return SessionLocal()


def test_default_seed_loads_once():
    db = _make_session()
    expected = len(json.loads(DEFAULT_SEED_PATH.read_text(encoding="utf-8")))
    assert seed_rules(db) == expected
    assert seed_rules(db) == 0
    assert db.query(BomDependencyRule).count() == expected


def test_seeded_rules_validate_a_camera_bom():
    db = _make_session()
    seed_rules(db)
    result = validate_bom(db, [Material("CAMERA", 20), Material("NVR", 1, ports=16)], category="SKP")
    assert result.valid is True
    assert "Dla kamer potrzeba minimum 2 rejestratorów NVR" in result.warnings
    assert "NVR musi mieć minimum 20 portów" in result.warnings
    assert result.suggestions == ["Zalecany UPS dla urządzeń sieciowych"]


def test_seed_stores_camel_case_documents():
    db = _make_session()
    seed_rules(db)
    rule = db.query(BomDependencyRule).filter(BomDependencyRule.category == "PRZEJAZD_KAT_A").one()
    assert rule.system_type == "SMOKIP_A"
    assert rule.conditions[0]["materialCategory"] == "CAMERA"
    assert rule.actions[0]["targetMaterialCategory"] == "SWITCH"


def test_invalid_seed_entries_are_skipped(tmp_path: Path, caplog):
    path = tmp_path / "rules.json"
    path.write_text(
        json.dumps(
            [
                {"name": "bad", "conditions": [], "actions": [{"targetMaterialCategory": "nvr", "field": "required"}]},
                {
                    "name": "good",
                    "conditions": [],
                    "actions": [{"targetMaterialCategory": "NVR", "field": "required", "formula": "1"}],
                },
            ]
        ),
        encoding="utf-8",
    )
    caplog.set_level(logging.WARNING)
    db = _make_session()
    assert seed_rules(db, path) == 1
    assert [r.name for r in db.query(BomDependencyRule).all()] == ["good"]
    assert any("Skipping invalid seed rule" in rec.message for rec in caplog.records)


def test_missing_seed_file_is_a_noop(tmp_path: Path):
    db = _make_session()
    assert seed_rules(db, tmp_path / "missing.json") == 0
