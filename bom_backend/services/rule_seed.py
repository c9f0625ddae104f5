"""
Auto-seed baseline dependency rules.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ..models.dependency_rule import BomDependencyRule
from ..schemas.dependency_rule import RuleCreate, rule_record

DEFAULT_SEED_PATH = Path(__file__).resolve().parents[1] / "data" / "seed_dependency_rules.json"


def _load_seed(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        return data
    return []


def _rule_exists(db: Session, name: str) -> bool:
    return db.query(BomDependencyRule).filter(BomDependencyRule.name == name).first() is not None


def seed_rules(db: Session, seed_path: Path = DEFAULT_SEED_PATH) -> int:
    """
    Seed baseline rules from a JSON file if no rules exist.

    Returns number of rules inserted. Entries that fail validation are
    logged and skipped.
    """
    logger = logging.getLogger("rule_seed")
    if db.query(BomDependencyRule).count() > 0:
        return 0
    if not seed_path.exists():
        logger.warning("Rule seed file missing path=%s", seed_path)
        return 0
    created = 0
    for index, item in enumerate(_load_seed(seed_path)):
        try:
            payload = RuleCreate.model_validate(item)
        except ValidationError as exc:
            logger.warning("Skipping invalid seed rule index=%s: %s", index, exc)
            continue
        if _rule_exists(db, payload.name):
            continue
        db.add(BomDependencyRule(**rule_record(payload)))
        created += 1
    if created:
        db.commit()
        logger.info("Seeded %s dependency rules", created)
    return created
