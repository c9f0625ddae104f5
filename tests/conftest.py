import os
from pathlib import Path
import tempfile

# Isolated lightweight DB; must be set before bom_backend.core.db is imported.
DB_PATH = Path(tempfile.gettempdir()) / "bom_backend_tests.db"
if DB_PATH.exists():
    DB_PATH.unlink()

os.environ.setdefault("DATABASE_URL", f"sqlite+pysqlite:///{DB_PATH}")
os.environ.setdefault("AUTO_CREATE_DB", "true")
os.environ.setdefault("AUTO_RUN_MIGRATIONS", "false")
os.environ.setdefault("AUTO_SEED_RULES", "false")
os.environ.setdefault("BOM_ENV", "dev")
