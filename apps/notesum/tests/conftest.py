from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from notesum.config import get_settings
from notesum.db import get_engine
from notesum.main import app


@pytest.fixture(autouse=True)
def reset_caches() -> Iterator[None]:
    get_settings.cache_clear()
    get_engine.cache_clear()
    yield
    get_settings.cache_clear()
    get_engine.cache_clear()


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    vault = tmp_path / "vault"
    (vault / "projects").mkdir(parents=True)
    (vault / "index.md").write_text(
        "---\naliases: Home\n---\n"
        "# Index\n"
        "See [[alpha]], [[Missing Note]] and [[projects/beta.md|Beta]].\n",
        encoding="utf-8",
    )
    (vault / "alpha.md").write_text("Alpha body", encoding="utf-8")
    (vault / "projects" / "beta.md").write_text(
        "---\naliases:\n  - Project Beta\n  - PB\n---\nBeta body\n",
        encoding="utf-8",
    )
    (vault / "attachment.png").write_bytes(b"\x89PNG")
    return vault


@pytest.fixture
def client(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    vault_dir: Path,
) -> Iterator[TestClient]:
    sqlite_db_path = tmp_path / "notesum-tests.db"
    monkeypatch.setenv("NOTESUM_DATABASE_URL", f"sqlite+pysqlite:///{sqlite_db_path}")
    monkeypatch.setenv("NOTESUM_DB_ECHO", "false")
    monkeypatch.setenv("NOTESUM_VAULT_DIR", str(vault_dir))
    monkeypatch.setenv("LLM_PROVIDER", "openai")
    monkeypatch.setenv("LLM_MODEL_ID", "gpt-4o")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    engine = get_engine()

    with TestClient(app) as test_client:
        yield test_client

    engine.dispose()
