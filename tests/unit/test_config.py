from spl_ingest.core.config import IngestionSettings, Settings


def test_ingestion_defaults():
    options = IngestionSettings()
    assert options.commit_per_section is True
    assert options.reject_class_cycles is True
    assert options.resolve_pending_on_insert is True
    assert options.max_section_depth == 64


def test_ingestion_switches_read_from_environment(monkeypatch):
    monkeypatch.setenv("SPL_REJECT_CLASS_CYCLES", "false")
    monkeypatch.setenv("SPL_MAX_SECTION_DEPTH", "8")
    options = IngestionSettings()
    assert options.reject_class_cycles is False
    assert options.max_section_depth == 8


def test_settings_expose_nested_values(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://user:pw@db:5432/labels")
    current = Settings()
    assert current.database_url == "postgresql+asyncpg://user:pw@db:5432/labels"
    assert current.ingestion.max_section_depth == 64
