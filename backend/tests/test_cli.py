"""Tests for RecordForge CLI commands."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from recordforge.cli.main import cli
from recordforge.metadata.loader import MetadataLoader
from recordforge.persistence.sql import SQLRepository

METADATA_PATH = Path(__file__).parent.parent.parent / "metadata"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def in_backend_dir(monkeypatch):
    """Ensure CWD is the backend directory for metadata resolution."""
    backend_dir = Path(__file__).parent.parent
    monkeypatch.chdir(backend_dir)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the CLI at a per-test SQLite file."""
    path = tmp_path / "test.db"
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("RECORDFORGE_METADATA_PATH", raising=False)
    monkeypatch.setenv("RECORDFORGE_DB_PATH", str(path))
    return path


@pytest.fixture
def seeded_db(db_path):
    loader = MetadataLoader(METADATA_PATH)
    loader.load_all()
    repo = SQLRepository(f"sqlite:///{db_path}")
    repo.initialize_entities(list(loader.entities.values()))
    repo.create(loader.entities["Doctor"], {
        "doctorid": "DR000001", "firstname": "Alice", "surname": "Smith",
        "address": "1 High St", "email": "alice@example.com", "specialization": "General",
    })
    repo.create(loader.entities["Patient"], {
        "patientid": "PT000001", "firstname": "Ann", "surname": "Lee", "postcode": "AB1 2CD",
        "address": "2 Low Rd", "phone": "0123", "email": "ann@example.com",
        "maindoctorid": "DR000001",
    })
    repo.create(loader.entities["Visit"], {
        "visitid": "VT000001", "patientid": "PT000001", "doctorid": "DR000001",
        "dateofvisit": "2024-02-29", "diagnosis": "Flu",
    })
    repo.close()
    return db_path


class TestHelp:
    def test_group_help(self, runner):
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "RecordForge" in result.output
        for command in ("serve", "metadata", "entities", "db"):
            assert command in result.output


class TestMetadataValidate:
    def test_validate_succeeds(self, runner, in_backend_dir, db_path):
        result = runner.invoke(cli, ["metadata", "validate"])
        assert result.exit_code == 0
        assert "All metadata is valid" in result.output

    def test_validate_shows_entities(self, runner, in_backend_dir, db_path):
        result = runner.invoke(cli, ["metadata", "validate"])
        assert "Loaded 8 entities" in result.output
        assert "Doctor (6 fields, 0 display-only, table: doctor)" in result.output
        assert "Visit (6 fields, 2 display-only, table: visit)" in result.output

    def test_invalid_metadata_fails(self, runner, in_backend_dir, tmp_path, monkeypatch):
        entities = tmp_path / "broken" / "entities"
        entities.mkdir(parents=True)
        (entities / "thing.yaml").write_text(
            "entity: Thing\nfields:\n  - name: id\n    type: money\n"
        )
        monkeypatch.setenv("RECORDFORGE_METADATA_PATH", str(tmp_path / "broken"))

        result = runner.invoke(cli, ["metadata", "validate"])
        assert result.exit_code == 1
        assert "unknown type 'money'" in result.output

    def test_missing_metadata_directory(self, runner, tmp_path, monkeypatch):
        monkeypatch.setenv("RECORDFORGE_METADATA_PATH", str(tmp_path / "nowhere"))
        result = runner.invoke(cli, ["metadata", "validate"])
        assert result.exit_code == 1
        assert "Metadata directory not found" in result.output


class TestDbInit:
    def test_creates_tables(self, runner, in_backend_dir, db_path):
        result = runner.invoke(cli, ["db", "init"])
        assert result.exit_code == 0
        assert "Initialized 8 tables" in result.output
        assert db_path.exists()

    def test_is_repeatable(self, runner, in_backend_dir, db_path):
        runner.invoke(cli, ["db", "init"])
        result = runner.invoke(cli, ["db", "init"])
        assert result.exit_code == 0


class TestEntitiesList:
    def test_prints_labels_and_rows(self, runner, in_backend_dir, seeded_db):
        result = runner.invoke(cli, ["entities", "list", "Doctor"])
        assert result.exit_code == 0
        header = result.output.splitlines()[0]
        assert header.split()[:3] == ["Doctor", "ID", "First"]
        assert "Alice" in result.output

    def test_resolves_display_values(self, runner, in_backend_dir, seeded_db):
        result = runner.invoke(cli, ["entities", "list", "visit", "--json"])
        assert result.exit_code == 0
        table = json.loads(result.stdout)
        assert table["rows"] == [[
            "VT000001", "PT000001", "Ann Lee", "DR000001", "Alice Smith",
            "2024-02-29", "", "Flu",
        ]]

    def test_missing_and_unknown_placeholders(self, runner, in_backend_dir, seeded_db):
        result = runner.invoke(cli, ["entities", "list", "Patient", "--json"])
        row = json.loads(result.stdout)["rows"][0]
        assert row[8] == "None"
        assert row[10] == "Alice Smith"

    def test_unknown_entity(self, runner, in_backend_dir, db_path):
        result = runner.invoke(cli, ["entities", "list", "Nope"])
        assert result.exit_code == 1
        assert "Unknown entity: Nope" in result.output

    def test_missing_table_reported(self, runner, in_backend_dir, db_path):
        result = runner.invoke(cli, ["entities", "list", "Drug"])
        assert result.exit_code == 1
        assert "Unable to load data from drug" in result.output


class TestEntitiesForm:
    def test_add_form(self, runner, in_backend_dir, seeded_db):
        result = runner.invoke(cli, ["entities", "form", "Visit"])
        assert result.exit_code == 0
        form = json.loads(result.stdout)
        assert form["mode"] == "add"
        doctor = next(c for c in form["controls"] if c["name"] == "doctorid")
        assert doctor["kind"] == "select"
        assert doctor["options"] == [{"key": "DR000001", "display": "Alice Smith"}]

    def test_edit_form(self, runner, in_backend_dir, seeded_db):
        result = runner.invoke(cli, ["entities", "form", "Doctor", "--key", "DR000001"])
        assert result.exit_code == 0
        form = json.loads(result.stdout)
        assert form["key"] == "DR000001"
        key_control = form["controls"][0]
        assert key_control["locked"] is True
        assert key_control["initialValue"] == "DR000001"

    def test_edit_form_unknown_key(self, runner, in_backend_dir, seeded_db):
        result = runner.invoke(cli, ["entities", "form", "Doctor", "--key", "DR999999"])
        assert result.exit_code == 1
        assert "No Doctors record with key DR999999" in result.output
