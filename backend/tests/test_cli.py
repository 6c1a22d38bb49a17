"""Tests for the management CLI (sync engine against a temporary SQLite file)."""

import pytest

from carrier_lookup import cli
from carrier_lookup.config import settings


@pytest.fixture
def cli_database(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "database_url_sync", f"sqlite:///{tmp_path / 'cli.db'}")
    cli.create_tables()


@pytest.mark.unit
class TestManagementCli:

    def test_seed_is_idempotent(self, cli_database, capsys):
        """Test seeding twice creates the demo services once."""
        cli.seed()
        first = capsys.readouterr().out
        cli.seed()
        second = capsys.readouterr().out

        assert "3 new service(s)" in first
        assert "0 new service(s)" in second

    def test_list_carriers(self, cli_database, capsys):
        """Test carrier listing shows type and service count."""
        cli.seed()
        capsys.readouterr()

        cli.list_carriers()
        out = capsys.readouterr().out

        assert "COSCO  [MLO]  (1 services)" in out
        assert "Maersk  [MLO]  (1 services)" in out
        assert "3 carrier(s)" in out
