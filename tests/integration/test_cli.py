import pytest

from src.adapters.sqlite_db import SQLitePublisherRepo
from src.app_shell import cli


@pytest.fixture
def cli_db(tmp_path, monkeypatch) -> str:
    db_path = str(tmp_path / "cli.db")
    monkeypatch.setenv("APP_DATABASE__PATH", db_path)
    return db_path


def test_migrate_then_up_to_date(cli_db, capsys) -> None:
    cli.main(["migrate"])
    assert "001_initial.sql" in capsys.readouterr().out

    cli.main(["migrate"])
    assert "up to date" in capsys.readouterr().out


def test_create_publisher(cli_db, capsys) -> None:
    cli.main(["migrate"])

    cli.main(["create-publisher", "editor", "--password", "s3cret"])

    assert "Publisher 'editor' created" in capsys.readouterr().out
    assert SQLitePublisherRepo(cli_db).get_by_username("editor") is not None


def test_duplicate_publisher_exits_nonzero(cli_db) -> None:
    cli.main(["migrate"])
    cli.main(["create-publisher", "editor", "--password", "s3cret"])

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["create-publisher", "editor", "--password", "other"])

    assert exc_info.value.code == 1


def test_unknown_environment_exits_nonzero(cli_db, monkeypatch) -> None:
    monkeypatch.setenv("APP_ENVIRONMENT", "staging")

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["migrate"])

    assert exc_info.value.code == 1
