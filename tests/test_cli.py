"""Tests for the command line interface."""

from pathlib import Path

import pytest
import structlog

from org_chart import cli
from org_chart.backends import HttpBackend, NotionBackend, YamlBackend
from org_chart.config import Config
from org_chart.config_commands import get as config_get
from org_chart.config_commands import list_config
from org_chart.config_commands import set as config_set


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from an empty directory with an isolated home."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    cli.configure_logging("critical")
    yield tmp_path
    structlog.reset_defaults()


@pytest.fixture
def initialized(workspace: Path, capsys: pytest.CaptureFixture) -> Path:
    cli.init()
    capsys.readouterr()
    return workspace


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(config_dir=tmp_path / "local", global_dir=tmp_path / "global")


def test_get_backend_defaults_to_yaml(config: Config) -> None:
    """Test the default backend."""
    backend = cli.get_backend(config)
    assert isinstance(backend, YamlBackend)
    assert backend.path == Path(".org-chart/employees.yaml")


def test_get_backend_http(config: Config) -> None:
    """Test the REST backend needs a base URL."""
    config.set("backend", "http")
    with pytest.raises(ValueError, match="http.base_url"):
        cli.get_backend(config)

    config.set("http.base_url", "http://localhost:3000")
    config.set("http.timeout", "2.5")
    backend = cli.get_backend(config)
    assert isinstance(backend, HttpBackend)
    assert backend.base_url == "http://localhost:3000"
    assert backend.client.timeout.read == 2.5


def test_get_backend_notion(config: Config) -> None:
    """Test the Notion backend needs a token and a database."""
    config.set("backend", "notion")
    config.set("notion.token", "secret")
    with pytest.raises(ValueError, match="notion.database_id"):
        cli.get_backend(config)

    config.set("notion.database_id", "db")
    backend = cli.get_backend(config)
    assert isinstance(backend, NotionBackend)
    assert backend.database_id == "db"


def test_get_backend_unknown(config: Config) -> None:
    """Test an unsupported backend name."""
    config.set("backend", "ldap")
    with pytest.raises(ValueError, match="Unknown backend: ldap"):
        cli.get_backend(config)


def test_init(workspace: Path, capsys: pytest.CaptureFixture) -> None:
    """Test writing and protecting the sample file."""
    cli.init()
    assert "Wrote 10 employee(s)" in capsys.readouterr().out
    assert (workspace / ".org-chart" / "employees.yaml").exists()

    cli.init()
    assert "already exists" in capsys.readouterr().out

    cli.init(force=True)
    assert "Wrote 10 employee(s)" in capsys.readouterr().out


def test_list_filters(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    """Test the search and team options."""
    cli.list_employees(team="Finance")
    out = capsys.readouterr().out
    assert "Found 3 employee(s)" in out
    assert "10: Erica Reel, VP of Operations [Finance] -> 4" in out

    cli.list_employees(search="linda")
    assert "Found 1 employee(s)" in capsys.readouterr().out


def test_teams(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    cli.teams()
    assert capsys.readouterr().out.split() == ["Executive", "Technology", "Business", "Finance"]


def test_chart(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    """Test the printed layout summary."""
    cli.chart()
    out = capsys.readouterr().out
    assert "Chart: 10 node(s), 9 edge(s), canvas 1570x400" in out
    assert "1: Mark Hill (Chief Executive Officer) at (675, 0)" in out
    assert "4 -> 10" in out


def test_chart_with_filter(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    """Test ancestors are drawn for filtered employees."""
    cli.chart(search="erica")
    out = capsys.readouterr().out
    assert "Chart: 3 node(s), 2 edge(s)" in out

    cli.chart(search="nobody by that name")
    assert "Nothing to show" in capsys.readouterr().out


def test_move(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    """Test a valid move is saved to the file."""
    cli.move("5", "3")
    assert "Moved 5 under 3" in capsys.readouterr().out

    cli.list_employees(search="ron")
    assert "-> 3" in capsys.readouterr().out


def test_move_rejected(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    """Test moving a manager under its own report."""
    cli.move("1", "5")
    out = capsys.readouterr().out
    assert "[i] Cannot assign a subordinate as manager!" in out
    assert "Move rejected: would create cycle" in out


def test_ancestors(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    cli.ancestors("9")
    assert "9 -> 4 -> 1" in capsys.readouterr().out

    cli.ancestors("1")
    assert "1 has no manager" in capsys.readouterr().out

    cli.ancestors("42")
    assert "Unknown employee 42" in capsys.readouterr().out


def test_cycles(initialized: Path, capsys: pytest.CaptureFixture) -> None:
    cli.cycles()
    assert "No cycles found" in capsys.readouterr().out


def test_missing_file_reports_fetch_error(workspace: Path, capsys: pytest.CaptureFixture) -> None:
    """Test commands before init."""
    cli.list_employees()
    assert "[!] Error fetching employees: Please try again later" in capsys.readouterr().out


def test_config_commands(workspace: Path, capsys: pytest.CaptureFixture) -> None:
    """Test setting and reading configuration."""
    config_get("layout.direction")
    assert "layout.direction = DOWN (default)" in capsys.readouterr().out

    config_set("layout.direction", "RIGHT")
    assert "Set layout.direction = RIGHT (local)" in capsys.readouterr().out

    config_get("layout.direction")
    assert capsys.readouterr().out.strip() == "layout.direction = RIGHT"

    config_get("http.base_url")
    assert "http.base_url is not set" in capsys.readouterr().out


def test_config_list(workspace: Path, capsys: pytest.CaptureFixture) -> None:
    """Test listing explicit settings and built-in defaults."""
    list_config()
    assert "No local settings" in capsys.readouterr().out

    config_set("backend", "http")
    capsys.readouterr()
    list_config(defaults=True)
    out = capsys.readouterr().out
    assert "backend = http\n" in out
    assert "layout.layer_spacing = 80 (default)" in out
