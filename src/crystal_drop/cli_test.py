import textwrap

import pytest
import structlog
from click.testing import CliRunner

from crystal_drop import cli as cli_module
from crystal_drop.cli import cli
from crystal_drop.oracle import threshold_oracle


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()


class TestPlanCommand:

    def test_plan(self):
        result = CliRunner().invoke(cli, ["plan", "10"])
        assert result.exit_code == 0, result.output
        assert "k = 4" in result.output
        assert "sequence = [4, 7, 9]" in result.output
        assert "worst case drops <= 8" in result.output

    def test_plan_rejects_zero_floors(self):
        result = CliRunner().invoke(cli, ["plan", "0"])
        assert result.exit_code == 2
        assert "must be > 0" in result.output


class TestRunCommand:
    """Test suite for `crystal-drop run`"""

    def test_run_without_animation(self):
        result = CliRunner().invoke(cli, ["run", "10", "7", "--no-animate"])
        assert result.exit_code == 0, result.output
        assert "4, 7, 5, 6, 7" in result.output

    def test_run_animated(self):
        result = CliRunner().invoke(cli, ["run", "10", "7", "--delay", "0"])
        assert result.exit_code == 0, result.output
        assert "Found f" in result.output

    def test_run_rejects_breaking_floor_outside_building(self):
        result = CliRunner().invoke(cli, ["run", "10", "10", "--no-animate"])
        assert result.exit_code == 2
        assert "0 <= f < 10" in result.output


class TestStepCommand:

    def test_step_until_found(self):
        result = CliRunner().invoke(cli, ["step", "10", "7"], input="n\n" * 10)
        assert result.exit_code == 0, result.output
        assert "safe: floor 4 safe" in result.output
        assert "break: floor 7 broke" in result.output
        assert "found: floor 7 broke" in result.output

    def test_step_stop_early(self):
        result = CliRunner().invoke(cli, ["step", "10", "7"], input="n\nq\n")
        assert result.exit_code == 0, result.output
        assert "floor 4" in result.output
        assert "floor 7" not in result.output

    def test_step_back_reshows_earlier_state(self):
        """Going back re-renders the previous state without dropping again"""
        result = CliRunner().invoke(cli, ["step", "10", "7"], input="n\nn\nb\nn\nq\n")
        assert result.exit_code == 0, result.output
        assert result.output.count("|  v1") == 2
        assert result.output.count("|  v2") == 2
        assert result.output.count("floor 7 broke") == 1


class TestSolveCommand:
    """Test suite for `crystal-drop solve` with plugin oracles"""

    def test_solve_with_plugin(self, tmp_path):
        plugin = tmp_path / "oracle.py"
        plugin.write_text(textwrap.dedent("""
            def breaks(floor):
                return floor >= 13
        """))
        result = CliRunner().invoke(cli, ["solve", "20", "--oracle-fn", str(plugin)])
        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == "13"

    def test_solve_reports_inconsistency(self, tmp_path):
        plugin = tmp_path / "oracle.py"
        plugin.write_text(textwrap.dedent("""
            def breaks(floor):
                return False
        """))
        result = CliRunner().invoke(cli, ["solve", "20", "--oracle-fn", str(plugin)])
        assert result.exit_code == 1
        assert "Search inconsistency" in result.output


class TestDemoCommand:

    def test_demo_uses_http_oracle(self, monkeypatch):
        monkeypatch.setattr(cli_module, "fetch_building", lambda endpoint: 30)
        monkeypatch.setattr(cli_module, "http_oracle", lambda endpoint: threshold_oracle(21))
        result = CliRunner().invoke(cli, ["demo", "--no-animate"])
        assert result.exit_code == 0, result.output
        assert result.output.strip().splitlines()[-1] == "21"


class TestDemoApiCommand:

    def test_starts_demo_app(self, monkeypatch):
        import uvicorn
        from demo_api.api import app

        runs = []
        monkeypatch.setattr(uvicorn, "run", lambda target, **kwargs: runs.append((target, kwargs)))
        result = CliRunner().invoke(cli, ["demo-api", "--port", "8123"])
        assert result.exit_code == 0, result.output
        assert "/api/drop" in result.output
        assert runs == [(app, {"host": "127.0.0.1", "port": 8123, "reload": False})]
