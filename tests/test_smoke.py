"""Smoke tests: imports work, CLI --help works."""

from click.testing import CliRunner

from epicviz.__main__ import main


def test_import():
    import epicviz

    assert epicviz is not None


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(main, ["--help"])
    assert result.exit_code == 0
    assert "layout as JSON" in result.output
