"""Unit tests for the callflow CLI"""

import json
import textwrap

import pytest
from typer.testing import CliRunner

from callflow.cli.main import app

MENU_YAML = """
version: "1.0"
resources:
  queues:
    Sales: arn:queue/sales
    Support: arn:queue/support
flows:
  Menu:
    steps:
      - type: message
        text: Welcome
      - type: collect
        prompt: Press 1 for sales, 2 for support
        digits:
          1:
            - type: transfer_to_queue
              queue: Sales
          2:
            - type: message
              text: One moment
            - type: continue
      - type: transfer_to_queue
        queue: Support
"""

ORPHAN_YAML = """
version: "1.0"
resources:
  queues:
    Sales: arn:queue/sales
flows:
  Orphan:
    steps:
      - type: collect
        prompt: Press 1
        digits:
          1:
            - type: transfer_to_queue
              queue: Sales
      - type: disconnect
"""


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    """Keep the commands from reconfiguring logging for the rest of the session."""
    calls: list[str] = []
    monkeypatch.setattr("callflow.cli.commands.common.setup_logging", calls.append)
    return calls


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def menu_file(tmp_path):
    path = tmp_path / "menu.yaml"
    path.write_text(MENU_YAML, encoding="utf-8")
    return path


def test_cli_help(runner):
    """Test CLI help lists the compile and validate commands"""
    # Act
    result = runner.invoke(app, ["--help"])

    # Assert
    assert result.exit_code == 0
    assert "compile" in result.stdout
    assert "validate" in result.stdout


def test_cli_version(runner):
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert "callflow version" in result.stdout


class TestValidate:
    def test_valid_definition(self, runner, menu_file, fresh_catalog):
        """Test validate reports each flow with its action count"""
        # Act
        result = runner.invoke(app, ["validate", str(menu_file)])

        # Assert
        assert result.exit_code == 0
        assert "✓ Menu (5 actions)" in result.stdout

    def test_unresolved_reference_fails(self, runner, tmp_path, fresh_catalog):
        path = tmp_path / "menu.yaml"
        path.write_text(MENU_YAML.replace("    Support: arn:queue/support\n", ""), encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Menu failed" in result.stdout

    def test_orphan_is_warning_when_lenient(self, runner, tmp_path, fresh_catalog):
        path = tmp_path / "orphan.yaml"
        path.write_text(ORPHAN_YAML, encoding="utf-8")

        strict = runner.invoke(app, ["validate", str(path)])
        lenient = runner.invoke(app, ["validate", str(path), "--lenient"])

        assert strict.exit_code == 1
        assert lenient.exit_code == 0
        assert "warning" in lenient.stdout

    def test_log_level_from_definition_unless_given(
        self, runner, tmp_path, quiet_logging, fresh_catalog
    ):
        path = tmp_path / "debug.yaml"
        path.write_text(MENU_YAML + "settings:\n  log_level: DEBUG\n", encoding="utf-8")

        runner.invoke(app, ["validate", str(path)])
        from_definition = list(quiet_logging)
        quiet_logging.clear()
        runner.invoke(app, ["validate", str(path), "--log-level", "error"])

        assert from_definition == ["WARNING", "DEBUG"]
        assert quiet_logging == ["ERROR"]

    def test_nothing_to_validate(self, runner, fresh_catalog):
        result = runner.invoke(app, ["validate"])

        assert result.exit_code == 2

    def test_unknown_selected_flow(self, runner, menu_file, fresh_catalog):
        result = runner.invoke(app, ["validate", str(menu_file), "--flow", "Nope"])

        assert result.exit_code == 1
        assert "Unknown flow(s): Nope" in result.stdout

    def test_malformed_definition(self, runner, tmp_path, fresh_catalog):
        path = tmp_path / "bad.yaml"
        path.write_text("flows:\n  Bad:\n    steps:\n      - type: teleport\n", encoding="utf-8")

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "Cannot load flows" in result.stdout


class TestCompile:
    def test_writes_one_document_per_flow(self, runner, menu_file, tmp_path, fresh_catalog):
        """Test compile writes <output>/<flow>.json with resolved addresses"""
        # Arrange
        output = tmp_path / "build"

        # Act
        result = runner.invoke(app, ["compile", str(menu_file), "--output", str(output)])

        # Assert
        assert result.exit_code == 0
        document = json.loads((output / "Menu.json").read_text(encoding="utf-8"))
        assert document["StartAction"] == "message"
        queues = [
            action["Parameters"]["QueueId"]
            for action in document["Actions"]
            if action["Type"] == "TransferContactToQueue"
        ]
        assert queues == ["arn:queue/sales", "arn:queue/support"]

    def test_module_flows(self, runner, tmp_path, monkeypatch, fresh_catalog):
        (tmp_path / "cli_sample_flows.py").write_text(
            textwrap.dedent(
                """
                from callflow import flow


                @flow("Goodbye")
                def goodbye(builder):
                    builder.play_prompt("Goodbye").disconnect()
                """
            ),
            encoding="utf-8",
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        output = tmp_path / "out"

        result = runner.invoke(
            app, ["compile", "--module", "cli_sample_flows", "--output", str(output)]
        )

        assert result.exit_code == 0
        assert (output / "Goodbye.json").exists()

    def test_failed_flow_does_not_block_others(self, runner, tmp_path, fresh_catalog):
        path = tmp_path / "mixed.yaml"
        path.write_text(
            MENU_YAML
            + textwrap.indent(
                textwrap.dedent(
                    """
                    Broken:
                      steps:
                        - type: disconnect
                        - type: message
                          text: Too late
                    """
                ),
                "  ",
            ),
            encoding="utf-8",
        )
        output = tmp_path / "build"

        result = runner.invoke(app, ["compile", str(path), "--output", str(output)])

        assert result.exit_code == 1
        assert (output / "Menu.json").exists()
        assert not (output / "Broken.json").exists()
        assert "Broken failed" in result.stdout

    def test_missing_definition_path(self, runner, tmp_path):
        result = runner.invoke(app, ["compile", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 2
