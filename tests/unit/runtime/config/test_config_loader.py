"""Unit tests for config_loader module."""

import json
from pathlib import Path

import pytest

from helm_deploy.runtime.config.config_loader import load_event, load_inputs
from helm_deploy.runtime.config.config_utils import substitute_env_vars
from helm_deploy.runtime.config.settings import ActionSettings


class TestLoadInputs:
    """Tests for collecting configured inputs."""

    def test_reads_input_environment_variables(self) -> None:
        inputs = load_inputs({"INPUT_RELEASE": " api \n", "INPUT_VALUE-FILES": "a.yml"})

        assert inputs["release"] == "api"
        assert inputs["value-files"] == "a.yml"
        assert inputs["namespace"] == ""
        assert inputs["token"] == ""

    def test_config_file_supplies_defaults(self, tmp_path: Path) -> None:
        config = tmp_path / "deploy.yml"
        config.write_text(
            "inputs:\n"
            "  release: api\n"
            "  namespace: ${NAMESPACE:-staging}\n"
            "  value-files: [a.yml, b.yml]\n"
            "  dry-run: true\n"
        )

        inputs = load_inputs({"INPUT_RELEASE": "web"}, config)

        assert inputs["release"] == "web"
        assert inputs["namespace"] == "staging"
        assert json.loads(inputs["value-files"]) == ["a.yml", "b.yml"]
        assert inputs["dry-run"] == "true"

    def test_config_file_keeps_value_templates(self, tmp_path: Path) -> None:
        config = tmp_path / "deploy.yml"
        config.write_text("inputs:\n  values: 'ref: ${{ deployment.ref }}'\n")

        inputs = load_inputs({}, config)

        assert inputs["values"] == "ref: ${{ deployment.ref }}"

    def test_config_file_requires_inputs_mapping(self, tmp_path: Path) -> None:
        config = tmp_path / "deploy.yml"
        config.write_text("release: api\n")

        with pytest.raises(ValueError, match="inputs"):
            load_inputs({}, config)

    def test_config_file_missing_variable(self, tmp_path: Path) -> None:
        config = tmp_path / "deploy.yml"
        config.write_text("inputs:\n  namespace: ${NAMESPACE}\n")

        with pytest.raises(ValueError, match="NAMESPACE"):
            load_inputs({}, config)

    def test_selected_names(self) -> None:
        assert load_inputs({"INPUT_TRACK": "canary"}, names=["track"]) == {
            "track": "canary"
        }


class TestSubstituteEnvVars:
    """Tests for placeholder substitution."""

    def test_required_variable(self) -> None:
        assert substitute_env_vars("ns: ${NS}", {"NS": "prod"}) == "ns: prod"

    def test_default_value(self) -> None:
        assert substitute_env_vars("ns: ${NS:-dev}", {}) == "ns: dev"

    def test_custom_error(self) -> None:
        with pytest.raises(ValueError, match="set the namespace"):
            substitute_env_vars("ns: ${NS:?set the namespace}", {})


class TestLoadEvent:
    """Tests for reading the deployment event."""

    def test_returns_deployment(self, tmp_path: Path) -> None:
        event = tmp_path / "event.json"
        event.write_text(json.dumps({"deployment": {"id": 5, "payload": {"track": "canary"}}}))

        assert load_event(event) == {"id": 5, "payload": {"track": "canary"}}

    def test_non_deployment_event(self, tmp_path: Path) -> None:
        event = tmp_path / "event.json"
        event.write_text(json.dumps({"pull_request": {"number": 1}}))

        assert load_event(event) is None

    def test_missing_file(self, tmp_path: Path) -> None:
        assert load_event(tmp_path / "absent.json") is None
        assert load_event(None) is None

    def test_invalid_json(self, tmp_path: Path) -> None:
        event = tmp_path / "event.json"
        event.write_text("{not json")

        with pytest.raises(ValueError):
            load_event(event)


class TestActionSettings:
    """Tests for ActionSettings.from_env."""

    def test_defaults(self) -> None:
        settings = ActionSettings.from_env({})

        assert settings.api_url == "https://api.github.com"
        assert settings.server_url == "https://github.com"
        assert settings.event_path is None
        assert settings.debug is False

    def test_reads_github_variables(self) -> None:
        settings = ActionSettings.from_env(
            {
                "GITHUB_REPOSITORY": "octo/app",
                "GITHUB_SHA": "abc123",
                "GITHUB_EVENT_PATH": "/github/workflow/event.json",
                "GITHUB_API_URL": "https://ghe.example.com/api/v3/",
                "RUNNER_DEBUG": "1",
            }
        )

        assert settings.owner == "octo"
        assert settings.repo == "app"
        assert settings.sha == "abc123"
        assert settings.event_path == Path("/github/workflow/event.json")
        assert settings.api_url == "https://ghe.example.com/api/v3"
        assert settings.debug is True

    def test_workspace_defaults_to_cwd(self, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)

        assert ActionSettings.from_env({}).workspace == Path.cwd()

    def test_reads_workspace(self) -> None:
        settings = ActionSettings.from_env({"GITHUB_WORKSPACE": "/github/workspace"})

        assert settings.workspace == Path("/github/workspace")
