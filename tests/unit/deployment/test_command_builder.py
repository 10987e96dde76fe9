"""Tests for helm command synthesis."""

import os
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from helm_deploy.deployment.command_builder import CommandSynthesizer, delete_args
from helm_deploy.deployment.request import (
    DeploymentRequest,
    RepositoryAddOn,
    ToolVariant,
)


def make_request(**overrides: object) -> DeploymentRequest:
    fields: dict[str, object] = {"app_name": "api", "namespace": "prod", "chart": "app"}
    fields.update(overrides)
    return DeploymentRequest(**fields)  # type: ignore[arg-type]


@pytest.fixture
def mock_rewriter(tmp_path: Path) -> MagicMock:
    """Create a mock kubeconfig rewriter."""
    rewriter = MagicMock()
    rewriter.inject_token.return_value = tmp_path / "kubeconfig-with-token.yml"
    return rewriter


@pytest.fixture
def synthesizer(tmp_path: Path, mock_rewriter: MagicMock) -> CommandSynthesizer:
    return CommandSynthesizer(tmp_path, rewriter=mock_rewriter)


class TestUpgradeCommand:
    """Tests for the upgrade --install invocation."""

    def test_base_tokens(self, synthesizer: CommandSynthesizer) -> None:
        invocation = synthesizer.build(make_request(chart="/usr/src/charts/app"))

        assert invocation.executable == "helm"
        assert invocation.args == (
            "upgrade",
            "api",
            "/usr/src/charts/app",
            "--install",
            "--wait",
            "--atomic",
            "--namespace=prod",
            "--set=app.name=api",
            "--values=./values.yml",
        )

    def test_conditional_flags_in_order(self, synthesizer: CommandSynthesizer) -> None:
        request = make_request(
            dry_run=True,
            app_version="1.4.0",
            chart_version="0.9.1",
            timeout="10m",
            value_files=("a.yml", "b.yml"),
            kube_context="prod-cluster",
        )

        args = synthesizer.build(request).args

        assert args[7:] == (
            "--dry-run",
            "--set=app.name=api",
            "--set=app.version=1.4.0",
            "--version=0.9.1",
            "--timeout=10m",
            "--values=a.yml",
            "--values=b.yml",
            "--values=./values.yml",
            "--kube-context=prod-cluster",
        )

    def test_rendered_values_file_is_last_values_flag(
        self, synthesizer: CommandSynthesizer
    ) -> None:
        args = synthesizer.build(make_request(value_files=("a.yml",))).args

        values_flags = [a for a in args if a.startswith("--values=")]
        assert values_flags[-1] == "--values=./values.yml"

    def test_canary_disables_service_and_ingress(
        self, synthesizer: CommandSynthesizer
    ) -> None:
        request = make_request(track="canary")

        invocation = synthesizer.build(request)

        assert invocation.args[1] == "api-canary"
        assert "--set=service.enabled=false" in invocation.args
        assert "--set=ingress.enabled=false" in invocation.args

    @pytest.mark.parametrize("track", ["stable", "beta"])
    def test_other_tracks_keep_service_and_ingress(
        self, synthesizer: CommandSynthesizer, track: str
    ) -> None:
        args = synthesizer.build(make_request(track=track)).args

        assert "--set=service.enabled=false" not in args
        assert "--set=ingress.enabled=false" not in args

    def test_helm3_token_passed_as_flag(
        self, synthesizer: CommandSynthesizer, mock_rewriter: MagicMock
    ) -> None:
        request = make_request(variant=ToolVariant.HELM3, kube_token="s3cret")

        invocation = synthesizer.build(request)

        assert invocation.executable == "helm3"
        assert invocation.args[-1] == "--kube-token=s3cret"
        assert "KUBECONFIG" not in invocation.env
        mock_rewriter.inject_token.assert_not_called()

    def test_helm2_token_rewrites_kubeconfig(
        self, tmp_path: Path, mock_rewriter: MagicMock
    ) -> None:
        synthesizer = CommandSynthesizer(
            tmp_path, kubeconfig="/tmp/source.yml", rewriter=mock_rewriter
        )
        request = make_request(kube_token="s3cret")

        invocation = synthesizer.build(request)

        assert not any(a.startswith("--kube-token") for a in invocation.args)
        mock_rewriter.inject_token.assert_called_once_with("/tmp/source.yml", "s3cret")
        assert invocation.env["KUBECONFIG"] == str(tmp_path / "kubeconfig-with-token.yml")

    def test_kubeconfig_rewritten_once_per_run(
        self, synthesizer: CommandSynthesizer, mock_rewriter: MagicMock
    ) -> None:
        request = make_request(kube_token="s3cret")

        synthesizer.build(request)
        synthesizer.delete(request, "api")

        mock_rewriter.inject_token.assert_called_once()

    def test_redacted_masks_token(self, synthesizer: CommandSynthesizer) -> None:
        request = make_request(variant=ToolVariant.HELM3, kube_token="s3cret")

        rendered = synthesizer.build(request).redacted()

        assert "s3cret" not in rendered
        assert "--kube-token=***" in rendered


class TestEnvironmentOverlay:
    """Tests for the per-invocation environment."""

    def test_helm3_uses_xdg_directories(self, synthesizer: CommandSynthesizer) -> None:
        env = synthesizer.environment(make_request(variant=ToolVariant.HELM3))

        assert env == {
            "XDG_DATA_HOME": "/root/.helm/",
            "XDG_CACHE_HOME": "/root/.helm/",
            "XDG_CONFIG_HOME": "/root/.helm/",
        }

    def test_helm2_uses_helm_home(self, synthesizer: CommandSynthesizer) -> None:
        env = synthesizer.environment(make_request())

        assert env == {"HELM_HOME": "/root/.helm/"}

    def test_active_kubeconfig_is_exported(
        self, tmp_path: Path, mock_rewriter: MagicMock
    ) -> None:
        synthesizer = CommandSynthesizer(
            tmp_path, kubeconfig=tmp_path / "kubeconfig.yml", rewriter=mock_rewriter
        )

        env = synthesizer.environment(make_request(variant=ToolVariant.HELM3))

        assert env["KUBECONFIG"] == str(tmp_path / "kubeconfig.yml")

    def test_overlay_does_not_touch_process_environment(
        self, synthesizer: CommandSynthesizer, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("HELM_HOME", raising=False)

        synthesizer.build(make_request())

        assert "HELM_HOME" not in os.environ

    def test_invocation_env_is_read_only(self, synthesizer: CommandSynthesizer) -> None:
        invocation = synthesizer.build(make_request())

        with pytest.raises(TypeError):
            invocation.env["HELM_HOME"] = "/tmp"  # type: ignore[index]


class TestDeleteCommand:
    """Tests for delete invocations."""

    def test_helm2_delete(self, synthesizer: CommandSynthesizer) -> None:
        invocation = synthesizer.delete(make_request(), "api")

        assert invocation.argv == ["helm", "delete", "--purge", "api"]
        assert invocation.ignore_return_code

    def test_helm3_delete(self, synthesizer: CommandSynthesizer) -> None:
        invocation = synthesizer.delete(make_request(variant=ToolVariant.HELM3), "api")

        assert invocation.argv == ["helm3", "delete", "-n", "prod", "api"]
        assert invocation.ignore_return_code

    def test_delete_args(self) -> None:
        assert delete_args(ToolVariant.HELM2, "prod", "api") == ["delete", "--purge", "api"]
        assert delete_args(ToolVariant.HELM3, "prod", "api") == [
            "delete",
            "-n",
            "prod",
            "api",
        ]


class TestRepositoryCommands:
    """Tests for repository registration."""

    def test_no_repository(self, synthesizer: CommandSynthesizer) -> None:
        assert synthesizer.repo_add(make_request()) is None

    def test_repo_add_without_credentials(self, synthesizer: CommandSynthesizer) -> None:
        request = make_request(
            repository=RepositoryAddOn(url="https://charts.example.com", alias="ex")
        )

        invocation = synthesizer.repo_add(request)

        assert invocation is not None
        assert invocation.args == ("repo", "add", "ex", "https://charts.example.com")
        assert not invocation.ignore_return_code

    def test_repo_add_with_credentials(self, synthesizer: CommandSynthesizer) -> None:
        request = make_request(
            repository=RepositoryAddOn(
                url="https://charts.example.com",
                alias="ex",
                username="user",
                password="pass",
            )
        )

        invocation = synthesizer.repo_add(request)

        assert invocation is not None
        assert invocation.args == (
            "repo",
            "add",
            "--username",
            "user",
            "--password",
            "pass",
            "ex",
            "https://charts.example.com",
        )
        assert invocation.redacted().split()[6] == "***"

    def test_repo_update(self, synthesizer: CommandSynthesizer) -> None:
        invocation = synthesizer.repo_update(make_request(variant=ToolVariant.HELM3))

        assert invocation.argv == ["helm3", "repo", "update"]
