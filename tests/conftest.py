import pytest

# Variables a CI runner may carry that would leak into input resolution
_ISOLATED_PREFIXES = ("INPUT_", "GITHUB_", "KUBECONFIG", "RUNNER_DEBUG")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Strip action inputs and cluster credentials from the test environment."""
    import os

    for name in list(os.environ):
        if name.startswith(_ISOLATED_PREFIXES):
            monkeypatch.delenv(name, raising=False)
