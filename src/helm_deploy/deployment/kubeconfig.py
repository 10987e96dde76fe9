"""Kubeconfig handling for cluster credentials.

Two operations live here:

- ``materialize_kubeconfig`` writes credential material supplied through the
  environment (raw or base64) to a local file.
- ``KubeconfigRewriter.inject_token`` derives a kubeconfig in which every
  context authenticates with a single bearer token. Helm 2 has no
  ``--kube-token`` flag, so the token has to travel inside the file.
"""

from __future__ import annotations

import base64
import binascii
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]
from loguru import logger

from .constants import DEFAULT_CONSTANTS, DeploymentConstants
from .errors import (
    CredentialFileNotFoundError,
    MalformedCredentialDocumentError,
    NoContextsDefinedError,
)


def parse_base64(secret_value: str) -> str:
    """Decode a base64-encoded secret to text.

    Raises:
        MalformedCredentialDocumentError: If the value is not valid base64
    """
    try:
        return base64.b64decode(secret_value).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise MalformedCredentialDocumentError(
            "KUBECONFIG_BASE64 is not valid base64-encoded text", details=str(e)
        ) from e


def materialize_kubeconfig(
    environment: Mapping[str, str],
    working_dir: Path,
    constants: DeploymentConstants = DEFAULT_CONSTANTS,
) -> Path | None:
    """Write kubeconfig contents supplied through the environment to disk.

    ``KUBECONFIG_FILE`` holds the raw document and takes priority over
    ``KUBECONFIG_BASE64``.

    Args:
        environment: Environment to read credential material from
        working_dir: Directory the kubeconfig file is written to
        constants: Deployment constants

    Returns:
        Path of the written file, or None when no material was supplied
    """
    raw = environment.get(constants.KUBECONFIG_RAW_ENV)
    encoded = environment.get(constants.KUBECONFIG_BASE64_ENV)
    if raw:
        content = raw
    elif encoded:
        content = parse_base64(encoded)
    else:
        return None

    path = working_dir / constants.KUBECONFIG_FILE
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Wrote kubeconfig from environment to {path}")
    return path


class KubeconfigRewriter:
    """Derives a kubeconfig whose contexts all use an injected token user."""

    def __init__(
        self,
        working_dir: Path,
        constants: DeploymentConstants = DEFAULT_CONSTANTS,
    ) -> None:
        """Initialize the rewriter.

        Args:
            working_dir: Directory the derived kubeconfig is written to
            constants: Deployment constants
        """
        self.working_dir = working_dir
        self.constants = constants

    def inject_token(self, kubeconfig_path: Path | str | None, token: str) -> Path:
        """Create a rewritten kubeconfig that authenticates with ``token``.

        A user entry carrying the token is appended to ``users`` and every
        context is bound to it, replacing any previous per-context user.

        Args:
            kubeconfig_path: Source kubeconfig; ``~/.kube/config`` when None
            token: Bearer token for the cluster

        Returns:
            Path to the derived kubeconfig file

        Raises:
            CredentialFileNotFoundError: If the source file does not exist
            MalformedCredentialDocumentError: If the source cannot be parsed
            NoContextsDefinedError: If the source defines no contexts
        """
        source = (
            Path(kubeconfig_path)
            if kubeconfig_path
            else self.constants.default_kubeconfig
        )
        if not source.exists():
            raise CredentialFileNotFoundError(
                "Cannot find a kubeconfig file, which is required when using "
                "helm2 with the kube-token option",
                details=str(source),
            )

        document = self._load(source)
        contexts = document.get("contexts")
        if not contexts:
            raise NoContextsDefinedError(
                "Cannot find contexts in the kubeconfig file, which are required "
                "when using helm2 with the kube-token option",
                details=str(source),
            )
        if not isinstance(contexts, list):
            raise MalformedCredentialDocumentError(
                "Kubeconfig 'contexts' must be a list", details=str(source)
            )

        users = document.get("users") or []
        if not isinstance(users, list):
            raise MalformedCredentialDocumentError(
                "Kubeconfig 'users' must be a list", details=str(source)
            )

        user_name = self.constants.TOKEN_USER_NAME
        users = [
            u for u in users if not (isinstance(u, Mapping) and u.get("name") == user_name)
        ]
        users.append({"name": user_name, "user": {"token": token}})
        document["users"] = users

        for entry in contexts:
            if not isinstance(entry, dict):
                raise MalformedCredentialDocumentError(
                    "Kubeconfig context entries must be mappings", details=str(source)
                )
            context = entry.get("context")
            if not isinstance(context, dict):
                context = {}
                entry["context"] = context
            context["user"] = user_name

        target = self.working_dir / self.constants.TOKEN_KUBECONFIG_FILE
        with open(target, "w", encoding="utf-8") as f:
            yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)

        logger.debug(
            f"Bound {len(contexts)} context(s) in {source} to '{user_name}', "
            f"wrote {target}"
        )
        return target

    @staticmethod
    def _load(source: Path) -> dict[str, Any]:
        try:
            with open(source, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise MalformedCredentialDocumentError(
                f"Error parsing kubeconfig: {e}", details=str(source)
            ) from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise MalformedCredentialDocumentError(
                "Kubeconfig must be a mapping", details=str(source)
            )
        return loaded
