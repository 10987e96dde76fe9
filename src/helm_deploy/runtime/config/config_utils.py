"""Configuration template substitution utilities."""

import re
from collections.abc import Mapping

# ${VAR}, ${VAR:-default}, ${VAR:?message}; leaves ${{ ... }} untouched
_PLACEHOLDER = re.compile(r"\$\{([^{}]+)\}")


def substitute_env_vars(text: str, environment: Mapping[str, str]) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        # Handle default values: ${VAR:-default}
        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return environment.get(var_name, default)

        # Handle error messages: ${VAR:?message}
        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = environment.get(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        # Handle required variables: ${VAR}
        else:
            value = environment.get(var_expr)
            if value is None:
                raise ValueError(f"Required environment variable {var_expr} not set")
            return value

    return _PLACEHOLDER.sub(replacer, text)
