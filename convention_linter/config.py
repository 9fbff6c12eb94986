"""Linter configuration assembled once from the process environment."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from convention_linter.errors import ConfigurationError
from convention_linter.github_client import parse_repo_full_name, validate_pr_number
from convention_linter.providers import ProviderKey, get_provider
from convention_linter.schema import VerdictPolicy

REQUIRED_ENV_VARS = ("GITHUB_BASE_REF", "CHANGED_FILES", "GITHUB_REPOSITORY", "PR_NUMBER")
EMPTY_ALLOWED_ENV_VARS = frozenset({"CHANGED_FILES"})
DEFAULT_PROVIDER = ProviderKey.GITHUB
DEFAULT_REVIEW_TIMEOUT_SECONDS = 120.0
DEFAULT_GITHUB_TIMEOUT_SECONDS = 20.0
TRUE_VALUES = frozenset({"true"})


@dataclass(frozen=True, slots=True)
class LinterConfig:
    """Immutable settings for one linter run."""

    base_ref: str
    changed_files: tuple[str, ...]
    repo_full_name: str
    pr_number: int
    github_token: str
    provider: ProviderKey
    provider_credential: str
    post_success_comments: bool = False
    debug_thinking: bool = False
    verdict_policy: VerdictPolicy = VerdictPolicy.EXACT
    review_timeout_seconds: float = DEFAULT_REVIEW_TIMEOUT_SECONDS
    github_timeout_seconds: float = DEFAULT_GITHUB_TIMEOUT_SECONDS
    repo_root: Path = Path(".")


def load_linter_config(
    environ: Mapping[str, str] | None = None,
    *,
    load_env_file: bool = True,
) -> LinterConfig:
    """Build a LinterConfig from environment variables, failing fast on bad input."""
    if environ is None:
        if load_env_file:
            load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
        environ = os.environ

    missing = [
        name
        for name in REQUIRED_ENV_VARS
        if environ.get(name) is None
        or (name not in EMPTY_ALLOWED_ENV_VARS and not environ[name].strip())
    ]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}."
        )

    github_token = environ.get("GITHUB_TOKEN") or environ.get("GH_TOKEN")
    if not github_token:
        raise ConfigurationError("Missing GitHub token. Set GITHUB_TOKEN (preferred) or GH_TOKEN.")

    provider = parse_provider_key(environ.get("AI_PROVIDER"))
    credential_var = get_provider(provider).spec.credential_env_var
    provider_credential = environ.get(credential_var)
    if provider is ProviderKey.GITHUB and not provider_credential:
        provider_credential = github_token
    if not provider_credential:
        raise ConfigurationError(
            f"Missing required environment variable: {credential_var} for provider: {provider}"
        )

    repo_full_name = environ["GITHUB_REPOSITORY"].strip()
    try:
        parse_repo_full_name(repo_full_name)
        pr_number = validate_pr_number(_parse_int(environ["PR_NUMBER"], name="PR_NUMBER"))
    except ValueError as error:
        raise ConfigurationError(str(error)) from error

    return LinterConfig(
        base_ref=environ["GITHUB_BASE_REF"].strip(),
        changed_files=tuple(environ["CHANGED_FILES"].split()),
        repo_full_name=repo_full_name,
        pr_number=pr_number,
        github_token=github_token,
        provider=provider,
        provider_credential=provider_credential,
        post_success_comments=_parse_flag(environ.get("POST_SUCCESS_COMMENTS")),
        debug_thinking=_parse_flag(environ.get("DEBUG_THINKING")),
        verdict_policy=_parse_verdict_policy(environ.get("VERDICT_POLICY")),
        review_timeout_seconds=_parse_timeout(
            environ.get("REVIEW_TIMEOUT_SECONDS"),
            name="REVIEW_TIMEOUT_SECONDS",
            default=DEFAULT_REVIEW_TIMEOUT_SECONDS,
        ),
        github_timeout_seconds=_parse_timeout(
            environ.get("GITHUB_TIMEOUT_SECONDS"),
            name="GITHUB_TIMEOUT_SECONDS",
            default=DEFAULT_GITHUB_TIMEOUT_SECONDS,
        ),
        repo_root=Path(environ.get("LINTER_REPO_ROOT") or "."),
    )


def parse_provider_key(value: str | None) -> ProviderKey:
    """Parse AI_PROVIDER, defaulting to the primary provider."""
    if not value:
        return DEFAULT_PROVIDER
    try:
        return ProviderKey(value.strip().lower())
    except ValueError as error:
        supported = ", ".join(key.value for key in ProviderKey)
        raise ConfigurationError(
            f"Invalid AI provider: {value}. Supported providers: {supported}"
        ) from error


def _parse_flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in TRUE_VALUES


def _parse_verdict_policy(value: str | None) -> VerdictPolicy:
    if not value:
        return VerdictPolicy.EXACT
    try:
        return VerdictPolicy(value.strip().lower())
    except ValueError as error:
        raise ConfigurationError(
            f"VERDICT_POLICY must be 'exact' or 'contains', got '{value}'."
        ) from error


def _parse_int(value: str, *, name: str) -> int:
    try:
        return int(value.strip())
    except ValueError as error:
        raise ConfigurationError(f"{name} must be an integer, got '{value}'.") from error


def _parse_timeout(value: str | None, *, name: str, default: float) -> float:
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError as error:
        raise ConfigurationError(f"{name} must be a number of seconds, got '{value}'.") from error
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive, got '{value}'.")
    return parsed
