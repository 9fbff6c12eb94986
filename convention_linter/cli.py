"""Typer CLI for the convention linter."""

from __future__ import annotations

import structlog
import typer

from convention_linter.config import load_linter_config
from convention_linter.errors import ConfigurationError
from convention_linter.github_client import build_github_client
from convention_linter.linter import run_convention_linter
from convention_linter.logging_config import configure_logging
from convention_linter.prompts import (
    LEGACY_TEMPLATE_NAME,
    PROMPTS_DIR,
    SYSTEM_TEMPLATE_NAME,
    USER_TEMPLATE_NAME,
)
from convention_linter.providers import (
    GEMINI_SPEC,
    GITHUB_MODELS_SPEC,
    OPENAI_SPEC,
    build_review_client,
)

logger = structlog.get_logger(__name__)


def _provider_lines() -> str:
    return "\n".join(
        f"  {spec.key.value:<10} - {spec.display_name} ({spec.model})"
        for spec in (GITHUB_MODELS_SPEC, GEMINI_SPEC, OPENAI_SPEC)
    )


USAGE_EPILOG = f"""\b
Required environment variables:
  GITHUB_BASE_REF        Base branch for comparison
  CHANGED_FILES          Space-separated list of changed files
  GITHUB_REPOSITORY      Full repository name (owner/repo)
  PR_NUMBER              Pull request number
  GITHUB_TOKEN           GitHub API token (GH_TOKEN also accepted)

\b
Optional environment variables:
  AI_PROVIDER            github, gemini or openai (default: github)
  GEMINI_API_KEY         Required for the gemini provider
  OPENAI_API_KEY         Required for the openai provider
  POST_SUCCESS_COMMENTS  'true' to comment on passing checks
  DEBUG_THINKING         'true' for debug logs and Gemini reasoning traces
  VERDICT_POLICY         exact or contains (default: exact)
  REVIEW_TIMEOUT_SECONDS Review call timeout (default: 120)
  GITHUB_TIMEOUT_SECONDS GitHub call timeout (default: 20)

\b
Supported AI providers:
{_provider_lines()}

\b
Prompt files in {PROMPTS_DIR.as_posix()}/:
  {SYSTEM_TEMPLATE_NAME} and {USER_TEMPLATE_NAME}
  or legacy {LEGACY_TEMPLATE_NAME}
"""

HELP_CONTEXT = {"help_option_names": ["-h", "--help"]}

app = typer.Typer(
    help="Lint naming consistency between ORM models and migrations with an AI reviewer.",
    context_settings=HELP_CONTEXT,
    add_completion=False,
)


@app.command(epilog=USAGE_EPILOG, context_settings=HELP_CONTEXT)
def lint() -> None:
    """Review the pull request's model and migration changes and report the verdict."""
    configure_logging()
    try:
        config = load_linter_config()
    except ConfigurationError as error:
        logger.error("configuration_error", error=str(error))
        raise typer.Exit(code=1) from error

    if config.debug_thinking:
        configure_logging(debug=True)

    with (
        build_review_client(timeout_seconds=config.review_timeout_seconds) as review_client,
        build_github_client(
            config.github_token,
            timeout_seconds=config.github_timeout_seconds,
        ) as github_client,
    ):
        outcome = run_convention_linter(
            config,
            review_client=review_client,
            github_client=github_client,
        )

    raise typer.Exit(code=outcome.exit_code)
