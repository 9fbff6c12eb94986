"""Pull request comment rendering and exit-code reporting."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from convention_linter.github_client import CommentPostResult, post_issue_comment
from convention_linter.schema import DiffBundle, ReviewVerdict

COMMENT_MARKER = "<!-- convention-linter -->"
EXIT_PASSED = 0
EXIT_FAILED = 1

logger = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ReportContext:
    """Where and how to report one verdict."""

    pr_number: int
    repo_full_name: str
    provider_name: str
    bundle: DiffBundle
    post_success_comments: bool = False


def _render_counts(context: ReportContext) -> list[str]:
    bundle = context.bundle
    return [
        f"**AI Provider:** {context.provider_name}",
        f"**Files Analyzed:** {len(bundle.files)}",
        f"- Model files: {len(bundle.model_paths)}",
        f"- Migration files: {len(bundle.migration_paths)}",
        "",
    ]


def render_failure_comment(verdict: ReviewVerdict, context: ReportContext) -> str:
    """Render the Markdown comment posted when violations are found."""
    lines = [COMMENT_MARKER, "## 🚨 Convention Linter Analysis", ""]
    lines.extend(_render_counts(context))
    lines.extend(["### ❌ Issues Found", "", "```", verdict.raw_text.strip(), "```"])
    return "\n".join(lines)


def render_success_comment(context: ReportContext) -> str:
    """Render the Markdown comment posted when every check passes."""
    lines = [COMMENT_MARKER, "## ✅ Convention Linter Passed!", ""]
    lines.extend(_render_counts(context))
    lines.append("All naming conventions and structural integrity checks passed successfully! 🎉")
    return "\n".join(lines)


def report(verdict: ReviewVerdict, context: ReportContext, *, client: httpx.Client) -> int:
    """Post the verdict to the pull request and return the process exit code."""
    result: CommentPostResult | None = None
    if not verdict.passed:
        logger.warning("convention_violations_found", pr_number=context.pr_number)
        result = post_issue_comment(
            client=client,
            repo_full_name=context.repo_full_name,
            pr_number=context.pr_number,
            body=render_failure_comment(verdict, context),
        )
        exit_code = EXIT_FAILED
    else:
        logger.info("convention_check_passed", pr_number=context.pr_number)
        if context.post_success_comments:
            result = post_issue_comment(
                client=client,
                repo_full_name=context.repo_full_name,
                pr_number=context.pr_number,
                body=render_success_comment(context),
            )
        exit_code = EXIT_PASSED

    if result is not None and not result.posted:
        logger.warning(
            "comment_not_posted",
            status_code=result.status_code,
            exit_code=exit_code,
        )
    return exit_code
