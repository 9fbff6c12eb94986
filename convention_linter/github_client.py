"""GitHub REST helpers for posting linter results to pull requests."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

GITHUB_API_BASE_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"

logger = structlog.get_logger(__name__)


class GitHubInputError(ValueError):
    """Raised when repository or PR input values are invalid."""


@dataclass(frozen=True, slots=True)
class CommentPostResult:
    """Outcome of one attempt to post a pull request comment."""

    posted: bool
    status_code: int | None = None
    error: str | None = None
    html_url: str | None = None


def parse_repo_full_name(repo_full_name: str) -> tuple[str, str]:
    """Parse and validate repository input in owner/repo format."""
    owner, separator, repo = repo_full_name.strip().partition("/")
    if not separator or not owner or not repo or "/" in repo:
        raise GitHubInputError(
            f"Invalid repo '{repo_full_name}'. Expected format is owner/repo."
        )
    return owner, repo


def validate_pr_number(pr_number: int) -> int:
    """Validate and normalize pull request number input."""
    if pr_number <= 0:
        raise GitHubInputError(f"Invalid PR number '{pr_number}'. Expected a positive integer.")
    return pr_number


def issue_comments_endpoint(repo_full_name: str, pr_number: int) -> str:
    """Build the issue-comments endpoint path for a pull request."""
    owner, repo = parse_repo_full_name(repo_full_name)
    return f"/repos/{owner}/{repo}/issues/{validate_pr_number(pr_number)}/comments"


def post_issue_comment(
    *,
    client: httpx.Client,
    repo_full_name: str,
    pr_number: int,
    body: str,
) -> CommentPostResult:
    """Post a comment on a pull request, reporting failure instead of raising."""
    endpoint = issue_comments_endpoint(repo_full_name, pr_number)
    try:
        response = client.post(endpoint, json={"body": body})
    except httpx.HTTPError as error:
        logger.error("comment_post_failed", endpoint=endpoint, error=str(error))
        return CommentPostResult(posted=False, error=f"network error ({error})")

    if not response.is_success:
        logger.error(
            "comment_post_failed",
            endpoint=endpoint,
            status_code=response.status_code,
            response=response.text,
        )
        return CommentPostResult(
            posted=False,
            status_code=response.status_code,
            error=response.text,
        )

    html_url: str | None = None
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and isinstance(payload.get("html_url"), str):
        html_url = payload["html_url"]
    logger.info("comment_posted", endpoint=endpoint, html_url=html_url)
    return CommentPostResult(posted=True, status_code=response.status_code, html_url=html_url)


def build_github_client(
    token: str,
    timeout_seconds: float = 20,
    *,
    trust_env: bool = True,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Build an authenticated GitHub HTTP client."""
    headers = {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    return httpx.Client(
        base_url=GITHUB_API_BASE_URL,
        headers=headers,
        timeout=timeout_seconds,
        trust_env=trust_env,
        transport=transport,
    )
