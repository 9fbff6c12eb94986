"""Unit tests for GitHub comment posting helpers."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from convention_linter.github_client import (
    GITHUB_API_VERSION,
    GitHubInputError,
    build_github_client,
    issue_comments_endpoint,
    parse_repo_full_name,
    post_issue_comment,
    validate_pr_number,
)


def make_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.Client:
    """Create an authenticated GitHub client backed by mock transport."""
    return build_github_client("gh-token", transport=httpx.MockTransport(handler))


@pytest.mark.unit
def test_parse_repo_full_name_accepts_owner_repo() -> None:
    owner, repo = parse_repo_full_name("acme/agency-portal")
    assert owner == "acme"
    assert repo == "agency-portal"


@pytest.mark.unit
@pytest.mark.parametrize("value", ["acme", "acme/", "/repo", "acme/repo/extra"])
def test_parse_repo_full_name_rejects_invalid_format(value: str) -> None:
    with pytest.raises(GitHubInputError):
        parse_repo_full_name(value)


@pytest.mark.unit
def test_validate_pr_number_rejects_non_positive() -> None:
    assert validate_pr_number(7) == 7
    with pytest.raises(GitHubInputError):
        validate_pr_number(0)


@pytest.mark.unit
def test_issue_comments_endpoint() -> None:
    assert issue_comments_endpoint("acme/portal", 42) == "/repos/acme/portal/issues/42/comments"


@pytest.mark.unit
def test_post_issue_comment_success() -> None:
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(
            201,
            json={"id": 1, "html_url": "https://github.com/acme/portal/pull/42#issuecomment-1"},
        )

    with make_client(handler) as client:
        result = post_issue_comment(
            client=client,
            repo_full_name="acme/portal",
            pr_number=42,
            body="hello",
        )

    assert result.posted is True
    assert result.status_code == 201
    assert result.html_url == "https://github.com/acme/portal/pull/42#issuecomment-1"
    request = captured[0]
    assert request.method == "POST"
    assert request.url.path == "/repos/acme/portal/issues/42/comments"
    assert request.headers["Authorization"] == "Bearer gh-token"
    assert request.headers["X-GitHub-Api-Version"] == GITHUB_API_VERSION
    assert json.loads(request.content) == {"body": "hello"}


@pytest.mark.unit
def test_post_issue_comment_reports_http_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, text="Resource not accessible by integration")

    with make_client(handler) as client:
        result = post_issue_comment(
            client=client,
            repo_full_name="acme/portal",
            pr_number=42,
            body="hello",
        )

    assert result.posted is False
    assert result.status_code == 403
    assert result.error == "Resource not accessible by integration"


@pytest.mark.unit
def test_post_issue_comment_reports_network_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with make_client(handler) as client:
        result = post_issue_comment(
            client=client,
            repo_full_name="acme/portal",
            pr_number=42,
            body="hello",
        )

    assert result.posted is False
    assert result.status_code is None
    assert result.error is not None
    assert "connection refused" in result.error


@pytest.mark.unit
def test_post_issue_comment_treats_redirect_as_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            302,
            headers={"Location": "https://api.github.com/elsewhere"},
            text="redirected",
        )

    with make_client(handler) as client:
        result = post_issue_comment(
            client=client,
            repo_full_name="acme/portal",
            pr_number=42,
            body="hello",
        )

    assert result.posted is False
    assert result.status_code == 302
    assert result.html_url is None
