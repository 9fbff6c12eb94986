"""Changed-file classification and git diff retrieval."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path, PurePosixPath

import structlog

from convention_linter.errors import GitCommandError
from convention_linter.schema import ChangedFile, DiffBundle, FileCategory

MODEL_SUFFIXES = (".model.ts", ".model.js")
MIGRATION_SUFFIXES = (".ts", ".js")
MIGRATIONS_DIR_NAME = "migrations"
REMOTE_NAME = "origin"
GIT_TIMEOUT_SECONDS = 120

GitRunner = Callable[[Sequence[str], Path], str]

logger = structlog.get_logger(__name__)


def run_git(
    args: Sequence[str],
    cwd: Path,
    *,
    timeout_seconds: float = GIT_TIMEOUT_SECONDS,
) -> str:
    """Run a git command and return stdout, raising GitCommandError on failure.

    Output is decoded as UTF-8 and undecodable bytes are replaced.
    """
    command = ["git", *args]
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout_seconds,
            check=False,
        )
    except subprocess.TimeoutExpired as error:
        raise GitCommandError(
            f"{' '.join(command)} timed out after {timeout_seconds}s.",
            command=command,
        ) from error
    except OSError as error:
        raise GitCommandError(
            f"Could not run {' '.join(command)}: {error}",
            command=command,
        ) from error
    if completed.returncode != 0:
        raise GitCommandError(
            f"{' '.join(command)} exited with status {completed.returncode}.",
            command=command,
            stderr=completed.stderr.strip(),
        )
    return completed.stdout


def classify_path(path: str) -> FileCategory:
    """Categorize a changed path by suffix and location."""
    normalized = path.replace("\\", "/")
    if normalized.endswith(MODEL_SUFFIXES):
        return FileCategory.MODEL
    directories = PurePosixPath(normalized).parts[:-1]
    if MIGRATIONS_DIR_NAME in directories and normalized.endswith(MIGRATION_SUFFIXES):
        return FileCategory.MIGRATION
    return FileCategory.OTHER


def fetch_base_ref(
    base_ref: str,
    *,
    runner: GitRunner = run_git,
    repo_root: Path = Path("."),
) -> None:
    """Fetch the base branch so origin/<base_ref> is available for diffs."""
    if not base_ref or base_ref.startswith("-"):
        raise GitCommandError(
            f"Refusing to fetch invalid base ref '{base_ref}'.",
            command=["git", "fetch", REMOTE_NAME, base_ref],
        )
    logger.info("fetching_base_ref", base_ref=base_ref)
    runner(["fetch", REMOTE_NAME, base_ref], repo_root)


def fetch_file_diff(
    path: str,
    base_ref: str,
    *,
    runner: GitRunner = run_git,
    repo_root: Path = Path("."),
) -> str:
    """Return the diff of one path between origin/<base_ref> and HEAD."""
    return runner(["diff", f"{REMOTE_NAME}/{base_ref}", "HEAD", "--", path], repo_root)


def read_full_content(path: str, *, repo_root: Path = Path(".")) -> str | None:
    """Read the current content of a file, or None when it is missing or unreadable."""
    file_path = repo_root / path
    if not file_path.is_file():
        return None
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as error:
        logger.warning("file_content_unreadable", path=path, error=str(error))
        return None


def _unique_paths(changed_paths: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for path in changed_paths:
        if path and path not in seen:
            seen.add(path)
            ordered.append(path)
    return ordered


def classify_changed_files(
    changed_paths: Iterable[str],
    base_ref: str,
    *,
    runner: GitRunner = run_git,
    repo_root: Path = Path("."),
) -> DiffBundle:
    """Build a categorized diff bundle for the changed paths, in input order."""
    files: list[ChangedFile] = []
    for path in _unique_paths(changed_paths):
        logger.info("processing_diff", path=path)
        try:
            diff_text = fetch_file_diff(path, base_ref, runner=runner, repo_root=repo_root)
        except GitCommandError as error:
            logger.warning(
                "diff_unavailable",
                path=path,
                error=str(error),
                stderr=error.stderr,
            )
            diff_text = ""

        category = classify_path(path)
        full_content = None
        if category is not FileCategory.OTHER:
            full_content = read_full_content(path, repo_root=repo_root)
            if full_content is not None:
                logger.info("full_content_loaded", path=path, category=str(category))

        files.append(
            ChangedFile(
                path=path,
                diff_text=diff_text,
                full_content=full_content,
                category=category,
            )
        )

    bundle = DiffBundle.from_files(files)
    logger.info(
        "diff_bundle_built",
        total=len(bundle.files),
        models=len(bundle.model_paths),
        migrations=len(bundle.migration_paths),
        other=len(bundle.other_paths),
    )
    return bundle
