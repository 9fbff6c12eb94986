"""Prompt rendering from the diff bundle and template files."""

from __future__ import annotations

from pathlib import Path

import structlog

from convention_linter.errors import ConfigurationError
from convention_linter.schema import ChangedFile, DiffBundle, FileCategory, PromptPair

PROMPTS_DIR = Path(".github") / "prompts"
SYSTEM_TEMPLATE_NAME = "convention-linter-system.txt"
USER_TEMPLATE_NAME = "convention-linter-user.txt"
LEGACY_TEMPLATE_NAME = "convention-linter-prompt.txt"
DIFF_DATA_PLACEHOLDER = "__DIFF_DATA__"
LEGACY_PLACEHOLDER = "__DIFFS_PLACEHOLDER__"
LEGACY_USER_PREAMBLE = "Please analyze the following code changes:\n\n"

CONTENT_FENCE_LANGUAGES = {".ts": "typescript", ".js": "javascript"}

logger = structlog.get_logger(__name__)


def _path_list(paths: list[str]) -> str:
    return ", ".join(paths) if paths else "none"


def _render_file(changed_file: ChangedFile) -> list[str]:
    lines = [f"### File: {changed_file.path} (Type: {changed_file.category})", ""]
    if changed_file.diff_text:
        lines.extend(["#### Git Diff:", "```diff", changed_file.diff_text.rstrip("\n"), "```", ""])
    if changed_file.full_content is not None:
        language = CONTENT_FENCE_LANGUAGES.get(Path(changed_file.path).suffix, "")
        lines.extend(
            [
                "#### Complete File Content (for context):",
                f"```{language}",
                changed_file.full_content.rstrip("\n"),
                "```",
                "",
            ]
        )
    return lines


def render_diff_bundle(bundle: DiffBundle) -> str:
    """Render the bundle as Markdown: a change summary followed by per-file sections."""
    model_paths = bundle.paths_for(FileCategory.MODEL)
    migration_paths = bundle.paths_for(FileCategory.MIGRATION)
    other_paths = bundle.paths_for(FileCategory.OTHER)

    lines = [
        "## Change Summary",
        f"- Model files changed: {len(model_paths)} ({_path_list(model_paths)})",
        f"- Migration files changed: {len(migration_paths)} ({_path_list(migration_paths)})",
        f"- Other files changed: {len(other_paths)} ({_path_list(other_paths)})",
        "",
        "## Detailed Changes",
        "",
    ]
    for changed_file in bundle.files:
        lines.extend(_render_file(changed_file))
    return "\n".join(lines)


def assemble_prompts(bundle: DiffBundle, prompts_dir: Path = PROMPTS_DIR) -> PromptPair:
    """Build system and user prompts from the template pair, or the legacy template."""
    system_path = prompts_dir / SYSTEM_TEMPLATE_NAME
    user_path = prompts_dir / USER_TEMPLATE_NAME
    legacy_path = prompts_dir / LEGACY_TEMPLATE_NAME
    rendered = render_diff_bundle(bundle)

    if system_path.is_file() and user_path.is_file():
        system_prompt = system_path.read_text(encoding="utf-8")
        user_template = user_path.read_text(encoding="utf-8")
        if DIFF_DATA_PLACEHOLDER in user_template:
            user_prompt = user_template.replace(DIFF_DATA_PLACEHOLDER, rendered)
        else:
            logger.warning(
                "user_template_missing_placeholder",
                template=str(user_path),
                placeholder=DIFF_DATA_PLACEHOLDER,
            )
            user_prompt = f"{user_template.rstrip()}\n\n{rendered}"
        return PromptPair(system_prompt=system_prompt, user_prompt=user_prompt)

    if legacy_path.is_file():
        logger.warning(
            "legacy_prompt_template",
            template=str(legacy_path),
            hint="Split it into system and user prompts for better results.",
        )
        template = legacy_path.read_text(encoding="utf-8")
        system_prompt = template.split(LEGACY_PLACEHOLDER, 1)[0]
        return PromptPair(
            system_prompt=system_prompt,
            user_prompt=f"{LEGACY_USER_PREAMBLE}{rendered}",
            legacy=True,
        )

    raise ConfigurationError(
        "No prompt templates found. Create either:\n"
        f"  - {system_path} and {user_path} (recommended)\n"
        f"  - {legacy_path} (legacy)"
    )
