"""Tests for prompt rendering and template selection."""

from __future__ import annotations

from pathlib import Path

import pytest

from convention_linter.errors import ConfigurationError
from convention_linter.prompts import (
    LEGACY_PLACEHOLDER,
    LEGACY_TEMPLATE_NAME,
    PROMPTS_DIR,
    SYSTEM_TEMPLATE_NAME,
    USER_TEMPLATE_NAME,
    assemble_prompts,
    render_diff_bundle,
)
from convention_linter.schema import ChangedFile, DiffBundle, FileCategory


def make_bundle() -> DiffBundle:
    """Build a bundle with one file of each category."""
    return DiffBundle.from_files(
        [
            ChangedFile(
                path="src/models/agent.model.ts",
                diff_text="@@ -1 +1 @@\n-old\n+new\n",
                full_content="export class Agent {}\n",
                category=FileCategory.MODEL,
            ),
            ChangedFile(
                path="src/migrations/20240101-init.js",
                diff_text="",
                full_content="module.exports = {};\n",
                category=FileCategory.MIGRATION,
            ),
            ChangedFile(path="README.md", diff_text="+docs", category=FileCategory.OTHER),
        ]
    )


@pytest.mark.unit
def test_render_diff_bundle_summary_and_sections() -> None:
    rendered = render_diff_bundle(make_bundle())

    assert rendered.startswith("## Change Summary\n")
    assert "- Model files changed: 1 (src/models/agent.model.ts)" in rendered
    assert "- Migration files changed: 1 (src/migrations/20240101-init.js)" in rendered
    assert "- Other files changed: 1 (README.md)" in rendered
    assert "### File: src/models/agent.model.ts (Type: model)" in rendered
    assert "```diff\n@@ -1 +1 @@\n-old\n+new\n```" in rendered
    assert "```typescript\nexport class Agent {}\n```" in rendered
    assert "```javascript\nmodule.exports = {};\n```" in rendered
    assert "### File: README.md (Type: other)" in rendered


@pytest.mark.unit
def test_render_diff_bundle_skips_empty_diff_block() -> None:
    rendered = render_diff_bundle(make_bundle())
    migration_section = rendered.split("### File: src/migrations/20240101-init.js")[1]
    migration_section = migration_section.split("### File:")[0]

    assert "#### Git Diff:" not in migration_section
    assert "#### Complete File Content (for context):" in migration_section


@pytest.mark.unit
def test_render_empty_categories_as_none() -> None:
    rendered = render_diff_bundle(DiffBundle.from_files([]))

    assert "- Model files changed: 0 (none)" in rendered
    assert "- Migration files changed: 0 (none)" in rendered


@pytest.mark.unit
def test_assemble_uses_modern_template_pair(prompts_repo: Path) -> None:
    prompts = assemble_prompts(make_bundle(), prompts_repo / PROMPTS_DIR)

    assert prompts.system_prompt == "You review naming."
    assert prompts.user_prompt.startswith("Check these changes:\n\n## Change Summary")
    assert "__DIFF_DATA__" not in prompts.user_prompt
    assert prompts.legacy is False


@pytest.mark.unit
def test_assemble_appends_when_user_template_lacks_placeholder(tmp_path: Path) -> None:
    prompts_dir = tmp_path / PROMPTS_DIR
    prompts_dir.mkdir(parents=True)
    (prompts_dir / SYSTEM_TEMPLATE_NAME).write_text("system", encoding="utf-8")
    (prompts_dir / USER_TEMPLATE_NAME).write_text("Review:\n", encoding="utf-8")

    prompts = assemble_prompts(make_bundle(), prompts_dir)

    assert prompts.user_prompt.startswith("Review:\n\n## Change Summary")


@pytest.mark.unit
def test_assemble_falls_back_to_legacy_template(tmp_path: Path) -> None:
    prompts_dir = tmp_path / PROMPTS_DIR
    prompts_dir.mkdir(parents=True)
    (prompts_dir / LEGACY_TEMPLATE_NAME).write_text(
        f"Legacy rules here.\n{LEGACY_PLACEHOLDER}\nTrailing text.", encoding="utf-8"
    )
    # Only half of the modern pair present still counts as absent.
    (prompts_dir / SYSTEM_TEMPLATE_NAME).write_text("unused", encoding="utf-8")

    prompts = assemble_prompts(make_bundle(), prompts_dir)

    assert prompts.legacy is True
    assert prompts.system_prompt == "Legacy rules here.\n"
    assert prompts.user_prompt.startswith(
        "Please analyze the following code changes:\n\n## Change Summary"
    )
    assert "Trailing text." not in prompts.user_prompt


@pytest.mark.unit
def test_assemble_without_templates_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="No prompt templates found"):
        assemble_prompts(make_bundle(), tmp_path / PROMPTS_DIR)


@pytest.mark.unit
def test_repository_ships_modern_templates() -> None:
    repo_root = Path(__file__).resolve().parents[1]

    prompts = assemble_prompts(make_bundle(), repo_root / PROMPTS_DIR)

    assert "OK" in prompts.system_prompt
    assert "## Change Summary" in prompts.user_prompt
