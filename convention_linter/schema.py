"""Data contracts shared by the linter stages."""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

PASS_TOKEN = "OK"


class FileCategory(StrEnum):
    """Categories a changed file can fall into."""

    MODEL = "model"
    MIGRATION = "migration"
    OTHER = "other"


class VerdictPolicy(StrEnum):
    """How reviewer text is matched against the pass token."""

    EXACT = "exact"
    CONTAINS = "contains"


class ChangedFile(BaseModel):
    """One changed path with its diff and, for schema files, its current content."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str = Field(min_length=1)
    diff_text: str = ""
    full_content: str | None = None
    category: FileCategory

    @model_validator(mode="after")
    def validate_full_content(self) -> ChangedFile:
        """Only model and migration files carry full content."""
        if self.category is FileCategory.OTHER and self.full_content is not None:
            raise ValueError("full_content is only allowed for model and migration files")
        return self


class DiffBundle(BaseModel):
    """Categorized set of changed files for one linter run."""

    model_config = ConfigDict(extra="forbid", protected_namespaces=())

    files: list[ChangedFile] = Field(default_factory=list)
    model_paths: frozenset[str] = frozenset()
    migration_paths: frozenset[str] = frozenset()
    other_paths: frozenset[str] = frozenset()

    @classmethod
    def from_files(cls, files: Iterable[ChangedFile]) -> DiffBundle:
        """Build a bundle and derive the per-category path sets."""
        ordered = list(files)
        return cls(
            files=ordered,
            model_paths=frozenset(f.path for f in ordered if f.category is FileCategory.MODEL),
            migration_paths=frozenset(
                f.path for f in ordered if f.category is FileCategory.MIGRATION
            ),
            other_paths=frozenset(f.path for f in ordered if f.category is FileCategory.OTHER),
        )

    @model_validator(mode="after")
    def validate_partition(self) -> DiffBundle:
        """Every file path sits in exactly the set matching its category."""
        sets = {
            FileCategory.MODEL: self.model_paths,
            FileCategory.MIGRATION: self.migration_paths,
            FileCategory.OTHER: self.other_paths,
        }
        for changed_file in self.files:
            for category, paths in sets.items():
                if (changed_file.path in paths) != (category is changed_file.category):
                    raise ValueError(
                        f"path '{changed_file.path}' is not partitioned by its category "
                        f"'{changed_file.category}'"
                    )
        union = self.model_paths | self.migration_paths | self.other_paths
        if union != {f.path for f in self.files}:
            raise ValueError("category path sets must cover exactly the bundled files")
        return self

    def paths_for(self, category: FileCategory) -> list[str]:
        """Return paths of one category in bundle order."""
        return [f.path for f in self.files if f.category is category]

    @property
    def has_reviewable_content(self) -> bool:
        """Whether any file has a diff or full content worth sending to a reviewer."""
        return any(f.diff_text or f.full_content for f in self.files)


class PromptPair(BaseModel):
    """System and user prompts sent to a review provider."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    system_prompt: str
    user_prompt: str = Field(min_length=1)
    legacy: bool = False


class ReviewVerdict(BaseModel):
    """Reviewer reply and the pass/fail decision derived from it."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    raw_text: str
    passed: bool
    policy: VerdictPolicy = VerdictPolicy.EXACT

    @classmethod
    def evaluate(cls, raw_text: str, policy: VerdictPolicy = VerdictPolicy.EXACT) -> ReviewVerdict:
        """Decide pass/fail for reviewer text under the given matching policy."""
        text = raw_text.strip()
        if policy is VerdictPolicy.EXACT:
            passed = text == PASS_TOKEN
        else:
            passed = PASS_TOKEN in text
        return cls(raw_text=raw_text, passed=passed, policy=policy)
