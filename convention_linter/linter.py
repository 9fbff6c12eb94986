"""Linter run orchestration: classify, assemble, review, report."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

import httpx
import structlog

from convention_linter.config import LinterConfig
from convention_linter.diff_classifier import (
    GitRunner,
    classify_changed_files,
    fetch_base_ref,
    run_git,
)
from convention_linter.errors import LinterError
from convention_linter.output import EXIT_FAILED, EXIT_PASSED, ReportContext, report
from convention_linter.prompts import PROMPTS_DIR, assemble_prompts
from convention_linter.providers import get_provider
from convention_linter.schema import ReviewVerdict

logger = structlog.get_logger(__name__)


class LinterStage(StrEnum):
    """Stages of one linter run."""

    CLASSIFYING = "classifying"
    ASSEMBLING = "assembling"
    REVIEWING = "reviewing"
    REPORTING = "reporting"
    DONE = "done"


@dataclass(frozen=True, slots=True)
class LinterOutcome:
    """Terminal state of a run: the stage it stopped in and its exit code."""

    stage: LinterStage
    exit_code: int
    verdict: ReviewVerdict | None = None
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.exit_code == EXIT_PASSED


def _failed(stage: LinterStage, error: LinterError) -> LinterOutcome:
    logger.error("linter_stage_failed", stage=str(stage), error=str(error))
    return LinterOutcome(stage=stage, exit_code=EXIT_FAILED, error=str(error))


def run_convention_linter(
    config: LinterConfig,
    *,
    review_client: httpx.Client,
    github_client: httpx.Client,
    runner: GitRunner = run_git,
) -> LinterOutcome:
    """Run every stage once and return the terminal outcome."""
    provider = get_provider(config.provider, debug_thinking=config.debug_thinking)
    logger.info("linter_started", provider=provider.spec.display_name)

    if not config.changed_files:
        logger.info("no_changed_files")
        return LinterOutcome(stage=LinterStage.DONE, exit_code=EXIT_PASSED)

    stage = LinterStage.CLASSIFYING
    try:
        fetch_base_ref(config.base_ref, runner=runner, repo_root=config.repo_root)
        bundle = classify_changed_files(
            config.changed_files,
            config.base_ref,
            runner=runner,
            repo_root=config.repo_root,
        )
        if not bundle.has_reviewable_content:
            logger.info("no_meaningful_diffs")
            return LinterOutcome(stage=LinterStage.DONE, exit_code=EXIT_PASSED)

        stage = LinterStage.ASSEMBLING
        prompts = assemble_prompts(bundle, config.repo_root / PROMPTS_DIR)

        stage = LinterStage.REVIEWING
        logger.info("calling_provider", provider=provider.spec.display_name)
        raw_text = provider.send(
            review_client,
            prompts.system_prompt,
            prompts.user_prompt,
            config.provider_credential,
        )
        verdict = ReviewVerdict.evaluate(raw_text, config.verdict_policy)
        logger.info(
            "review_result",
            passed=verdict.passed,
            policy=str(verdict.policy),
            text=raw_text,
        )

        stage = LinterStage.REPORTING
        context = ReportContext(
            pr_number=config.pr_number,
            repo_full_name=config.repo_full_name,
            provider_name=provider.spec.display_name,
            bundle=bundle,
            post_success_comments=config.post_success_comments,
        )
        exit_code = report(verdict, context, client=github_client)
    except LinterError as error:
        return _failed(stage, error)

    return LinterOutcome(stage=LinterStage.DONE, exit_code=exit_code, verdict=verdict)
