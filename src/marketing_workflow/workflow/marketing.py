"""The "Create marketing plan" workflow.

Triggered by a feature event, it brands the feature, drafts an announcement blog
post from the branding, optionally saves both, and returns them together. The
completion provider is injected when the workflow is registered.
"""

from __future__ import annotations

import logging

from marketing_workflow.config import WorkflowSettings
from marketing_workflow.llm.provider import LLMProvider
from marketing_workflow.storage.results import ResultStore
from marketing_workflow.workflow.events import feature_input
from marketing_workflow.workflow.models import (
    BlogPost,
    BrandingResult,
    FeatureRecord,
    WorkflowResult,
)
from marketing_workflow.workflow.runtime import (
    RunContext,
    Step,
    WorkflowFunction,
    WorkflowRuntime,
)
from marketing_workflow.workflow.state_machine import RunState
from marketing_workflow.workflow.steps import (
    BLOG_POST_STEP,
    BRANDING_STEP,
    StepOptions,
    draft_blog_post,
    generate_feature_branding,
)

logger = logging.getLogger(__name__)

FUNCTION_ID = "create-marketing-plan"
FUNCTION_NAME = "Create marketing plan"
SAVE_STEP = "Save to DB"


def register_marketing_plan(
    runtime: WorkflowRuntime,
    *,
    llm: LLMProvider,
    settings: WorkflowSettings,
    results: ResultStore | None = None,
) -> WorkflowFunction:
    """Register the marketing plan function on ``runtime``.

    Results are saved only when ``settings.persist_results`` is set and a store is
    given.
    """
    options = StepOptions.from_settings(settings)
    store = results if settings.persist_results else None

    @runtime.create_function(fn_id=FUNCTION_ID, name=FUNCTION_NAME, event=settings.event_name)
    def create_marketing_plan(ctx: RunContext, step: Step) -> WorkflowResult:
        text = feature_input(ctx.event)
        if ctx.attempt > 1:
            logger.info(
                "Resuming marketing plan from recorded steps",
                extra={"run_id": ctx.run_id, "attempt": ctx.attempt},
            )

        branding = step.run(
            BRANDING_STEP,
            lambda: generate_feature_branding(llm, text, options),
            model=BrandingResult,
            running=RunState.BRANDING_RUNNING,
            done=RunState.BRANDING_DONE,
        )

        blog_post = step.run(
            BLOG_POST_STEP,
            lambda: draft_blog_post(llm, branding, options),
            model=BlogPost,
            running=RunState.BLOG_POST_RUNNING,
            done=RunState.BLOG_POST_DONE,
        )

        if store is not None:
            step.run(
                SAVE_STEP,
                lambda: store.save(
                    FeatureRecord(
                        run_id=ctx.run_id,
                        input=text,
                        name=branding.result.feature_name,
                        title=branding.result.headline,
                        description=branding.result.description,
                        blog_post=blog_post.result,
                    )
                ),
                model=FeatureRecord,
                running=RunState.SAVING,
                done=RunState.SAVED,
            )

        return WorkflowResult(feature_branding=branding, blog_post=blog_post)

    return create_marketing_plan
