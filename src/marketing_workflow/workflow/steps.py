"""The two completion-backed steps of the marketing plan.

Steps are passive: they take fully materialised inputs and an injected provider,
make their completion calls, and return a result model. They never decide what
runs next and never catch provider errors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from marketing_workflow.config import WorkflowSettings
from marketing_workflow.errors import EmptyCompletionError
from marketing_workflow.llm.provider import LLMProvider
from marketing_workflow.workflow.models import BlogPost, BrandingResult
from marketing_workflow.workflow.parsing import Parsed, parse_branding
from marketing_workflow.workflow.prompts import (
    blog_post_prompt,
    branding_prompt,
    correction_prompt,
)

logger = logging.getLogger(__name__)

BRANDING_STEP = "Generate feature branding and copywriting"
BLOG_POST_STEP = "Draft announcement blog post"


@dataclass(frozen=True, slots=True)
class StepOptions:
    branding_max_tokens: int = 256
    blog_post_max_tokens: int = 1024
    malformed_response_policy: str = "fail"
    max_reprompts: int = 1
    allow_empty_blog_post: bool = False

    @classmethod
    def from_settings(cls, settings: WorkflowSettings) -> StepOptions:
        return cls(
            branding_max_tokens=settings.branding_max_tokens,
            blog_post_max_tokens=settings.blog_post_max_tokens,
            malformed_response_policy=settings.malformed_response_policy,
            max_reprompts=settings.max_reprompts,
            allow_empty_blog_post=settings.allow_empty_blog_post,
        )


def generate_feature_branding(
    llm: LLMProvider, feature_input: str, options: StepOptions | None = None
) -> BrandingResult:
    """Brand a feature: name, social headline and a two-sentence description.

    Raises:
        EmptyCompletionError: The provider returned no text.
        MalformedResponseError: The text is not the expected JSON object, after any
            correction prompts allowed by the reprompt policy.
    """
    opts = options or StepOptions()
    prompt = branding_prompt(feature_input)

    completion = llm.complete(prompt, max_tokens=opts.branding_max_tokens)
    reprompts_left = opts.max_reprompts if opts.malformed_response_policy == "reprompt" else 0

    while True:
        if not completion.text:
            raise EmptyCompletionError(BRANDING_STEP, completion_id=completion.id)

        parsed = parse_branding(completion.text)
        if isinstance(parsed, Parsed):
            break
        if reprompts_left <= 0:
            raise parsed.error

        logger.warning(
            "Branding completion was malformed; reprompting",
            extra={
                "completion_id": completion.id,
                "reason": parsed.error.reason,
                "reprompts_left": reprompts_left,
            },
        )
        reprompts_left -= 1
        completion = llm.complete(
            correction_prompt(
                original_prompt=prompt,
                previous=completion.text,
                reason=parsed.error.reason,
            ),
            max_tokens=opts.branding_max_tokens,
        )

    branding = parsed.value
    logger.info(
        "Feature branded",
        extra={"completion_id": completion.id, "feature_name": branding.feature_name},
    )
    return BrandingResult(completion_id=completion.id, result=branding)


def draft_blog_post(
    llm: LLMProvider, branding: BrandingResult, options: StepOptions | None = None
) -> BlogPost:
    """Expand branding copy into an announcement blog post.

    The completion text is returned unparsed.
    """
    opts = options or StepOptions()

    completion = llm.complete(
        blog_post_prompt(branding.result),
        max_tokens=opts.blog_post_max_tokens,
    )

    if not completion.text:
        if not opts.allow_empty_blog_post:
            raise EmptyCompletionError(BLOG_POST_STEP, completion_id=completion.id)
        logger.warning("Blog post completion was empty", extra={"completion_id": completion.id})
        return BlogPost(completion_id=completion.id, result=None)

    logger.info(
        "Blog post drafted",
        extra={"completion_id": completion.id, "characters": len(completion.text)},
    )
    return BlogPost(completion_id=completion.id, result=completion.text)
