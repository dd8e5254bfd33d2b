"""Prompt templates for the marketing plan steps.

Values are embedded verbatim. Nothing here escapes or sanitizes user input or
model output.
"""

from __future__ import annotations

from marketing_workflow.workflow.models import BrandingCopy

BRANDING_PROMPT = """\
You are a product marketer and copywriter.
Your job is to create captivating marketing copy and headlines for announcing a new product feature.
You must brand the feature with a compelling name, create a captivating headline for social media,
and create a 2-sentence description for why it is so useful.
You must respond in a JSON object with the following keys: "feature_name", "headline", and "description".

The feature's technical description is: "{input}"
"""

BLOG_POST_PROMPT = """\
You are a content marketer.
Your job is to create compelling blog posts that announce new software features to developers.
You must write a blog post that explains why a software developer would use the feature
and include two different use cases for the new feature.

The feature's name is: "{feature_name}"
The blog post's headline is: "{headline}"
The feature's description is: "{description}"
"""

CORRECTION_PROMPT = """\
{original_prompt}
Your previous response could not be used: {reason}
Previous response:
{previous}

Respond again with only a JSON object that has exactly the keys "feature_name", "headline", and "description".
"""


def branding_prompt(feature_input: str) -> str:
    # str.format does not re-interpret braces inside substituted values.
    return BRANDING_PROMPT.format(input=feature_input)


def blog_post_prompt(branding: BrandingCopy) -> str:
    return BLOG_POST_PROMPT.format(
        feature_name=branding.feature_name,
        headline=branding.headline,
        description=branding.description,
    )


def correction_prompt(*, original_prompt: str, previous: str, reason: str) -> str:
    """Ask the model to fix a branding response that failed to parse."""

    return CORRECTION_PROMPT.format(
        original_prompt=original_prompt,
        previous=previous,
        reason=reason,
    )
