"""Fallible parsing of model output.

``parse_branding`` never raises for bad model output: it returns either
``Parsed`` or ``ParseFailed`` and leaves the decision to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import ValidationError

from marketing_workflow.errors import MalformedResponseError
from marketing_workflow.workflow.models import BrandingCopy


@dataclass(frozen=True, slots=True)
class Parsed:
    value: BrandingCopy


@dataclass(frozen=True, slots=True)
class ParseFailed:
    error: MalformedResponseError


ParseResult = Parsed | ParseFailed


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()))
        msg = err.get("msg", "invalid")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_branding(text: str) -> ParseResult:
    """Parse a completion into branding copy.

    The text must be a JSON object with exactly the keys ``feature_name``,
    ``headline`` and ``description``, all strings.
    """

    try:
        value = BrandingCopy.model_validate_json(text)
    except ValidationError as e:
        return ParseFailed(MalformedResponseError(_describe(e), raw_text=text))
    return Parsed(value)
