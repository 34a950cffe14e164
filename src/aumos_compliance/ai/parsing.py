"""Extract and validate JSON from chat-model responses."""
from __future__ import annotations

import json
import re
from typing import TypeVar

from aumos_compliance.ai.results import AnalysisResult, ParseStatus

ResultT = TypeVar("ResultT", bound=AnalysisResult)

_FENCED = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def extract_json(response: str) -> str:
    """Return the JSON payload of a model response.

    Markdown code fences (```` ```json ... ``` ````) are stripped.  When
    the response has prose around the object, the outermost ``{...}`` is
    sliced out.

    Example
    -------
    >>> extract_json('```json\\n{"summary": "ok"}\\n```')
    '{"summary": "ok"}'
    """
    cleaned = response.strip()
    fenced = _FENCED.match(cleaned)
    if fenced:
        return fenced.group(1).strip()
    if cleaned.startswith("{"):
        return cleaned
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        return cleaned[start : end + 1]
    return cleaned


def parse_response(response: str, model: type[ResultT], **context: object) -> ResultT:
    """Validate a model response into ``model``.

    ``context`` fields (jurisdiction, query) come from the request and
    override whatever the model echoed back.

    Raises
    ------
    ValueError
        If the response holds no JSON object or fails validation.
        ``json.JSONDecodeError`` and pydantic's ``ValidationError`` are
        both ``ValueError`` subclasses.
    """
    payload = json.loads(extract_json(response))
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}.")
    payload.update(context)
    payload.pop("parseStatus", None)
    payload.pop("parse_status", None)
    return model.model_validate(payload)


def fallback_result(response: str, model: type[ResultT], **context: object) -> ResultT:
    """Build a ``FALLBACK`` result carrying the raw response as its summary."""
    return model(
        summary=response,
        parse_status=ParseStatus.FALLBACK,
        raw_response=response,
        **context,
    )
