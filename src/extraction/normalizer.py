"""Normalization of raw model replies into SR&ED outputs.

A reply is classified as one of:

* ``StructuredSuccess``: the text (after fence stripping) parsed as JSON.
* ``ParseFailure``: the text did not parse; the raw reply is preserved.
* ``TransportFailure``: the gateway answered with a non-success status.

Lax mode mirrors the historical behaviour: any valid JSON is a success and
only ill-shaped leaves are dropped when the displayable output is built.
Strict mode validates against ``SREDOutput`` and demotes mismatches to
``ParseFailure``.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel, ValidationError

from src.extraction.exceptions import (
    ParseFailureError,
    PaymentRequiredError,
    RateLimitedError,
    UpstreamError,
)
from src.models import (
    BigPictureItem,
    CandidateProject,
    DraftingBullet,
    DraftingMaterial,
    ErrorKind,
    IterationItem,
    SREDOutput,
    WorkPerformedItem,
)

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```[ \t]*[\w+-]*[ \t]*\n?")
_CLOSING_FENCE = "```"

_LIST_BUCKETS: Dict[str, Type[BaseModel]] = {
    "candidate_projects": CandidateProject,
    "big_picture": BigPictureItem,
    "work_performed": WorkPerformedItem,
    "iterations": IterationItem,
}


@dataclass(frozen=True)
class StructuredSuccess:
    data: Any
    output: SREDOutput

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class ParseFailure:
    raw_text: str
    error: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def kind(self) -> ErrorKind:
        return ErrorKind.PARSE_FAILURE

    def to_exception(self) -> ParseFailureError:
        return ParseFailureError("Failed to parse LLM output as JSON", raw_content=self.raw_text)


@dataclass(frozen=True)
class TransportFailure:
    kind: ErrorKind
    status: int
    message: str
    body: str = ""

    @property
    def ok(self) -> bool:
        return False

    def to_exception(self) -> UpstreamError:
        if self.kind == ErrorKind.RATE_LIMITED:
            return RateLimitedError(self.message, upstream_status=self.status)
        if self.kind == ErrorKind.PAYMENT_REQUIRED:
            return PaymentRequiredError(self.message, upstream_status=self.status)
        return UpstreamError(self.message, upstream_status=self.status)


NormalizedReply = Union[StructuredSuccess, ParseFailure]


def strip_code_fences(text: str) -> str:
    """Remove a single markdown fence wrapping the reply, if present.

    Handles an opening fence with or without a language tag at the very start
    and a closing fence at the very end. Anything else is left untouched.
    """
    cleaned = text.strip()
    match = _OPENING_FENCE.match(cleaned)
    if match:
        cleaned = cleaned[match.end():]
    if cleaned.endswith(_CLOSING_FENCE):
        cleaned = cleaned[: -len(_CLOSING_FENCE)]
    return cleaned.strip()


def _resolve_path(data: Any, loc: Tuple[Any, ...]) -> List[Any]:
    """Longest prefix of a validation error location that exists in ``data``.

    Union and type tags that pydantic appends to ``loc`` are not keys of the
    input and end the walk.
    """
    path: List[Any] = []
    node = data
    for key in loc:
        if isinstance(node, dict) and key in node:
            node = node[key]
        elif isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
            node = node[key]
        else:
            break
        path.append(key)
    return path


def _drop_path(data: Any, path: List[Any]) -> None:
    parent = data
    for key in path[:-1]:
        parent = parent[key]
    if isinstance(parent, list):
        parent.pop(path[-1])
    else:
        del parent[path[-1]]


def _coerce_item(item: Any, model: Type[BaseModel], where: str) -> Optional[BaseModel]:
    if not isinstance(item, dict):
        logger.warning("Skipping non-object item in %s: %r", where, item)
        return None
    pruned = copy.deepcopy(item)
    while True:
        try:
            return model.model_validate(pruned)
        except ValidationError as exc:
            path = _resolve_path(pruned, tuple(exc.errors()[0].get("loc", ())))
            if not path:
                logger.warning("Dropping unusable %s item: %s", where, exc.errors()[0].get("msg"))
                return None
            # A bad list element (one citation) goes whole; other leaves go alone.
            indexes = [i for i, key in enumerate(path) if isinstance(key, int)]
            if indexes:
                path = path[: indexes[-1] + 1]
            logger.warning("Dropping invalid value at %s.%s", where, ".".join(str(k) for k in path))
            _drop_path(pruned, path)


def _coerce_items(value: Any, model: Type[BaseModel], where: str) -> List[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        logger.warning("Expected a list for %s, got %s; using empty", where, type(value).__name__)
        return []
    items = (_coerce_item(item, model, where) for item in value)
    return [item for item in items if item is not None]


def coerce_output(data: Any) -> SREDOutput:
    """Build a displayable SREDOutput from loosely shaped JSON.

    Absent or ill-typed buckets become empty. Within an item only the
    offending leaf is dropped (one bad citation, one non-string field); the
    rest of the item is kept as the model wrote it. Never raises.
    """
    if not isinstance(data, dict):
        logger.warning("Model reply is JSON but not an object; showing empty buckets")
        return SREDOutput()
    buckets: Dict[str, Any] = {
        name: _coerce_items(data.get(name), model, name) for name, model in _LIST_BUCKETS.items()
    }
    drafting = data.get("drafting_material")
    if not isinstance(drafting, dict):
        if drafting is not None:
            logger.warning("drafting_material is not an object; using empty sections")
        drafting = {}
    buckets["drafting_material"] = DraftingMaterial(
        **{
            name: _coerce_items(drafting.get(name), DraftingBullet, f"drafting_material.{name}")
            for name in DraftingMaterial.model_fields
        }
    )
    return SREDOutput(**buckets)


def validate_output(data: Any) -> SREDOutput:
    """Strict schema check: an object carrying all five buckets that validates."""
    if not isinstance(data, dict):
        raise ValueError("Reply is not a JSON object")
    missing = [name for name in SREDOutput.model_fields if name not in data]
    if missing:
        raise ValueError(f"Reply is missing buckets: {', '.join(missing)}")
    return SREDOutput.model_validate(data)


def normalize_reply(raw_text: str, *, strict: bool = False) -> NormalizedReply:
    """Parse a raw model reply into a structured success or a parse failure."""
    cleaned = strip_code_fences(raw_text or "")
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse LLM output as JSON: %s", exc)
        return ParseFailure(raw_text=raw_text, error=str(exc))

    if strict:
        try:
            output = validate_output(data)
        except (ValidationError, ValueError) as exc:
            logger.error("LLM output does not match the SR&ED schema: %s", exc)
            return ParseFailure(raw_text=raw_text, error=str(exc))
    else:
        output = coerce_output(data)

    logger.info("Successfully parsed LLM output")
    return StructuredSuccess(data=data, output=output)


def classify_gateway_status(status: int, body: str = "") -> Optional[TransportFailure]:
    """Map a gateway HTTP status to a transport failure; 2xx returns None."""
    if 200 <= status < 300:
        return None
    if status == 429:
        return TransportFailure(
            ErrorKind.RATE_LIMITED, status, "Rate limit exceeded. Please try again later.", body
        )
    if status == 402:
        return TransportFailure(
            ErrorKind.PAYMENT_REQUIRED,
            status,
            "Payment required. Please add credits to your workspace.",
            body,
        )
    return TransportFailure(ErrorKind.UPSTREAM, status, f"AI gateway error: {status}", body)
