"""
Maps a procedure call onto an HTTP request.

Queries are GETs with the input in an ``input`` query parameter, mutations
are POSTs and subscription polls are PATCHes, both with an ``{"input": ...}``
JSON body.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Callable
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict

from .errors import UnhandledProcedureTypeError
from .transformer import DataTransformer

# Characters encodeURIComponent leaves alone besides alphanumerics
_URI_COMPONENT_SAFE = "-_.!~*'()"


class ProcedureType(str, Enum):
    """The three kinds of remote procedure."""

    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


class Procedure(BaseModel):
    """One procedure call. ``input`` of None means no input."""

    model_config = ConfigDict(frozen=True)

    kind: ProcedureType
    path: str
    input: Any = None


class HttpIntent(BaseModel):
    """Method, URL and body of the HTTP request for a procedure call."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    body: str | None = None


def _to_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _input_body(procedure: Procedure, transformer: DataTransformer) -> str:
    # Absent input is never handed to the transformer and leaves no key behind
    if procedure.input is None:
        return _to_json({})
    return _to_json({"input": transformer.serialize(procedure.input)})


def _build_query(procedure: Procedure, base_url: str, transformer: DataTransformer) -> HttpIntent:
    url = f"{base_url}/{procedure.path}"
    if procedure.input is not None:
        encoded = _to_json(transformer.serialize(procedure.input))
        url += f"?input={quote(encoded, safe=_URI_COMPONENT_SAFE)}"
    return HttpIntent(method="GET", url=url)


def _build_mutation(procedure: Procedure, base_url: str, transformer: DataTransformer) -> HttpIntent:
    return HttpIntent(
        method="POST",
        url=f"{base_url}/{procedure.path}",
        body=_input_body(procedure, transformer),
    )


def _build_subscription(procedure: Procedure, base_url: str, transformer: DataTransformer) -> HttpIntent:
    # PATCH keeps subscription polls apart from mutations at the routing layer
    return HttpIntent(
        method="PATCH",
        url=f"{base_url}/{procedure.path}",
        body=_input_body(procedure, transformer),
    )


_BUILDERS: dict[ProcedureType, Callable[[Procedure, str, DataTransformer], HttpIntent]] = {
    ProcedureType.QUERY: _build_query,
    ProcedureType.MUTATION: _build_mutation,
    ProcedureType.SUBSCRIPTION: _build_subscription,
}


def coerce_procedure_type(kind: ProcedureType | str) -> ProcedureType:
    """Resolve a procedure kind, failing fast on anything unknown.

    Raises:
        UnhandledProcedureTypeError: If ``kind`` is not a known procedure type.
    """
    try:
        return ProcedureType(kind)
    except ValueError:
        raise UnhandledProcedureTypeError(kind) from None


def build_request(
    kind: ProcedureType | str,
    path: str,
    input: Any = None,
    *,
    base_url: str,
    transformer: DataTransformer,
) -> HttpIntent:
    """Build the HTTP intent for a procedure call.

    Args:
        kind: Procedure type (query, mutation or subscription).
        path: Procedure path, appended to ``base_url``.
        input: Procedure input; None means no input.
        base_url: Router endpoint without a trailing slash.
        transformer: Transformer whose ``serialize`` is applied to the input.

    Returns:
        The method, URL and body to send.

    Raises:
        UnhandledProcedureTypeError: If ``kind`` is not a known procedure type.
    """
    procedure = Procedure(kind=coerce_procedure_type(kind), path=path, input=input)
    return _BUILDERS[procedure.kind](procedure, base_url, transformer)
