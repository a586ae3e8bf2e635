"""Parse fund documents arriving as JSON text or as already-parsed structures."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping

from esg_pipeline.errors import ParseError

log = logging.getLogger(__name__)


def load_document(source: str | bytes | bytearray | Mapping[str, Any]) -> dict[str, Any]:
    """Return the fund document as a dict.

    Strings and bytes are decoded as JSON; mappings are accepted as already
    parsed. The caller's mapping is never modified.

    Args:
        source: JSON text or a parsed mapping.

    Returns:
        The top-level JSON object.

    Raises:
        ParseError: if the text is not valid JSON or its top level is not an object.
    """
    if isinstance(source, Mapping):
        return dict(source)

    if isinstance(source, (bytes, bytearray)):
        try:
            source = source.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(f"Input is not valid UTF-8: {exc}") from exc

    if not isinstance(source, str):
        raise ParseError(f"Unsupported input type: {type(source).__name__}")

    try:
        doc = json.loads(source, parse_constant=_reject_constant)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc

    if not isinstance(doc, dict):
        raise ParseError(f"Top-level JSON value must be an object, got {type(doc).__name__}")

    log.debug("Parsed input document with keys %s", sorted(doc))
    return doc


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ParseError(f"Invalid JSON constant: {name}")
