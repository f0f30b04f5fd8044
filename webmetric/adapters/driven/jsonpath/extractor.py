"""JSONPath extractor adapter built on jsonpath-ng.

Path expressions follow the template syntax of analysis templates:
``{$.data.value}``, ``{.items[*].count}`` or several templates in a row such
as ``{.a}{.b}``. Each braced expression yields one match-set; literal text
between expressions yields a match-set containing that text.
"""

from __future__ import annotations

import logging
from typing import Any

from jsonpath_ng import JSONPath
from jsonpath_ng.ext import parse

from webmetric.core.errors import ConfigurationError, ExtractionError
from webmetric.ports.metric import Metric

__all__ = [
    "DEFAULT_JSON_PATH",
    "JsonPathExtractor",
    "compile_json_path",
    "new_json_path_extractor",
]

logger = logging.getLogger(__name__)

DEFAULT_JSON_PATH = "{$}"

# A compiled segment is either a JSONPath expression or literal text.
_Segment = JSONPath | str


def _split_template(template: str) -> list[tuple[bool, str]]:
    """Split a template into (is_expression, text) pairs.

    Braces inside quoted strings are part of the expression.

    Raises:
        ConfigurationError: On unbalanced braces or quotes.
    """
    if "{" not in template and "}" not in template:
        return [(True, template.strip())]

    segments: list[tuple[bool, str]] = []
    buf: list[str] = []
    depth = 0
    quote: str | None = None

    for ch in template:
        if quote:
            buf.append(ch)
            if ch == quote:
                quote = None
            continue
        if depth and ch in ("'", '"'):
            quote = ch
            buf.append(ch)
        elif ch == "{":
            if depth == 0 and buf:
                segments.append((False, "".join(buf)))
                buf = []
            elif depth:
                buf.append(ch)
            depth += 1
        elif ch == "}":
            if depth == 0:
                raise ConfigurationError(f"unexpected '}}' in JSONPath {template!r}")
            depth -= 1
            if depth == 0:
                segments.append((True, "".join(buf).strip()))
                buf = []
            else:
                buf.append(ch)
        else:
            buf.append(ch)

    if depth or quote:
        raise ConfigurationError(f"unclosed expression in JSONPath {template!r}")
    if buf:
        segments.append((False, "".join(buf)))
    return segments


def _normalize(expression: str) -> str:
    """Root relative expressions at ``$`` (``.a.b`` -> ``$.a.b``)."""
    if not expression or expression == "$":
        return "$"
    if expression.startswith("$"):
        return expression
    if expression.startswith((".", "[")):
        return "$" + expression
    return "$." + expression


class JsonPathExtractor:
    """Compiled, immutable path expression.

    Safe to share between concurrent invocations: find() never mutates the
    extractor.
    """

    __slots__ = ("_segments", "template")

    def __init__(self, template: str, segments: tuple[_Segment, ...]) -> None:
        self.template = template
        self._segments = segments

    def find(self, data: Any) -> list[list[Any]]:
        """Apply the expression to a decoded JSON document.

        Args:
            data: Parsed JSON value (dict, list, str, int, float, bool or None).

        Returns:
            One list of matched values per template segment, in order.

        Raises:
            ExtractionError: If the expression cannot be applied to the document.
        """
        results: list[list[Any]] = []
        for segment in self._segments:
            if isinstance(segment, str):
                results.append([segment])
                continue
            try:
                matches = segment.find(data)
            except Exception as e:  # noqa: BLE001 - jsonpath-ng raises plain exceptions
                raise ExtractionError(f"Could not find JSONPath in body: {e}") from e
            results.append([match.value for match in matches])
        return results


def compile_json_path(template: str) -> JsonPathExtractor:
    """Compile a path template.

    Args:
        template: Template string; empty selects the whole document.

    Returns:
        Compiled extractor.

    Raises:
        ConfigurationError: If the template or any expression is invalid.
    """
    template = template or DEFAULT_JSON_PATH
    segments: list[_Segment] = []
    for is_expression, text in _split_template(template):
        if not is_expression:
            segments.append(text)
            continue
        expression = _normalize(text)
        try:
            segments.append(parse(expression))
        except Exception as e:  # noqa: BLE001 - lexer/parser errors have no common base
            raise ConfigurationError(f"invalid JSONPath {template!r}: {e}") from e

    logger.debug(f"Compiled JSONPath {template!r} into {len(segments)} segment(s)")
    return JsonPathExtractor(template, tuple(segments))


def new_json_path_extractor(metric: Metric) -> JsonPathExtractor:
    """Compile the path expression of a metric.

    Args:
        metric: Metric whose web provider holds the path expression.

    Returns:
        Extractor bound to this metric definition.

    Raises:
        ConfigurationError: If the path expression is invalid.
    """
    return compile_json_path(metric.provider.web.json_path)
