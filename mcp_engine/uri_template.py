"""URI template matching for resource routing.

A template is split on ``/`` into segments. A segment of the form ``{name}``
captures the corresponding segment of the candidate URI; every other segment
must match literally. Empty segments are skipped, so ``echo://{message}``
splits into ``["echo:", "{message}"]``.
"""

from __future__ import annotations

from typing import Optional

import structlog

logger = structlog.get_logger()


def split_segments(uri: str) -> list[str]:
    return [segment for segment in uri.split("/") if segment]


def placeholder_name(segment: str) -> Optional[str]:
    """Return ``name`` for a ``{name}`` segment, ``None`` for a literal."""
    if len(segment) >= 3 and segment[0] == "{" and segment[-1] == "}":
        return segment[1:-1]
    return None


def template_parameters(template: str) -> list[str]:
    """Placeholder names of *template*, in order of appearance."""
    names = []
    for segment in split_segments(template):
        name = placeholder_name(segment)
        if name is not None:
            names.append(name)
    return names


def match_template(template: str, uri: str) -> Optional[dict[str, str]]:
    """Match *uri* against *template*.

    Returns the captured parameters (possibly empty) on a match and ``None``
    otherwise. Callers must test ``is None``: a template without placeholders
    matches with an empty mapping.
    """
    template_segments = split_segments(template)
    uri_segments = split_segments(uri)

    if not template_segments or len(template_segments) != len(uri_segments):
        return None

    params: dict[str, str] = {}
    for expected, actual in zip(template_segments, uri_segments):
        name = placeholder_name(expected)
        if name is not None:
            params[name] = actual
        elif expected != actual:
            logger.debug("URI segment mismatch", template=template, expected=expected, actual=actual)
            return None

    return params
