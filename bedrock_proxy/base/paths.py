"""Response path parsing and extraction.

A :class:`Path` is an ordered chain of access steps used to pull a text value
out of a decoded backend payload. The text form used by the model catalog is
dotted field names with bracketed list indexes::

    generation            -> field "generation"
    delta.text            -> field "delta", field "text"
    content[0].text       -> field "content", index 0, field "text"
    outputs[0].text       -> field "outputs", index 0, field "text"
    [0].generation        -> index 0, field "generation" (list at the root)

Resolution failures raise :class:`ExtractError` with one of three codes:

- ``PATH_NOT_FOUND``: a mapping lacks the requested field.
- ``INDEX_OUT_OF_RANGE``: a list is shorter than the requested index.
- ``TYPE_MISMATCH``: a step expects a mapping or list but finds something
  else (strings count as scalars), or the final value is not a string when
  text is requested.

Extraction is a pure function of ``(path, value)``; inputs are never mutated.
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Tuple, Union

from .errors import ErrorCode, ExtractError


@dataclass(frozen=True)
class FieldStep:
    """Access a mapping entry by key."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class IndexStep:
    """Access a list element by zero-based position."""

    index: int

    def __str__(self) -> str:
        return f"[{self.index}]"


Step = Union[FieldStep, IndexStep]

_SEGMENT_RE = re.compile(r"^(?P<name>[^.\[\]]+)?(?P<indexes>(?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


@dataclass(frozen=True)
class Path:
    """Immutable sequence of :class:`FieldStep` / :class:`IndexStep` items."""

    steps: Tuple[Step, ...]

    @classmethod
    def parse(cls, text: str) -> "Path":
        """Parse the dotted/indexed text form.

        Raises:
            ValueError: When ``text`` is empty or malformed (empty segments,
                unbalanced brackets, non-numeric indexes).
        """
        if not isinstance(text, str) or not text.strip():
            raise ValueError("path must be a non-empty string")
        steps: list[Step] = []
        for segment in text.strip().split("."):
            match = _SEGMENT_RE.match(segment)
            if not segment or match is None:
                raise ValueError(f"malformed path segment {segment!r} in {text!r}")
            name = match.group("name")
            indexes = match.group("indexes")
            if name is None and steps:
                raise ValueError(f"index segment {segment!r} must follow a field in {text!r}")
            if name is not None:
                steps.append(FieldStep(name))
            steps.extend(IndexStep(int(i)) for i in _INDEX_RE.findall(indexes))
        return cls(tuple(steps))

    def __str__(self) -> str:
        out = ""
        for step in self.steps:
            if isinstance(step, IndexStep):
                out += str(step)
            else:
                out += ("." if out else "") + step.name
        return out


def _is_list(node: Any) -> bool:
    return isinstance(node, Sequence) and not isinstance(node, (str, bytes, bytearray))


def resolve(path: Path, value: Any) -> Any:
    """Walk ``value`` along ``path`` and return the node found there.

    Raises:
        ExtractError: ``PATH_NOT_FOUND``, ``INDEX_OUT_OF_RANGE`` or
            ``TYPE_MISMATCH`` as described in the module docstring.
    """
    node = value
    for position, step in enumerate(path.steps):
        if isinstance(step, FieldStep):
            if not isinstance(node, Mapping):
                raise _error(ErrorCode.TYPE_MISMATCH, path, position, f"expected mapping, found {type(node).__name__}")
            if step.name not in node:
                raise _error(ErrorCode.PATH_NOT_FOUND, path, position, f"missing field {step.name!r}")
            node = node[step.name]
        else:
            if not _is_list(node):
                raise _error(ErrorCode.TYPE_MISMATCH, path, position, f"expected list, found {type(node).__name__}")
            if step.index >= len(node):
                raise _error(
                    ErrorCode.INDEX_OUT_OF_RANGE, path, position, f"index {step.index} out of range (len={len(node)})"
                )
            node = node[step.index]
    return node


def extract(path: Path, value: Any) -> str:
    """Return the string found at ``path`` inside ``value``.

    The returned string is the exact object present in the payload; nothing is
    stripped or re-encoded.
    """
    node = resolve(path, value)
    if not isinstance(node, str):
        raise _error(ErrorCode.TYPE_MISMATCH, path, len(path.steps), f"expected string, found {type(node).__name__}")
    return node


def _error(code: ErrorCode, path: Path, position: int, detail: str) -> ExtractError:
    where = str(Path(path.steps[:position])) or "<root>"
    return ExtractError(code=code, message=f"{detail} at {where}", path=str(path))


__all__ = ["Path", "FieldStep", "IndexStep", "Step", "resolve", "extract"]
