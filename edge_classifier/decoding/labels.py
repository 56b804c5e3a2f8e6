"""Label dictionary loading: class index to human-readable label."""

from __future__ import annotations

import json
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import TextIO

from edge_classifier.errors import LabelSourceError


class LabelSet(Sequence):
    """Immutable, index-addressable sequence of class labels."""

    __slots__ = ("_labels",)

    def __init__(self, labels) -> None:
        self._labels = tuple(str(label) for label in labels)

    def __getitem__(self, index):
        return self._labels[index]

    def __len__(self) -> int:
        return len(self._labels)

    def __iter__(self) -> Iterator[str]:
        return iter(self._labels)

    def __eq__(self, other) -> bool:
        if isinstance(other, LabelSet):
            return self._labels == other._labels
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._labels)

    def __repr__(self) -> str:
        return f"LabelSet({len(self._labels)} labels)"


def _parse_lines(text: str) -> list[str]:
    # only "\n" ends a line; other Unicode line breaks may appear inside a label
    lines = [line[:-1] if line.endswith("\r") else line for line in text.split("\n")]
    while lines and not lines[-1].strip():
        lines.pop()
    return lines


def _parse_json(text: str, origin: str) -> list[str]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as error:
        raise LabelSourceError(f"Invalid JSON in label source {origin}: {error}") from error

    if isinstance(payload, list):
        return [str(label) for label in payload]
    if isinstance(payload, dict) and isinstance(payload.get("id_to_label"), dict):
        id_to_label = {}
        for key, value in payload["id_to_label"].items():
            try:
                id_to_label[int(key)] = value
            except ValueError as error:
                raise LabelSourceError(
                    f"Label id {key!r} in {origin} is not an integer", {"key": key}
                ) from error
        expected = list(range(len(id_to_label)))
        if sorted(id_to_label) != expected:
            raise LabelSourceError(
                f"Label ids in {origin} are not contiguous from 0",
                {"ids": sorted(id_to_label)},
            )
        return [str(id_to_label[index]) for index in expected]
    raise LabelSourceError(
        f"Label source {origin} must be a list or contain an 'id_to_label' mapping"
    )


def load_labels(source: str | Path | TextIO) -> LabelSet:
    """Load labels from a text file, a JSON label map or an open text stream.

    Line N of a text source is the label of class index N. Trailing blank
    lines are dropped; every other line is kept verbatim.
    """
    if hasattr(source, "read"):
        try:
            text = source.read()
        except OSError as error:
            raise LabelSourceError(f"Cannot read label stream: {error}") from error
        return LabelSet(_parse_lines(text))

    path = Path(source)
    try:
        with path.open(encoding="utf-8", newline="") as file_obj:
            text = file_obj.read()
    except (OSError, UnicodeDecodeError) as error:
        raise LabelSourceError(
            f"Cannot read label file {path}: {error}", {"path": str(path)}
        ) from error

    if path.suffix.lower() == ".json":
        return LabelSet(_parse_json(text, str(path)))
    return LabelSet(_parse_lines(text))
