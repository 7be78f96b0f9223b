"""
Line-schema validation for external tool reports.

Both tools print fixed-order `<Label>: <value>` reports. A LineSchema
declares the expected template for every line position and either returns
all typed fields or raises ParseError naming the first line that failed.
Lines after the last declared position are ignored.

Usage:
    schema = LineSchema('commp report', [
        LineField('commp_cid', 'CommP CID'),
        LineField('piece_size', 'Piece size', unsigned_int),
    ])
    fields = schema.parse(stdout)
"""

import re
from dataclasses import dataclass
from typing import Any, Callable, Sequence

from ..errors import ParseError

_UNSIGNED = re.compile(r'[0-9]+')
_SIGNED = re.compile(r'[+-]?[0-9]+')


def text(raw: str) -> str:
    return raw


def unsigned_int(raw: str) -> int:
    """Parse a plain base-10 unsigned integer (no sign, no separators)."""
    if not _UNSIGNED.fullmatch(raw):
        raise ValueError(f'not an unsigned integer: {raw!r}')
    return int(raw)


def signed_int(raw: str) -> int:
    if not _SIGNED.fullmatch(raw):
        raise ValueError(f'not an integer: {raw!r}')
    return int(raw)


@dataclass(frozen=True)
class LineField:
    """
    Expected template for one line position.

    A field without a label is informational: the line must be present but
    its content is not inspected or returned.
    """

    name: str
    label: str | None = None
    convert: Callable[[str], Any] = text

    @property
    def informational(self) -> bool:
        return self.label is None

    def extract(self, line: str) -> str | None:
        """Return the trimmed value if `line` matches `<label>: <value>`."""
        match = re.match(rf'{re.escape(self.label)}: (.*)$', line)
        if match is None:
            return None
        value = match.group(1).strip()
        return value or None


def informational(name: str) -> LineField:
    return LineField(name=name)


class LineSchema:
    """Ordered line templates for a single tool report."""

    def __init__(self, name: str, fields: Sequence[LineField]):
        self.name = name
        self.fields = tuple(fields)

    def parse(self, output: str) -> dict[str, Any]:
        """
        Validate `output` against the schema.

        Args:
            output: Raw stdout of the tool

        Returns:
            Mapping of field name to converted value for every labelled line

        Raises:
            ParseError: On the first missing, mismatched or unconvertible line
        """
        lines = output.splitlines()
        values: dict[str, Any] = {}

        for index, line_field in enumerate(self.fields):
            line_number = index + 1
            if index >= len(lines):
                raise ParseError(
                    f'Resolve {line_field.name} failure: {self.name} ended at line {len(lines)}',
                    context={'schema': self.name, 'expected_lines': len(self.fields)},
                    field=line_field.name,
                    line_number=line_number,
                )
            if line_field.informational:
                continue

            line = lines[index].strip()
            raw = line_field.extract(line)
            if raw is None:
                raise ParseError(
                    f"Resolve {line_field.name} failure: expected '{line_field.label}: <value>' "
                    f'at line {line_number}',
                    context={'schema': self.name, 'line': line},
                    field=line_field.name,
                    line_number=line_number,
                )
            try:
                values[line_field.name] = line_field.convert(raw)
            except ValueError as e:
                raise ParseError(
                    f'Resolve {line_field.name} failure: {e}',
                    context={'schema': self.name, 'line': line},
                    field=line_field.name,
                    line_number=line_number,
                ) from e

        return values
