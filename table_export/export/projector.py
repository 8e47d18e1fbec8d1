"""
Record projector - maps a record to one escaped CSV line.

Format:
- Fields in projection order, joined by ","
- A field is quoted only if it contains ",", '"' or "\n"; quotes are doubled
- Missing or non-string attributes become an empty unquoted field
- Exactly one "\n" per line, no trimming

Pure functions only; safe to call from every scan worker at once.
"""
from dataclasses import dataclass
from typing import Iterable, Tuple

from table_export.core.errors import ConfigurationError
from table_export.ports.row_source import Record

SEPARATOR = ","
LINE_TERMINATOR = "\n"
_QUOTE_TRIGGERS = (",", '"', "\n")


@dataclass(frozen=True)
class ProjectionSpec:
    """Ordered attribute allow-list; also the output column order."""

    attributes: Tuple[str, ...]

    def __post_init__(self):
        if not self.attributes:
            raise ConfigurationError("At least one attribute is required")
        seen = set()
        for attribute in self.attributes:
            if not isinstance(attribute, str) or not attribute.strip():
                raise ConfigurationError(f"Invalid attribute name: {attribute!r}")
            if attribute in seen:
                raise ConfigurationError(f"Duplicate attribute: {attribute}")
            seen.add(attribute)

    @classmethod
    def of(cls, attributes: Iterable[str]) -> "ProjectionSpec":
        return cls(tuple(attributes))

    def __len__(self) -> int:
        return len(self.attributes)


def escape_field(value: str) -> str:
    """
    Escape a single CSV field.

    >>> escape_field("Bo, Jr.")
    '"Bo, Jr."'
    >>> escape_field('a"b')
    '"a""b"'
    >>> escape_field("plain")
    'plain'
    """
    if any(trigger in value for trigger in _QUOTE_TRIGGERS):
        return '"' + value.replace('"', '""') + '"'
    return value


def _string_value(record: Record, attribute: str) -> str:
    value = record.get(attribute)
    return value if isinstance(value, str) else ""


def project_record(record: Record, projection: ProjectionSpec) -> str:
    """Render one record as a newline-terminated CSV line."""
    fields = (escape_field(_string_value(record, a)) for a in projection.attributes)
    return SEPARATOR.join(fields) + LINE_TERMINATOR


def header_line(projection: ProjectionSpec) -> str:
    """Header row: the attribute names in projection order."""
    return SEPARATOR.join(escape_field(a) for a in projection.attributes) + LINE_TERMINATOR
