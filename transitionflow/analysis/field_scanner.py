"""
Field Reference Scanner
Finds test-data field references embedded in free text (code, selectors, args)
"""

import re
import json
import logging
from dataclasses import dataclass
from typing import List, Any

from transitionflow.core.models import ReferenceKind

logger = logging.getLogger(__name__)

_PATH = r'[a-zA-Z_][\w.\[\]]*'
_INDEX = re.compile(r'\[\d+\]')
_ROOT_SPLIT = re.compile(r'[.\[]')


@dataclass(frozen=True)
class FieldHit:
    """A single field reference found in text"""
    field: str
    kind: ReferenceKind = ReferenceKind.DATA


def normalize_field(path: str) -> str:
    """
    Normalize a field path so indexed accesses collapse

    passengers.adults[0].name -> passengers.adults[].name
    """
    if not path or not isinstance(path, str):
        return ''
    return _INDEX.sub('[]', path.strip()).rstrip('.[')


def get_root_field(field_name: str) -> str:
    """First path segment, without index brackets"""
    if not field_name or not isinstance(field_name, str):
        return ''
    return _ROOT_SPLIT.split(field_name)[0]


def safe_stringify(value: Any) -> str:
    """Convert arbitrary document values to text for scanning, never raises"""
    if value is None:
        return ''
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return str(value)
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=str)
        except (TypeError, ValueError):
            return ''
    return ''


def unwrap_data_prefix(path: str):
    """{{ctx.data.x}} is a data read of x, not a variable named ctx.data.x"""
    for prefix in ('ctx.data.', 'testData.', 'ctx.'):
        rest = path[len(prefix):]
        if path.startswith(prefix) and rest and rest != 'data':
            return rest, ReferenceKind.DATA
    return path, ReferenceKind.VARIABLE


class FieldReferenceScanner:
    """
    Regex based scanner for field references

    Recognized forms, in priority order at the same position:
    ctx.data.<path>, testData.<path>, ctx.<path> and {{<path>}}.
    This is a heuristic: references inside string literals or comments
    are reported like any other.
    """

    PATTERN = re.compile(
        rf'\bctx\.data\.(?P<data>{_PATH})'
        rf'|\btestData\.(?P<test_data>{_PATH})'
        rf'|\bctx\.(?!data\b)(?P<alias>{_PATH})'
        rf'|\{{\{{\s*(?P<variable>{_PATH})\s*\}}\}}'
    )

    def scan(self, text: Any) -> List[FieldHit]:
        """
        Extract every field reference from text

        Args:
            text: Text to scan; non-strings yield no matches

        Returns:
            Normalized, de-duplicated hits in order of appearance
        """
        if not text or not isinstance(text, str):
            return []

        hits = []
        seen = set()
        for match in self.PATTERN.finditer(text):
            if match.group('variable') is not None:
                raw, kind = unwrap_data_prefix(match.group('variable'))
            else:
                raw = match.group('data') or match.group('test_data') or match.group('alias')
                kind = ReferenceKind.DATA

            normalized = normalize_field(raw)
            if not normalized or (normalized, kind) in seen:
                continue
            seen.add((normalized, kind))
            hits.append(FieldHit(field=normalized, kind=kind))

        return hits

    def scan_fields(self, text: Any) -> List[str]:
        """Field names only, de-duplicated"""
        fields = []
        for hit in self.scan(text):
            if hit.field not in fields:
                fields.append(hit.field)
        return fields

    def scan_value(self, value: Any) -> List[FieldHit]:
        """Scan any document value (stringified first)"""
        return self.scan(safe_stringify(value))


def strip_variable_braces(value: Any) -> str:
    """{{ userId }} -> userId"""
    if not isinstance(value, str):
        return ''
    stripped = value.strip()
    if stripped.startswith('{{') and stripped.endswith('}}'):
        stripped = stripped[2:-2].strip()
    return stripped
