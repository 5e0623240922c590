"""
Condition Block Utilities
Operator catalogue, legacy requires migration and block validation
"""

import json
import uuid
import logging
from typing import Dict, List, Any, Optional

from transitionflow.core.models import BlockType

logger = logging.getLogger(__name__)

# needs_value: whether the operator compares against a value
OPERATORS: Dict[str, Dict[str, Any]] = {
    'equals': {'label': '=', 'description': 'equals', 'needs_value': True},
    'notEquals': {'label': '≠', 'description': 'not equals', 'needs_value': True},
    'greaterThan': {'label': '>', 'description': 'greater than', 'needs_value': True},
    'greaterThanOrEqual': {'label': '>=', 'description': 'greater or equal', 'needs_value': True},
    'lessThan': {'label': '<', 'description': 'less than', 'needs_value': True},
    'lessThanOrEqual': {'label': '<=', 'description': 'less or equal', 'needs_value': True},
    'contains': {'label': 'contains', 'description': 'contains', 'needs_value': True},
    'notContains': {'label': '∌', 'description': 'not contains', 'needs_value': True},
    'startsWith': {'label': 'starts', 'description': 'starts with', 'needs_value': True},
    'endsWith': {'label': 'ends', 'description': 'ends with', 'needs_value': True},
    'matches': {'label': '~', 'description': 'regex match', 'needs_value': True},
    'in': {'label': 'in', 'description': 'in list', 'needs_value': True},
    'notIn': {'label': '∉', 'description': 'not in list', 'needs_value': True},
    'exists': {'label': '∃', 'description': 'exists', 'needs_value': False},
    'notExists': {'label': '∄', 'description': 'not exists', 'needs_value': False},
    'truthy': {'label': '✓', 'description': 'is truthy', 'needs_value': False},
    'falsy': {'label': '✗', 'description': 'is falsy', 'needs_value': False},
}


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def _value_type_of(value: Any) -> str:
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    return 'string'


def migrate_requires_to_conditions(requires: Any) -> Optional[Dict[str, Any]]:
    """
    Convert a legacy requires map into a single condition-check block

    Args:
        requires: {field: expected_value}

    Returns:
        Conditions object with one block, or None when requires is empty
    """
    if not isinstance(requires, dict) or not requires:
        return None

    checks = [
        {
            'id': _new_id('chk'),
            'field': field_name,
            'operator': 'equals',
            'value': value,
            'valueType': _value_type_of(value),
        }
        for field_name, value in requires.items()
    ]

    return {
        'mode': 'all',
        'blocks': [{
            'id': _new_id('cond_check'),
            'type': BlockType.CONDITION_CHECK.value,
            'label': 'Migrated Conditions',
            'order': 0,
            'expanded': True,
            'enabled': True,
            'mode': 'all',
            'data': {'checks': checks},
        }],
    }


def conditions_to_requires(conditions: Any) -> Optional[Dict[str, Any]]:
    """
    Convert conditions back to a legacy requires map

    Only a single enabled condition-check block whose checks all use
    'equals' can be represented; anything else returns None.
    """
    if not isinstance(conditions, dict):
        return None
    blocks = conditions.get('blocks')
    if not isinstance(blocks, list) or len(blocks) != 1:
        return None

    block = blocks[0]
    if not isinstance(block, dict) or block.get('type') != BlockType.CONDITION_CHECK.value:
        return None
    if not block.get('enabled'):
        return None

    data = block.get('data') if isinstance(block.get('data'), dict) else {}
    checks = [c for c in (data.get('checks') or []) if isinstance(c, dict)]
    if any(c.get('operator') != 'equals' for c in checks):
        return None

    requires = {
        c['field']: c.get('value')
        for c in checks
        if c.get('field') and c.get('enabled') is not False
    }
    return requires or None


def can_convert_to_simple_requires(conditions: Any) -> bool:
    return conditions_to_requires(conditions) is not None


def format_value(value: Any) -> str:
    """Display form of a check value"""
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        if value.startswith('{{') and value.endswith('}}'):
            return value
        return f'"{value}"'
    if isinstance(value, list):
        return f"[{', '.join(str(v) for v in value)}]"
    return json.dumps(value, default=str)


def _block_code(block: Dict[str, Any]) -> str:
    code = block.get('code')
    if not isinstance(code, str):
        data = block.get('data') if isinstance(block.get('data'), dict) else {}
        code = data.get('code')
    return code if isinstance(code, str) else ''


def get_condition_block_summary(block: Any) -> str:
    """One-line summary of a condition block"""
    if not isinstance(block, dict):
        return ''

    block_type = block.get('type')
    if block_type == BlockType.CONDITION_CHECK.value:
        data = block.get('data') if isinstance(block.get('data'), dict) else {}
        checks = [c for c in (data.get('checks') or [])
                  if isinstance(c, dict) and c.get('enabled') is not False]
        if not checks:
            return 'No checks'
        if len(checks) == 1:
            check = checks[0]
            operator = OPERATORS.get(check.get('operator'))
            if operator and operator['needs_value']:
                return f"{check.get('field')} {operator['label']} {format_value(check.get('value'))}"
            label = operator['label'] if operator else check.get('operator')
            return f"{check.get('field')} {label}"
        mode = 'ALL' if block.get('mode', 'all') == 'all' else 'ANY'
        return f"{len(checks)} checks ({mode})"

    if block_type == BlockType.CUSTOM_CODE.value:
        lines = len([line for line in _block_code(block).split('\n') if line.strip()])
        return f"{lines} line{'' if lines == 1 else 's'}"

    return ''


def validate_condition_block(block: Any) -> List[str]:
    """Human readable problems found in one block"""
    errors = []
    if not isinstance(block, dict):
        return ['Block must be an object']

    if block.get('type') == BlockType.CONDITION_CHECK.value:
        data = block.get('data') if isinstance(block.get('data'), dict) else {}
        for i, check in enumerate(data.get('checks') or []):
            if not isinstance(check, dict):
                errors.append(f"Check {i + 1}: Invalid check")
                continue
            if not check.get('field'):
                errors.append(f"Check {i + 1}: Field is required")
            operator = OPERATORS.get(check.get('operator'))
            if operator is None:
                errors.append(f"Check {i + 1}: Unknown operator \"{check.get('operator')}\"")
            elif operator['needs_value'] and check.get('value') in ('', None):
                errors.append(f"Check {i + 1}: Value is required for \"{operator['description']}\"")

    elif block.get('type') == BlockType.CUSTOM_CODE.value:
        if not _block_code(block).strip():
            errors.append('Code is required')

    else:
        errors.append(f"Unknown block type \"{block.get('type')}\"")

    return errors


def validate_conditions(conditions: Any) -> List[str]:
    """Validate every block, prefixing errors with the block position"""
    if not isinstance(conditions, dict) or not isinstance(conditions.get('blocks'), list):
        return []

    all_errors = []
    for i, block in enumerate(conditions['blocks']):
        label = block.get('label') if isinstance(block, dict) else None
        for error in validate_condition_block(block):
            all_errors.append(f"Block {i + 1} ({label or 'unnamed'}): {error}")
    return all_errors
