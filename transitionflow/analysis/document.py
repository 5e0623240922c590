"""
Transition Document Adapter
Maps the loosely-shaped transition form data onto one normalized model.

Every legacy or alternate shape (requires vs conditions.blocks, args vs
argsArray, storeAs as string or object, code vs data.code) is resolved here,
so the extractor only walks TransitionSpec. Entries that do not conform are
dropped; normalize_document never raises.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Any, Optional, Tuple

from transitionflow.core.models import BlockType

logger = logging.getLogger(__name__)


@dataclass
class CheckSpec:
    index: int
    field: str
    operator: Optional[str] = None
    value: Any = None
    value_type: Optional[str] = None
    enabled: bool = True


@dataclass
class ConditionBlockSpec:
    index: int
    type: BlockType
    enabled: bool
    label: Optional[str] = None
    checks: List[CheckSpec] = field(default_factory=list)
    code: Optional[str] = None


@dataclass
class ImportSpec:
    index: int
    constructor: Optional[str] = None
    path: Optional[str] = None
    class_name: Optional[str] = None


@dataclass
class ArgSpec:
    key: str  # 'args' or 'argsArray'
    index: int
    value: Any


@dataclass
class StoreAsSpec:
    key: str
    persist: bool = True
    global_: bool = False


@dataclass
class StepSpec:
    index: int
    args: List[ArgSpec] = field(default_factory=list)
    value: Any = None
    code: Optional[str] = None
    selector: Optional[str] = None
    store_as: Optional[StoreAsSpec] = None
    method: Optional[str] = None
    type: Optional[str] = None
    conditions: List[ConditionBlockSpec] = field(default_factory=list)
    description: Optional[str] = None


@dataclass
class TransitionSpec:
    conditions: List[ConditionBlockSpec] = field(default_factory=list)
    requires: List[Tuple[str, Any]] = field(default_factory=list)
    imports: List[ImportSpec] = field(default_factory=list)
    steps: List[StepSpec] = field(default_factory=list)
    action_details: Optional['TransitionSpec'] = None


def _as_str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _as_list(value: Any) -> list:
    return value if isinstance(value, list) else []


def normalize_conditions(conditions: Any) -> List[ConditionBlockSpec]:
    """Normalize a {blocks: [...]} conditions object"""
    if not isinstance(conditions, dict):
        return []

    blocks = []
    for block_idx, block in enumerate(_as_list(conditions.get('blocks'))):
        if not isinstance(block, dict):
            continue
        block_type = BlockType.from_value(block.get('type'))
        if block_type is None:
            logger.debug(f"Ignoring condition block {block_idx} with type {block.get('type')!r}")
            continue

        data = block.get('data') if isinstance(block.get('data'), dict) else {}
        spec = ConditionBlockSpec(
            index=block_idx,
            type=block_type,
            enabled=bool(block.get('enabled')),
            label=_as_str(block.get('label'))
        )

        if block_type == BlockType.CONDITION_CHECK:
            for check_idx, check in enumerate(_as_list(data.get('checks'))):
                if not isinstance(check, dict) or not _as_str(check.get('field')):
                    continue
                spec.checks.append(CheckSpec(
                    index=check_idx,
                    field=check['field'],
                    operator=check.get('operator'),
                    value=check.get('value'),
                    value_type=_as_str(check.get('valueType')),
                    enabled=check.get('enabled') is not False
                ))
        else:
            spec.code = _as_str(block.get('code')) or _as_str(data.get('code'))

        blocks.append(spec)

    return blocks


def normalize_store_as(store_as: Any) -> Optional[StoreAsSpec]:
    """storeAs may be a bare key or {key, persist, global}"""
    if isinstance(store_as, str):
        return StoreAsSpec(key=store_as) if store_as else None
    if isinstance(store_as, dict) and _as_str(store_as.get('key')):
        return StoreAsSpec(
            key=store_as['key'],
            persist=store_as.get('persist') is not False,
            global_=store_as.get('global') is True
        )
    return None


def normalize_step(step_idx: int, step: Any) -> Optional[StepSpec]:
    if not isinstance(step, dict):
        return None

    args = []
    raw_args = step.get('args')
    if isinstance(raw_args, (list, tuple)):
        args.extend(ArgSpec('args', i, a) for i, a in enumerate(raw_args))
    elif isinstance(raw_args, str):
        args.append(ArgSpec('args', 0, raw_args))
    if isinstance(step.get('argsArray'), (list, tuple)):
        args.extend(ArgSpec('argsArray', i, a) for i, a in enumerate(step['argsArray']))

    return StepSpec(
        index=step_idx,
        args=args,
        value=step.get('value'),
        code=_as_str(step.get('code')),
        selector=_as_str(step.get('selector')),
        store_as=normalize_store_as(step.get('storeAs')),
        method=_as_str(step.get('method')),
        type=_as_str(step.get('type')),
        conditions=normalize_conditions(step.get('conditions')),
        description=_as_str(step.get('description'))
    )


def normalize_document(document: Any, allow_nested: bool = True) -> TransitionSpec:
    """
    Build a TransitionSpec from raw transition form data

    Args:
        document: Transition form data (any shape)
        allow_nested: Whether to follow actionDetails (one level only)

    Returns:
        Normalized TransitionSpec; empty when document is not a dict
    """
    if not isinstance(document, dict):
        return TransitionSpec()

    spec = TransitionSpec(conditions=normalize_conditions(document.get('conditions')))

    requires = document.get('requires')
    if isinstance(requires, dict):
        spec.requires = [(k, v) for k, v in requires.items() if isinstance(k, str) and k]

    for imp_idx, imp in enumerate(_as_list(document.get('imports'))):
        if not isinstance(imp, dict):
            continue
        spec.imports.append(ImportSpec(
            index=imp_idx,
            constructor=_as_str(imp.get('constructor')),
            path=_as_str(imp.get('path')),
            class_name=_as_str(imp.get('className'))
        ))

    for step_idx, step in enumerate(_as_list(document.get('steps'))):
        step_spec = normalize_step(step_idx, step)
        if step_spec is not None:
            spec.steps.append(step_spec)

    details = document.get('actionDetails')
    if allow_nested and isinstance(details, dict):
        spec.action_details = normalize_document({
            'imports': details.get('imports'),
            'steps': details.get('steps'),
            'requires': details.get('requires'),
            'conditions': details.get('conditions'),
        }, allow_nested=False)

    return spec
