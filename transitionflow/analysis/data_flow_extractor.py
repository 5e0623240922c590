"""
Data-Flow Extractor
Static extraction of test-data reads and writes from transition form data
"""

import logging
from dataclasses import replace
from typing import Dict, List, Any, Optional

from transitionflow.core.models import BlockType, ReferenceKind, WriteType
from transitionflow.analysis.document import (
    ConditionBlockSpec,
    StepSpec,
    TransitionSpec,
    normalize_document,
)
from transitionflow.analysis.field_scanner import (
    FieldReferenceScanner,
    get_root_field,
    normalize_field,
    strip_variable_braces,
    unwrap_data_prefix,
)
from transitionflow.analysis.models import (
    ConditionFact,
    DataFlowResult,
    DataFlowSummary,
    ProvenanceTag,
    ReadRequirement,
    WriteEffect,
)

logger = logging.getLogger(__name__)

ACTION_DETAILS_PREFIX = 'actionDetails'

_FIELD_PREFIXES = ('ctx.data.', 'testData.')


def clean_check_field(field_name: str) -> str:
    """Drop the ctx.data./testData. prefix a check field may carry"""
    for prefix in _FIELD_PREFIXES:
        if field_name.startswith(prefix):
            field_name = field_name[len(prefix):]
            break
    return normalize_field(field_name)


def infer_write_type(method: Optional[str], step_type: Optional[str]) -> WriteType:
    """
    Best-effort type of the value a storeAs step produces

    The step type marks accessor steps ('get...' -> getter); method name
    substrings refine the shape (text -> string, count -> number,
    list -> array, last match wins); type 'getText' always means string.
    """
    write_type = WriteType.UNKNOWN

    if step_type and 'get' in step_type.lower():
        write_type = WriteType.GETTER

    if method:
        method_lower = method.lower()
        if 'text' in method_lower:
            write_type = WriteType.STRING
        if 'count' in method_lower:
            write_type = WriteType.NUMBER
        if 'list' in method_lower:
            write_type = WriteType.ARRAY

    if step_type == 'getText':
        write_type = WriteType.STRING

    return write_type


class _FlowBuilder:
    """Accumulates facts for a single extraction call"""

    def __init__(self):
        self.reads: List[ReadRequirement] = []
        self.writes: List[WriteEffect] = []
        self.conditions: List[ConditionFact] = []
        self._reads_by_field: Dict[str, ReadRequirement] = {}
        self._write_fields = set()

    def add_read(self, field_name: str, source: ProvenanceTag,
                 required: bool = False, is_variable: bool = False) -> None:
        if not field_name:
            return

        existing = self._reads_by_field.get(field_name)
        if existing is not None:
            if source not in existing.sources:
                existing.sources.append(source)
            existing.required = existing.required or required
            existing.is_variable = existing.is_variable or is_variable
            return

        read = ReadRequirement(
            field=field_name,
            sources=[source],
            required=required,
            is_nested='.' in field_name,
            root_field=get_root_field(field_name),
            is_variable=is_variable
        )
        self.reads.append(read)
        self._reads_by_field[field_name] = read

    def add_write(self, write: WriteEffect) -> None:
        if not write.field or write.field in self._write_fields:
            return
        self._write_fields.add(write.field)
        self.writes.append(write)

    def has_condition_on(self, field_name: str) -> bool:
        return any(c.field == field_name for c in self.conditions)

    def build(self) -> DataFlowResult:
        grouped: Dict[str, List[ReadRequirement]] = {}
        for read in self.reads:
            if read.root_field:
                grouped.setdefault(read.root_field, []).append(read)

        summary = DataFlowSummary(
            total_reads=len(self.reads),
            required_reads=sum(1 for r in self.reads if r.required),
            total_writes=len(self.writes),
            has_conditions=len(self.conditions) > 0
        )
        return DataFlowResult(
            reads=self.reads,
            writes=self.writes,
            conditions=self.conditions,
            grouped=grouped,
            summary=summary
        )


class DataFlowExtractor:
    """
    Walks a transition document and reports which test-data fields it
    reads and writes.

    Traversal order is fixed: conditions, legacy requires, imports, steps,
    actionDetails. Later passes only add sources or widen `required`.
    Top-level conditions produce required reads; step-scoped conditions,
    imports and steps produce optional ones.
    """

    def __init__(self, scanner: Optional[FieldReferenceScanner] = None):
        self.scanner = scanner or FieldReferenceScanner()

    def extract(self, document: Any) -> DataFlowResult:
        """
        Extract data flow from transition form data

        Args:
            document: Transition document; malformed input degrades to
                fewer facts instead of raising

        Returns:
            DataFlowResult with reads, writes, conditions, grouped, summary
        """
        spec = normalize_document(document)
        builder = self._extract_spec(spec)

        if spec.action_details is not None:
            self._merge_nested(builder, self._extract_spec(spec.action_details))

        result = builder.build()
        logger.debug(
            f"Extracted {result.summary.total_reads} reads "
            f"({result.summary.required_reads} required), "
            f"{result.summary.total_writes} writes"
        )
        return result

    def _extract_spec(self, spec: TransitionSpec) -> _FlowBuilder:
        builder = _FlowBuilder()

        self._extract_condition_blocks(builder, spec.conditions, required=True)
        self._extract_requires(builder, spec)
        self._extract_imports(builder, spec)
        for step in spec.steps:
            self._extract_step(builder, step)

        return builder

    def _scan_into(self, builder: _FlowBuilder, text: Any,
                   source: ProvenanceTag, required: bool) -> None:
        for hit in self.scanner.scan_value(text):
            builder.add_read(hit.field, source, required,
                             is_variable=hit.kind == ReferenceKind.VARIABLE)

    def _extract_condition_blocks(
        self,
        builder: _FlowBuilder,
        blocks: List[ConditionBlockSpec],
        required: bool,
        scope: Optional[ProvenanceTag] = None
    ) -> None:
        for block in blocks:
            if not block.enabled:
                continue

            if scope is None:
                block_tag = ProvenanceTag('condition', block.index)
            else:
                block_tag = scope.child(f"condition[{block.index}]")

            if block.type == BlockType.CUSTOM_CODE:
                self._scan_into(builder, block.code, block_tag.child('code'), required)
                continue

            for check in block.checks:
                if not check.enabled:
                    continue
                field_name = clean_check_field(check.field)
                if not field_name:
                    continue

                builder.add_read(field_name, block_tag, required)
                builder.conditions.append(ConditionFact(
                    field=field_name,
                    operator=check.operator,
                    value=check.value,
                    value_type=check.value_type,
                    block_index=block.index,
                    block_label=block.label,
                    scope=scope
                ))

                if check.value_type == 'variable':
                    raw, kind = unwrap_data_prefix(strip_variable_braces(check.value))
                    builder.add_read(normalize_field(raw), block_tag.child('value'),
                                     required=False, is_variable=kind == ReferenceKind.VARIABLE)

    def _extract_requires(self, builder: _FlowBuilder, spec: TransitionSpec) -> None:
        for key, value in spec.requires:
            field_name = normalize_field(key)
            builder.add_read(field_name, ProvenanceTag('requires'), required=True)
            builder.conditions.append(ConditionFact(
                field=field_name,
                operator='equals',
                value=value,
                legacy=True
            ))
            self._scan_into(builder, value, ProvenanceTag('requires', subpath=f"{key}.value"),
                            required=True)

    def _extract_imports(self, builder: _FlowBuilder, spec: TransitionSpec) -> None:
        for imp in spec.imports:
            tag = ProvenanceTag('import', imp.index)
            self._scan_into(builder, imp.constructor, tag.child('constructor'), required=False)
            self._scan_into(builder, imp.path, tag.child('path'), required=False)

    def _extract_step(self, builder: _FlowBuilder, step: StepSpec) -> None:
        tag = ProvenanceTag('step', step.index)

        for arg in step.args:
            self._scan_into(builder, arg.value, tag.child(f"{arg.key}[{arg.index}]"),
                            required=False)
        self._scan_into(builder, step.value, tag.child('value'), required=False)
        self._scan_into(builder, step.code, tag.child('code'), required=False)
        self._scan_into(builder, step.selector, tag.child('selector'), required=False)

        if step.store_as is not None:
            builder.add_write(WriteEffect(
                field=step.store_as.key,
                source=tag.child('storeAs'),
                type=infer_write_type(step.method, step.type),
                persist=step.store_as.persist,
                global_=step.store_as.global_
            ))

        # Step-scoped gating is advisory: optional reads only
        self._extract_condition_blocks(builder, step.conditions, required=False, scope=tag)

    def _merge_nested(self, builder: _FlowBuilder, nested: _FlowBuilder) -> None:
        for read in nested.reads:
            for source in read.sources:
                builder.add_read(read.field, source.with_prefix(ACTION_DETAILS_PREFIX),
                                 read.required, read.is_variable)

        for write in nested.writes:
            builder.add_write(WriteEffect(
                field=write.field,
                source=write.source.with_prefix(ACTION_DETAILS_PREFIX),
                type=write.type,
                persist=write.persist,
                global_=write.global_
            ))

        for condition in nested.conditions:
            if builder.has_condition_on(condition.field):
                continue
            if condition.scope is not None:
                condition = replace(condition, scope=condition.scope.with_prefix(ACTION_DETAILS_PREFIX))
            builder.conditions.append(condition)


def extract_data_flow(document: Any) -> DataFlowResult:
    """Convenience wrapper around DataFlowExtractor().extract()"""
    return DataFlowExtractor().extract(document)
