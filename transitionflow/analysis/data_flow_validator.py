"""
Data-Flow Validator
Classifies extracted reads against a test-data schema and stored variables
"""

import logging
from typing import Iterable, Optional, Set, Any

from transitionflow.core.models import Verdict
from transitionflow.analysis.field_scanner import get_root_field
from transitionflow.analysis.models import (
    ClassifiedRead,
    DataFlowResult,
    ReadRequirement,
    ValidationResult,
)

logger = logging.getLogger(__name__)

# Infrastructure-ish root fields usually provided by the runner config
COMMON_CONFIG_FIELDS = frozenset({
    'lang', 'device', 'baseUrl', 'config', 'status', 'environment',
    'platform', 'timeout', 'retries', 'page', 'browser', 'context'
})

MISSING_REASON = 'Not found in testData schema or stored variables'
WARNING_REASON = 'Looks like config field, verify it exists'


def _entry_name(entry: Any, attributes: Iterable[str]) -> Optional[str]:
    """Name of a schema/variable entry given as str, dict or object"""
    if isinstance(entry, str):
        return entry or None
    for attr in attributes:
        if isinstance(entry, dict):
            value = entry.get(attr)
        else:
            value = getattr(entry, attr, None)
        if isinstance(value, str) and value:
            return value
    return None


def build_schema_fields(schema: Any) -> Set[str]:
    """Field names declared by a schema list (str, {key} or {name})"""
    fields = set()
    if not isinstance(schema, (list, tuple, set)):
        return fields
    for entry in schema:
        name = _entry_name(entry, ('key', 'name'))
        if name:
            if name.startswith('ctx.data.'):
                name = name[len('ctx.data.'):]
            fields.add(name)
    return fields


def build_variable_names(variables: Any) -> Set[str]:
    """Variable names from a list of str or {name|field|key|path} entries"""
    names = set()
    if not isinstance(variables, (list, tuple, set)):
        return names
    for entry in variables:
        name = _entry_name(entry, ('name', 'field', 'key', 'path'))
        if name:
            names.add(name)
    return names


def build_schema_roots(schema_fields: Iterable[str]) -> Set[str]:
    """Root of every schema key: user.role also vouches for user.email"""
    return {get_root_field(name) for name in schema_fields if get_root_field(name)}


def is_common_config_field(field_name: str) -> bool:
    return get_root_field(field_name) in COMMON_CONFIG_FIELDS


class DataFlowValidator:
    """
    Validates extracted data flow

    Precedence per read: schema (valid), prior variables or the flow's own
    writes (fromStored), common config field (warning), else missing.
    """

    def __init__(self, common_fields: Optional[Iterable[str]] = None):
        self.common_fields = frozenset(common_fields) if common_fields is not None \
            else COMMON_CONFIG_FIELDS

    def validate(
        self,
        flow: Optional[DataFlowResult],
        schema: Any = None,
        prior_variables: Any = None
    ) -> ValidationResult:
        """
        Classify every read of a flow

        Args:
            flow: Result of DataFlowExtractor.extract()
            schema: Test-data schema entries
            prior_variables: Variables produced by prior steps/transitions

        Returns:
            ValidationResult with valid, missing, warnings, from_stored
        """
        result = ValidationResult()
        if flow is None or not getattr(flow, 'reads', None):
            return result

        schema_fields = build_schema_fields(schema)
        schema_roots = build_schema_roots(schema_fields)
        stored = build_variable_names(prior_variables)
        stored.update(w.field for w in flow.writes if w.field)

        for read in flow.reads:
            if not isinstance(read, ReadRequirement) or not read.field:
                continue
            classified = self._classify(read, schema_fields, schema_roots, stored)
            {
                Verdict.VALID: result.valid,
                Verdict.FROM_STORED: result.from_stored,
                Verdict.WARNING: result.warnings,
                Verdict.MISSING: result.missing,
            }[classified.verdict].append(classified)

        logger.debug(
            f"Validation: {len(result.valid)} valid, {len(result.from_stored)} stored, "
            f"{len(result.warnings)} warnings, {len(result.missing)} missing"
        )
        return result

    def _classify(self, read: ReadRequirement, schema_fields: Set[str],
                  schema_roots: Set[str], stored: Set[str]) -> ClassifiedRead:
        root = read.root_field or get_root_field(read.field)

        if read.field in schema_fields or root in schema_roots:
            return ClassifiedRead(read, Verdict.VALID)
        if read.field in stored or root in stored:
            return ClassifiedRead(read, Verdict.FROM_STORED)
        if root in self.common_fields:
            return ClassifiedRead(read, Verdict.WARNING, WARNING_REASON)
        return ClassifiedRead(read, Verdict.MISSING, MISSING_REASON)


def validate_data_flow(
    flow: Optional[DataFlowResult],
    schema: Any = None,
    prior_variables: Any = None
) -> ValidationResult:
    """Convenience wrapper around DataFlowValidator().validate()"""
    return DataFlowValidator().validate(flow, schema, prior_variables)
