"""
Data models for transition data-flow analysis
"""

from dataclasses import dataclass, field, replace
from typing import List, Dict, Any, Optional, Set

from transitionflow.core.models import WriteType, Verdict


@dataclass(frozen=True)
class ProvenanceTag:
    """Location inside a transition document that produced a fact"""
    kind: str  # 'condition', 'requires', 'import', 'step'
    index: Optional[int] = None
    subpath: str = ""
    prefix: str = ""

    def child(self, subpath: str) -> 'ProvenanceTag':
        """Return a tag pointing one level deeper"""
        joined = f"{self.subpath}.{subpath}" if self.subpath else subpath
        return replace(self, subpath=joined)

    def with_prefix(self, prefix: str) -> 'ProvenanceTag':
        """Re-tag for a nested document (e.g. actionDetails)"""
        joined = f"{prefix}.{self.prefix}" if self.prefix else prefix
        return replace(self, prefix=joined)

    def __str__(self) -> str:
        label = self.kind if self.index is None else f"{self.kind}[{self.index}]"
        if self.subpath:
            label = f"{label}.{self.subpath}"
        if self.prefix:
            label = f"{self.prefix}.{label}"
        return label


@dataclass
class ReadRequirement:
    """A test-data field the transition consults"""
    field: str
    sources: List[ProvenanceTag] = field(default_factory=list)
    required: bool = False
    is_nested: bool = False
    root_field: str = ""
    is_variable: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field': self.field,
            'sources': [str(s) for s in self.sources],
            'required': self.required,
            'isNested': self.is_nested,
            'rootField': self.root_field,
            'isVariable': self.is_variable,
        }


@dataclass
class WriteEffect:
    """A field produced by a step's storeAs"""
    field: str
    source: ProvenanceTag
    type: WriteType = WriteType.UNKNOWN
    persist: bool = True
    global_: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'field': self.field,
            'source': str(self.source),
            'type': self.type.value,
            'persist': self.persist,
            'global': self.global_,
        }


@dataclass
class ConditionFact:
    """One condition check encountered while walking the document"""
    field: str
    operator: Optional[str]
    value: Any = None
    value_type: Optional[str] = None
    block_index: Optional[int] = None
    block_label: Optional[str] = None
    legacy: bool = False
    scope: Optional[ProvenanceTag] = None  # None for top-level conditions

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'field': self.field,
            'operator': self.operator,
            'value': self.value,
        }
        if self.value_type is not None:
            data['valueType'] = self.value_type
        if self.block_index is not None:
            data['blockIndex'] = self.block_index
        if self.block_label is not None:
            data['blockLabel'] = self.block_label
        if self.legacy:
            data['legacy'] = True
        if self.scope is not None:
            data['scope'] = str(self.scope)
        return data


@dataclass
class DataFlowSummary:
    """Counters shown next to the data-flow panel"""
    total_reads: int = 0
    required_reads: int = 0
    total_writes: int = 0
    has_conditions: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalReads': self.total_reads,
            'requiredReads': self.required_reads,
            'totalWrites': self.total_writes,
            'hasConditions': self.has_conditions,
        }


@dataclass
class DataFlowResult:
    """Result of data-flow extraction"""
    reads: List[ReadRequirement] = field(default_factory=list)
    writes: List[WriteEffect] = field(default_factory=list)
    conditions: List[ConditionFact] = field(default_factory=list)
    grouped: Dict[str, List[ReadRequirement]] = field(default_factory=dict)
    summary: DataFlowSummary = field(default_factory=DataFlowSummary)

    def get_read(self, field_name: str) -> Optional[ReadRequirement]:
        for read in self.reads:
            if read.field == field_name:
                return read
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reads': [r.to_dict() for r in self.reads],
            'writes': [w.to_dict() for w in self.writes],
            'conditions': [c.to_dict() for c in self.conditions],
            'grouped': {
                root: [r.to_dict() for r in reads]
                for root, reads in self.grouped.items()
            },
            'summary': self.summary.to_dict(),
        }


@dataclass
class ClassifiedRead:
    """A read together with the validator's verdict"""
    read: ReadRequirement
    verdict: Verdict
    reason: Optional[str] = None

    @property
    def field(self) -> str:
        return self.read.field

    def to_dict(self) -> Dict[str, Any]:
        data = self.read.to_dict()
        if self.verdict == Verdict.VALID:
            data['source'] = 'testData'
        elif self.verdict == Verdict.FROM_STORED:
            data['source'] = 'stored'
        if self.reason:
            data['reason'] = self.reason
        return data


@dataclass
class ValidationResult:
    """Result of data-flow validation, one bucket per verdict"""
    valid: List[ClassifiedRead] = field(default_factory=list)
    missing: List[ClassifiedRead] = field(default_factory=list)
    warnings: List[ClassifiedRead] = field(default_factory=list)
    from_stored: List[ClassifiedRead] = field(default_factory=list)

    @property
    def has_missing(self) -> bool:
        return len(self.missing) > 0

    def fields(self, verdict: Verdict) -> List[str]:
        """Field names classified under a verdict"""
        bucket = {
            Verdict.VALID: self.valid,
            Verdict.MISSING: self.missing,
            Verdict.WARNING: self.warnings,
            Verdict.FROM_STORED: self.from_stored,
        }[verdict]
        return [entry.field for entry in bucket]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'valid': [e.to_dict() for e in self.valid],
            'missing': [e.to_dict() for e in self.missing],
            'warnings': [e.to_dict() for e in self.warnings],
            'fromStored': [e.to_dict() for e in self.from_stored],
        }


@dataclass
class PathIssue:
    """Problem found while walking a path of states"""
    type: str  # 'missing_transition', 'missing_data'
    message: str
    from_state: Optional[str] = None
    to_state: Optional[str] = None
    transition: Optional[str] = None
    fields: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type, 'message': self.message}
        if self.type == 'missing_transition':
            data.update({'from': self.from_state, 'to': self.to_state})
        else:
            data.update({'at': self.from_state, 'transition': self.transition,
                         'fields': list(self.fields)})
        return data


@dataclass
class StateContext:
    """Data available at a state and what its outgoing transition needs"""
    available_before: Set[str] = field(default_factory=set)
    required: List[str] = field(default_factory=list)
    produced: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    event: Optional[str] = None
    to_state: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'availableBefore': sorted(self.available_before),
            'required': list(self.required),
            'produced': list(self.produced),
            'missing': list(self.missing),
            'transition': {'event': self.event, 'to': self.to_state} if self.to_state else None,
        }


@dataclass
class PathDataFlow:
    """Cumulative data flow along a path of states"""
    path: List[str] = field(default_factory=list)
    initial_required: List[str] = field(default_factory=list)
    state_contexts: Dict[str, StateContext] = field(default_factory=dict)
    final_context: List[str] = field(default_factory=list)
    path_transitions: List[Dict[str, Any]] = field(default_factory=list)
    issues: List[PathIssue] = field(default_factory=list)
    total_required: int = 0

    @property
    def summary(self) -> Dict[str, int]:
        return {
            'pathLength': len(self.path),
            'transitionCount': len(self.path_transitions),
            'totalRequired': self.total_required,
            'initialRequired': len(self.initial_required),
            'totalProduced': len(self.final_context),
            'issueCount': len(self.issues),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': list(self.path),
            'initialRequired': list(self.initial_required),
            'stateContexts': {k: v.to_dict() for k, v in self.state_contexts.items()},
            'finalContext': list(self.final_context),
            'pathTransitions': [
                {'from': t['from'], 'to': t['to'], 'event': t.get('event')}
                for t in self.path_transitions
            ],
            'issues': [i.to_dict() for i in self.issues],
            'summary': self.summary,
        }


@dataclass
class PathComparison:
    """Comparison of data requirements across alternative paths"""
    path_analyses: List[PathDataFlow] = field(default_factory=list)
    common_required: List[str] = field(default_factory=list)
    easiest_path: Optional[PathDataFlow] = None
    problematic_path: Optional[PathDataFlow] = None

    @property
    def path_count(self) -> int:
        return len(self.path_analyses)

    def to_dict(self) -> Dict[str, Any]:
        def brief(analysis: Optional[PathDataFlow], with_issues: bool = False):
            if analysis is None:
                return None
            data = {
                'path': list(analysis.path),
                'requiredCount': len(analysis.initial_required),
                'issueCount': len(analysis.issues),
            }
            if with_issues:
                data['issues'] = [i.to_dict() for i in analysis.issues]
            return data

        return {
            'pathCount': self.path_count,
            'pathAnalyses': [a.to_dict() for a in self.path_analyses],
            'commonRequired': list(self.common_required),
            'easiestPath': brief(self.easiest_path),
            'problematicPath': brief(self.problematic_path, with_issues=True),
        }
