"""
Data-flow analysis module for TransitionFlow
Extraction, validation and path analysis of transition documents
"""

from transitionflow.analysis.data_flow_extractor import DataFlowExtractor, extract_data_flow
from transitionflow.analysis.data_flow_validator import DataFlowValidator, validate_data_flow
from transitionflow.analysis.models import (
    DataFlowResult,
    ReadRequirement,
    WriteEffect,
    ConditionFact,
    ProvenanceTag,
    ValidationResult,
)
from transitionflow.analysis.path_flow import PathDataFlowAnalyzer

__all__ = [
    'DataFlowExtractor',
    'DataFlowValidator',
    'extract_data_flow',
    'validate_data_flow',
    'DataFlowResult',
    'ReadRequirement',
    'WriteEffect',
    'ConditionFact',
    'ProvenanceTag',
    'ValidationResult',
    'PathDataFlowAnalyzer',
]
