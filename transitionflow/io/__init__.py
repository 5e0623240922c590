"""
I/O module for TransitionFlow
Loading transition documents and exporting reports
"""

from transitionflow.io.document_loader import (
    DocumentLoader,
    load_json_file,
    load_schema,
    load_prior_variables,
    load_transitions,
    load_states,
)
from transitionflow.io.report_writer import ReportWriter, build_document_report

__all__ = [
    'DocumentLoader',
    'load_json_file',
    'load_schema',
    'load_prior_variables',
    'load_transitions',
    'load_states',
    'ReportWriter',
    'build_document_report',
]
