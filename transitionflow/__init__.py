"""
TransitionFlow - static data-flow analysis for test-automation transitions
"""

from transitionflow.analysis import (
    DataFlowExtractor,
    DataFlowValidator,
    extract_data_flow,
    validate_data_flow,
)

__version__ = "0.1.0"

__all__ = [
    "DataFlowExtractor",
    "DataFlowValidator",
    "extract_data_flow",
    "validate_data_flow",
]
