"""
Path Data-Flow Analyzer
Cumulative data availability along a path of states in the transition graph
"""

import logging
from typing import Dict, List, Any, Optional, Set

import networkx as nx

from transitionflow.analysis.data_flow_extractor import DataFlowExtractor
from transitionflow.analysis.data_flow_validator import is_common_config_field
from transitionflow.analysis.field_scanner import get_root_field
from transitionflow.analysis.models import (
    DataFlowResult,
    PathComparison,
    PathDataFlow,
    PathIssue,
    StateContext,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 10


def normalize_state(state: Any) -> str:
    """Case, underscore and hyphen insensitive state key"""
    if not isinstance(state, str):
        return ''
    return state.lower().replace('_', '').replace('-', '')


def build_form_data(transition: Dict[str, Any]) -> Dict[str, Any]:
    """Shape a discovered transition like the editor's form data"""
    action_details = transition.get('actionDetails')
    if not isinstance(action_details, dict):
        action_details = {}
    platforms = transition.get('platforms')

    return {
        'event': transition.get('event'),
        'platform': (platforms[0] if isinstance(platforms, list) and platforms
                     else action_details.get('platform', 'web')),
        'requires': transition.get('requires') or {},
        'conditions': transition.get('conditions'),
        'imports': action_details.get('imports') or [],
        'steps': action_details.get('steps') or [],
    }


class PathDataFlowAnalyzer:
    """
    Data-flow analysis over sequences of transitions

    Transitions are dicts with from/to/event and optionally actionDetails,
    requires, conditions and platforms. States may carry an xstateConfig.on
    map with richer transition data.
    """

    def __init__(
        self,
        transitions: Optional[List[Dict[str, Any]]] = None,
        states: Optional[Dict[str, Any]] = None,
        extractor: Optional[DataFlowExtractor] = None
    ):
        self.transitions = [
            t for t in (transitions or [])
            if isinstance(t, dict) and isinstance(t.get('from'), str) and isinstance(t.get('to'), str)
        ]
        self.states = states if isinstance(states, dict) else {}
        self.extractor = extractor or DataFlowExtractor()
        self.graph = self._build_graph()

    def _build_graph(self) -> nx.DiGraph:
        graph = nx.DiGraph()
        for transition in self.transitions:
            source = transition['from'].lower()
            target = transition['to'].lower()
            for key, name in ((source, transition['from']), (target, transition['to'])):
                if key not in graph:
                    graph.add_node(key, name=name)
            if not graph.has_edge(source, target):
                graph.add_edge(source, target, event=transition.get('event'))
        logger.debug(f"Transition graph: {graph.number_of_nodes()} states, "
                     f"{graph.number_of_edges()} edges")
        return graph

    def find_transition(self, from_state: str, to_state: str) -> Optional[Dict[str, Any]]:
        """
        Find the transition between two states

        Prefers the source state's xstateConfig entry when it carries
        actionDetails, otherwise merges it into the flat transition.
        """
        from_norm = normalize_state(from_state)
        to_norm = normalize_state(to_state)

        direct = next(
            (t for t in self.transitions
             if normalize_state(t['from']) == from_norm and normalize_state(t['to']) == to_norm),
            None
        )

        state_transition = None
        source_state = self.states.get(from_state) or self.states.get(str(from_state).lower())
        xstate_on = None
        if isinstance(source_state, dict) and isinstance(source_state.get('xstateConfig'), dict):
            xstate_on = source_state['xstateConfig'].get('on')

        if isinstance(xstate_on, dict):
            for event, config in xstate_on.items():
                configs = config if isinstance(config, list) else [config]
                for single in configs:
                    target = single if isinstance(single, str) else (
                        single.get('target') if isinstance(single, dict) else None)
                    if normalize_state(target) != to_norm:
                        continue
                    details = single if isinstance(single, dict) else {}
                    state_transition = {
                        'from': from_state,
                        'to': to_state,
                        'event': event,
                        'platforms': details.get('platforms'),
                        'actionDetails': details.get('actionDetails'),
                        'requires': details.get('requires'),
                        'conditions': details.get('conditions'),
                    }
                    break
                if state_transition:
                    break

        if state_transition and state_transition.get('actionDetails'):
            return state_transition

        if direct is not None:
            if direct.get('actionDetails') or state_transition is None:
                return direct
            merged = dict(direct)
            merged['actionDetails'] = state_transition.get('actionDetails')
            merged['requires'] = state_transition.get('requires') or direct.get('requires')
            merged['conditions'] = state_transition.get('conditions') or direct.get('conditions')
            return merged

        return state_transition

    def extract_transition_flow(self, transition: Dict[str, Any]) -> DataFlowResult:
        return self.extractor.extract(build_form_data(transition))

    def compute_path_data_flow(self, path: List[str]) -> PathDataFlow:
        """
        Walk a path and track which data is available at each state

        Args:
            path: State ids in order

        Returns:
            PathDataFlow with per-state contexts, issues and the fields the
            path needs up front
        """
        result = PathDataFlow(path=list(path or []))
        if not path:
            return result

        available: Set[str] = set()
        all_required: List[str] = []
        produced_along_path: List[str] = []

        for from_state, to_state in zip(path, path[1:]):
            transition = self.find_transition(from_state, to_state)
            if transition is None:
                result.issues.append(PathIssue(
                    type='missing_transition',
                    from_state=from_state,
                    to_state=to_state,
                    message=f'No transition found from "{from_state}" to "{to_state}"'
                ))
                continue

            event = transition.get('event')
            result.path_transitions.append({
                'from': from_state, 'to': to_state, 'event': event, 'transition': transition
            })

            flow = self.extract_transition_flow(transition)
            required = [r.field for r in flow.reads]
            produced = [w.field for w in flow.writes]

            missing = [
                f for f in required
                if f not in available
                and get_root_field(f) not in available
                and not is_common_config_field(f)
            ]
            for field_name in missing:
                if field_name not in all_required:
                    all_required.append(field_name)

            if missing:
                result.issues.append(PathIssue(
                    type='missing_data',
                    from_state=from_state,
                    transition=event,
                    fields=missing,
                    message=f'Transition "{event}" requires data not yet available: '
                            f'{", ".join(missing)}'
                ))

            result.state_contexts[from_state] = StateContext(
                available_before=set(available),
                required=required,
                produced=produced,
                missing=missing,
                event=event,
                to_state=to_state
            )
            available.update(produced)
            produced_along_path.extend(produced)

        result.state_contexts[path[-1]] = StateContext(available_before=set(available))
        result.final_context = sorted(available)
        result.total_required = len(all_required)
        result.initial_required = [
            f for f in all_required
            if not any(f == w or f.startswith(w + '.') for w in produced_along_path)
        ]
        return result

    def find_all_paths(self, start_state: str, end_state: str,
                       max_depth: int = DEFAULT_MAX_DEPTH) -> List[List[str]]:
        """
        All cycle-free paths between two states, shortest first

        Args:
            start_state: Starting state id
            end_state: Target state id
            max_depth: Maximum number of states in a path
        """
        if not isinstance(start_state, str) or not isinstance(end_state, str):
            return []
        if start_state.lower() == end_state.lower():
            return [[start_state]]

        source, target = start_state.lower(), end_state.lower()
        if source not in self.graph or target not in self.graph or max_depth < 2:
            return []

        paths = []
        for node_path in nx.all_simple_paths(self.graph, source, target, cutoff=max_depth - 1):
            names = [start_state] + [self.graph.nodes[n]['name'] for n in node_path[1:]]
            paths.append(names)

        paths.sort(key=len)
        return paths

    def compare_path_requirements(self, paths: List[List[str]]) -> PathComparison:
        """Compare data requirements of alternative paths"""
        comparison = PathComparison()
        for path in paths or []:
            comparison.path_analyses.append(self.compute_path_data_flow(path))

        if not comparison.path_analyses:
            return comparison

        required_sets = [set(a.initial_required) for a in comparison.path_analyses]
        comparison.common_required = [
            f for f in comparison.path_analyses[0].initial_required
            if all(f in s for s in required_sets)
        ]
        comparison.easiest_path = min(comparison.path_analyses,
                                      key=lambda a: len(a.initial_required))
        most_issues = max(comparison.path_analyses, key=lambda a: len(a.issues))
        if most_issues.issues:
            comparison.problematic_path = most_issues
        return comparison
