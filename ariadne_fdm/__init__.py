from .config import NetworkDefaults, get_network_defaults, set_network_defaults
from .graph import Edge, Graph, Node, Segment, construct_graph, find_node
from .measures import NetworkState, edge_forces, edge_lengths, edge_vectors
from .network import MIN_ANCHORS, Network, build_network, partition, valid_check
from .objectives import (
    Objective,
    ObjectiveResult,
    PerformanceObjective,
    TargetObjective,
    density_force,
    evaluate,
    total_cost,
)
from .solver_io import (
    SolverInputs,
    anchor_reactions,
    connectivity_matrix,
    load_vectors,
    solver_inputs,
)
from .tolerance import ToleranceIndex, within_tolerance
from .types import CardinalityError, InvalidNetworkError, broadcast_values

__all__ = [
    'CardinalityError',
    'Edge',
    'Graph',
    'InvalidNetworkError',
    'MIN_ANCHORS',
    'Network',
    'NetworkDefaults',
    'NetworkState',
    'Node',
    'Objective',
    'ObjectiveResult',
    'PerformanceObjective',
    'Segment',
    'SolverInputs',
    'TargetObjective',
    'ToleranceIndex',
    'anchor_reactions',
    'broadcast_values',
    'build_network',
    'connectivity_matrix',
    'construct_graph',
    'density_force',
    'edge_forces',
    'edge_lengths',
    'edge_vectors',
    'evaluate',
    'find_node',
    'get_network_defaults',
    'load_vectors',
    'partition',
    'set_network_defaults',
    'solver_inputs',
    'total_cost',
    'valid_check',
    'within_tolerance',
]
