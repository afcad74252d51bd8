import math

import numpy as np
import pytest

from ariadne_fdm import Segment, ToleranceIndex, construct_graph, find_node, within_tolerance


def test_within_tolerance_returns_first_match_not_nearest():
    points = [(0.0, 0.0, 0.0), (0.05, 0.0, 0.0), (0.06, 0.0, 0.0)]
    assert within_tolerance(points, (0.06, 0.0, 0.0), 0.1) == (True, 0)


def test_within_tolerance_is_inclusive():
    points = [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]
    assert within_tolerance(points, (0.0, 0.5, 0.0), 0.5) == (True, 0)


def test_within_tolerance_reports_no_match():
    assert within_tolerance([(0.0, 0.0, 0.0)], (1.0, 1.0, 1.0), 0.01) == (False, -1)
    assert within_tolerance([], (0.0, 0.0, 0.0), 10.0) == (False, -1)


def test_tolerance_index_find_or_add():
    index = ToleranceIndex(0.1)
    assert index.find_or_add((0.0, 0.0)) == (0, True)
    assert index.find_or_add((0.05, 0.0, 0.0)) == (0, False)
    assert index.find_or_add((1.0, 0.0, 0.0)) == (1, True)
    assert len(index) == 2
    assert index.points == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0)]


def test_negative_tolerance_rejected():
    with pytest.raises(ValueError):
        construct_graph([((0, 0, 0), (1, 0, 0))], -1.0)


def test_chain_of_two_segments():
    graph = construct_graph([((0, 0, 0), (1, 0, 0)), ((1, 0, 0), (2, 0, 0))], 0.01)

    assert [node.position for node in graph.nodes] == [
        (0.0, 0.0, 0.0),
        (1.0, 0.0, 0.0),
        (2.0, 0.0, 0.0),
    ]
    assert graph.ne == 2
    assert sorted(graph.nodes[1].neighbors) == [0, 2]
    assert graph.nodes[0].neighbors == [1]
    assert graph.nodes[2].neighbors == [1]
    assert graph.edge_indices() == [[0, 1], [1, 2]]


def test_disjoint_segments_create_two_nodes_per_edge():
    segments = [((i * 10.0, 0, 0), (i * 10.0 + 1.0, 0, 0)) for i in range(5)]
    graph = construct_graph(segments, 0.5)
    assert graph.nn == 2 * graph.ne == 10


def test_shared_endpoint_is_neighbor_of_both_ends():
    graph = construct_graph([((0, 0, 0), (1, 1, 0)), ((2, 0, 0), (1, 1, 0))], 0.001)

    assert graph.nn == 3
    assert graph.ne == 2
    shared = 1
    assert shared in graph.nodes[0].neighbors
    assert shared in graph.nodes[2].neighbors
    assert sorted(graph.nodes[shared].neighbors) == [0, 2]


def test_endpoint_within_tolerance_merges_onto_first_node():
    graph = construct_graph([((0, 0, 0), (1, 0, 0)), ((1.004, 0, 0), (2, 0, 0))], 0.01)
    assert graph.nn == 3
    assert graph.nodes[1].position == (1.0, 0.0, 0.0)
    assert graph.edges[1].start == 1


def test_zero_length_segment_becomes_self_loop():
    graph = construct_graph([((0, 0, 0), (0, 0, 0)), ((0, 0, 0), (1, 0, 0))], 0.01)

    assert graph.nn == 2
    assert graph.ne == 2
    assert graph.edges[0].is_loop
    assert graph.nodes[0].neighbors == [0, 0, 1]


def test_end_point_can_merge_with_its_own_start():
    graph = construct_graph([((0, 0, 0), (0.001, 0, 0))], 0.01)
    assert graph.nn == 1
    assert graph.edges[0].start == graph.edges[0].end == 0


def test_source_reference_is_kept():
    graph = construct_graph(
        [Segment((0, 0, 0), (1, 0, 0), source="crv-a"), ((1, 0, 0), (1, 1, 0), "crv-b")],
        0.01,
    )
    assert [edge.source for edge in graph.edges] == ["crv-a", "crv-b"]
    assert all(edge.q == 0.0 for edge in graph.edges)


def test_two_dimensional_points_get_zero_z():
    graph = construct_graph([((0, 0), (3, 4))], 0.01)
    assert graph.nodes[1].position == (3.0, 4.0, 0.0)
    np.testing.assert_allclose(graph.positions(), [[0, 0, 0], [3, 4, 0]])


def test_malformed_segment_rejected():
    with pytest.raises(TypeError):
        construct_graph([((0, 0, 0),)], 0.01)


def test_caller_geometry_is_copied():
    start = [0.0, 0.0, 0.0]
    graph = construct_graph([(start, [1.0, 0.0, 0.0])], 0.01)
    start[0] = 99.0
    assert graph.nodes[0].position == (0.0, 0.0, 0.0)


def test_nodes_are_farther_apart_than_tolerance():
    segments = [((0, 0, 0), (1, 0, 0)), ((1.2, 0, 0), (0.95, 0.01, 0)), ((0, 1, 0), (0.03, 0, 0))]
    tol = 0.1
    graph = construct_graph(segments, tol)
    for i, a in enumerate(graph.nodes):
        for b in graph.nodes[i + 1 :]:
            assert math.dist(a.position, b.position) > tol


def test_reorder_remaps_edges_and_neighbors():
    graph = construct_graph([((0, 0, 0), (1, 0, 0)), ((1, 0, 0), (2, 0, 0))], 0.01)
    graph.reorder([2, 0, 1])

    assert [node.position[0] for node in graph.nodes] == [2.0, 0.0, 1.0]
    assert graph.edge_indices() == [[1, 2], [2, 0]]
    assert graph.adjacency_list() == [[2], [2], [1, 0]]


def test_reorder_requires_permutation():
    graph = construct_graph([((0, 0, 0), (1, 0, 0))], 0.01)
    with pytest.raises(ValueError):
        graph.reorder([0, 0])


def test_duplicate_is_independent():
    graph = construct_graph([((0, 0, 0), (1, 0, 0))], 0.01)
    copy = graph.duplicate()
    copy.edges[0].q = 5.0
    copy.nodes[0].neighbors.append(0)
    assert graph.edges[0].q == 0.0
    assert graph.nodes[0].neighbors == [1]


def test_find_node_uses_build_tolerance_by_default():
    graph = construct_graph([((0, 0, 0), (1, 0, 0))], 0.1)
    assert find_node(graph, (1.05, 0, 0)) == (True, 1)
    assert find_node(graph, (1.05, 0, 0), tol=0.01) == (False, -1)


def test_nan_tolerance_rejected():
    with pytest.raises(ValueError):
        construct_graph([((0, 0, 0), (1, 0, 0))], float("nan"))


def test_numpy_array_segment_accepted():
    graph = construct_graph([np.array([[0, 0, 0], [1, 0, 0]]), np.array([[1, 0, 0], [1, 1, 0]])], 0.01)
    assert graph.nn == 3
    assert graph.edge_indices() == [[0, 1], [1, 2]]


def test_non_numeric_coordinates_rejected_as_type_error():
    with pytest.raises(TypeError):
        construct_graph([(("a", "b", "c"), (1, 0, 0))], 0.01)
