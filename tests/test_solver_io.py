import numpy as np
import pytest

from ariadne_fdm import (
    CardinalityError,
    InvalidNetworkError,
    anchor_reactions,
    broadcast_values,
    build_network,
    connectivity_matrix,
    construct_graph,
    load_vectors,
    solver_inputs,
)


def _apex_network():
    network = build_network(
        [((0, 0, 0), (1, 0, 1)), ((1, 0, 1), (2, 0, 0))],
        0.01,
        [(0, 0, 0), (2, 0, 0)],
        0.01,
    )
    network.rebind(q=[2.0, -3.0])
    return network


def _arch_network():
    return build_network(
        [((0, 0, 0), (1, 0, 1)), ((1, 0, 1), (2, 0, 1)), ((2, 0, 1), (3, 0, 0))],
        0.01,
        [(0, 0, 0), (3, 0, 0)],
        0.01,
    )


def test_broadcast_values():
    assert broadcast_values([7], 3, "q") == [7, 7, 7]
    assert broadcast_values([1, 2, 3], 3, "q") == [1, 2, 3]
    with pytest.raises(CardinalityError) as excinfo:
        broadcast_values([1, 2], 3, "q")
    assert excinfo.value.expected == 3
    assert excinfo.value.actual == 2
    with pytest.raises(CardinalityError):
        broadcast_values([1, 2, 3, 4], 3, "q")


def test_connectivity_matrix_signs():
    network = _apex_network()
    matrix = connectivity_matrix(network.graph).toarray()
    np.testing.assert_array_equal(matrix, [[1, -1, 0], [-1, 0, 1]])


def test_connectivity_row_of_self_loop_is_zero():
    graph = construct_graph([((0, 0, 0), (0, 0, 0)), ((0, 0, 0), (1, 0, 0))], 0.01)
    matrix = connectivity_matrix(graph).toarray()
    np.testing.assert_array_equal(matrix, [[0, 0], [-1, 1]])


def test_solver_inputs_are_partitioned_blocks():
    network = _apex_network()
    inputs = solver_inputs(network, loads=[(0, 0, -1)])

    np.testing.assert_array_equal(inputs.cn.toarray(), [[1], [-1]])
    np.testing.assert_array_equal(inputs.cf.toarray(), [[-1, 0], [0, 1]])
    np.testing.assert_allclose(inputs.q, [2.0, -3.0])
    np.testing.assert_allclose(inputs.loads, [[0, 0, -1]])
    np.testing.assert_allclose(inputs.fixed_positions, [[0, 0, 0], [2, 0, 0]])
    assert inputs.free_nodes == [0]
    assert inputs.fixed_nodes == [1, 2]


def test_solver_inputs_broadcast_q_and_loads():
    inputs = solver_inputs(_arch_network(), q=1.5, loads=[(0, 0, -2)])
    np.testing.assert_allclose(inputs.q, [1.5, 1.5, 1.5])
    np.testing.assert_allclose(inputs.loads, [[0, 0, -2], [0, 0, -2]])


def test_solver_inputs_reject_mismatched_loads():
    with pytest.raises(CardinalityError):
        solver_inputs(_arch_network(), loads=[(0, 0, -1)] * 3)


def test_solver_inputs_reject_invalid_network():
    network = build_network([((0, 0, 0), (1, 0, 0))], 0.01, [(0, 0, 0)], 0.01)
    with pytest.raises(InvalidNetworkError):
        solver_inputs(network)


def test_single_load_is_normalized_and_scaled():
    arrows = load_vectors(_arch_network(), [(0, 0, -5)], scale=2.0)

    assert len(arrows) == 2
    np.testing.assert_allclose(arrows[0][0], [1, 0, 1])
    np.testing.assert_allclose(arrows[1][0], [2, 0, 1])
    for _, vector in arrows:
        np.testing.assert_allclose(vector, [0, 0, -2])


def test_per_node_loads_scale_by_largest_and_skip_small():
    arrows = load_vectors(_arch_network(), [(0, 0, -4), (0, 0, -0.05)])

    assert len(arrows) == 1
    np.testing.assert_allclose(arrows[0][1], [0, 0, -1])


def test_load_vectors_reject_mismatched_count():
    with pytest.raises(CardinalityError):
        load_vectors(_arch_network(), [(0, 0, -1)] * 3)


def test_anchor_reactions():
    reactions = anchor_reactions(_apex_network())
    np.testing.assert_allclose(reactions, [[-2, 0, -2], [-3, 0, 3]])
