"""Example pipeline: merge a grid of segments into a network and score it."""

from ariadne_fdm import (
    PerformanceObjective,
    TargetObjective,
    build_network,
    solver_inputs,
    total_cost,
)

SIZE = 4


def grid_segments(size: int):
    segments = []
    for i in range(size + 1):
        for j in range(size):
            segments.append(((i, j, 0), (i, j + 1, 0), f"v{i}{j}"))
            segments.append(((j, i, 0), (j + 1, i, 0), f"h{j}{i}"))
    return segments


def main() -> None:
    corners = [(0, 0, 0), (SIZE, 0, 0), (SIZE, SIZE, 0), (0, SIZE, 0)]
    network = build_network(grid_segments(SIZE), 0.01, corners, 0.01)
    print("Valid:", network.valid)
    print("Free nodes:", len(network.free_nodes), "Fixed nodes:", network.fixed_nodes)

    network.rebind(q=1.0)
    inputs = solver_inputs(network, loads=[(0, 0, -1)])
    print("Cn shape:", inputs.cn.shape, "Cf shape:", inputs.cf.shape)

    objectives = [
        PerformanceObjective(weight=1.0),
        TargetObjective.from_network(network, network.free_nodes[:3], weight=10.0),
    ]
    result = total_cost(objectives, network.state())
    print(f"Total cost: {result.value:.6f}")


if __name__ == "__main__":
    main()
