import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from ariadne_fdm import (
    PerformanceObjective,
    Segment,
    build_network,
    edge_forces,
    get_network_defaults,
    total_cost,
)

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s:%(name)s:%(message)s",
    )


def _parse_segment(entry: Any) -> Segment:
    if isinstance(entry, dict):
        return Segment.coerce((entry["start"], entry["end"], entry.get("source")))
    return Segment.coerce(entry)


def _load_scene(path: str) -> Dict[str, Any]:
    with open(path) as fin:
        scene = json.load(fin)
    if not isinstance(scene, dict) or "segments" not in scene:
        raise ValueError(f"{path}: expected a JSON object with a 'segments' list")
    return scene


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Build a force density network from line segments")
    parser.add_argument("path", help="Path to a JSON scene with 'segments' and 'anchors'")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--edge-tol",
        type=float,
        help="Endpoint merge tolerance (default: scene value or %s)" % get_network_defaults().edge_tolerance,
    )
    parser.add_argument(
        "--anchor-tol",
        type=float,
        help="Anchor match tolerance (default: scene value or %s)" % get_network_defaults().anchor_tolerance,
    )
    parser.add_argument(
        "--q",
        type=float,
        help="Force density applied to every edge, overriding the scene's 'q'",
    )
    parser.add_argument(
        "--json-output",
        help="Write the partitioned network as JSON to the given path",
    )
    args = parser.parse_args(argv)

    _configure_logging(args.log_level)

    logger.info("Loading scene from %s", args.path)
    scene = _load_scene(args.path)
    segments: List[Segment] = [_parse_segment(entry) for entry in scene["segments"]]

    edge_tol = args.edge_tol if args.edge_tol is not None else scene.get("edge_tolerance")
    anchor_tol = args.anchor_tol if args.anchor_tol is not None else scene.get("anchor_tolerance")
    network = build_network(segments, edge_tol, scene.get("anchors", []), anchor_tol)

    q = args.q if args.q is not None else scene.get("q")
    if q is not None:
        network.rebind(q=q)

    graph = network.graph
    print(f"Nodes: {graph.nn}")
    print(f"Edges: {graph.ne}")
    print(f"Free nodes: {network.free_nodes}")
    print(f"Fixed nodes: {network.fixed_nodes}")
    print(f"Valid: {network.valid}")

    print("Node positions:")
    for idx, node in enumerate(graph.nodes):
        x, y, z = node.position
        tag = " (anchor)" if node.anchor else ""
        print(f"  [{idx}] ({x:.6f}, {y:.6f}, {z:.6f}){tag}")

    state = network.state()
    print("Edges (start, end, q, force):")
    for idx, (edge, force) in enumerate(zip(graph.edges, edge_forces(state))):
        print(f"  [{idx}] {edge.start}-{edge.end} q={edge.q:.6g} force={force:.6g}")

    performance = total_cost([PerformanceObjective()], state)
    print(f"Performance objective: {performance.value:.6g}")

    if args.json_output:
        output_path = Path(args.json_output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info("Writing network to %s", output_path)
        output_path.write_text(json.dumps(network.to_dict(), indent=2, default=str), encoding="utf-8")
        print(f"Network written to {output_path}")

    if not network.valid:
        logger.error("Network is not valid; check anchors and tolerances")
        raise SystemExit(1)


if __name__ == "__main__":
    main(sys.argv[1:])
