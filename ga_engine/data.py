import random
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np
import tsplib95


Point = Tuple[float, float]


@dataclass
class Instance:
    name: str
    path: Optional[Path]
    graph: nx.Graph
    optimum: Optional[float]


def _solution_candidates(path: Path) -> Iterable[Path]:
    yield path.with_suffix(".opt.tour")
    for ext in (".opt.tour", ".opt", ".tour"):
        yield path.parent / "solutions" / f"{path.stem}{ext}"


def _load_optimum(problem, path: Path) -> Optional[float]:
    for candidate in _solution_candidates(path):
        if not candidate.exists():
            continue
        tour_file = tsplib95.load(candidate)
        if not tour_file.tours:
            continue
        nodes = list(tour_file.tours[0])
        dist = 0.0
        for i in range(len(nodes)):
            dist += problem.get_weight(nodes[i], nodes[(i + 1) % len(nodes)])
        return float(dist)
    return None


def load_instance(path: Path) -> Instance:
    path = Path(path)
    problem = tsplib95.load(path)
    graph = problem.get_graph()
    # Self-loops carry no route information and would only inflate the graph.
    graph.remove_edges_from(list(nx.selfloop_edges(graph)))
    return Instance(name=problem.name, path=path, graph=graph, optimum=_load_optimum(problem, path))


def coordinate_graph(points: Sequence[Point]) -> nx.Graph:
    """Complete graph over ``points`` (nodes 0..n-1) weighted by Euclidean distance."""
    coords = np.asarray(points, dtype=float)
    if coords.ndim != 2 or coords.shape[1] != 2:
        raise ValueError(f"expected (x, y) pairs, got array of shape {coords.shape}")
    dists = np.linalg.norm(coords[:, None, :] - coords[None, :, :], axis=-1)
    graph = nx.Graph()
    for i, (x, y) in enumerate(coords):
        graph.add_node(i, pos=(float(x), float(y)))
    for i in range(len(coords)):
        for j in range(i + 1, len(coords)):
            graph.add_edge(i, j, weight=float(dists[i, j]))
    return graph


def read_coordinates(path: Path) -> List[Point]:
    points: List[Point] = []
    for line in Path(path).read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.replace(",", " ").split()
        points.append((float(parts[-2]), float(parts[-1])))
    return points


def random_cities(count: int, rng: random.Random, size: float = 100.0) -> List[Point]:
    return [(rng.uniform(0, size), rng.uniform(0, size)) for _ in range(count)]


def load_coordinates(path: Path) -> Instance:
    path = Path(path)
    return Instance(name=path.stem, path=path, graph=coordinate_graph(read_coordinates(path)), optimum=None)
