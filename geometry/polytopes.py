# geometry/polytopes.py
"""
Regular 4-polytopes with a deterministic vertex order and precomputed adjacency.

Vertex order, edges and faces are identical on every construction, so tests and
callers can index vertices reproducibly.
"""
from __future__ import annotations
import itertools
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .primitives import Point4D

DEFAULT_CIRCUMRADIUS = 1.0
_EDGE_TOL = 1e-9

Edge = Tuple[int, int]
Face = Tuple[int, ...]


def _edges_at_distance(vertices: Sequence[Point4D], length: float) -> List[Edge]:
    edges = []
    for i, j in itertools.combinations(range(len(vertices)), 2):
        if abs(vertices[i].distance(vertices[j]) - length) <= _EDGE_TOL * max(1.0, length):
            edges.append((i, j))
    return edges


def _shortest_edges(vertices: Sequence[Point4D]) -> List[Edge]:
    if len(vertices) < 2:
        return []
    shortest = min(a.distance(b) for a, b in itertools.combinations(vertices, 2))
    return _edges_at_distance(vertices, shortest)


class Polytope4D:
    """Immutable vertex set plus edge/face adjacency computed once."""

    def __init__(self, vertices: Sequence[Point4D],
                 edges: Optional[Sequence[Edge]] = None,
                 faces: Sequence[Face] = (),
                 name: str = "polytope"):
        self._vertices = tuple(vertices)
        self._edges = tuple(tuple(e) for e in (edges if edges is not None else _shortest_edges(self._vertices)))
        self._faces = tuple(tuple(f) for f in faces)
        self.name = name

    @property
    def vertices(self) -> Tuple[Point4D, ...]:
        return self._vertices

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return self._edges

    @property
    def faces(self) -> Tuple[Face, ...]:
        return self._faces

    def vertex_array(self) -> np.ndarray:
        return np.array([v.as_array() for v in self._vertices])

    def with_vertices(self, vertices: Sequence[Point4D]) -> "Polytope4D":
        """New snapshot sharing this polytope's adjacency."""
        vertices = tuple(vertices)
        if len(vertices) != len(self._vertices):
            raise ValueError(f"expected {len(self._vertices)} vertices, got {len(vertices)}")
        return Polytope4D(vertices, self._edges, self._faces, name=self.name)

    def centroid(self) -> Point4D:
        return Point4D.from_array(self.vertex_array().mean(axis=0))

    def circumradius(self) -> float:
        c = self.centroid()
        return max(v.distance(c) for v in self._vertices)

    def edge_length(self) -> float:
        i, j = self._edges[0]
        return self._vertices[i].distance(self._vertices[j])

    def __repr__(self):
        return f"{type(self).__name__}(V={len(self._vertices)}, E={len(self._edges)}, F={len(self._faces)})"


class Tesseract(Polytope4D):
    """4D hypercube: 16 vertices, 32 edges, 24 square faces."""

    def __init__(self, circumradius: float = DEFAULT_CIRCUMRADIUS):
        if circumradius <= 0:
            raise ValueError(f"circumradius must be positive, got {circumradius}")
        h = 0.5 * circumradius
        # vertex i: bit k set => +h on axis k
        vertices = [Point4D(*[h if (i >> k) & 1 else -h for k in range(4)]) for i in range(16)]
        edges = []
        for i in range(16):
            for bit in range(4):
                if i < (j := i ^ (1 << bit)):
                    edges.append((i, j))
        edges.sort()
        faces = []
        for a, b in itertools.combinations(range(4), 2):
            others = [k for k in range(4) if k not in (a, b)]
            for bits in itertools.product((0, 1), repeat=2):
                base = sum(bit << k for bit, k in zip(bits, others))
                faces.append((base, base | 1 << a, base | 1 << a | 1 << b, base | 1 << b))
        super().__init__(vertices, edges, faces, name="tesseract")


class Cell24(Polytope4D):
    """24-cell: 24 vertices (permutations of (±1, ±1, 0, 0)), 96 edges, 96 triangles."""

    def __init__(self, circumradius: float = DEFAULT_CIRCUMRADIUS):
        if circumradius <= 0:
            raise ValueError(f"circumradius must be positive, got {circumradius}")
        s = circumradius / math.sqrt(2.0)
        vertices = []
        for i, j in itertools.combinations(range(4), 2):
            for si, sj in itertools.product((-1.0, 1.0), repeat=2):
                p = [0.0] * 4
                p[i], p[j] = si * s, sj * s
                vertices.append(Point4D(*p))
        # edge length of the 24-cell equals its circumradius
        edges = _edges_at_distance(vertices, circumradius)
        adjacent = set(edges)
        faces = [
            (i, j, k) for i, j, k in itertools.combinations(range(len(vertices)), 3)
            if (i, j) in adjacent and (j, k) in adjacent and (i, k) in adjacent
        ]
        super().__init__(vertices, edges, faces, name="24-cell")
