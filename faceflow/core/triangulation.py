# core/triangulation.py
"""
Fixed triangle index table for drawing the face mesh.

The table is a flat sequence of landmark indices, three per triangle. It is
either read from a JSON file holding that flat list or derived from the
tesselation connections shipped with the MediaPipe face landmarker.
"""
import json
from functools import lru_cache
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from loguru import logger


def validate_table(table: Sequence[int]) -> Tuple[int, ...]:
    table = tuple(int(i) for i in table)
    if len(table) % 3 != 0:
        raise ValueError(f"Triangulation length {len(table)} is not a multiple of 3")
    if table and min(table) < 0:
        raise ValueError("Triangulation contains negative landmark indices")
    return table


def as_triangles(table: Sequence[int]) -> np.ndarray:
    """View a flat table as an (n, 3) index array"""
    return np.asarray(validate_table(table), dtype=np.int32).reshape(-1, 3)


def triangles_from_edges(edges: Iterable[Tuple[int, int]]) -> Tuple[int, ...]:
    """Flat triangle table from an undirected edge set.

    Every 3-clique becomes one triangle. Triangles are emitted with ascending
    vertex order and sorted, so the result does not depend on edge order.
    """
    neighbours = {}
    for a, b in edges:
        if a == b:
            continue
        neighbours.setdefault(a, set()).add(b)
        neighbours.setdefault(b, set()).add(a)

    table = []
    for a in sorted(neighbours):
        higher = sorted(n for n in neighbours[a] if n > a)
        for i, b in enumerate(higher):
            for c in higher[i + 1:]:
                if c in neighbours[b]:
                    table.extend((a, b, c))
    return tuple(table)


def _tesselation_edges():
    from mediapipe.tasks.python.vision import FaceLandmarksConnections

    for connection in FaceLandmarksConnections.FACE_LANDMARKS_TESSELATION:
        if isinstance(connection, tuple):
            yield connection
        else:
            yield connection.start, connection.end


@lru_cache(maxsize=None)
def load_triangulation(path: Optional[str] = None) -> Tuple[int, ...]:
    """Load the process-wide triangulation table (cached per source)"""
    if path:
        with open(path, 'r') as f:
            table = validate_table(json.load(f))
        logger.info(f"Loaded {len(table) // 3} triangles from {path}")
        return table

    table = validate_table(triangles_from_edges(_tesselation_edges()))
    logger.info(f"Derived {len(table) // 3} triangles from face tesselation")
    return table
