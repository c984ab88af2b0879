from __future__ import annotations

from typing import Sequence

import numpy as np

from ..errors import DimensionMismatchError


def _as_vector(v: Sequence[float]) -> np.ndarray:
    return np.asarray(v, dtype=float)


def _check_lengths(a: Sequence[float], b: Sequence[float]) -> None:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    _check_lengths(a, b)
    return float(np.dot(_as_vector(a), _as_vector(b)))


def l2_norm(v: Sequence[float]) -> float:
    return float(np.linalg.norm(_as_vector(v)))


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    _check_lengths(a, b)
    va, vb = _as_vector(a), _as_vector(b)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    _check_lengths(a, b)
    return float(np.linalg.norm(_as_vector(a) - _as_vector(b)))


def cosine_similarities(matrix: np.ndarray, query: Sequence[float]) -> np.ndarray:
    """Cosine of ``query`` against every row of ``matrix``; zero-norm rows score 0."""
    q = _as_vector(query)
    if matrix.shape[1] != q.shape[0]:
        raise DimensionMismatchError(matrix.shape[1], q.shape[0])
    dots = matrix @ q
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(q)
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)


def euclidean_distances(matrix: np.ndarray, query: Sequence[float]) -> np.ndarray:
    q = _as_vector(query)
    if matrix.shape[1] != q.shape[0]:
        raise DimensionMismatchError(matrix.shape[1], q.shape[0])
    return np.linalg.norm(matrix - q, axis=1)


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if norm == 0:
        return vector
    return vector / norm
