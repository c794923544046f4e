"""Initial tangent estimates and the banded least-squares tangent update."""
import logging
from typing import List, Tuple

import numpy as np
from scipy.linalg import LinAlgError, solve_banded

from pbnvec.fitting.given import SectionData, bernstein
from pbnvec.types import FitConfig

logger = logging.getLogger(__name__)


def compute_initial_tangents(given: SectionData) -> np.ndarray:
    """
    Unit tangents at every critical point, shape (n, 2).

    Interior points use the direction from the previous to the next critical
    point. Ends use their own chord, except on a closed loop where both ends
    share the direction across the seam.
    """
    points = given.critical_points
    n = given.n
    tangents = np.zeros((n, 2))
    for k in range(n):
        if 0 < k < n - 1:
            direction = points[k + 1] - points[k - 1]
        elif given.is_closed:
            direction = points[1] - points[n - 2]
        elif k == 0:
            direction = points[1] - points[0]
        else:
            direction = points[n - 1] - points[n - 2]

        if np.linalg.norm(direction) == 0:
            direction = _nearest_chord(points, k)
        tangents[k] = direction / np.linalg.norm(direction)
    return tangents


def _nearest_chord(points: np.ndarray, k: int) -> np.ndarray:
    candidates = []
    if k + 1 < len(points):
        candidates.append(points[k + 1] - points[k])
    if k > 0:
        candidates.append(points[k] - points[k - 1])
    for chord in candidates:
        if np.linalg.norm(chord) > 0:
            return chord
    return np.array([1.0, 0.0])


def optimize_tangents(
    given: SectionData,
    previous: np.ndarray,
    alphas: np.ndarray,
    t: List[np.ndarray],
    config: FitConfig
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Best tangents with arm lengths and parameters held fixed.

    Every section touches only its two end tangents, so the normal equations
    form a tridiagonal system shared by the x and y components. Rows with no
    information (all adjacent arm lengths zero) keep their previous tangent.

    The solved vectors are normalized and their lengths folded into the arm
    lengths, which leaves the curves unchanged by the normalization.

    Returns:
        (unit tangents, rescaled arm lengths)
    """
    n = given.n
    eps = config.singular_epsilon
    upper = np.zeros(n)
    diagonal = np.zeros(n)
    lower = np.zeros(n)
    y = np.zeros((n, 2))

    for i in range(given.section_count):
        b = bernstein(t[i])
        a_coeff = alphas[i, 0] * b[:, 1]
        b_coeff = -alphas[i, 1] * b[:, 2]
        residual = given.A(i, t[i])

        diagonal[i] += np.sum(a_coeff * a_coeff)
        diagonal[i + 1] += np.sum(b_coeff * b_coeff)
        cross = np.sum(a_coeff * b_coeff)
        upper[i + 1] += cross
        lower[i] += cross
        y[i] -= a_coeff @ residual
        y[i + 1] -= b_coeff @ residual

    for k in np.flatnonzero(diagonal < eps):
        logger.debug(f"No samples constrain the tangent at critical point {k}; keeping previous")
        diagonal[k] = 1.0
        if k > 0:
            lower[k - 1] = 0.0
        if k + 1 < n:
            upper[k + 1] = 0.0
        y[k] = previous[k]

    banded = np.vstack([upper, diagonal, lower])
    try:
        solved = solve_banded((1, 1), banded, y)
    except (LinAlgError, ValueError) as e:
        logger.warning(f"Tangent system could not be solved ({e}); keeping previous tangents")
        return previous.copy(), alphas.copy()
    if not np.all(np.isfinite(solved)):
        logger.warning("Tangent system produced non-finite values; keeping previous tangents")
        return previous.copy(), alphas.copy()

    norms = np.linalg.norm(solved, axis=1)
    tangents = previous.astype(float).copy()
    usable = norms > 0
    tangents[usable] = solved[usable] / norms[usable, None]
    scale = np.where(usable, norms, 0.0)

    rescaled = alphas.astype(float).copy()
    rescaled[:, 0] *= scale[:-1]
    rescaled[:, 1] *= scale[1:]
    return tangents, rescaled
