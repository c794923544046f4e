"""Least-squares solve for the control arm lengths of each section."""
import logging
from typing import List

import numpy as np

from pbnvec.fitting.given import SectionData, bernstein
from pbnvec.types import FitConfig

logger = logging.getLogger(__name__)


def optimize_alphas(
    given: SectionData,
    tangents: np.ndarray,
    previous: np.ndarray,
    t: List[np.ndarray],
    config: FitConfig
) -> np.ndarray:
    """
    Best arm lengths for every section with tangents and parameters held fixed.

    Each section is an independent 2x2 linear system. Arm lengths are kept
    non-negative, so control points never point backwards along a tangent.

    Args:
        given: Sections being fitted
        tangents: Unit tangents at the critical points, shape (n, 2)
        previous: Arm lengths from the last iteration, shape (n - 1, 2)
        t: Curve parameters for each section's samples
        config: Fitting settings

    Returns:
        New arm lengths, shape (n - 1, 2)
    """
    alphas = previous.astype(float).copy()
    for i in range(given.section_count):
        alphas[i] = _solve_section(given, tangents, previous[i], t[i], i, config.singular_epsilon)
    return alphas


def _solve_section(
    given: SectionData,
    tangents: np.ndarray,
    previous: np.ndarray,
    t: np.ndarray,
    i: int,
    eps: float
) -> np.ndarray:
    b = bernstein(t)
    a = given.A(i, t)
    t0 = tangents[i]
    t1 = tangents[i + 1]

    m00 = float(np.dot(t0, t0) * np.sum(b[:, 1] ** 2))
    m11 = float(np.dot(t1, t1) * np.sum(b[:, 2] ** 2))
    m01 = float(-np.dot(t0, t1) * np.sum(b[:, 1] * b[:, 2]))
    r0 = float(-np.sum(b[:, 1] * (a @ t0)))
    r1 = float(np.sum(b[:, 2] * (a @ t1)))

    alpha0, alpha1 = float(previous[0]), float(previous[1])
    determinant = m00 * m11 - m01 * m01
    if abs(determinant) > eps:
        alpha0 = (r0 * m11 - m01 * r1) / determinant
        alpha1 = (m00 * r1 - m01 * r0) / determinant
    else:
        # Collinear tangents or too few samples: solve what is solvable.
        logger.debug(
            f"Singular arm-length system for section {i} "
            f"(determinant={determinant:.3g}); solving determined lengths only"
        )
        if m00 > eps:
            alpha0 = (r0 - m01 * alpha1) / m00
        if m11 > eps:
            alpha1 = (r1 - m01 * alpha0) / m11

    if alpha0 < 0:
        alpha0 = 0.0
        alpha1 = r1 / m11 if m11 > eps else alpha1
    if alpha1 < 0:
        alpha1 = 0.0
        alpha0 = r0 / m00 if m00 > eps else alpha0

    result = np.array([max(alpha0, 0.0), max(alpha1, 0.0)])
    if not np.all(np.isfinite(result)):
        logger.warning(f"Non-finite arm lengths for section {i}; keeping previous values")
        return previous.astype(float).copy()
    return result
