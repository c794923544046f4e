"""Piecewise cubic construction and evaluation from tangents and alphas."""
from typing import List

import numpy as np

from pbnvec.fitting.given import SectionData, bernstein
from pbnvec.types import BezierCurve


def section_controls(given: SectionData, tangents: np.ndarray, alphas: np.ndarray, i: int) -> np.ndarray:
    """Control points of section ``i``, shape (4, 2)."""
    p0 = given.P(i)
    p3 = given.P(i + 1)
    p1 = p0 + alphas[i, 0] * tangents[i]
    p2 = p3 - alphas[i, 1] * tangents[i + 1]
    return np.array([p0, p1, p2, p3])


def evaluate(controls: np.ndarray, t: np.ndarray) -> np.ndarray:
    return bernstein(t) @ controls


def first_derivative(controls: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.asarray(t, dtype=float)[:, None]
    s = 1.0 - t
    d = np.diff(controls, axis=0)
    return 3.0 * (s * s * d[0] + 2.0 * s * t * d[1] + t * t * d[2])


def second_derivative(controls: np.ndarray, t: np.ndarray) -> np.ndarray:
    t = np.asarray(t, dtype=float)[:, None]
    dd = np.diff(controls, n=2, axis=0)
    return 6.0 * ((1.0 - t) * dd[0] + t * dd[1])


def compute_section_curves(given: SectionData, tangents: np.ndarray, alphas: np.ndarray) -> List[BezierCurve]:
    curves = []
    for i in range(given.section_count):
        controls = section_controls(given, tangents, alphas, i)
        curves.append(BezierCurve(*(tuple(float(v) for v in point) for point in controls)))
    return curves


def compute_error(
    given: SectionData,
    tangents: np.ndarray,
    alphas: np.ndarray,
    t: List[np.ndarray]
) -> float:
    """Total squared distance between samples and their projected curve points."""
    total = 0.0
    for i in range(given.section_count):
        controls = section_controls(given, tangents, alphas, i)
        residual = evaluate(controls, t[i]) - given.C(i)
        total += float(np.sum(residual * residual))
    return total
