"""Closest-point curve parameters for every sample."""
import logging
from typing import List, Optional

import numpy as np

from pbnvec.fitting.curves import evaluate, first_derivative, second_derivative, section_controls
from pbnvec.fitting.given import SectionData
from pbnvec.types import FitConfig

logger = logging.getLogger(__name__)

# Dense samples used when Newton-Raphson fails to improve a projection.
SEARCH_SAMPLES = 65


def chord_length_parameters(samples: np.ndarray) -> np.ndarray:
    """Cumulative chord length normalized to [0, 1]."""
    lengths = np.sqrt(np.sum(np.diff(samples, axis=0) ** 2, axis=1))
    cumulative = np.concatenate([[0.0], np.cumsum(lengths)])
    if cumulative[-1] <= 0:
        return np.linspace(0.0, 1.0, len(samples))
    return cumulative / cumulative[-1]


def compute_t_values(
    given: SectionData,
    tangents: np.ndarray,
    alphas: np.ndarray,
    previous: Optional[List[np.ndarray]],
    config: FitConfig
) -> List[np.ndarray]:
    """
    Parameter of the closest curve point for every sample of every section.

    The first pass uses chord-length parameters. Later passes refine the
    previous values with Newton-Raphson on the derivative of the squared
    distance; samples where that does not help fall back to a dense search.
    Section end samples stay pinned at 0 and 1.
    """
    t_values = []
    fallbacks = 0
    for i in range(given.section_count):
        samples = given.C(i)
        if previous is None:
            t_values.append(chord_length_parameters(samples))
            continue
        controls = section_controls(given, tangents, alphas, i)
        t_i, fallback_count = _project_section(controls, samples, previous[i], config)
        t_values.append(t_i)
        fallbacks += fallback_count

    if fallbacks:
        logger.debug(f"Projection: {fallbacks} samples used dense search fallback")
    return t_values


def _project_section(
    controls: np.ndarray,
    samples: np.ndarray,
    seed: np.ndarray,
    config: FitConfig
):
    t = seed.astype(float).copy()
    active = np.ones(len(t), dtype=bool)
    active[[0, -1]] = False

    for _ in range(config.newton_iterations):
        if not active.any():
            break
        t_active = t[active]
        difference = evaluate(controls, t_active) - samples[active]
        d1 = first_derivative(controls, t_active)
        d2 = second_derivative(controls, t_active)
        numerator = np.sum(difference * d1, axis=1)
        denominator = np.sum(d1 * d1, axis=1) + np.sum(difference * d2, axis=1)

        settled = (
            (np.abs(numerator) < config.newton_tolerance)
            | (np.sum(difference * difference, axis=1) < config.newton_tolerance)
            | (np.abs(denominator) < config.singular_epsilon)
        )
        step = np.where(settled, 0.0, numerator / np.where(settled, 1.0, denominator))
        t[active] = np.clip(t_active - step, 0.0, 1.0)

        indices = np.flatnonzero(active)
        active[indices[settled]] = False

    t[0], t[-1] = 0.0, 1.0

    seed_error = _squared_distance(controls, samples, seed)
    newton_error = _squared_distance(controls, samples, t)
    worse = newton_error > seed_error + config.newton_tolerance
    worse[[0, -1]] = False
    if not worse.any():
        return t, 0

    grid = np.linspace(0.0, 1.0, SEARCH_SAMPLES)
    curve = evaluate(controls, grid)
    for j in np.flatnonzero(worse):
        distances = np.sum((curve - samples[j]) ** 2, axis=1)
        best = int(np.argmin(distances))
        t[j] = grid[best] if distances[best] < seed_error[j] else seed[j]
    return t, int(worse.sum())


def _squared_distance(controls: np.ndarray, samples: np.ndarray, t: np.ndarray) -> np.ndarray:
    difference = evaluate(controls, t) - samples
    return np.sum(difference * difference, axis=1)
