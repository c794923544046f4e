"""
Piecewise cubic bezier fitting by alternating least squares.

Tangent directions at the critical points and arm lengths of each section are
optimized in turn, with the curve parameter of every sample re-projected
between passes, until the total squared error falls under a threshold or the
iteration cap is reached.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from pbnvec.fitting.alphas import optimize_alphas
from pbnvec.fitting.curves import compute_error, compute_section_curves
from pbnvec.fitting.given import SectionData
from pbnvec.fitting.projection import compute_t_values
from pbnvec.fitting.tangents import compute_initial_tangents, optimize_tangents
from pbnvec.types import BezierCurve, BoundaryPiece, FitConfig, FittingError, PreconditionError

logger = logging.getLogger(__name__)


@dataclass
class FitResult:
    """Outcome of one fitting run."""
    curves: List[BezierCurve] = field(default_factory=list)
    error: float = 0.0
    iterations: int = 0
    converged: bool = False


def find_best_fit(
    data_points: Sequence,
    critical_points: Sequence,
    config: Optional[FitConfig] = None
) -> FitResult:
    """
    Fit one cubic per section between consecutive critical points.

    Args:
        data_points: Ordered samples; closed loops repeat the first point last
        critical_points: Ordered subsequence of ``data_points`` sharing its
            first and last point
        config: Fitting settings (defaults to ``FitConfig()``)

    Returns:
        The lowest-error curves seen. The error is not guaranteed to decrease
        monotonically between iterations.

    Raises:
        PreconditionError: If the critical points do not partition the data
        FittingError: If the error becomes non-finite
    """
    config = config or FitConfig()
    if config.max_iterations < 1:
        raise PreconditionError(f"max_iterations must be >= 1, got {config.max_iterations}")
    given = SectionData.for_points(data_points, critical_points)

    tangents = compute_initial_tangents(given)
    alphas = np.zeros((given.section_count, 2))
    t = compute_t_values(given, tangents, alphas, None, config)

    best = None
    iteration = 0
    while iteration < config.max_iterations:
        iteration += 1
        alphas = optimize_alphas(given, tangents, alphas, t, config)
        tangents, alphas = optimize_tangents(given, tangents, alphas, t, config)
        t = compute_t_values(given, tangents, alphas, t, config)
        error = compute_error(given, tangents, alphas, t)

        if not np.isfinite(error):
            raise FittingError(f"Fit error became non-finite at iteration {iteration}")

        logger.debug(f"Fit iteration {iteration}: error={error:.4f}")
        if best is None or error < best.error:
            best = FitResult(
                curves=compute_section_curves(given, tangents, alphas),
                error=error,
                iterations=iteration,
            )
        if error < config.error_threshold:
            break

    best.iterations = iteration
    best.converged = best.error < config.error_threshold
    return best


def critical_points_for(piece: BoundaryPiece) -> List:
    """
    Critical points used to fit ``piece``.

    The simplified chain is used when present. Loops need at least three
    distinct critical points to be fitted, so long gaps get split at the
    middle sample of the chain until they have them.
    """
    chain = list(piece.chain)
    critical = list(piece.simplified_chain) or [chain[0], chain[-1]]
    if not piece.is_loop or len(critical) >= 4:
        return critical

    indices = _chain_indices(chain, critical)
    while len(indices) < 4:
        gaps = [(indices[k + 1] - indices[k], k) for k in range(len(indices) - 1)]
        width, k = max(gaps)
        if width < 2:
            break
        indices.insert(k + 1, indices[k] + width // 2)
    return [chain[index] for index in indices]


def _chain_indices(chain: List, critical: List) -> List[int]:
    indices = [0]
    for index in range(1, len(chain)):
        if len(indices) < len(critical) and chain[index] == critical[len(indices)]:
            indices.append(index)
    if indices[-1] != len(chain) - 1:
        indices.append(len(chain) - 1)
    return indices


def fit_piece(piece: BoundaryPiece, config: Optional[FitConfig] = None) -> BoundaryPiece:
    """Fit curves to ``piece`` and store them on it."""
    if len(piece.chain) < 2:
        piece.curves = []
        piece.fit_error = 0.0
        piece.fit_iterations = 0
        return piece

    result = find_best_fit(list(piece.chain), critical_points_for(piece), config)
    piece.curves = result.curves
    piece.fit_error = result.error
    piece.fit_iterations = result.iterations
    if not result.converged:
        logger.debug(
            f"Piece with {len(piece.chain)} points stopped after {result.iterations} "
            f"iterations at error {result.error:.2f}"
        )
    return piece
