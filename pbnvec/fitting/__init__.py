"""Piecewise cubic bezier fitting for traced boundary chains."""
from pbnvec.fitting.alphas import optimize_alphas
from pbnvec.fitting.curves import compute_error, compute_section_curves
from pbnvec.fitting.fit import FitResult, critical_points_for, find_best_fit, fit_piece
from pbnvec.fitting.given import SectionData, bernstein
from pbnvec.fitting.projection import compute_t_values
from pbnvec.fitting.tangents import compute_initial_tangents, optimize_tangents

__all__ = [
    'FitResult',
    'SectionData',
    'bernstein',
    'compute_error',
    'compute_initial_tangents',
    'compute_section_curves',
    'compute_t_values',
    'critical_points_for',
    'find_best_fit',
    'fit_piece',
    'optimize_alphas',
    'optimize_tangents',
]
