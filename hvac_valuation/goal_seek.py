"""Bounded scalar goal-seek helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from hvac_valuation.model import RESULT_FIELDS, run_valuation
from hvac_valuation.schema import INPUT_FIELDS, as_inputs


@dataclass
class GoalSeekResult:
    status: str
    value: float | None
    achieved: float | None
    iterations: int
    message: str


def solve_bounded_scalar(
    evaluator: Callable[[float], float],
    target: float,
    lower_bound: float,
    upper_bound: float,
    tol: float = 1e-3,
    max_iter: int = 60,
) -> GoalSeekResult:
    """Bisect [lower_bound, upper_bound] for evaluator(x) == target within tol."""
    lo, hi = float(lower_bound), float(upper_bound)
    if hi <= lo:
        return GoalSeekResult("failed", None, None, 0, "Upper bound must be greater than lower bound.")

    gap_lo = float(evaluator(lo)) - target
    gap_hi = float(evaluator(hi)) - target
    if gap_lo * gap_hi > 0:
        return GoalSeekResult("failed", None, None, 0, "Target is not bracketed by the bounds; widen them.")

    x = lo
    achieved = gap_lo + target
    for iteration in range(max_iter + 1):
        if abs(achieved - target) <= tol:
            return GoalSeekResult("solved", x, achieved, iteration, "Converged.")
        x = 0.5 * (lo + hi)
        achieved = float(evaluator(x))
        if (achieved - target) * gap_lo > 0:
            lo, gap_lo = x, achieved - target
        else:
            hi = x

    return GoalSeekResult("failed", x, achieved, max_iter, "Reached max iterations before tolerance was met.")


def solve_for_input(
    inputs,
    input_field: str,
    target_output: str,
    target_value: float,
    lower_bound: float,
    upper_bound: float,
    tol: float = 1.0,
    max_iter: int = 80,
) -> GoalSeekResult:
    """Find the value of one input that makes a result field hit target_value."""
    if input_field not in INPUT_FIELDS:
        raise KeyError(f"Unknown input field: {input_field}")
    if target_output not in RESULT_FIELDS:
        raise KeyError(f"Unknown result field: {target_output}")
    base = as_inputs(inputs)

    def _evaluate(x: float) -> float:
        return getattr(run_valuation(base.replace(**{input_field: x})), target_output)

    return solve_bounded_scalar(_evaluate, float(target_value), lower_bound, upper_bound, tol=tol, max_iter=max_iter)
