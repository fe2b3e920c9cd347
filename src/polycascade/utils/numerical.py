"""Numerical utilities for the cascade solver."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable

from polycascade.exceptions import DivergedError

logger = logging.getLogger(__name__)


def successive_substitution(
    func: Callable[[float], float],
    x0: float,
    tol: float,
    max_iter: int,
) -> tuple[float, float, int]:
    """Iterate x <- func(x) until two successive iterates agree.

    Plain Picard iteration with no acceleration: each step feeds the
    previous output straight back in.

    Args:
        func: Map whose fixed point is sought.
        x0: Starting estimate.
        tol: Absolute tolerance on |func(x) - x|.
        max_iter: Maximum number of map evaluations.

    Returns:
        Tuple of (x_prev, x_new, iterations) where x_new = func(x_prev)
        and |x_new - x_prev| < tol.

    Raises:
        DivergedError: If the tolerance is not met within max_iter
            evaluations, or an iterate overflows or stops being finite.
    """
    x = x0
    for iteration in range(1, max_iter + 1):
        try:
            x_new = func(x)
        except OverflowError as exc:
            raise DivergedError(
                f"Iterate overflowed after {iteration} iterations (last finite value {x:.6g})",
                iterations=iteration,
                last_value=x,
            ) from exc

        if not math.isfinite(x_new):
            raise DivergedError(
                f"Iterate became non-finite after {iteration} iterations (last finite value {x:.6g})",
                iterations=iteration,
                last_value=x,
            )

        if abs(x_new - x) < tol:
            logger.debug(f"Fixed point reached in {iteration} iterations: x={x_new:.6g}")
            return x, x_new, iteration

        x = x_new

    raise DivergedError(
        f"No fixed point within {max_iter} iterations (last value {x:.6g})",
        iterations=max_iter,
        last_value=x,
    )


__all__ = ["successive_substitution"]
