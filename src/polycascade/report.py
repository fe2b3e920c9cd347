"""Text and JSON renderings of a cascade design."""

from __future__ import annotations

from typing import Any

from polycascade.reactors.plant import Plant, PlantResult


def _require_result(plant: Plant) -> PlantResult:
    if plant.result is None:
        raise ValueError("Plant has not been computed; call compute_all() first")
    return plant.result


def render_text(plant: Plant) -> str:
    """Human-readable report: conditions, vessel size, stage results, total.

    Args:
        plant: Plant after ``compute_all``.

    Returns:
        Multi-line report, newline terminated.
    """
    result = _require_result(plant)
    geo = plant.geometry
    lines = [
        "Conditions:",
        f"(N, gamma_0, T2) = ({plant.n_reactors}, {plant.feed}, {plant.coolant})",
        "Reactor Size:",
        f"V = {geo.volume:.3f} [m3]",
        f"D = {geo.diameter:.3f} [m]",
        f"H = {geo.height:.3f} [m]",
        "Results:",
    ]

    for number, stage in enumerate(result.stages, start=1):
        lines.append(f"#{number}")
        if stage.diverged:
            lines.append(f"diverged after {stage.iterations} iterations")
            continue
        lines.append(f"Re = {stage.reynolds:.3f}")  # type: ignore[union-attr]
        lines.append(f"n = {stage.revolution_speed:.3f} [rps]")  # type: ignore[union-attr]
        lines.append(f"P = {stage.power:.3f} [W]")  # type: ignore[union-attr]

    lines.append("Total:")
    if result.diverged:
        lines.append("endless calculation...")
        lines.append("Ptot = infinity")
    else:
        lines.append(f"Ptot = {result.total_power:.3f} [W]")
    return "\n".join(lines) + "\n"


def to_dict(plant: Plant) -> dict[str, Any]:
    """JSON-serializable report. A divergent total is reported as None."""
    result = _require_result(plant)
    return {
        "conditions": {
            "n_reactors": plant.n_reactors,
            "feed": plant.feed,
            "coolant": plant.coolant,
        },
        "geometry": plant.geometry.to_dict(),
        "stages": [stage.to_dict() for stage in result.stages],
        "total_power": None if result.diverged else result.total_power,
        "diverged": result.diverged,
    }


__all__ = ["render_text", "to_dict"]
