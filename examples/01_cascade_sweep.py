"""Cascade sweep example: vessel size and agitation power versus N.

Shows how splitting the conversion over more reactors shrinks each vessel,
and where the stirring power stops being self-consistent.

Run: python examples/01_cascade_sweep.py
"""

from __future__ import annotations

from polycascade import Plant, render_text, setup_logging


def main() -> None:
    """Run cascade sweep example."""
    setup_logging(level="WARNING")

    print("=" * 60)
    print("Cascade sweep: gamma_0 = 0.01, T2 = 273 K")
    print("=" * 60)
    print(f"{'N':>3} {'V [m3]':>10} {'D [m]':>8} {'Ptot [W]':>12}")
    for n in range(1, 7):
        plant = Plant(n, 0.01, 273)
        result = plant.compute_all()
        total = "infinity" if result.diverged else f"{result.total_power:.3f}"
        print(f"{n:>3} {plant.geometry.volume:>10.3f} {plant.geometry.diameter:>8.3f} {total:>12}")

    print("\nViscous feed with a 10 K driving force:")
    plant = Plant(1, 0.3, 313)
    plant.compute_all()
    print(render_text(plant))


if __name__ == "__main__":
    main()
