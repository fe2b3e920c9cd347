"""Command-line entry point for polycascade.

Reads N, gamma_0 and T2 from standard input, one per line, and prints the
cascade design report.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import TextIO

from polycascade import __version__
from polycascade.exceptions import ConfigurationError, InvalidParameters

logger = logging.getLogger(__name__)

PROMPT = "input n[-], gamma_0[wt%], T2[K]"


def _parse_int(text: str, name: str) -> int:
    try:
        value = float(text)
    except ValueError:
        raise InvalidParameters(f"{name} must be a number, got {text!r}") from None
    if not value.is_integer():
        raise InvalidParameters(f"{name} must be an integer, got {text!r}")
    return int(value)


def _parse_float(text: str, name: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise InvalidParameters(f"{name} must be a number, got {text!r}") from None


def read_inputs(stream: TextIO) -> tuple[int, float, int | float]:
    """Read the three process inputs from a text stream.

    Args:
        stream: Stream holding N, gamma_0 and T2 on consecutive lines.

    Returns:
        Tuple of (n_reactors, feed, coolant). Integral coolant values are
        returned as int.

    Raises:
        InvalidParameters: If a line is missing or not a number.
    """
    values = []
    for name in ("N", "gamma_0", "T2"):
        line = stream.readline()
        if not line.strip():
            raise InvalidParameters(f"Missing input line for {name}")
        values.append(line.strip())

    n_reactors = _parse_int(values[0], "N")
    feed = _parse_float(values[1], "gamma_0")
    coolant: int | float = _parse_float(values[2], "T2")
    if coolant.is_integer():
        coolant = int(coolant)
    return n_reactors, feed, coolant


def run(args: argparse.Namespace, stdin: TextIO, stdout: TextIO) -> int:
    """Compute the plant described on stdin and write the report.

    Returns:
        Process exit code.
    """
    from polycascade.reactors.plant import Plant
    from polycascade.report import render_text, to_dict
    from polycascade.utils.config import CascadeConfig, load_config
    from polycascade.utils.logging import RunTracer, setup_logging

    try:
        config = load_config(args.config) if args.config else CascadeConfig()
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    setup_logging(
        level=args.log_level or config.logging.level,
        log_format=args.log_format or config.logging.format,
        log_file=config.logging.log_file,
        module_levels=config.logging.module_levels,
    )

    if stdin.isatty():
        print(PROMPT, file=stdout)

    with RunTracer() as tracer:
        try:
            n_reactors, feed, coolant = read_inputs(stdin)
            tracer.bind(n_reactors=n_reactors, feed=feed, coolant=coolant)
            plant = Plant(
                n_reactors,
                feed,
                coolant,
                constants=config.constants,
                settings=config.solver,
            )
            logger.info(f"Computing {plant!r}")
            plant.compute_all()
        except InvalidParameters as exc:
            logger.error(f"Invalid parameters: {exc}")
            print(f"Invalid parameters: {exc}", file=sys.stderr)
            return 1

    if args.json:
        print(json.dumps(to_dict(plant), indent=2), file=stdout)
    else:
        stdout.write(render_text(plant))
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the polycascade CLI."""
    parser = argparse.ArgumentParser(
        prog="polycascade",
        description=(
            "Size a cascade of N polymerization CSTRs and compute the agitation "
            "power of each reactor. Reads N, gamma_0 and T2 from stdin, one per line."
        ),
    )
    parser.add_argument("--version", action="version", version=f"polycascade {__version__}")
    parser.add_argument("--config", default=None, help="YAML file overriding constants, solver or logging")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--log-level", default=None, help="Log level (default from config: WARNING)")
    parser.add_argument("--log-format", choices=["text", "json"], default=None, help="Log format")

    args = parser.parse_args(argv)
    sys.exit(run(args, sys.stdin, sys.stdout))


__all__ = ["main", "read_inputs", "run"]
