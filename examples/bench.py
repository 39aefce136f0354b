"""Benchmark yamlrt against other YAML engines on a synthetic commented document."""

from __future__ import annotations

import argparse
import io
import time
from typing import TYPE_CHECKING

import ruamel.yaml
import yaml as pyyaml

import yamlrt

OK = 0
if TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Sequence


def _build_doc(sections: int, keys: int) -> str:
    lines = ["# synthetic configuration", "---"]
    for section in range(sections):
        lines.extend(("", f"# section {section}", f"section{section}:"))
        lines.extend(f"  key{i}: {i}  # value {i}" for i in range(keys))
        lines.append("  items:")
        lines.extend(f"    - name: item{i}\n      weight: {i}.5" for i in range(3))
        lines.append("  flags: [alpha, beta, gamma]")
    return "\n".join(lines) + "\n"


def _bench(callback: Callable[[], object], runs: int) -> float:
    start = time.perf_counter()
    for _ in range(runs):
        callback()
    return (time.perf_counter() - start) / runs


def _ruamel_round_trip(doc: str) -> Callable[[], str]:
    engine = ruamel.yaml.YAML()

    def _call() -> str:
        buffer = io.StringIO()
        engine.dump(engine.load(doc), buffer)
        return buffer.getvalue()

    return _call


def _format_line(label: str, seconds: float) -> str:
    return f"{label:<24}: {seconds * 1000:.3f} ms"


def _run_benchmarks(runs: int, sections: int, keys: int) -> list[str]:
    doc = _build_doc(sections, keys)
    root = yamlrt.loads(doc)
    pyyaml_data = pyyaml.safe_load(doc)
    ruamel_call = _ruamel_round_trip(doc)

    lines: list[str] = [
        f"Runs: {runs}",
        f"Document: {sections} sections x {keys} keys ({len(doc)} bytes)",
        f"yamlrt round trip exact: {yamlrt.dumps(root) == doc}",
        f"ruamel round trip exact: {ruamel_call() == doc}",
    ]
    lines.extend((
        _format_line("yamlrt.loads", _bench(lambda: yamlrt.loads(doc), runs)),
        _format_line("yamlrt.dumps", _bench(lambda: yamlrt.dumps(root), runs)),
        _format_line("ruamel rt load+dump", _bench(ruamel_call, runs)),
        _format_line("PyYAML safe_load", _bench(lambda: pyyaml.safe_load(doc), runs)),
        _format_line(
            "PyYAML safe_dump",
            _bench(lambda: pyyaml.safe_dump(pyyaml_data), runs),
        ),
    ))
    return lines


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Benchmark yamlrt vs other YAML engines",
    )
    parser.add_argument(
        "--runs",
        type=int,
        default=50,
        help="Number of iterations per operation (default: 50)",
    )
    parser.add_argument(
        "--sections",
        type=int,
        default=20,
        help="Number of top-level sections (default: 20)",
    )
    parser.add_argument(
        "--keys",
        type=int,
        default=50,
        help="Number of commented scalar keys per section (default: 50)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the benchmarks and print results.

    Returns:
        Exit code (0 for success).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    for line in _run_benchmarks(runs=args.runs, sections=args.sections, keys=args.keys):
        print(line)
    return OK


if __name__ == "__main__":
    raise SystemExit(main())
