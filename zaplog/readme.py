"""Generate the README's benchmark tables from ``go test -bench`` output.

The README template is read from standard input. Each benchmark table is
built by running the benchmarks and comparing every library against the
unsugared zap logger. The rendered document goes to standard output.
"""

from __future__ import annotations

import argparse
import json
import re
import subprocess
import sys
from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction
from typing import Mapping, Sequence

__all__ = [
    "LIBRARY_NAME_TO_MARKDOWN_NAME",
    "BenchmarkRow",
    "parse_duration",
    "find_unique_substring",
    "get_benchmark_output",
    "get_benchmark_row",
    "sort_rows",
    "get_benchmark_rows",
    "render_template",
    "main",
]

LIBRARY_NAME_TO_MARKDOWN_NAME: dict[str, str] = {
    "Zap": ":zap: zap",
    "Zap.Sugar": ":zap: zap (sugared)",
    "stdlib.Println": "standard library",
    "sirupsen/logrus": "logrus",
    "go-kit/kit/log": "go-kit",
    "inconshreveable/log15": "log15",
    "apex/log": "apex/log",
    "rs/zerolog": "zerolog",
    "slog": "slog",
}

_BENCHMARKS = (
    "BenchmarkAddingFields",
    "BenchmarkAccumulatedContext",
    "BenchmarkWithoutFields",
)

_TABLE_HEADER = (
    "| Package | Time | Time % to zap | Objects Allocated |",
    "| :------ | :--: | :-----------: | :---------------: |",
)

_UNIT_NANOS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}
_DURATION_COMPONENT = re.compile(r"(\d+\.?\d*|\.\d+)(ns|us|µs|μs|ms|s|m|h)?")
_MAX_DURATION = 2**63 - 1
_INTEGER = re.compile(r"[+-]?\d+")
_ACTION = re.compile(r"\{\{(?P<ltrim>- )?(?P<body>.*?)(?P<rtrim> -)?\}\}", re.S)
_FIELD = re.compile(r"\.([A-Za-z_]\w*)")


def _quote(text: str) -> str:
    return json.dumps(text, ensure_ascii=False)


def parse_duration(text: str) -> int:
    """Parse a duration such as ``"656ns"`` or ``"1h2m"`` into nanoseconds."""
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]
    if s == "0":
        return 0
    if not s:
        raise ValueError(f"time: invalid duration {_quote(text)}")
    total = Fraction(0)
    pos = 0
    while pos < len(s):
        match = _DURATION_COMPONENT.match(s, pos)
        if match is None:
            raise ValueError(f"time: invalid duration {_quote(text)}")
        number, unit = match.groups()
        if unit is None:
            raise ValueError(f"time: missing unit in duration {_quote(text)}")
        total += Fraction(number.rstrip(".") or "0") * _UNIT_NANOS[unit]
        pos = match.end()
    nanos = int(total)
    if nanos > _MAX_DURATION + (1 if negative else 0):
        raise ValueError(f"time: invalid duration {_quote(text)}")
    return -nanos if negative else nanos


def _atoi(text: str) -> int:
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"parsing {_quote(text)}: invalid syntax")
    return int(text)


@dataclass
class BenchmarkRow:
    """One library's benchmark result, with the zap baseline to compare to.

    Times are in nanoseconds per operation.
    """

    name: str
    time: int
    allocated_bytes: int
    allocated_objects: int
    zap_time: int = 0
    zap_allocated_bytes: int = 0
    zap_allocated_objects: int = 0

    @staticmethod
    def _percent(value: int, baseline: int) -> str:
        if baseline == 0:
            ratio = float("nan") if value == 0 else float("inf") * (1 if value > 0 else -1)
        else:
            ratio = value / baseline
        pct = ratio * 100 - 100
        if pct != pct:
            return "+NaN%"
        if pct in (float("inf"), float("-inf")):
            return ("+Inf" if pct > 0 else "-Inf") + "%"
        return f"{pct:+.0f}%"

    def __str__(self) -> str:
        pct = self._percent(self.time, self.zap_time)
        return (
            f"| {self.name} | {self.time} ns/op | {pct} | "
            f"{self.allocated_objects} allocs/op"
        )


def find_unique_substring(lines: Sequence[str], substring: str) -> str:
    """Return the one line containing ``substring``, or ``""`` if none does.

    Raises ValueError if more than one line contains it.
    """
    found = ""
    for line in lines:
        if substring in line:
            if found:
                raise ValueError(f"input has duplicate substring {substring}")
            found = line
    return found


def get_benchmark_output(benchmark_name: str) -> list[str]:
    """Run one benchmark in the ``benchmarks`` directory; return its output lines."""
    command = ["go", "test", f"-bench={benchmark_name}", "-benchmem"]
    try:
        result = subprocess.run(
            command,
            cwd="benchmarks",
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise RuntimeError(
            f"error running 'go test -bench={_quote(benchmark_name)}': {exc}\n"
        ) from exc
    output = result.stdout or ""
    if result.returncode != 0:
        raise RuntimeError(
            f"error running 'go test -bench={_quote(benchmark_name)}': "
            f"exit status {result.returncode}\n{output}"
        )
    return output.split("\n")


def get_benchmark_row(
    lines: Sequence[str],
    benchmark_name: str,
    library_name: str,
    baseline: BenchmarkRow | None,
) -> BenchmarkRow | None:
    """Build the row for one library, or None if its benchmark did not run."""
    line = find_unique_substring(lines, f"{benchmark_name}/{library_name}-")
    if not line:
        return None
    fields = line.split("\t")
    if len(fields) < 5:
        raise ValueError(f"unknown benchmark line: {line}")
    duration = parse_duration(
        fields[2].strip().removesuffix("/op").replace(" ", "")
    )
    allocated_bytes = _atoi(fields[3].strip().removesuffix(" B/op"))
    allocated_objects = _atoi(fields[4].strip().removesuffix(" allocs/op"))
    row = BenchmarkRow(
        name=LIBRARY_NAME_TO_MARKDOWN_NAME.get(library_name, ""),
        time=duration,
        allocated_bytes=allocated_bytes,
        allocated_objects=allocated_objects,
    )
    if baseline is not None:
        row.zap_time = baseline.time
        row.zap_allocated_bytes = baseline.allocated_bytes
        row.zap_allocated_objects = baseline.allocated_objects
    return row


def sort_rows(rows: Sequence[BenchmarkRow]) -> list[BenchmarkRow]:
    """Order rows with zap's first, each part sorted by time."""
    return sorted(rows, key=lambda row: ("zap" not in row.name, row.time))


def get_benchmark_rows(benchmark_name: str) -> str:
    """Run a benchmark and render its results as a Markdown table."""
    lines = get_benchmark_output(benchmark_name)
    baseline = get_benchmark_row(lines, benchmark_name, "Zap", None)
    rows = [
        row
        for library in LIBRARY_NAME_TO_MARKDOWN_NAME
        if (row := get_benchmark_row(lines, benchmark_name, library, baseline))
        is not None
    ]
    table = [*_TABLE_HEADER, *(str(row) for row in sort_rows(rows))]
    return "\n".join(table)


def render_template(template: str, data: Mapping[str, object]) -> str:
    """Fill ``{{.Name}}`` actions in ``template`` from ``data``.

    ``{{- `` and `` -}}`` trim the whitespace next to an action, and
    ``{{/* ... */}}`` is a comment. Any other action is an error.
    """
    pieces: list[str] = []
    pos = 0
    trim_next = False
    for match in _ACTION.finditer(template):
        text = template[pos : match.start()]
        if "{{" in text:
            raise ValueError("unclosed action in template")
        if trim_next:
            text = text.lstrip()
        if match.group("ltrim"):
            text = text.rstrip()
        pieces.append(text)
        body = match.group("body").strip()
        if body.startswith("/*") and body.endswith("*/"):
            pass
        else:
            field = _FIELD.fullmatch(body)
            if field is None:
                raise ValueError(f"unsupported template action: {{{{{body}}}}}")
            name = field.group(1)
            if name not in data:
                raise ValueError(f"can't evaluate field {name}")
            pieces.append(str(data[name]))
        trim_next = bool(match.group("rtrim"))
        pos = match.end()
    rest = template[pos:]
    if "{{" in rest:
        raise ValueError("unclosed action in template")
    pieces.append(rest.lstrip() if trim_next else rest)
    return "".join(pieces)


def _template_data() -> dict[str, str]:
    return {name: get_benchmark_rows(name) for name in _BENCHMARKS}


def main(argv: Sequence[str] | None = None) -> int:
    """Render the README template from stdin to stdout; return the exit status."""
    parser = argparse.ArgumentParser(
        description="Render the README template on stdin with benchmark tables."
    )
    parser.parse_args(argv)
    try:
        data = _template_data()
        template = sys.stdin.read()
        sys.stdout.write(render_template(template, data))
    except (OSError, ValueError, RuntimeError) as exc:
        print(f"{datetime.now():%Y/%m/%d %H:%M:%S} {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())