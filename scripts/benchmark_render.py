from __future__ import annotations

import argparse
import json
import platform
import statistics
import sys
import tempfile
import zipfile
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from importlib import metadata
from pathlib import Path
from time import perf_counter
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from tablekit.io.csv import CsvWriter  # noqa: E402
from tablekit.io.xlsx import SpecAutofitCellsPolicy, XlsxWriter  # noqa: E402
from tablekit.table.spec import (  # noqa: E402
    EnumBorderStyle,
    EnumMergeCondition,
    SpecBorders,
    SpecColumn,
    SpecMergeRules,
    SpecTable,
)


@dataclass(frozen=True)
class RenderBenchmarkScenario:
    name: str
    n_rows: int
    n_numeric_cols: int
    n_group_size: int
    output: str = "xlsx"
    rule_autofit_columns: str = "all"


@dataclass(frozen=True)
class RenderBenchmarkStats:
    scenario: RenderBenchmarkScenario
    n_cols: int
    repeats: int
    warmup_runs: int
    times_seconds: list[float]
    mean_seconds: float
    median_seconds: float
    min_seconds: float
    max_seconds: float
    stdev_seconds: float
    output_size_bytes_mean: int


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run render performance benchmarks for tablekit writers.",
    )
    parser.add_argument(
        "--repeat",
        type=int,
        default=5,
        help="Number of measured runs for each scenario.",
    )
    parser.add_argument(
        "--warmup",
        type=int,
        default=1,
        help="Number of warmup runs for each scenario.",
    )
    parser.add_argument(
        "--out-dir",
        type=Path,
        default=PROJECT_ROOT / "benchmarks" / "render" / "results",
        help="Directory where benchmark result files are written.",
    )
    parser.add_argument(
        "--profile",
        choices=("default", "huge"),
        default="default",
        help="Scenario profile to run.",
    )
    return parser.parse_args()


def build_scenarios(profile: str) -> list[RenderBenchmarkScenario]:
    if profile == "default":
        return [
            RenderBenchmarkScenario(
                name="grouped_tall_xlsx",
                n_rows=20_000,
                n_numeric_cols=6,
                n_group_size=25,
            ),
            RenderBenchmarkScenario(
                name="grouped_wide_xlsx_header_autofit",
                n_rows=5_000,
                n_numeric_cols=24,
                n_group_size=10,
                rule_autofit_columns="header",
            ),
            RenderBenchmarkScenario(
                name="grouped_tall_csv",
                n_rows=20_000,
                n_numeric_cols=6,
                n_group_size=25,
                output="csv",
            ),
        ]

    return [
        RenderBenchmarkScenario(
            name="huge_grouped_xlsx",
            n_rows=150_000,
            n_numeric_cols=10,
            n_group_size=50,
        ),
        RenderBenchmarkScenario(
            name="huge_grouped_csv",
            n_rows=150_000,
            n_numeric_cols=10,
            n_group_size=50,
            output="csv",
        ),
    ]


def detect_tablekit_version() -> str:
    try:
        return metadata.version("tablekit")
    except metadata.PackageNotFoundError:
        return "local-src"


def build_table(*, n_rows: int, n_numeric_cols: int, n_group_size: int) -> SpecTable:
    """Grouped rows: the ``group`` column merges vertically every ``n_group_size`` rows."""
    l_rows: list[dict[str, Any]] = []
    for _idx in range(n_rows):
        dict_row_: dict[str, Any] = {
            "group": f"group_{_idx // n_group_size:05d}",
            "row_id": _idx,
        }
        for _col_idx in range(n_numeric_cols):
            dict_row_[f"value_{_col_idx:02d}"] = (_idx * (_col_idx + 1)) / 7.0
        l_rows.append(dict_row_)

    tup_values = tuple(
        SpecColumn(f"value_{_col_idx:02d}", f"Value {_col_idx:02d}")
        for _col_idx in range(n_numeric_cols)
    )
    return SpecTable(
        data=l_rows,
        columns=(
            SpecColumn(
                "group",
                "Group",
                merge=SpecMergeRules(vertical=(EnumMergeCondition.IDENTICAL,)),
                borders=SpecBorders.create_boundaries(EnumBorderStyle.THIN),
            ),
            SpecColumn("row_id", "Row"),
            SpecColumn(label="Values", children=tup_values),
        ),
    )


def validate_xlsx_output(*, path_xlsx_out: Path, n_merges_min: int) -> None:
    with zipfile.ZipFile(path_xlsx_out) as zf:
        v_xml_sheet = zf.read("xl/worksheets/sheet1.xml")
    n_merges = v_xml_sheet.count(b"<mergeCell ")
    if n_merges < n_merges_min:
        raise ValueError(
            f"Merge count mismatch: expected at least {n_merges_min}, got {n_merges}."
        )


def run_one_write(
    *, table: SpecTable, path_file_out: Path, scenario: RenderBenchmarkScenario
) -> float:
    n_t_start = perf_counter()
    if scenario.output == "csv":
        with CsvWriter(path_file_out) as cw:
            cw.write_table(table)
    else:
        with XlsxWriter(path_file_out) as xw:
            xw.write_table(
                table,
                "benchmark",
                policy_autofit=SpecAutofitCellsPolicy(
                    rule_columns=scenario.rule_autofit_columns
                ),
            )
    return perf_counter() - n_t_start


def benchmark_scenario(
    *,
    scenario: RenderBenchmarkScenario,
    repeat: int,
    warmup: int,
    path_dir_tmp: Path,
) -> RenderBenchmarkStats:
    table = build_table(
        n_rows=scenario.n_rows,
        n_numeric_cols=scenario.n_numeric_cols,
        n_group_size=scenario.n_group_size,
    )
    n_groups = -(-scenario.n_rows // scenario.n_group_size)

    l_times_seconds: list[float] = []
    l_output_size_bytes: list[int] = []
    for _idx in range(warmup + repeat):
        b_warmup_ = _idx < warmup
        path_file_out_ = path_dir_tmp / f"{scenario.name}_{_idx}.{scenario.output}"
        n_elapsed_ = run_one_write(
            table=table, path_file_out=path_file_out_, scenario=scenario
        )
        if scenario.output == "xlsx" and scenario.n_group_size > 1:
            validate_xlsx_output(path_xlsx_out=path_file_out_, n_merges_min=n_groups)
        if not b_warmup_:
            l_times_seconds.append(n_elapsed_)
            l_output_size_bytes.append(path_file_out_.stat().st_size)
        path_file_out_.unlink(missing_ok=True)

    return RenderBenchmarkStats(
        scenario=scenario,
        n_cols=scenario.n_numeric_cols + 2,
        repeats=repeat,
        warmup_runs=warmup,
        times_seconds=l_times_seconds,
        mean_seconds=statistics.mean(l_times_seconds),
        median_seconds=statistics.median(l_times_seconds),
        min_seconds=min(l_times_seconds),
        max_seconds=max(l_times_seconds),
        stdev_seconds=(
            statistics.stdev(l_times_seconds) if len(l_times_seconds) > 1 else 0.0
        ),
        output_size_bytes_mean=round(statistics.mean(l_output_size_bytes)),
    )


def render_markdown_summary(payload: dict[str, Any]) -> str:
    l_lines = [
        "# Render Benchmark Record",
        "",
        f"- Timestamp (UTC): `{payload['timestamp_utc']}`",
        f"- Command: `{payload['command']}`",
        f"- Platform: `{payload['platform']}`",
        f"- Python: `{payload['python_version']}`",
        "- Package versions:",
        f"  - `tablekit`: `{payload['packages']['tablekit']}`",
        f"  - `xlsxwriter`: `{payload['packages']['xlsxwriter']}`",
        "",
        "| scenario | output | rows | cols | autofit | repeat | median_s | mean_s | min_s | max_s | stdev_s | mean_size_mb |",
        "| --- | --- | ---: | ---: | --- | ---: | ---: | ---: | ---: | ---: | ---: | ---: |",
    ]
    for item in payload["scenarios"]:
        cfg = item["scenario"]
        n_size_mb = float(item["output_size_bytes_mean"]) / (1024 * 1024)
        l_lines.append(
            "| "
            f"{cfg['name']} | {cfg['output']} | {cfg['n_rows']} | {item['n_cols']} | "
            f"{cfg['rule_autofit_columns']} | {item['repeats']} | "
            f"{item['median_seconds']:.3f} | {item['mean_seconds']:.3f} | "
            f"{item['min_seconds']:.3f} | {item['max_seconds']:.3f} | "
            f"{item['stdev_seconds']:.3f} | {n_size_mb:.2f} |"
        )
    return "\n".join(l_lines) + "\n"


def main() -> int:
    args = parse_args()
    if args.repeat < 1:
        raise ValueError("--repeat must be >= 1")
    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")

    args.out_dir.mkdir(parents=True, exist_ok=True)
    ts = datetime.now(timezone.utc)
    c_timestamp_compact = ts.strftime("%Y%m%dT%H%M%SZ")

    with tempfile.TemporaryDirectory(prefix="tablekit_render_bench_") as c_dir_tmp:
        l_stats = [
            benchmark_scenario(
                scenario=cfg_scenario,
                repeat=args.repeat,
                warmup=args.warmup,
                path_dir_tmp=Path(c_dir_tmp),
            )
            for cfg_scenario in build_scenarios(args.profile)
        ]

    payload = {
        "timestamp_utc": ts.isoformat(),
        "command": " ".join(sys.argv),
        "platform": platform.platform(),
        "python_version": sys.version.split()[0],
        "packages": {
            "tablekit": detect_tablekit_version(),
            "xlsxwriter": metadata.version("xlsxwriter"),
        },
        "repeat": args.repeat,
        "warmup": args.warmup,
        "profile": args.profile,
        "scenarios": [asdict(item) for item in l_stats],
    }

    path_file_json = args.out_dir / f"render_{c_timestamp_compact}.json"
    path_file_md = args.out_dir / f"render_{c_timestamp_compact}.md"
    path_file_json.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
    )
    path_file_md.write_text(render_markdown_summary(payload), encoding="utf-8")

    print(path_file_json)
    print(path_file_md)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
