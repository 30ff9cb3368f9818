from collections import defaultdict
from typing import Any

import polars as pl

from .errors import TableDataError
from .spec import SpecColumn


def convert_to_polars(df: Any) -> pl.DataFrame:
    return df if isinstance(df, pl.DataFrame) else pl.DataFrame(df)


def validate_unique_columns(df: pl.DataFrame) -> None:
    l_cols = df.columns

    # fast path: no duplicates
    if len(l_cols) == len(set(l_cols)):
        return

    dict_pos: dict[str, list[int]] = defaultdict(list)
    for _idx, _val in enumerate(l_cols):
        dict_pos[_val].append(_idx)

    c_msg = "; ".join(
        f"{c_name!r} x{len(l_pos)} at indices {l_pos}"
        for c_name, l_pos in dict_pos.items()
        if len(l_pos) > 1
    )
    raise TableDataError(f"Duplicate column names detected: {c_msg}")


def convert_frame_to_rows(df: Any) -> list[dict[str, Any]]:
    """Rows of a polars-compatible frame as plain dicts; struct columns nest."""
    df_custom = convert_to_polars(df)
    validate_unique_columns(df_custom)
    return list(df_custom.iter_rows(named=True))


def derive_columns_from_frame(df: Any) -> tuple[SpecColumn, ...]:
    df_custom = convert_to_polars(df)
    return tuple(SpecColumn(name=_c, label=_c) for _c in df_custom.columns)
