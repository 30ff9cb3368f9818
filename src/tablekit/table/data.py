from collections.abc import Mapping, Sequence
from datetime import date, datetime, timezone
from typing import Any

from .errors import TableDataError
from .spec import Data

################################################################################
# #region Lookup


def lookup_value(row: Data, *keys: str) -> tuple[Any, bool]:
    """
    Look up a (possibly nested) field in a row.

    Each key descends one level into nested mappings. Keys are stripped of
    surrounding whitespace.

    Returns:
        tuple[Any, bool]: ``(value, True)`` when every key is present,
        ``(None, False)`` when a key is missing. A missing field is not an
        error.

    Raises:
        ValueError: If no key is given.
        TableDataError: If an intermediate value is not a mapping.

    Examples:
        >>> lookup_value({"a": {"b": 1}}, "a", "b")
        (1, True)
        >>> lookup_value({"a": {"b": 1}}, "a", "c")
        (None, False)
    """
    if not keys:
        raise ValueError("lookup_value needs at least one key.")

    cfg_node: Any = row
    for _depth, _key in enumerate(keys):
        if not isinstance(cfg_node, Mapping):
            c_where = f"key {keys[_depth - 1]!r}" if _depth > 0 else "row"
            raise TableDataError(
                f"Malformed structure at {c_where}: "
                f"expected a mapping, got {type(cfg_node).__name__}."
            )
        c_key = _key.strip()
        if c_key not in cfg_node:
            return None, False
        cfg_node = cfg_node[c_key]
    return cfg_node, True


# #endregion
################################################################################
# #region Ordering


def sort_rows_by_time(data: Sequence[Data], key: str) -> list[Data]:
    """
    Return a chronologically sorted copy of ``data``.

    Rows whose ``key`` holds a ``datetime``/``date`` are ordered by it; the
    remaining rows follow in their original order. The sort is stable and the
    input is left untouched.
    """
    l_timed: list[tuple[datetime, int, Data]] = []
    l_untimed: list[Data] = []
    for _idx, _row in enumerate(data):
        v_time = _row.get(key)
        if isinstance(v_time, datetime):
            l_timed.append((_normalize_time(v_time), _idx, _row))
        elif isinstance(v_time, date):
            l_timed.append((datetime.combine(v_time, datetime.min.time()), _idx, _row))
        else:
            l_untimed.append(_row)
    l_timed.sort(key=lambda _item: (_item[0], _item[1]))
    return [_row for _, _, _row in l_timed] + l_untimed


def _normalize_time(value: datetime) -> datetime:
    # aware and naive datetimes cannot be compared; naive values count as UTC
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# #endregion
################################################################################
