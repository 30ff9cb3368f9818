from collections.abc import Sequence
from datetime import date, datetime, time
from typing import Any


def convert_value_for_output(value: Any, fmt: str = "", *, list_separator: str = "") -> Any:
    """
    Render a raw row value the way backends write it.

    Args:
        value: Raw value from a data row.
        fmt: ``strftime`` pattern for temporal values; ignored for anything
            else. Strings are never reformatted, so a label such as
            ``"Total"`` in a date column stays as it is.
        list_separator: Separator joining the elements of list/tuple values.
            Without one, the sequence is rendered with ``str``.

    Returns:
        Any: ``None`` for ``None``; strings, numbers and booleans unchanged;
        temporal values formatted (or unchanged without ``fmt``); sequences
        as a single string.

    Raises:
        ValueError: If ``fmt`` cannot be applied to the value.

    Examples:
        >>> convert_value_for_output(date(2024, 1, 2), "%d/%m/%Y")
        '02/01/2024'
        >>> convert_value_for_output(["a", "b"], list_separator=", ")
        'a, b'
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.strftime(fmt) if fmt else value
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        if not list_separator:
            return str(list(value))
        return list_separator.join(
            _convert_element(_elem, fmt) for _elem in value
        )
    return str(value)


def _convert_element(value: Any, fmt: str) -> str:
    v_out = convert_value_for_output(value, fmt)
    return "" if v_out is None else str(v_out)
