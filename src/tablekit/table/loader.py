"""Build :class:`SpecTable` objects from plain mappings (e.g. parsed JSON).

Layout::

    {
      "write_header": true,
      "limit": 0,
      "list_separator": ", ",
      "columns": [
        {"label": "Group", "children": [{"name": "a", "label": "A"}]},
        {"name": "c", "label": "C", "format": "%Y-%m-%d",
         "merge": {"vertical": ["identical"]},
         "borders": {"left": "thin", "right": "thin", "inner": "dotted"},
         "style": {"bold": true, "alignment": "center"}}
      ],
      "data": [{"a": 1, "c": "x"}],
      "row_options": {"0": {"style": {"italic": true}, "mergeable": false}},
      "cell_options": [{"col": 0, "row": 0, "border": "thick"}]
    }

A border value may be a style name (applied to all four sides) or a mapping
of side -> style name. ``inner`` takes the same forms.
"""

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Any

from .spec import (
    EnumAlignment,
    EnumBorderStyle,
    EnumMergeCondition,
    SpecBorder,
    SpecBorders,
    SpecCellOptions,
    SpecColumn,
    SpecMergeRules,
    SpecRowOptions,
    SpecStyle,
    SpecTable,
)

_TUP_STYLE_KEYS = tuple(SpecStyle.__dataclass_fields__)
_DICT_STYLE_TYPES: Mapping[str, tuple[type, ...]] = MappingProxyType(
    {
        "bold": (bool,),
        "italic": (bool,),
        "underline": (str,),
        "text_color": (str,),
        "background_color": (str,),
        "font_size": (float, int),
        "font_family": (str,),
    }
)


def _convert_enum(enum_cls: Any, value: Any, *, what: str) -> Any:
    try:
        if isinstance(value, str) and issubclass(enum_cls, EnumBorderStyle):
            return enum_cls[value.strip().upper()]
        return enum_cls(value)
    except (KeyError, ValueError) as e:
        raise ValueError(f"Unknown {what}: {value!r}") from e


def load_merge_rules(cfg: Mapping[str, Any] | None) -> SpecMergeRules | None:
    if cfg is None:
        return None
    return SpecMergeRules(
        vertical=tuple(
            _convert_enum(EnumMergeCondition, _c, what="merge condition")
            for _c in cfg.get("vertical", ())
        ),
        horizontal=tuple(
            _convert_enum(EnumMergeCondition, _c, what="merge condition")
            for _c in cfg.get("horizontal", ())
        ),
    )


def load_borders(cfg: str | Mapping[str, Any] | None) -> SpecBorders | None:
    if cfg is None:
        return None
    if isinstance(cfg, str):
        return SpecBorders.create_boundaries(
            _convert_enum(EnumBorderStyle, cfg, what="border style")
        )

    dict_sides: dict[str, SpecBorder | None] = {}
    for _side in ("left", "right", "top", "bottom"):
        if (v_style_ := cfg.get(_side)) is not None:
            dict_sides[_side] = SpecBorder(
                _convert_enum(EnumBorderStyle, v_style_, what="border style")
            )
    return SpecBorders(**dict_sides, inner=load_borders(cfg.get("inner")))


def load_style(cfg: Mapping[str, Any] | None) -> SpecStyle | None:
    if cfg is None:
        return None
    set_unknown = set(cfg) - set(_TUP_STYLE_KEYS)
    if set_unknown:
        raise ValueError(f"Unknown style keys: {sorted(set_unknown)}")
    dict_style = dict(cfg)
    for _key, _value in dict_style.items():
        if _key == "alignment":
            continue
        tup_types_ = _DICT_STYLE_TYPES[_key]
        # bool is an int subclass; only accept it where a bool is expected
        if not isinstance(_value, tup_types_) or (
            isinstance(_value, bool) and bool not in tup_types_
        ):
            raise ValueError(
                f"Style key {_key!r} expects {tup_types_[0].__name__}, "
                f"got {type(_value).__name__}: {_value!r}"
            )
    if "alignment" in dict_style:
        dict_style["alignment"] = _convert_enum(
            EnumAlignment, dict_style["alignment"], what="alignment"
        )
    return SpecStyle(**dict_style)


def load_column(cfg: Mapping[str, Any]) -> SpecColumn:
    return SpecColumn(
        name=cfg.get("name", ""),
        label=cfg.get("label", cfg.get("name", "")),
        format=cfg.get("format", ""),
        merge=load_merge_rules(cfg.get("merge")),
        borders=load_borders(cfg.get("borders")),
        style=load_style(cfg.get("style")),
        children=tuple(load_column(_c) for _c in cfg.get("children", ())),
    )


def load_row_options(cfg: Mapping[str, Any]) -> SpecRowOptions:
    return SpecRowOptions(
        border=load_borders(cfg.get("border")),
        style=load_style(cfg.get("style")),
        merge=load_merge_rules(cfg.get("merge")),
        mergeable=bool(cfg.get("mergeable", True)),
    )


def load_cell_options(cfg: Mapping[str, Any]) -> SpecCellOptions:
    return SpecCellOptions(
        border=load_borders(cfg.get("border")),
        style=load_style(cfg.get("style")),
        mergeable=bool(cfg.get("mergeable", True)),
    )


def load_table(cfg: Mapping[str, Any]) -> SpecTable:
    """
    Build a table from its mapping description.

    Raises:
        ValueError: If an enum name, style key or index is invalid.
    """
    v_row_options = cfg.get("row_options") or {}
    dict_row_options: dict[int, SpecRowOptions] = {}
    if isinstance(v_row_options, Mapping):
        for _key, _val in v_row_options.items():
            dict_row_options[int(_key)] = load_row_options(_val)
    else:
        for _val in v_row_options:
            dict_row_options[int(_val["row"])] = load_row_options(_val)

    dict_cell_options: dict[tuple[int, int], SpecCellOptions] = {}
    l_cell_options: Sequence[Mapping[str, Any]] = cfg.get("cell_options") or ()
    for _val in l_cell_options:
        dict_cell_options[(int(_val["col"]), int(_val["row"]))] = load_cell_options(
            _val
        )

    return SpecTable(
        data=tuple(cfg.get("data", ())),
        columns=tuple(load_column(_c) for _c in cfg.get("columns", ())),
        row_options=MappingProxyType(dict_row_options),
        cell_options=MappingProxyType(dict_cell_options),
        write_header=bool(cfg.get("write_header", True)),
        limit=int(cfg.get("limit", 0)),
        list_separator=str(cfg.get("list_separator", "")),
    )
