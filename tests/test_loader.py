from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure src-layout imports work when running tests from repo checkout.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from tablekit.table.loader import load_borders, load_style, load_table  # noqa: E402
from tablekit.table.spec import (  # noqa: E402
    EnumAlignment,
    EnumBorderStyle,
    EnumMergeCondition,
    SpecBorder,
    SpecBorders,
    SpecStyle,
)

DICT_TABLE = {
    "write_header": False,
    "limit": 2,
    "list_separator": ", ",
    "columns": [
        {"label": "Group", "children": [{"name": "a", "label": "A"}, {"name": "b"}]},
        {
            "name": "c",
            "label": "C",
            "format": "%Y",
            "merge": {"vertical": ["identical"], "horizontal": ["empty"]},
            "borders": {"left": "thin", "inner": "dotted"},
            "style": {"bold": True, "alignment": "center"},
        },
    ],
    "data": [{"a": 1, "b": 2, "c": "x"}],
    "row_options": {"0": {"style": {"italic": True}, "mergeable": False}},
    "cell_options": [{"col": 1, "row": 0, "border": "thick"}],
}


def test_load_full_table() -> None:
    table = load_table(DICT_TABLE)

    assert table.write_header is False
    assert table.limit == 2
    assert table.list_separator == ", "
    assert table.data == ({"a": 1, "b": 2, "c": "x"},)

    col_group, col_c = table.columns
    assert col_group.label == "Group"
    assert [_c.name for _c in col_group.children] == ["a", "b"]
    # label defaults to name
    assert col_group.children[1].label == "b"

    assert col_c.format == "%Y"
    assert col_c.merge.vertical == (EnumMergeCondition.IDENTICAL,)
    assert col_c.merge.horizontal == (EnumMergeCondition.EMPTY,)
    assert col_c.borders.left == SpecBorder(EnumBorderStyle.THIN)
    assert col_c.borders.right is None
    assert col_c.borders.inner == SpecBorders.create_boundaries(EnumBorderStyle.DOTTED)
    assert col_c.style == SpecStyle(bold=True, alignment=EnumAlignment.CENTER)

    cfg_row = table.get_row_options(0)
    assert cfg_row.style == SpecStyle(italic=True)
    assert cfg_row.mergeable is False

    cfg_cell = table.get_cell_options(1, 0)
    assert cfg_cell.border == SpecBorders.create_boundaries(EnumBorderStyle.THICK)
    assert cfg_cell.mergeable is True


def test_row_options_as_list() -> None:
    table = load_table(
        {
            "columns": [{"name": "a"}],
            "data": [{"a": 1}, {"a": 2}],
            "row_options": [{"row": 1, "border": {"bottom": "double"}}],
        }
    )
    assert table.get_row_options(0) is None
    assert table.get_row_options(1).border.bottom == SpecBorder(EnumBorderStyle.DOUBLE)


def test_defaults() -> None:
    table = load_table({"columns": [{"name": "a"}]})
    assert table.write_header is True
    assert table.limit == 0
    assert table.data == ()
    assert dict(table.row_options) == {}


def test_border_names_are_case_insensitive() -> None:
    assert load_borders(" Medium ") == SpecBorders.create_boundaries(
        EnumBorderStyle.MEDIUM
    )
    assert load_borders(None) is None


@pytest.mark.parametrize(
    "cfg,match",
    [
        ({"columns": [{"name": "a", "merge": {"vertical": ["same"]}}]}, "merge condition"),
        ({"columns": [{"name": "a", "borders": "hairline"}]}, "border style"),
        ({"columns": [{"name": "a", "style": {"alignment": "justify"}}]}, "alignment"),
    ],
)
def test_unknown_enum_names_raise(cfg, match: str) -> None:
    with pytest.raises(ValueError, match=match):
        load_table(cfg)


def test_unknown_style_key_raises() -> None:
    with pytest.raises(ValueError, match="blink"):
        load_style({"bold": True, "blink": True})


@pytest.mark.parametrize(
    "cfg_style,match",
    [
        ({"underline": True}, "'underline' expects str"),
        ({"bold": "yes"}, "'bold' expects bool"),
        ({"font_size": True}, "'font_size' expects float"),
        ({"text_color": 255}, "'text_color' expects str"),
    ],
)
def test_style_values_with_wrong_types_raise(cfg_style, match: str) -> None:
    with pytest.raises(ValueError, match=match):
        load_style(cfg_style)


def test_style_font_size_accepts_int() -> None:
    cfg_style = load_style({"font_size": 12, "underline": "single"})
    assert cfg_style is not None
    assert cfg_style.font_size == 12
    assert cfg_style.underline == "single"
