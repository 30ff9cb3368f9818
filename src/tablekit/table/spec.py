# Value objects describing a table to render: columns, rows, merge rules,
# borders, styles and per-row / per-cell overrides.

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import IntEnum, StrEnum
from types import MappingProxyType
from typing import Any, Self, TypeAlias

Data: TypeAlias = Mapping[str, Any]


################################################################################
# #region Enums
class EnumMergeCondition(StrEnum):
    IDENTICAL = "identical"  # both values equal and non-empty
    EMPTY = "empty"  # both values empty or missing


class EnumBorderStyle(IntEnum):
    # values line up with the XlsxWriter border indices
    NONE = 0
    THIN = 1
    MEDIUM = 2
    DASHED = 3
    DOTTED = 4
    THICK = 5
    DOUBLE = 6


class EnumBorderSide(StrEnum):
    LEFT = "left"
    RIGHT = "right"
    TOP = "top"
    BOTTOM = "bottom"


class EnumAlignment(StrEnum):
    NONE = "none"
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"
    CENTER_MIDDLE = "center_middle"
    LEFT_MIDDLE = "left_middle"
    RIGHT_MIDDLE = "right_middle"

    def derive_values(self) -> tuple[str, str]:
        """Return the ``(horizontal, vertical)`` alignment pair."""
        return _DICT_ALIGNMENT_VALUES.get(self, ("left", "top"))


_DICT_ALIGNMENT_VALUES: Mapping[EnumAlignment, tuple[str, str]] = MappingProxyType(
    {
        EnumAlignment.LEFT: ("left", "top"),
        EnumAlignment.CENTER: ("center", "top"),
        EnumAlignment.RIGHT: ("right", "top"),
        EnumAlignment.TOP: ("left", "top"),
        EnumAlignment.MIDDLE: ("left", "center"),
        EnumAlignment.BOTTOM: ("left", "bottom"),
        EnumAlignment.CENTER_MIDDLE: ("center", "center"),
        EnumAlignment.LEFT_MIDDLE: ("left", "center"),
        EnumAlignment.RIGHT_MIDDLE: ("right", "center"),
    }
)


# #endregion
################################################################################
# #region MergeRules
@dataclass(frozen=True, slots=True)
class SpecMergeRules:
    """
    Merge conditions for adjacent cells.

    ``vertical`` applies between rows of the same column, ``horizontal``
    between columns of the same row. An empty tuple never merges.
    """

    vertical: tuple[EnumMergeCondition, ...] = ()
    horizontal: tuple[EnumMergeCondition, ...] = ()

    def with_(self, **kwargs: Any) -> "SpecMergeRules":
        return replace(self, **kwargs)


# #endregion
################################################################################
# #region Borders
@dataclass(frozen=True, slots=True)
class SpecBorder:
    style: EnumBorderStyle = EnumBorderStyle.THIN


@dataclass(frozen=True, slots=True)
class SpecBorders:
    """
    Per-side border configuration.

    Setting ``inner`` on a column or row makes every cell of it receive all
    four outer sides instead of an outline around the whole span.
    """

    left: SpecBorder | None = None
    right: SpecBorder | None = None
    top: SpecBorder | None = None
    bottom: SpecBorder | None = None
    inner: "SpecBorders | None" = None

    @classmethod
    def create(
        cls,
        left: EnumBorderStyle,
        right: EnumBorderStyle,
        top: EnumBorderStyle,
        bottom: EnumBorderStyle,
    ) -> "SpecBorders":
        return cls(
            left=SpecBorder(left),
            right=SpecBorder(right),
            top=SpecBorder(top),
            bottom=SpecBorder(bottom),
        )

    @classmethod
    def create_boundaries(cls, style: EnumBorderStyle) -> "SpecBorders":
        return cls.create(style, style, style, style)

    def with_(self, **kwargs: Any) -> "SpecBorders":
        return replace(self, **kwargs)

    def with_vertical(self, style: EnumBorderStyle) -> "SpecBorders":
        return replace(self, left=SpecBorder(style), right=SpecBorder(style))

    def with_horizontal(self, style: EnumBorderStyle) -> "SpecBorders":
        return replace(self, top=SpecBorder(style), bottom=SpecBorder(style))

    def with_boundaries(self, style: EnumBorderStyle) -> "SpecBorders":
        return self.with_vertical(style).with_horizontal(style)

    def with_inner(self, style: EnumBorderStyle) -> "SpecBorders":
        return replace(self, inner=SpecBorders.create_boundaries(style))

    def get_side(self, side: EnumBorderSide) -> SpecBorder | None:
        return getattr(self, side.value)

    def iter_sides(self) -> Iterator[tuple[EnumBorderSide, SpecBorder]]:
        """Yield ``(side, border)`` for every declared outer side."""
        for _side in EnumBorderSide:
            if (cfg_border_ := self.get_side(_side)) is not None:
                yield _side, cfg_border_

    def has_borders(self) -> bool:
        return any(
            _border.style != EnumBorderStyle.NONE for _, _border in self.iter_sides()
        )


# #endregion
################################################################################
# #region Style
@dataclass(frozen=True, slots=True)
class SpecStyle:
    # empty/zero fields mean "not set"
    bold: bool = False
    italic: bool = False
    underline: str = ""
    text_color: str = ""
    background_color: str = ""
    font_size: float = 0
    font_family: str = ""
    alignment: EnumAlignment = EnumAlignment.NONE

    def with_(self, **kwargs: Any) -> "SpecStyle":
        return replace(self, **kwargs)

    def merge(self, other: "SpecStyle") -> "SpecStyle":
        # fields set on the right win
        data = {
            k: (
                getattr(other, k)
                if getattr(other, k) != getattr(_STYLE_UNSET, k)
                else getattr(self, k)
            )
            for k in self.__dataclass_fields__
        }
        return SpecStyle(**data)


_STYLE_UNSET = SpecStyle()


# #endregion
################################################################################
# #region Columns
@dataclass(frozen=True, slots=True)
class SpecColumn:
    """
    One column definition, possibly grouping sub-columns.

    Only leaf columns (no ``children``) map to a data field and a physical
    output column. Group columns contribute a header label spanning their
    leaves.
    """

    name: str = ""
    label: str = ""
    format: str = ""
    merge: SpecMergeRules | None = None
    borders: SpecBorders | None = None
    style: SpecStyle | None = None
    children: tuple["SpecColumn", ...] = ()

    def with_(self, **kwargs: Any) -> "SpecColumn":
        return replace(self, **kwargs)

    def with_children(self, children: Sequence["SpecColumn"]) -> "SpecColumn":
        return replace(self, children=tuple(children))

    def add_child(self, child: "SpecColumn") -> "SpecColumn":
        return replace(self, children=(*self.children, child))

    def remove_child(self, name: str) -> "SpecColumn":
        return replace(
            self, children=tuple(_c for _c in self.children if _c.name != name)
        )

    def has_children(self) -> bool:
        return len(self.children) > 0

    def count_leaves(self) -> int:
        """Number of physical leaf columns this column spans."""
        if not self.has_children():
            return 1
        return sum(_child.count_leaves() for _child in self.children)


# #endregion
################################################################################
# #region Options
@dataclass(frozen=True, slots=True)
class SpecRowOptions:
    border: SpecBorders | None = None
    style: SpecStyle | None = None
    # overrides column-level merge rules for this row
    merge: SpecMergeRules | None = None
    mergeable: bool = True

    def with_(self, **kwargs: Any) -> "SpecRowOptions":
        return replace(self, **kwargs)


@dataclass(frozen=True, slots=True)
class SpecCellOptions:
    border: SpecBorders | None = None
    style: SpecStyle | None = None
    mergeable: bool = True

    def with_(self, **kwargs: Any) -> "SpecCellOptions":
        return replace(self, **kwargs)


# #endregion
################################################################################
# #region Table
@dataclass(frozen=True, slots=True)
class SpecTable:
    """
    A dataset plus everything needed to render it.

    Attributes:
        data: Rows in output order, each a mapping from column name to value.
        columns: Top-level column definitions (possibly nested).
        row_options: Per-row overrides keyed by 0-based data-row index.
        cell_options: Per-cell overrides keyed by ``(leaf_col_idx, data_row_idx)``,
            both 0-based.
        write_header: Whether header rows are rendered above the data.
        limit: Maximum number of data rows to render (0 = no limit).
        list_separator: Separator used by backends to join sequence values.
    """

    data: Sequence[Data] = ()
    columns: tuple[SpecColumn, ...] = ()
    row_options: Mapping[int, SpecRowOptions] = field(
        default_factory=lambda: MappingProxyType({})
    )
    cell_options: Mapping[tuple[int, int], SpecCellOptions] = field(
        default_factory=lambda: MappingProxyType({})
    )
    write_header: bool = True
    limit: int = 0
    list_separator: str = ""

    @classmethod
    def from_frame(
        cls,
        df: Any,
        columns: Sequence[SpecColumn] | None = None,
        **kwargs: Any,
    ) -> Self:
        """
        Build a table from a polars DataFrame (or anything polars accepts).

        Without explicit ``columns`` every frame column becomes a leaf column
        whose label is its name.
        """
        from tablekit._optional_deps import import_optional_module

        frame = import_optional_module(
            module_name=".frame",
            package=__package__ or "tablekit.table",
            feature="SpecTable.from_frame",
            extras=("polars",),
            required_modules=("polars",),
        )
        l_rows = frame.convert_frame_to_rows(df)
        tup_columns = (
            tuple(columns)
            if columns is not None
            else frame.derive_columns_from_frame(df)
        )
        return cls(data=l_rows, columns=tup_columns, **kwargs)

    def with_(self, **kwargs: Any) -> "SpecTable":
        return replace(self, **kwargs)

    def with_row_options(self, row_options: Mapping[int, SpecRowOptions]) -> "SpecTable":
        return replace(self, row_options=MappingProxyType(dict(row_options)))

    def with_cell_options(
        self, cell_options: Mapping[tuple[int, int], SpecCellOptions]
    ) -> "SpecTable":
        return replace(self, cell_options=MappingProxyType(dict(cell_options)))

    def get_row_options(self, row_idx: int) -> SpecRowOptions | None:
        return self.row_options.get(row_idx)

    def get_cell_options(self, col_idx: int, row_idx: int) -> SpecCellOptions | None:
        return self.cell_options.get((col_idx, row_idx))

    def iter_rows(self) -> Iterator[tuple[int, Data]]:
        """Yield ``(data_row_idx, row)`` for the rows that get rendered."""
        for _row_idx, _row in enumerate(self.data):
            if self.limit > 0 and _row_idx >= self.limit:
                return
            yield _row_idx, _row

    def count_rows(self) -> int:
        n_rows = len(self.data)
        return min(n_rows, self.limit) if self.limit > 0 else n_rows


# #endregion
################################################################################
# #region Results
@dataclass(frozen=True, slots=True)
class SpecMergeRange:
    # 1-based sheet coordinates, inclusive
    col_start: int
    row_start: int
    col_end: int
    row_end: int

    def check_is_horizontal(self) -> bool:
        return self.row_start == self.row_end and self.col_start != self.col_end

    def check_contains(self, col: int, row: int) -> bool:
        return (
            self.col_start <= col <= self.col_end
            and self.row_start <= row <= self.row_end
        )

    def check_overlaps(self, other: "SpecMergeRange") -> bool:
        return not (
            other.col_end < self.col_start
            or other.col_start > self.col_end
            or other.row_end < self.row_start
            or other.row_start > self.row_end
        )


@dataclass(slots=True)
class SpecRenderReport:
    merges: list[SpecMergeRange] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def warn(self, msg: str) -> None:
        self.warnings.append(str(msg))


# #endregion
################################################################################
