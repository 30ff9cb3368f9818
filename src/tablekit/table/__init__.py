from .columns import (
    build_header_grid,
    convert_data_index_to_sheet_row,
    convert_sheet_row_to_data_index,
    count_header_rows,
    count_max_depth,
    count_total_leaves,
    derive_data_start_row,
    flatten_columns,
)
from .data import lookup_value, sort_rows_by_time
from .errors import TableDataError, TableOperationError, TableStructureError
from .loader import load_table
from .merge import (
    check_should_merge,
    find_horizontal_merge_ranges,
    find_vertical_merge_ranges,
    plan_header_merges,
    process_merging,
)
from .operations import TableOperations
from .render import TableRenderer, render_table
from .spec import (
    EnumAlignment,
    EnumBorderSide,
    EnumBorderStyle,
    EnumMergeCondition,
    SpecBorder,
    SpecBorders,
    SpecCellOptions,
    SpecColumn,
    SpecMergeRange,
    SpecMergeRules,
    SpecRenderReport,
    SpecRowOptions,
    SpecStyle,
    SpecTable,
)

__all__ = [
    "EnumAlignment",
    "EnumBorderSide",
    "EnumBorderStyle",
    "EnumMergeCondition",
    "SpecBorder",
    "SpecBorders",
    "SpecCellOptions",
    "SpecColumn",
    "SpecMergeRange",
    "SpecMergeRules",
    "SpecRenderReport",
    "SpecRowOptions",
    "SpecStyle",
    "SpecTable",
    "TableDataError",
    "TableOperationError",
    "TableOperations",
    "TableRenderer",
    "TableStructureError",
    "build_header_grid",
    "check_should_merge",
    "convert_data_index_to_sheet_row",
    "convert_sheet_row_to_data_index",
    "count_header_rows",
    "count_max_depth",
    "count_total_leaves",
    "derive_data_start_row",
    "find_horizontal_merge_ranges",
    "find_vertical_merge_ranges",
    "flatten_columns",
    "load_table",
    "lookup_value",
    "plan_header_merges",
    "process_merging",
    "render_table",
    "sort_rows_by_time",
]
