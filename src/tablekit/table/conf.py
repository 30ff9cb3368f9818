# Fixed rendering defaults.

from .spec import EnumAlignment, EnumBorderStyle, SpecBorder, SpecStyle

DEFAULT_HEADER_STYLE = SpecStyle(
    bold=True,
    background_color="#E0E0E0",
    alignment=EnumAlignment.CENTER,
)
DEFAULT_HEADER_BOTTOM_BORDER = SpecBorder(EnumBorderStyle.THIN)

DEFAULT_LOGGER_COMPONENT = "tablekit"
