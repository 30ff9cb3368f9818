from __future__ import annotations

from importlib import import_module
from importlib.metadata import PackageNotFoundError, version
from types import ModuleType
from typing import TYPE_CHECKING, Any

__all__ = [
    "__version__",
    "table",
    "io_sheet",
    "io_xlsx",
    "io_csv",
    "cli_console",
]

try:
    __version__ = version("tablekit")
except PackageNotFoundError:
    __version__ = "0.0.0"

if TYPE_CHECKING:
    import tablekit.cli.console as cli_console
    import tablekit.io.csv as io_csv
    import tablekit.io.sheet as io_sheet
    import tablekit.io.xlsx as io_xlsx
    import tablekit.table as table

_ALIAS_MODULES: dict[str, str] = {
    "table": "tablekit.table",
    "io_sheet": "tablekit.io.sheet",
    "io_xlsx": "tablekit.io.xlsx",
    "io_csv": "tablekit.io.csv",
    "cli_console": "tablekit.cli.console",
}


def __getattr__(name: str) -> Any:
    module_name = _ALIAS_MODULES.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module_loaded: ModuleType = import_module(module_name)
    globals()[name] = module_loaded
    return module_loaded


def __dir__() -> list[str]:
    return sorted(set(globals()) | set(__all__))
