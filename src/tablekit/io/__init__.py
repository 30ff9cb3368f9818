from __future__ import annotations

from importlib import import_module
from types import ModuleType
from typing import TYPE_CHECKING, Any

__all__ = ["sheet", "xlsx", "csv", "value_conversion"]

if TYPE_CHECKING:
    import tablekit.io.csv as csv
    import tablekit.io.sheet as sheet
    import tablekit.io.value_conversion as value_conversion
    import tablekit.io.xlsx as xlsx

_ALIAS_MODULES: dict[str, str] = {
    "sheet": "tablekit.io.sheet",
    "xlsx": "tablekit.io.xlsx",
    "csv": "tablekit.io.csv",
    "value_conversion": "tablekit.io.value_conversion",
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
