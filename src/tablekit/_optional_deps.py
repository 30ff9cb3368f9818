from __future__ import annotations

from collections.abc import Iterable, Sequence
from importlib import import_module
from types import ModuleType

_PROJECT_NAME = "tablekit"


def _derive_module_name_parts(names: Iterable[str]) -> set[str]:
    # "xlsxwriter.utility" matches both "xlsxwriter" and "utility"
    set_parts: set[str] = set()
    for _name in names:
        set_parts |= {_p for _p in _name.split(".") if _p}
    return set_parts


def create_optional_dependency_error(
    *,
    feature: str,
    extras: Sequence[str],
    missing_module: str | None,
) -> ModuleNotFoundError:
    """
    Build the error raised when an optional backend cannot be imported.

    The message names the missing module and the extras that provide it.
    """
    c_extras = ",".join(dict.fromkeys(extras))
    c_missing = (
        f"Missing optional dependency `{missing_module}`."
        if missing_module
        else "Missing optional dependency."
    )
    return ModuleNotFoundError(
        f"{feature} is unavailable. {c_missing} "
        f'Install it with `pip install "{_PROJECT_NAME}[{c_extras}]"` '
        f"or, in development, `pdm sync -G {c_extras}`."
    )


def import_optional_module(
    *,
    module_name: str,
    package: str,
    feature: str,
    extras: Sequence[str],
    required_modules: Sequence[str],
) -> ModuleType:
    """
    Import ``module_name`` and translate a missing third-party dependency into a
    friendly error.

    Only failures naming one of ``required_modules`` (or any failure when none
    are listed) are translated; other import errors propagate unchanged.
    """
    try:
        return import_module(module_name, package=package)
    except ModuleNotFoundError as exc:
        set_missing = _derive_module_name_parts([exc.name or ""])
        set_required = _derive_module_name_parts(required_modules)
        if not required_modules or set_missing & set_required:
            raise create_optional_dependency_error(
                feature=feature,
                extras=extras,
                missing_module=exc.name,
            ) from exc
        raise
