from typing import TYPE_CHECKING

from loguru import logger as _logger

from .conf import DEFAULT_LOGGER_COMPONENT
from .spec import SpecRenderReport

if TYPE_CHECKING:
    from loguru import Logger


def create_default_logger() -> "Logger":
    return _logger.bind(component=DEFAULT_LOGGER_COMPONENT)


def record_failure(
    report: SpecRenderReport | None,
    logger: "Logger",
    msg: str,
    exc: BaseException,
) -> None:
    """Log a swallowed best-effort failure and keep it on the report."""
    c_text = f"{msg}: {exc}"
    logger.warning(c_text)
    if report is not None:
        report.warn(c_text)
