import argparse
import os
from collections.abc import Iterable
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any


@dataclass(frozen=True, slots=True)
class SpecFileArg:
    """Validation rules for a file path given on the command line.

    Attributes:
        rule_file_exts: Allowed file extensions (lowercase, no leading dots).
        if_must_exist: Whether the file must already exist (inputs).
        if_parent_writable: Whether the parent directory must be writable
            (outputs).

    Examples:
        ``SpecFileArg(rule_file_exts=("json",))`` accepts an existing JSON file.
    """

    rule_file_exts: tuple[str, ...] = ()
    if_must_exist: bool = True
    if_parent_writable: bool = False


class FileAction(argparse.Action):
    """Validate a file argument and store it as an absolute :class:`Path`.

    Typical usage:
        ``parser.add_argument("file_in", action=FileAction.input(exts=("json",)))``
        ``parser.add_argument("file_out", action=FileAction.output(exts=("xlsx", "csv")))``
    """

    def __init__(
        self,
        option_strings: list[str],
        dest: str,
        *,
        spec: SpecFileArg | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(option_strings, dest, **kwargs)
        self.spec = spec or SpecFileArg()

    def _normalize_one(self, *, value: str, c_name: str) -> Path:
        if not value.strip():
            raise argparse.ArgumentError(self, f"[{c_name}]: Value cannot be empty.")
        cls_path = Path(value).expanduser().resolve()

        if self.spec.rule_file_exts:
            c_suffix = cls_path.suffix.lower().lstrip(".")
            if c_suffix not in self.spec.rule_file_exts:
                c_expected = ", ".join(self.spec.rule_file_exts)
                c_got = "." + c_suffix if c_suffix else "(none)"
                raise argparse.ArgumentError(
                    self,
                    f"[{c_name}]: Expected extension(s) in ({c_expected}), got {c_got}: {cls_path}",
                )

        if self.spec.if_must_exist:
            if not cls_path.is_file():
                raise argparse.ArgumentError(self, f"[{c_name}]: Not a file: {cls_path}")
            if not os.access(cls_path, os.R_OK):
                raise argparse.ArgumentError(
                    self, f"[{c_name}]: File not readable: {cls_path}"
                )

        if self.spec.if_parent_writable:
            cls_parent = cls_path.parent
            if not cls_parent.is_dir() or not os.access(cls_parent, os.W_OK):
                raise argparse.ArgumentError(
                    self, f"[{c_name}]: Directory not writable: {cls_parent}"
                )
        return cls_path

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Any,
        option_string: str | None = None,
    ) -> None:
        c_name = option_string or self.dest
        if not isinstance(values, (str, os.PathLike)):
            raise argparse.ArgumentError(
                self,
                f"[{c_name}]: Expected a path-like value (str/Path), got {type(values).__name__}.",
            )
        setattr(
            namespace,
            self.dest,
            self._normalize_one(value=os.fsdecode(values), c_name=c_name),
        )

    # -------- convenience factories --------
    @staticmethod
    def _normalize_exts(exts: Iterable[str]) -> tuple[str, ...]:
        return tuple(str(e).lower().lstrip(".") for e in exts if str(e).strip())

    @classmethod
    def input(cls, *, exts: Iterable[str] = (), **kwargs: Any):
        return partial(
            cls, spec=SpecFileArg(rule_file_exts=cls._normalize_exts(exts)), **kwargs
        )

    @classmethod
    def output(cls, *, exts: Iterable[str] = (), **kwargs: Any):
        return partial(
            cls,
            spec=SpecFileArg(
                rule_file_exts=cls._normalize_exts(exts),
                if_must_exist=False,
                if_parent_writable=True,
            ),
            **kwargs,
        )
