"""Adapters storing the policy in a comma separated text file."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from .model import Model
from .persist import BatchAdapter, FilteredAdapter, UpdatableAdapter, load_policy_line

PathLike = Union[str, "os.PathLike[str]"]


class AdapterError(Exception):
    """Raised when an adapter cannot carry out an operation."""


_EMPTY_PATH = "invalid file path, file path cannot be empty"
_NO_AUTO_SAVE = "the file adapter does not support auto-save"


class FileAdapter(BatchAdapter, UpdatableAdapter):
    """Loads the whole policy from a file and saves it back; no auto-save."""

    def __init__(self, file_path: PathLike) -> None:
        self.file_path = os.fspath(file_path) if file_path else ""

    def _check_path(self) -> None:
        if not self.file_path:
            raise AdapterError(_EMPTY_PATH)

    def _read_lines(self, model: Model, keep: Callable[[str], bool]) -> None:
        with open(self.file_path, encoding="utf-8") as handle:
            for raw in handle:
                line = raw.strip()
                if keep(line):
                    load_policy_line(line, model)

    def load_policy(self, model: Model) -> None:
        """Load every rule of the file into model."""
        self._check_path()
        self._read_lines(model, lambda _line: True)

    def save_policy(self, model: Model) -> None:
        """Write every policy and grouping rule of model to the file."""
        self._check_path()
        lines = [
            f"{ptype}, " + ", ".join(rule)
            for sec in ("p", "g")
            for ptype, assertion in model.get(sec, {}).items()
            for rule in assertion.policy
        ]
        with open(self.file_path, "w", encoding="utf-8", newline="\n") as handle:
            handle.write("\n".join(lines))

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        raise AdapterError(_NO_AUTO_SAVE)

    def add_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        raise AdapterError(_NO_AUTO_SAVE)

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        raise AdapterError(_NO_AUTO_SAVE)

    def remove_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        raise AdapterError(_NO_AUTO_SAVE)

    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *args: str) -> None:
        raise AdapterError(_NO_AUTO_SAVE)

    def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> None:
        raise AdapterError(_NO_AUTO_SAVE)

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> None:
        raise AdapterError(_NO_AUTO_SAVE)


@dataclass
class Filter:
    """Field values that loaded rules must have; empty values match anything."""

    p: list[str] = field(default_factory=list)
    g: list[str] = field(default_factory=list)


def _skip_words(words: list[str], wanted: Sequence[str]) -> bool:
    if len(words) < len(wanted) + 1:
        return True
    return any(
        value and value.strip() != word.strip() for value, word in zip(wanted, words[1:])
    )


def _skip_line(line: str, filter: Optional[Filter]) -> bool:
    if filter is None:
        return False
    words = line.split(",")
    kind = words[0].strip()
    wanted: Sequence[str] = filter.p if kind == "p" else filter.g if kind == "g" else ()
    return _skip_words(words, wanted)


class FilteredFileAdapter(FileAdapter, FilteredAdapter):
    """File adapter that can load only the rules matching a Filter."""

    def __init__(self, file_path: PathLike) -> None:
        super().__init__(file_path)
        self._filtered = True

    def load_policy(self, model: Model) -> None:
        """Load every rule of the file and mark the policy as unfiltered."""
        self._filtered = False
        super().load_policy(model)

    def load_filtered_policy(self, model: Model, filter: Any) -> None:
        """Load only rules matching filter; a filter of None loads everything."""
        if filter is None:
            self.load_policy(model)
            return
        self._check_path()
        if not isinstance(filter, Filter):
            raise AdapterError("invalid filter type")
        self._read_lines(model, lambda line: not _skip_line(line, filter))
        self._filtered = True

    def is_filtered(self) -> bool:
        return self._filtered

    def save_policy(self, model: Model) -> None:
        """Save the policy; a filtered policy cannot be saved."""
        if self._filtered:
            raise AdapterError("cannot save a filtered policy")
        super().save_policy(model)