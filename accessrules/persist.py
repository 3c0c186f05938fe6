"""Storage adapter, dispatcher and watcher interfaces, and policy line loading."""

from __future__ import annotations

import abc
import csv
from collections.abc import Callable, Sequence
from typing import Any

from .model import DEFAULT_SEP, Model


def load_policy_line(line: str, model: Model) -> None:
    """Parse one comma separated text line and append it as a rule to model.

    Empty lines and lines starting with ``#`` are ignored. The first field names
    the policy type; its first letter names the section.
    """
    if line == "" or line.startswith("#"):
        return
    try:
        tokens = next(csv.reader([line], skipinitialspace=True), None)
    except csv.Error:
        return
    if not tokens:
        return
    key = tokens[0]
    sec = key[:1]
    assertion = model[sec][key]
    rule = tokens[1:]
    assertion.policy.append(rule)
    assertion.policy_map[DEFAULT_SEP.join(rule)] = len(assertion.policy) - 1


class Adapter(abc.ABC):
    """Interface for policy storage."""

    @abc.abstractmethod
    def load_policy(self, model: Model) -> None:
        """Load all policy rules from storage into model."""

    @abc.abstractmethod
    def save_policy(self, model: Model) -> None:
        """Save all policy rules of model to storage."""

    @abc.abstractmethod
    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        """Add a rule to storage (auto-save)."""

    @abc.abstractmethod
    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        """Remove a rule from storage (auto-save)."""

    @abc.abstractmethod
    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *args: str) -> None:
        """Remove rules matching the field filter from storage (auto-save)."""


class FilteredAdapter(Adapter):
    """Adapter able to load only the rules that match a filter."""

    @abc.abstractmethod
    def load_filtered_policy(self, model: Model, filter: Any) -> None:
        """Load only the rules that match filter."""

    @abc.abstractmethod
    def is_filtered(self) -> bool:
        """Return whether the loaded policy has been filtered."""


class BatchAdapter(Adapter):
    """Adapter able to add and remove several rules at once."""

    @abc.abstractmethod
    def add_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        """Add rules to storage (auto-save)."""

    @abc.abstractmethod
    def remove_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        """Remove rules from storage (auto-save)."""


class UpdatableAdapter(Adapter):
    """Adapter able to update rules in place."""

    @abc.abstractmethod
    def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> None:
        """Replace one rule in storage."""

    @abc.abstractmethod
    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> None:
        """Replace several rules in storage."""


class Dispatcher(abc.ABC):
    """Interface propagating policy changes to all instances."""

    @abc.abstractmethod
    def add_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        """Add rules to all instances."""

    @abc.abstractmethod
    def remove_policies(self, sec: str, ptype: str, rules: Sequence[Sequence[str]]) -> None:
        """Remove rules from all instances."""

    @abc.abstractmethod
    def remove_filtered_policy(self, sec: str, ptype: str, field_index: int, *args: str) -> None:
        """Remove rules matching the field filter from all instances."""

    @abc.abstractmethod
    def clear_policy(self) -> None:
        """Clear the policy of all instances."""

    @abc.abstractmethod
    def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> None:
        """Replace one rule in all instances."""

    @abc.abstractmethod
    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> None:
        """Replace several rules in all instances."""


class Watcher(abc.ABC):
    """Interface keeping several enforcer instances in sync."""

    @abc.abstractmethod
    def set_update_callback(self, callback: Callable[[str], None]) -> None:
        """Set the function called when another instance changed the policy."""

    @abc.abstractmethod
    def update(self) -> None:
        """Notify other instances that the policy changed."""

    @abc.abstractmethod
    def close(self) -> None:
        """Stop the watcher; the callback is not called any more."""


class WatcherEx(Watcher):
    """Watcher with notifications for individual kinds of change."""

    @abc.abstractmethod
    def update_for_add_policy(self, *args: str) -> None:
        """Notify other instances after a rule was added."""

    @abc.abstractmethod
    def update_for_remove_policy(self, *args: str) -> None:
        """Notify other instances after a rule was removed."""

    @abc.abstractmethod
    def update_for_remove_filtered_policy(self, field_index: int, *args: str) -> None:
        """Notify other instances after rules matching a filter were removed."""

    @abc.abstractmethod
    def update_for_save_policy(self, model: Model) -> None:
        """Notify other instances after the policy was saved."""


class WatcherUpdatable(Watcher):
    """Watcher with notifications for rule updates."""

    @abc.abstractmethod
    def update_for_update_policy(self, old_rule: Sequence[str], new_rule: Sequence[str]) -> None:
        """Notify other instances after a rule was updated."""

    @abc.abstractmethod
    def update_for_update_policies(
        self, old_rules: Sequence[Sequence[str]], new_rules: Sequence[Sequence[str]]
    ) -> None:
        """Notify other instances after several rules were updated."""