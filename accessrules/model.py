"""Access control model: assertions, sections and the policy rules they hold."""

from __future__ import annotations

import enum
import functools
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Optional

from .logger import DefaultLogger, Logger
from .role_manager import RoleManager

DEFAULT_SEP = ","

SECTION_NAMES: dict[str, str] = {
    "r": "request_definition",
    "p": "policy_definition",
    "g": "role_definition",
    "e": "policy_effect",
    "m": "matchers",
}

REQUIRED_SECTIONS: tuple[str, ...] = ("r", "p", "e", "m")

_MAX_PRIORITY = 2**32


class ModelError(Exception):
    """Raised when a model or its role definitions are invalid."""


class PolicyOp(enum.Enum):
    """Kind of incremental change applied to role links."""

    ADD = 0
    REMOVE = 1


def _rule_key(rule: Sequence[str]) -> str:
    return DEFAULT_SEP.join(rule)


def _parse_priority(text: str) -> Optional[int]:
    """Parse a priority as an unsigned 32-bit decimal, or return None."""
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    return value if value < _MAX_PRIORITY else None


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


@dataclass
class Assertion:
    """One expression of a model section, such as ``r = sub, obj, act``."""

    key: str = ""
    value: str = ""
    tokens: list[str] = field(default_factory=list)
    policy: list[list[str]] = field(default_factory=list)
    policy_map: dict[str, int] = field(default_factory=dict)
    rm: Optional[RoleManager] = None
    logger: Logger = field(default_factory=DefaultLogger, repr=False)

    def _link_rules(self, rm: RoleManager, rules: Iterable[Sequence[str]]) -> Iterable[list[str]]:
        self.rm = rm
        count = self.value.count("_")
        if count < 2:
            raise ModelError('the number of "_" in role definition should be at least 2')
        for rule in rules:
            if len(rule) < count:
                raise ModelError("grouping policy elements do not meet role definition")
            yield list(rule[:count])

    def build_role_links(self, rm: RoleManager) -> None:
        """Add a link to rm for every rule of this assertion."""
        for rule in self._link_rules(rm, self.policy):
            rm.add_link(rule[0], rule[1], *rule[2:])

    def build_incremental_role_links(
        self, rm: RoleManager, op: PolicyOp, rules: Iterable[Sequence[str]]
    ) -> None:
        """Add or delete the links for the given rules in rm."""
        for rule in self._link_rules(rm, rules):
            if op is PolicyOp.ADD:
                rm.add_link(rule[0], rule[1], *rule[2:])
            elif op is PolicyOp.REMOVE:
                rm.delete_link(rule[0], rule[1], *rule[2:])


class FunctionMap:
    """Thread-safe collection of named expression functions."""

    def __init__(self) -> None:
        self._functions: dict[str, Callable[..., Any]] = {}
        self._lock = threading.Lock()

    def add_function(self, name: str, function: Callable[..., Any]) -> None:
        """Register function under name unless the name is already taken."""
        with self._lock:
            self._functions.setdefault(name, function)

    def get_functions(self) -> dict[str, Callable[..., Any]]:
        """Return a copy of all registered functions."""
        with self._lock:
            return dict(self._functions)


class Model(dict):
    """The whole access control model: section name to key to assertion."""

    def __init__(self, logger: Optional[Logger] = None) -> None:
        super().__init__()
        self._logger: Logger = logger if logger is not None else DefaultLogger()

    @property
    def logger(self) -> Logger:
        return self._logger

    def set_logger(self, logger: Logger) -> None:
        """Set the logger of the model and of every assertion in it."""
        for assertions in self.values():
            for assertion in assertions.values():
                assertion.logger = logger
        self._logger = logger

    def add_def(self, sec: str, key: str, value: str) -> bool:
        """Add an assertion to a section; return False when value is empty."""
        if value == "":
            return False
        assertion = Assertion(key=key, value=value, logger=self._logger)
        if sec in ("r", "p"):
            assertion.tokens = [f"{key}_{token.strip()}" for token in value.split(",")]
        self.setdefault(sec, {})[key] = assertion
        return True

    def _load_section(self, cfg: Mapping[str, str], sec: str) -> None:
        index = 1
        while True:
            key = sec if index == 1 else f"{sec}{index}"
            value = cfg.get(f"{SECTION_NAMES[sec]}::{key}") or ""
            if not self.add_def(sec, key, value):
                return
            index += 1

    def load_model_from_config(self, cfg: Mapping[str, str]) -> None:
        """Load all sections from a mapping of ``section::key`` to text."""
        for sec in SECTION_NAMES:
            self._load_section(cfg, sec)
        missing = [SECTION_NAMES[sec] for sec in REQUIRED_SECTIONS if not self.has_section(sec)]
        if missing:
            raise ModelError(f"missing required sections: {','.join(missing)}")

    def has_section(self, sec: str) -> bool:
        return self.get(sec) is not None

    def print_model(self) -> None:
        """Log every assertion of the model."""
        if not self._logger.is_enabled():
            return
        info = [
            [sec, key, assertion.value]
            for sec, assertions in self.items()
            for key, assertion in assertions.items()
        ]
        self._logger.log_model(info)

    def sort_policies_by_priority(self) -> None:
        """Order the rules of every priority policy by their priority field."""

        def compare(first: list[str], second: list[str]) -> int:
            def less(a: list[str], b: list[str]) -> bool:
                pa = _parse_priority(a[0]) if a else None
                if pa is None:
                    return True
                pb = _parse_priority(b[0]) if b else None
                if pb is None:
                    return True
                return pa < pb

            if less(first, second):
                return -1
            if less(second, first):
                return 1
            return 0

        for ptype, assertion in self.get("p", {}).items():
            if not assertion.tokens or assertion.tokens[0] != f"{ptype}_priority":
                continue
            assertion.policy.sort(key=functools.cmp_to_key(compare))
            self._reindex(assertion, 0)

    def build_incremental_role_links(
        self,
        rm_map: Mapping[str, RoleManager],
        op: PolicyOp,
        sec: str,
        ptype: str,
        rules: Iterable[Sequence[str]],
    ) -> None:
        """Apply a change of grouping rules to the matching role manager."""
        if sec == "g":
            self[sec][ptype].build_incremental_role_links(rm_map[ptype], op, rules)

    def build_role_links(self, rm_map: Mapping[str, RoleManager]) -> None:
        """Build the role links of every grouping assertion."""
        self.print_policy()
        for ptype, assertion in self.get("g", {}).items():
            assertion.build_role_links(rm_map[ptype])

    def print_policy(self) -> None:
        """Log all policy and grouping rules."""
        if not self._logger.is_enabled():
            return
        policy: dict[str, list[list[str]]] = {}
        for sec in ("p", "g"):
            for key, assertion in self.get(sec, {}).items():
                policy.setdefault(key, []).extend(assertion.policy)
        self._logger.log_policy(policy)

    def clear_policy(self) -> None:
        """Remove all policy and grouping rules."""
        for sec in ("p", "g"):
            for assertion in self.get(sec, {}).values():
                assertion.policy = []
                assertion.policy_map = {}

    @staticmethod
    def _reindex(assertion: Assertion, start: int) -> None:
        for position, rule in enumerate(assertion.policy[start:], start):
            assertion.policy_map[_rule_key(rule)] = position

    @staticmethod
    def _matches(rule: Sequence[str], field_index: int, field_values: Sequence[str]) -> bool:
        return all(
            value == "" or rule[field_index + offset] == value
            for offset, value in enumerate(field_values)
        )

    def get_policy(self, sec: str, ptype: str) -> list[list[str]]:
        return list(self[sec][ptype].policy)

    def get_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *args: str
    ) -> list[list[str]]:
        """Return rules whose fields from field_index on match args; "" matches anything."""
        return [rule for rule in self[sec][ptype].policy if self._matches(rule, field_index, args)]

    def has_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        return _rule_key(rule) in self[sec][ptype].policy_map

    def has_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """Return True if any of the rules is present."""
        return any(self.has_policy(sec, ptype, rule) for rule in rules)

    def add_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> None:
        """Append a rule, keeping priority policies ordered by priority."""
        assertion = self[sec][ptype]
        rule = list(rule)
        assertion.policy.append(rule)
        priority = _parse_priority(rule[0]) if rule else None
        is_priority = bool(assertion.tokens) and assertion.tokens[0] == f"{ptype}_priority"
        if sec == "p" and is_priority and priority is not None:
            position = len(assertion.policy) - 1
            while position > 0:
                previous = assertion.policy[position - 1]
                previous_priority = _parse_priority(previous[0]) if previous else None
                if previous_priority is None or previous_priority <= priority:
                    break
                assertion.policy[position] = previous
                assertion.policy_map[_rule_key(previous)] = position
                position -= 1
            assertion.policy[position] = rule
            assertion.policy_map[_rule_key(rule)] = position
        else:
            assertion.policy_map[_rule_key(rule)] = len(assertion.policy) - 1

    def add_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> None:
        self.add_policies_with_affected(sec, ptype, rules)

    def add_policies_with_affected(
        self, sec: str, ptype: str, rules: Iterable[Sequence[str]]
    ) -> list[list[str]]:
        """Add the rules not yet present and return those that were added."""
        affected: list[list[str]] = []
        for rule in rules:
            if self.has_policy(sec, ptype, rule):
                continue
            affected.append(list(rule))
            self.add_policy(sec, ptype, rule)
        return affected

    def remove_policy(self, sec: str, ptype: str, rule: Sequence[str]) -> bool:
        """Remove a rule; return whether it was present."""
        return bool(self.remove_policies_with_affected(sec, ptype, [rule]))

    def update_policy(
        self, sec: str, ptype: str, old_rule: Sequence[str], new_rule: Sequence[str]
    ) -> bool:
        """Replace old_rule by new_rule in place; return whether old_rule was present."""
        assertion = self[sec][ptype]
        old_key = _rule_key(old_rule)
        index = assertion.policy_map.get(old_key)
        if index is None:
            return False
        assertion.policy[index] = list(new_rule)
        del assertion.policy_map[old_key]
        assertion.policy_map[_rule_key(new_rule)] = index
        return True

    def update_policies(
        self,
        sec: str,
        ptype: str,
        old_rules: Sequence[Sequence[str]],
        new_rules: Sequence[Sequence[str]],
    ) -> bool:
        """Replace rules pairwise; if any old rule is missing, undo all and return False."""
        if len(new_rules) < len(old_rules):
            raise ModelError("fewer new rules than old rules")
        assertion = self[sec][ptype]
        modified: list[tuple[int, Sequence[str], Sequence[str]]] = []
        for old_rule, new_rule in zip(old_rules, new_rules):
            old_key = _rule_key(old_rule)
            index = assertion.policy_map.get(old_key)
            if index is None:
                for done_index, done_old, done_new in reversed(modified):
                    assertion.policy[done_index] = list(done_old)
                    assertion.policy_map.pop(_rule_key(done_new), None)
                    assertion.policy_map[_rule_key(done_old)] = done_index
                return False
            assertion.policy[index] = list(new_rule)
            del assertion.policy_map[old_key]
            assertion.policy_map[_rule_key(new_rule)] = index
            modified.append((index, old_rule, new_rule))
        return True

    def remove_policies(self, sec: str, ptype: str, rules: Iterable[Sequence[str]]) -> bool:
        """Remove rules; return whether any was removed."""
        return bool(self.remove_policies_with_affected(sec, ptype, rules))

    def remove_policies_with_affected(
        self, sec: str, ptype: str, rules: Iterable[Sequence[str]]
    ) -> list[list[str]]:
        """Remove the rules present and return those that were removed."""
        assertion = self[sec][ptype]
        affected: list[list[str]] = []
        for rule in rules:
            key = _rule_key(rule)
            index = assertion.policy_map.pop(key, None)
            if index is None:
                continue
            affected.append(list(rule))
            del assertion.policy[index]
            self._reindex(assertion, index)
        return affected

    def remove_filtered_policy(
        self, sec: str, ptype: str, field_index: int, *args: str
    ) -> tuple[bool, list[list[str]]]:
        """Remove rules matching the field filter; return (any removed, removed rules)."""
        if not args:
            return False, []
        assertion = self[sec][ptype]
        kept: list[list[str]] = []
        removed: list[list[str]] = []
        first_index: Optional[int] = None
        for index, rule in enumerate(assertion.policy):
            if self._matches(rule, field_index, args):
                if first_index is None:
                    first_index = index
                assertion.policy_map.pop(_rule_key(rule), None)
                removed.append(rule)
            else:
                kept.append(rule)
        if first_index is not None:
            assertion.policy = kept
            self._reindex(assertion, first_index)
        return bool(removed), removed

    def get_values_for_field_in_policy(self, sec: str, ptype: str, field_index: int) -> list[str]:
        """Return the distinct values of one field, in order of first appearance."""
        return _dedupe(rule[field_index] for rule in self[sec][ptype].policy)

    def get_values_for_field_in_policy_all_types(self, sec: str, field_index: int) -> list[str]:
        """Return the distinct values of one field across every ptype of a section."""
        return _dedupe(
            value
            for ptype in self.get(sec, {})
            for value in self.get_values_for_field_in_policy(sec, ptype, field_index)
        )