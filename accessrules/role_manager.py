"""Role inheritance management with optional name and domain pattern matching."""

from __future__ import annotations

import abc
from collections.abc import Callable
from typing import Optional

from .logger import DefaultLogger, Logger

MatchingFunc = Callable[[str, str], bool]

_DEFAULT_DOMAIN = ""
_SEPARATOR = "::"


class RoleManagerError(Exception):
    """Base class for role manager errors."""


class DomainParameterError(RoleManagerError):
    """Raised when more than one domain argument is given."""

    def __init__(self) -> None:
        super().__init__("domain should be 1 parameter")


class NamesNotFoundError(RoleManagerError):
    """Raised when one of the two names of a link does not exist."""

    def __init__(self) -> None:
        super().__init__("error: name1 or name2 does not exist")


class NameNotFoundError(RoleManagerError):
    """Raised when a name does not exist."""

    def __init__(self) -> None:
        super().__init__("error: name does not exist")


class RoleManager(abc.ABC):
    """Interface for managing role inheritance; trailing arguments are the domain."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Remove all stored data."""

    @abc.abstractmethod
    def add_link(self, name1: str, name2: str, *args: str) -> None:
        """Make name1 inherit name2."""

    @abc.abstractmethod
    def delete_link(self, name1: str, name2: str, *args: str) -> None:
        """Remove the inheritance of name2 by name1."""

    @abc.abstractmethod
    def has_link(self, name1: str, name2: str, *args: str) -> bool:
        """Return whether name1 inherits name2."""

    @abc.abstractmethod
    def get_roles(self, name: str, *args: str) -> list[str]:
        """Return the roles name directly inherits."""

    @abc.abstractmethod
    def get_users(self, name: str, *args: str) -> list[str]:
        """Return the users directly inheriting name."""

    @abc.abstractmethod
    def print_roles(self) -> None:
        """Log all roles."""

    @abc.abstractmethod
    def set_logger(self, logger: Logger) -> None:
        """Set the logger used by print_roles."""


def _name_with_domain(domain: str, name: str) -> str:
    if domain == "":
        return name
    return f"{domain}{_SEPARATOR}{name}"


def _domain_and_name(name_with_domain: str) -> tuple[str, str]:
    parts = name_with_domain.split(_SEPARATOR)
    if len(parts) == 1:
        return _DEFAULT_DOMAIN, parts[0]
    return parts[0], parts[1]


def _single_domain(args: tuple[str, ...]) -> str:
    if not args:
        return _DEFAULT_DOMAIN
    if len(args) == 1:
        return args[0]
    raise DomainParameterError()


class _Role:
    __slots__ = ("name", "roles")

    def __init__(self, name: str) -> None:
        self.name = name
        self.roles: list[_Role] = []

    def add_role(self, role: _Role) -> None:
        if all(existing.name != role.name for existing in self.roles):
            self.roles.append(role)

    def delete_role(self, role: _Role) -> None:
        for existing in self.roles:
            if existing.name == role.name:
                self.roles.remove(existing)
                return

    def has_direct_role(self, name: str) -> bool:
        return any(role.name == name for role in self.roles)

    def has_role(self, name: str, level: int) -> bool:
        if self.has_direct_role(name):
            return True
        if level <= 0:
            return False
        return any(role.has_role(name, level - 1) for role in self.roles)

    def has_direct_role_matching(self, domain: str, name: str, match: MatchingFunc) -> bool:
        target = _name_with_domain(domain, name)
        for role in self.roles:
            role_domain, role_name = _domain_and_name(role.name)
            if role.name == target or (match(name, role_name) and role_domain == domain):
                return True
        return False

    def has_role_matching(self, domain: str, name: str, level: int, match: MatchingFunc) -> bool:
        if self.has_direct_role_matching(domain, name, match):
            return True
        if level <= 0:
            return False
        return any(role.has_role_matching(domain, name, level - 1, match) for role in self.roles)

    def role_names(self) -> list[str]:
        return [_domain_and_name(role.name)[1] for role in self.roles]

    def __str__(self) -> str:
        if not self.roles:
            return ""
        inner = ", ".join(role.name for role in self.roles)
        if len(self.roles) != 1:
            inner = f"({inner})"
        return f"{self.name} < {inner}"


class DefaultRoleManager(RoleManager):
    """Default role manager with bounded hierarchy search depth."""

    def __init__(self, max_hierarchy_level: int) -> None:
        self._roles: dict[str, _Role] = {}
        self._domains: dict[str, None] = {}
        self._max_hierarchy_level = max_hierarchy_level
        self._matching_func: Optional[MatchingFunc] = None
        self._domain_matching_func: Optional[MatchingFunc] = None
        self._logger: Logger = DefaultLogger()

    @property
    def _has_pattern(self) -> bool:
        return self._matching_func is not None

    @property
    def _has_domain_pattern(self) -> bool:
        return self._domain_matching_func is not None

    def add_matching_func(self, name: str, fn: MatchingFunc) -> None:
        """Allow patterns in role names, matched with fn."""
        self._matching_func = fn

    def add_domain_matching_func(self, name: str, fn: MatchingFunc) -> None:
        """Allow patterns in domains, matched with fn."""
        self._domain_matching_func = fn

    def set_logger(self, logger: Logger) -> None:
        self._logger = logger

    def clear(self) -> None:
        self._roles = {}
        self._domains = {}

    def _create_role(self, name: str) -> _Role:
        role = self._roles.get(name)
        if role is None:
            role = self._roles[name] = _Role(name)
        return role

    def _has_role(self, domain: str, name: str, match: Optional[MatchingFunc]) -> bool:
        if match is None:
            return _name_with_domain(domain, name) in self._roles
        return any(
            key_domain == domain and match(name, key_name)
            for key_domain, key_name in map(_domain_and_name, list(self._roles))
        )

    def _pattern_domains(self, domain: str) -> list[str]:
        matched = [domain]
        if self._domain_matching_func is not None:
            matched.extend(
                pattern
                for pattern in self._domains
                if pattern != domain and self._domain_matching_func(domain, pattern)
            )
        return matched

    def add_link(self, name1: str, name2: str, *args: str) -> None:
        """Make name1 inherit name2; an optional single argument is the domain."""
        requested = _single_domain(args)
        self._domains[requested] = None
        match = self._matching_func
        for domain in self._pattern_domains(requested):
            role1 = self._create_role(_name_with_domain(domain, name1))
            role2 = self._create_role(_name_with_domain(domain, name2))
            role1.add_role(role2)

            if match is None:
                continue
            for key, value in list(self._roles.items()):
                key_domain, pattern = _domain_and_name(key)
                if key_domain != domain:
                    continue
                if match(pattern, name1) and name1 != pattern:
                    self._create_role(key).add_role(role1)
                if match(pattern, name2) and name2 != pattern:
                    role2.add_role(value)
                if match(name1, pattern) and name1 != pattern:
                    self._create_role(key).add_role(role1)
                if match(name2, pattern) and name2 != pattern:
                    role2.add_role(value)

    def delete_link(self, name1: str, name2: str, *args: str) -> None:
        """Remove the link between name1 and name2; raise if either is unknown."""
        domain = _single_domain(args)
        key1 = _name_with_domain(domain, name1)
        key2 = _name_with_domain(domain, name2)
        if key1 not in self._roles or key2 not in self._roles:
            raise NamesNotFoundError()
        self._roles[key1].delete_role(self._roles[key2])

    def has_link(self, name1: str, name2: str, *args: str) -> bool:
        """Return whether name1 inherits name2, directly or transitively."""
        requested = _single_domain(args)
        if name1 == name2:
            return True
        match = self._matching_func
        for domain in self._pattern_domains(requested):
            if not self._has_role(domain, name1, match) or not self._has_role(domain, name2, match):
                continue
            if match is not None:
                for key, value in list(self._roles.items()):
                    _, name = _domain_and_name(key)
                    if match(name1, name) and value.has_role_matching(
                        domain, name2, self._max_hierarchy_level, match
                    ):
                        return True
            else:
                role1 = self._create_role(_name_with_domain(domain, name1))
                if role1.has_role(_name_with_domain(domain, name2), self._max_hierarchy_level):
                    return True
        return False

    def get_roles(self, name: str, *args: str) -> list[str]:
        """Return the roles name directly inherits, without duplicates."""
        requested = _single_domain(args)
        found: list[str] = []
        for domain in self._pattern_domains(requested):
            if not self._has_role(domain, name, self._matching_func):
                continue
            found.extend(self._create_role(_name_with_domain(domain, name)).role_names())
        return list(dict.fromkeys(found))

    def get_users(self, name: str, *args: str) -> list[str]:
        """Return the users directly inheriting name; raise if name is unknown."""
        requested = _single_domain(args)
        users: list[str] = []
        for domain in self._pattern_domains(requested):
            key = _name_with_domain(domain, name)
            if not self._has_role(domain, name, self._domain_matching_func):
                raise NameNotFoundError()
            users.extend(
                _domain_and_name(role.name)[1]
                for role in list(self._roles.values())
                if role.has_direct_role(key)
            )
        return users

    def print_roles(self) -> None:
        if not self._logger.is_enabled():
            return
        lines = [text for text in map(str, self._roles.values()) if text]
        self._logger.log_role(lines)