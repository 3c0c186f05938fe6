"""Logging interface for the access control engine and its default implementation."""

from __future__ import annotations

import abc
import logging
from collections.abc import Mapping, Sequence
from typing import Any

_std_logger = logging.getLogger("accessrules")


def _format_value(value: Any) -> str:
    """Render a value the way the engine's log lines expect it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(item) for item in value) + "]"
    return str(value)


class Logger(abc.ABC):
    """Interface every logger used by the engine implements."""

    @abc.abstractmethod
    def enable_log(self, enable: bool) -> None:
        """Turn printing of messages on or off."""

    @abc.abstractmethod
    def is_enabled(self) -> bool:
        """Return whether the logger prints messages."""

    @abc.abstractmethod
    def log_model(self, model: Sequence[Sequence[str]]) -> None:
        """Log information about the model."""

    @abc.abstractmethod
    def log_enforce(
        self,
        matcher: str,
        request: Sequence[Any],
        result: bool,
        explains: Sequence[Sequence[str]],
    ) -> None:
        """Log information about an enforcement decision."""

    @abc.abstractmethod
    def log_role(self, roles: Sequence[str]) -> None:
        """Log information about roles."""

    @abc.abstractmethod
    def log_policy(self, policy: Mapping[str, Sequence[Sequence[str]]]) -> None:
        """Log information about the policy."""


class DefaultLogger(Logger):
    """Logger writing to the standard ``logging`` module; disabled by default."""

    def __init__(self, enabled: bool = False, target: logging.Logger | None = None) -> None:
        self._enabled = enabled
        self._target = target if target is not None else _std_logger

    def enable_log(self, enable: bool) -> None:
        self._enabled = bool(enable)

    def is_enabled(self) -> bool:
        return self._enabled

    def _emit(self, message: str) -> None:
        self._target.info(message)

    def log_model(self, model: Sequence[Sequence[str]]) -> None:
        if not self._enabled:
            return
        body = "".join(f"{_format_value(entry)}\n" for entry in model or ())
        self._emit("Model: " + body)

    def log_enforce(
        self,
        matcher: str,
        request: Sequence[Any],
        result: bool,
        explains: Sequence[Sequence[str]],
    ) -> None:
        if not self._enabled:
            return
        request_text = ", ".join(_format_value(value) for value in request or ())
        explains = list(explains or ())
        message = f"Request: {request_text} ---> {_format_value(bool(result))}\nHit Policy: "
        if explains:
            message += ", ".join(_format_value(rule) for rule in explains) + " \n"
        self._emit(message)

    def log_policy(self, policy: Mapping[str, Sequence[Sequence[str]]]) -> None:
        if not self._enabled:
            return
        body = "".join(f"{key} : {_format_value(list(rules))}\n" for key, rules in (policy or {}).items())
        self._emit("Policy: " + body)

    def log_role(self, roles: Sequence[str]) -> None:
        if not self._enabled:
            return
        self._emit("Roles:  " + _format_value(list(roles or ())))


class _LoggerSlot:
    """Holds the logger used by the module-level logging functions."""

    def __init__(self, logger: Logger) -> None:
        self.logger = logger


_slot = _LoggerSlot(DefaultLogger())


def set_logger(logger: Logger) -> None:
    """Set the logger used by the module-level logging functions."""
    _slot.logger = logger


def get_logger() -> Logger:
    """Return the logger used by the module-level logging functions."""
    return _slot.logger


def log_model(model: Sequence[Sequence[str]]) -> None:
    """Log model information through the current logger."""
    _slot.logger.log_model(model)


def log_enforce(
    matcher: str,
    request: Sequence[Any],
    result: bool,
    explains: Sequence[Sequence[str]],
) -> None:
    """Log enforcement information through the current logger."""
    _slot.logger.log_enforce(matcher, request, result, explains)


def log_role(roles: Sequence[str]) -> None:
    """Log role information through the current logger."""
    _slot.logger.log_role(roles)


def log_policy(policy: Mapping[str, Sequence[Sequence[str]]]) -> None:
    """Log policy information through the current logger."""
    _slot.logger.log_policy(policy)