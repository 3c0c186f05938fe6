import logging

import pytest

from accessrules import logger as logmod
from accessrules.logger import DefaultLogger, Logger


class RecordingLogger(Logger):
    def __init__(self):
        self.calls = []
        self.enabled = False

    def enable_log(self, enable):
        self.calls.append(("enable_log", enable))
        self.enabled = enable

    def is_enabled(self):
        self.calls.append(("is_enabled",))
        return self.enabled

    def log_model(self, model):
        self.calls.append(("log_model", model))

    def log_enforce(self, matcher, request, result, explains):
        self.calls.append(("log_enforce", matcher, request, result, explains))

    def log_role(self, roles):
        self.calls.append(("log_role", roles))

    def log_policy(self, policy):
        self.calls.append(("log_policy", policy))


@pytest.fixture
def recorder():
    previous = logmod.get_logger()
    rec = RecordingLogger()
    logmod.set_logger(rec)
    yield rec
    logmod.set_logger(previous)


def test_set_and_get_logger(recorder):
    assert logmod.get_logger() is recorder


def test_module_functions_delegate(recorder):
    current = logmod.get_logger()
    current.enable_log(True)
    assert current.is_enabled() is True

    policy = {}
    logmod.log_policy(policy)
    model = []
    logmod.log_model(model)
    logmod.log_enforce("my_matcher", ["bob"], True, [])
    logmod.log_role([])

    assert recorder.calls == [
        ("enable_log", True),
        ("is_enabled",),
        ("log_policy", {}),
        ("log_model", []),
        ("log_enforce", "my_matcher", ["bob"], True, []),
        ("log_role", []),
    ]


def test_default_logger_disabled_by_default():
    assert DefaultLogger().is_enabled() is False


def test_default_logger_enable_toggle():
    lg = DefaultLogger()
    lg.enable_log(True)
    assert lg.is_enabled() is True
    lg.enable_log(False)
    assert lg.is_enabled() is False


def test_disabled_logger_emits_nothing(caplog):
    lg = DefaultLogger()
    with caplog.at_level(logging.INFO, logger="accessrules"):
        lg.log_model([["r", "r", "sub, obj, act"]])
        lg.log_role(["a"])
    assert caplog.messages == []


def test_log_model_format(caplog):
    lg = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="accessrules"):
        lg.log_model([["r", "r", "sub"], ["p", "p", "obj"]])
    assert caplog.messages == ["Model: [r r sub]\n[p p obj]\n"]


def test_log_enforce_format(caplog):
    lg = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="accessrules"):
        lg.log_enforce("m", ["alice", "data1", "read"], True, [["alice", "data1", "read"]])
        lg.log_enforce("m", ["bob"], False, [])
    assert caplog.messages == [
        "Request: alice, data1, read ---> true\nHit Policy: [alice data1 read] \n",
        "Request: bob ---> false\nHit Policy: ",
    ]


def test_log_policy_and_role_format(caplog):
    lg = DefaultLogger(enabled=True)
    with caplog.at_level(logging.INFO, logger="accessrules"):
        lg.log_policy({"p": [["alice", "data1", "read"]]})
        lg.log_role(["u1 < g1", "u2 < g1"])
    assert caplog.messages == [
        "Policy: p : [[alice data1 read]]\n",
        "Roles:  [u1 < g1 u2 < g1]",
    ]