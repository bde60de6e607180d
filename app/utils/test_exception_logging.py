import logging
from typing import List
from unittest.mock import Mock

from app.utils import mask_token, token_fingerprint
from app.utils.exception_logging import (
    format_exception_message,
    log_exception_with_details,
)


class BrokenStrException(Exception):
    """An exception that breaks when __str__ is called."""

    def __str__(self):
        raise RuntimeError("Cannot convert to string!")

    def __repr__(self):
        return "BrokenStrException(cannot convert to string)"


class MockExceptionGroup(Exception):
    """Minimal exception group look-alike."""

    def __init__(self, message: str, exceptions: List[Exception]):
        super().__init__(message)
        self.exceptions = exceptions


def test_logs_regular_exception_with_traceback():
    logger = Mock(spec=logging.Logger)
    exc = ValueError("bad value")

    log_exception_with_details(logger, "[Server]", exc)

    logger.log.assert_called_once()
    level, message = logger.log.call_args.args
    assert level == logging.ERROR
    assert message == "[Server] Exception: bad value"
    assert logger.log.call_args.kwargs["exc_info"] is exc


def test_logs_each_sub_exception_of_a_group():
    logger = Mock(spec=logging.Logger)
    group = MockExceptionGroup("many", [ValueError("one"), KeyError("two")])

    log_exception_with_details(logger, "[Server]", group, level=logging.WARNING)

    messages = [c.args[1] for c in logger.log.call_args_list]
    assert messages[0] == "[Server] Exception with 2 sub-exceptions: many"
    assert messages[1] == "[Server] Sub-exception 1: ValueError: one"
    assert messages[2] == "[Server] Sub-exception 2: KeyError: 'two'"
    assert all(c.args[0] == logging.WARNING for c in logger.log.call_args_list)


def test_format_survives_broken_str():
    assert format_exception_message(BrokenStrException()) == (
        "BrokenStrException(cannot convert to string)"
    )


def test_format_includes_sub_exceptions():
    group = MockExceptionGroup("outer", [RuntimeError("inner")])
    assert format_exception_message(group) == "outer (Sub-exceptions: RuntimeError: inner)"


def test_mask_token_hides_credential():
    assert mask_token("Bearer abcdef123", "abcdef123") == "Bearer abcd****"
    assert mask_token("nothing to hide", None) == "nothing to hide"


def test_token_fingerprint_does_not_contain_token():
    fingerprint = token_fingerprint("super-secret-token")
    assert "super-secret-token" not in fingerprint
    assert fingerprint.startswith("len=18 sha256=")
    assert token_fingerprint(None) == "<empty>"
