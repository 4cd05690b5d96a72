"""Tests for the error taxonomy."""

import pytest

from mwchain.domain.errors import (
    UNEXPECTED_ERROR_MESSAGE,
    BindingError,
    BindingIssue,
    DomainError,
)


class TestDomainError:
    def test_without_cause(self) -> None:
        err = DomainError("unauthenticated")
        assert err.message == "unauthenticated"
        assert err.cause is None
        assert str(err) == "unauthenticated"

    def test_with_cause(self) -> None:
        cause = ValueError("bad id")
        err = DomainError(UNEXPECTED_ERROR_MESSAGE, cause=cause)
        assert err.__cause__ is cause
        assert err.describe() == "Interceptor chain execution error: ValueError: bad id"
        assert str(err) == err.describe()

    def test_repr(self) -> None:
        assert repr(DomainError("x")) == "DomainError('x', cause=None)"


class TestBindingError:
    def test_message_lists_every_issue(self) -> None:
        err = BindingError(
            [
                BindingIssue(code="UNKNOWN_INTERCEPTOR", message="Unknown 'a'", interceptor="a"),
                BindingIssue(code="UNKNOWN_INTERCEPTOR", message="Unknown 'b'", interceptor="b"),
            ]
        )
        text = str(err)
        assert text.startswith("2 binding issue(s)")
        assert "Unknown 'a'" in text
        assert "Unknown 'b'" in text
        assert len(err.issues) == 2

    def test_issue_is_frozen(self) -> None:
        issue = BindingIssue(code="X", message="m")
        with pytest.raises(ValueError):
            issue.code = "Y"  # type: ignore[misc]
