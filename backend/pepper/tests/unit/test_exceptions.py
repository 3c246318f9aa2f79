"""Tests for the scorer exception hierarchy."""

from pepper.logic.exceptions import (
    GameRuleError,
    InvalidActionError,
    InvalidSetupError,
    SnapshotLoadError,
    UnsupportedSettingsError,
)


class TestGameRuleErrorHierarchy:
    def test_rule_errors_share_a_base(self) -> None:
        for error_cls in (InvalidActionError, InvalidSetupError, UnsupportedSettingsError):
            assert issubclass(error_cls, GameRuleError)

    def test_snapshot_error_is_not_a_rule_error(self) -> None:
        assert not issubclass(SnapshotLoadError, GameRuleError)


class TestSnapshotLoadError:
    def test_stores_reason(self) -> None:
        err = SnapshotLoadError("expected 4 players, got 3")
        assert err.reason == "expected 4 players, got 3"

    def test_message_format(self) -> None:
        err = SnapshotLoadError("bad json")
        assert str(err) == "cannot restore game snapshot: bad json"
