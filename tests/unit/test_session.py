"""Tests for the analysis session state machine."""

import pytest

from gatekeeper.exceptions import InvalidTransitionError
from gatekeeper.session import AnalysisSession, AnalysisState


def session() -> AnalysisSession:
    return AnalysisSession(url="https://example.com", issue_description="login loop")


class TestAnalysisSession:
    """Tests for AnalysisSession."""

    def test_happy_path(self) -> None:
        """idle -> crawling -> filtering -> done."""
        s = session()

        s.transition(AnalysisState.CRAWLING)
        s.transition(AnalysisState.FILTERING)
        s.transition(AnalysisState.DONE)

        assert s.state == AnalysisState.DONE

    @pytest.mark.parametrize("from_state", [AnalysisState.CRAWLING, AnalysisState.FILTERING])
    def test_error_reachable(self, from_state: AnalysisState) -> None:
        """Errors can happen while crawling or filtering."""
        s = session()
        s.state = from_state

        s.transition(AnalysisState.ERROR)

        assert s.state == AnalysisState.ERROR

    @pytest.mark.parametrize(
        ("from_state", "to_state"),
        [
            (AnalysisState.IDLE, AnalysisState.FILTERING),
            (AnalysisState.IDLE, AnalysisState.DONE),
            (AnalysisState.IDLE, AnalysisState.ERROR),
            (AnalysisState.CRAWLING, AnalysisState.DONE),
            (AnalysisState.DONE, AnalysisState.CRAWLING),
            (AnalysisState.ERROR, AnalysisState.IDLE),
        ],
    )
    def test_illegal_transitions(
        self, from_state: AnalysisState, to_state: AnalysisState
    ) -> None:
        """Illegal transitions raise and leave the state alone."""
        s = session()
        s.state = from_state

        with pytest.raises(InvalidTransitionError) as exc_info:
            s.transition(to_state)

        assert s.state == from_state
        assert exc_info.value.code == "invalid_transition"

    @pytest.mark.parametrize("from_state", [AnalysisState.CRAWLING, AnalysisState.FILTERING])
    def test_cancel_returns_to_idle(self, from_state: AnalysisState) -> None:
        """Cancelling a running session sets the signal and returns to idle."""
        s = session()
        s.state = from_state

        s.cancel()

        assert s.is_cancelled
        assert s.state == AnalysisState.IDLE
        assert not s.is_running

    def test_cancel_finished_session(self) -> None:
        """Cancelling a finished session keeps its terminal state."""
        s = session()
        s.state = AnalysisState.DONE

        s.cancel()

        assert s.state == AnalysisState.DONE
        assert s.is_cancelled

    def test_sessions_are_independent(self) -> None:
        """Each session owns its own abort signal."""
        first, second = session(), session()

        first.cancel()

        assert first.is_cancelled
        assert not second.is_cancelled
        assert first.id != second.id

    def test_to_dict(self) -> None:
        """Serializes id, state and input."""
        s = session()
        data = s.to_dict()

        assert data["state"] == "idle"
        assert data["url"] == "https://example.com"
        assert data["cancelled"] is False
