"""Unit tests for cancellation support."""

import signal

from diffmend.core.cancel import CancellationToken


class TestCancellationToken:
    """Tests for CancellationToken."""

    def test_not_cancelled_initially(self):
        """Token is not cancelled when created."""
        token = CancellationToken()
        assert token.is_cancelled is False
        assert token.reason is None

    def test_cancel_records_reason(self):
        token = CancellationToken()
        token.cancel("user request")

        assert token.is_cancelled is True
        assert token.reason == "user request"

    def test_first_reason_is_kept(self):
        """Calling cancel() again does not overwrite the original reason."""
        token = CancellationToken()
        token.cancel()
        token.cancel("later")

        assert token.reason == "cancelled"


class TestCancelOnSigint:
    """Tests for the SIGINT context manager."""

    def test_sigint_cancels_token(self):
        token = CancellationToken()

        with token.cancel_on_sigint():
            signal.raise_signal(signal.SIGINT)

        assert token.is_cancelled is True
        assert token.reason == "interrupted"

    def test_previous_handler_restored(self):
        previous = signal.getsignal(signal.SIGINT)
        token = CancellationToken()

        with token.cancel_on_sigint():
            assert signal.getsignal(signal.SIGINT) is not previous

        assert signal.getsignal(signal.SIGINT) is previous
        assert token.is_cancelled is False
