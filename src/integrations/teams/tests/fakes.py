"""Test doubles for interactive sessions."""

from collections.abc import AsyncIterator

from src.integrations.teams.schemas import SessionEvent, SessionState
from src.integrations.teams.session import PowerShellSession


class FakeSession(PowerShellSession):
    def __init__(self, requires_mfa: bool = True):
        self.requires_mfa = requires_mfa
        self._state = SessionState.CONNECTING
        self.codes: list[str] = []
        self.disconnected = False

    @property
    def state(self) -> SessionState:
        return self._state

    async def connect(self) -> None:
        self._state = (
            SessionState.AWAITING_MFA if self.requires_mfa else SessionState.CONNECTED
        )

    async def send_mfa_code(self, code: str) -> None:
        self.codes.append(code)
        self._state = SessionState.CONNECTED

    async def disconnect(self) -> None:
        self.disconnected = True
        self._state = SessionState.DISCONNECTED

    async def events(self) -> AsyncIterator[SessionEvent]:
        yield SessionEvent(message="Enter the code sent to your device")
        yield SessionEvent(output="Connected")
