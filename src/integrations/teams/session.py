"""
Interactive PowerShell sessions for operators signing in with MFA.

The session itself is opaque: something that connects, may ask for an MFA
code, and produces a stream of events. ``SessionManager`` owns the sessions,
one per operator and tenant, and closes those left idle.
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from datetime import datetime, timedelta

from src.db.database import utcnow
from src.integrations.teams.schemas import SessionEvent, SessionInfo, SessionState
from src.utils.logger import logger


class PowerShellSession(ABC):
    @property
    @abstractmethod
    def state(self) -> SessionState:
        pass

    @abstractmethod
    async def connect(self) -> None:
        """Start the sign-in; the state moves to awaiting_mfa or connected."""
        pass

    @abstractmethod
    async def send_mfa_code(self, code: str) -> None:
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        pass

    @abstractmethod
    def events(self) -> AsyncIterator[SessionEvent]:
        """Events as they happen; ends when the session disconnects."""
        pass


SessionFactory = Callable[[str, str], PowerShellSession]


class SessionNotFoundError(LookupError):
    def __init__(self, operator_id: str, tenant_id: str):
        super().__init__(f"No PowerShell session for tenant {tenant_id}")
        self.operator_id = operator_id
        self.tenant_id = tenant_id


class _ManagedSession:
    def __init__(self, session: PowerShellSession, now: datetime):
        self.session = session
        self.created_at = now
        self.last_activity = now


class SessionManager:
    """Tracks interactive sessions keyed by (operator, tenant)."""

    def __init__(
        self,
        factory: SessionFactory,
        idle_timeout: timedelta = timedelta(minutes=30),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.factory = factory
        self.idle_timeout = idle_timeout
        self.clock = clock
        self._sessions: dict[tuple[str, str], _ManagedSession] = {}

    def _info(self, key: tuple[str, str], managed: _ManagedSession) -> SessionInfo:
        return SessionInfo(
            operator_id=key[0],
            tenant_id=key[1],
            state=managed.session.state,
            created_at=managed.created_at,
            last_activity=managed.last_activity,
        )

    def _touch(self, operator_id: str, tenant_id: str) -> _ManagedSession:
        managed = self._sessions.get((operator_id, tenant_id))
        if managed is None:
            raise SessionNotFoundError(operator_id, tenant_id)
        managed.last_activity = self.clock()
        return managed

    async def open(self, operator_id: str, tenant_id: str) -> SessionInfo:
        """Start a new session, replacing any the operator has for the tenant."""
        await self.close_idle()
        key = (operator_id, tenant_id)
        if key in self._sessions:
            await self.close(operator_id, tenant_id)

        managed = _ManagedSession(self.factory(operator_id, tenant_id), self.clock())
        self._sessions[key] = managed
        logger.info(
            "Opening PowerShell session", operator_id=operator_id, tenant_id=tenant_id
        )
        await managed.session.connect()
        return self._info(key, managed)

    def get(self, operator_id: str, tenant_id: str) -> SessionInfo:
        managed = self._touch(operator_id, tenant_id)
        return self._info((operator_id, tenant_id), managed)

    async def send_mfa_code(
        self, operator_id: str, tenant_id: str, code: str
    ) -> SessionInfo:
        managed = self._touch(operator_id, tenant_id)
        await managed.session.send_mfa_code(code)
        return self._info((operator_id, tenant_id), managed)

    def events(self, operator_id: str, tenant_id: str) -> AsyncIterator[SessionEvent]:
        return self._touch(operator_id, tenant_id).session.events()

    async def close(self, operator_id: str, tenant_id: str) -> bool:
        managed = self._sessions.pop((operator_id, tenant_id), None)
        if managed is None:
            return False
        await managed.session.disconnect()
        logger.info(
            "Closed PowerShell session", operator_id=operator_id, tenant_id=tenant_id
        )
        return True

    async def close_idle(self) -> int:
        """Disconnect sessions idle longer than the timeout; returns how many."""
        cutoff = self.clock() - self.idle_timeout
        stale = [
            key
            for key, managed in self._sessions.items()
            if managed.last_activity < cutoff
            or managed.session.state == SessionState.DISCONNECTED
        ]
        for operator_id, tenant_id in stale:
            await self.close(operator_id, tenant_id)
        return len(stale)

    async def close_all(self) -> None:
        for operator_id, tenant_id in list(self._sessions):
            await self.close(operator_id, tenant_id)

    def __len__(self) -> int:
        return len(self._sessions)


_session_manager: SessionManager | None = None


def get_session_manager() -> SessionManager | None:
    """Global session manager; None until a session factory is installed."""
    return _session_manager


def set_session_manager(manager: SessionManager | None) -> None:
    global _session_manager
    _session_manager = manager
