from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..domain import GoogleSession
from .context import ServiceContext

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AuthService:
    """Holds the Google session obtained by the front end's OAuth flow."""

    context: ServiceContext
    _session: Optional[GoogleSession] = field(default=None, init=False)

    def restore(self) -> Optional[GoogleSession]:
        """Reload the persisted session, if any, at startup."""

        self._session = self.context.sessions.load()
        if self._session is not None:
            logger.info("Restored session for %s", self._session.email)
        return self._session

    def sign_in(self, session: GoogleSession) -> GoogleSession:
        if not session.access_token:
            raise ValueError("An access token is required to sign in.")
        self._session = self.context.sessions.save(session)
        logger.info("Signed in as %s", session.email)
        return self._session

    def sign_out(self) -> None:
        self.context.sessions.clear()
        if self._session is not None:
            logger.info("Signed out %s", self._session.email)
        self._session = None

    def current_session(self) -> Optional[GoogleSession]:
        return self._session

    def access_token(self) -> Optional[str]:
        if self._session is None or self._session.is_expired():
            return None
        return self._session.access_token

    def is_authenticated(self) -> bool:
        return self.access_token() is not None
