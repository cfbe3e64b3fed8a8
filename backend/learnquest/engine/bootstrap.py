"""Session bootstrap: create a new session once, or load an existing one."""

import logging
from collections.abc import Callable
from enum import Enum

from learnquest.client.base import SessionGateway
from learnquest.config import Settings, settings as default_settings
from learnquest.exceptions import LearnQuestError, SessionCreationError
from learnquest.models import CreatedSession, LoadedSession, SessionTarget

logger = logging.getLogger(__name__)

Navigate = Callable[[str], None]


class CreationState(str, Enum):
    """One-shot creation latch. Leaves ``NOT_STARTED`` once and never returns."""

    NOT_STARTED = "not_started"
    CREATING = "creating"
    CREATED = "created"
    FAILED = "failed"


class SessionBootstrap:
    """Produces the starting point of a session page.

    ``create`` runs the creation call at most once per bootstrap instance,
    however many times initialization re-enters it; the latch moves to
    ``CREATING`` before the request goes out, so a second caller arriving
    while the first is awaiting the network sees it and backs off.
    """

    def __init__(
        self,
        gateway: SessionGateway,
        navigate: Navigate,
        config: Settings | None = None,
    ):
        self.gateway = gateway
        self.navigate = navigate
        self.config = config or default_settings
        self._state = CreationState.NOT_STARTED

    @property
    def state(self) -> CreationState:
        return self._state

    async def create(self, target: SessionTarget) -> CreatedSession | None:
        """Create a session for ``target`` and navigate to it.

        Returns None for duplicate calls. On failure the caller is sent to the
        home screen and :class:`SessionCreationError` is raised; there is no
        retry.
        """
        if self._state is not CreationState.NOT_STARTED:
            logger.info(f"Ignoring duplicate session creation (state: {self._state.value})")
            return None
        self._state = CreationState.CREATING

        try:
            created = await self.gateway.create_session(target)
        except LearnQuestError as e:
            self._state = CreationState.FAILED
            logger.error(f"Failed to create session for {target.to_payload()}: {e}")
            self.navigate(self.config.home_path)
            raise SessionCreationError(f"Could not create session: {e}") from e

        self._state = CreationState.CREATED
        logger.info(
            f"Created session {created.session.id} with {len(created.questions)} questions"
        )
        self.navigate(self.config.session_path(created.session.id))
        return created

    async def load(self, session_id: str) -> LoadedSession:
        """Load an existing session with its answer history.

        On failure the caller is sent home and the error propagates.
        """
        try:
            loaded = await self.gateway.get_session(session_id)
        except LearnQuestError as e:
            logger.error(f"Failed to load session {session_id}: {e}")
            self.navigate(self.config.home_path)
            raise

        logger.info(
            f"Loaded session {session_id}: {len(loaded.answered_question_ids)}/"
            f"{len(loaded.questions)} answered, status={loaded.session.status.value}"
        )
        return loaded
