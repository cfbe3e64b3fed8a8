"""HTTP client for the learning sessions API."""

import logging
from typing import Any

import httpx

from learnquest.config import Settings, settings as default_settings
from learnquest.exceptions import ApiError
from learnquest.models import (
    AnswerResponse,
    CreatedSession,
    LearningSession,
    LoadedSession,
    SessionTarget,
    SubmissionResult,
)
from learnquest.models.payloads import (
    Resource,
    parse_completed_session,
    parse_created_session,
    parse_deck_list,
    parse_loaded_session,
    parse_submission_result,
)

from .base import SessionGateway

logger = logging.getLogger(__name__)


class LearningApiClient(SessionGateway):
    """``SessionGateway`` over ``httpx.AsyncClient``.

    Requests are made once; there are no retries at this layer; callers
    decide what a failure means.

    Usage:
        async with LearningApiClient() as api:
            created = await api.create_session(SessionTarget.for_deck(deck_id))
    """

    def __init__(
        self,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or default_settings
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.config.access_token:
            headers["Authorization"] = f"Bearer {self.config.access_token}"
        if self.config.child_profile_id:
            headers["X-Child-Profile-Id"] = self.config.child_profile_id

        self._client = httpx.AsyncClient(
            base_url=self.config.api_url,
            headers=headers,
            timeout=self.config.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LearningApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, url: str, json: dict | None = None) -> Any:
        """Send one request and return the decoded JSON body."""
        try:
            response = await self._client.request(method, url, json=json)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.warning(f"Timeout on {method} {url}")
            raise ApiError(f"Timeout on {method} {url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            detail = _error_detail(e.response)
            logger.warning(f"HTTP {status} for {method} {url}: {detail}")
            raise ApiError(f"HTTP {status} for {method} {url}", status, detail) from e
        except httpx.RequestError as e:
            logger.warning(f"Request error for {method} {url}: {e}")
            raise ApiError(f"Request error for {method} {url}: {e}") from e

        logger.debug(f"{method} {url} -> {response.status_code}")
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Non-JSON response for {method} {url}", response.status_code) from e

    async def create_session(self, target: SessionTarget) -> CreatedSession:
        raw = await self._request("POST", "/learning_sessions", json=target.to_payload())
        return parse_created_session(raw)

    async def get_session(self, session_id: str) -> LoadedSession:
        raw = await self._request("GET", f"/learning_sessions/{session_id}")
        return parse_loaded_session(raw)

    async def submit_answer(
        self,
        session_id: str,
        question_id: str,
        response: AnswerResponse,
    ) -> SubmissionResult:
        body = {"question_id": question_id, **response.to_payload()}
        raw = await self._request(
            "POST", f"/learning_sessions/{session_id}/submit_answer", json=body
        )
        return parse_submission_result(raw)

    async def complete_session(self, session_id: str) -> LearningSession:
        raw = await self._request("POST", f"/learning_sessions/{session_id}/complete")
        return parse_completed_session(raw)

    async def list_decks(self) -> list[Resource]:
        """List the decks visible to the current child profile."""
        raw = await self._request("GET", "/decks")
        return parse_deck_list(raw)

    async def first_quiz_deck_id(self) -> str | None:
        """Id of the first deck whose ``deck_type`` is ``quiz``, if any."""
        for deck in await self.list_decks():
            if deck.attributes.get("deck_type") == "quiz":
                return deck.id
        return None


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, dict):
        for key in ("detail", "error", "message"):
            if key in body:
                return str(body[key])
    return str(body)[:200]
