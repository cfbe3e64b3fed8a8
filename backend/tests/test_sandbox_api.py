"""End-to-end: the engine against the sandbox FastAPI backend."""

import asyncio

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from learnquest.client import LearningApiClient
from learnquest.config import Settings
from learnquest.engine import LearningSessionEngine, NextStep, SubmitOutcome
from learnquest.exceptions import ApiError, SessionCreationError
from learnquest.models import AnswerResponse, QuestionType, SessionStatus, SessionTarget
from learnquest.server.db import SkillNodeDB, get_db, init_db
from learnquest.server.main import create_app
from learnquest.server.services.content import ContentService

CONFIG = Settings(api_url="http://sandbox.test/api/v1")


class Sandbox:
    """A seeded in-memory backend and an API client talking to it."""

    async def __aenter__(self):
        self.engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )
        await init_db(self.engine)
        async with self.session_factory() as db:
            await ContentService(db).load_from_json()
            await db.commit()

        async def override_get_db():
            async with self.session_factory() as db:
                try:
                    yield db
                    await db.commit()
                except Exception:
                    await db.rollback()
                    raise

        app = create_app()
        app.dependency_overrides[get_db] = override_get_db
        self.api = LearningApiClient(CONFIG, transport=httpx.ASGITransport(app=app))
        return self

    async def __aexit__(self, *exc_info):
        await self.api.aclose()
        await self.engine.dispose()

    async def skill_node_id(self, title: str) -> str:
        async with self.session_factory() as db:
            result = await db.execute(select(SkillNodeDB).where(SkillNodeDB.title == title))
            return result.scalar_one().id


async def _answer_correctly(engine: LearningSessionEngine) -> SubmitOutcome:
    question = engine.current_question
    if question.question_type is QuestionType.FILL_BLANK:
        engine.enter_text("  Puppy ")
    else:
        engine.select_option(question.correct_answer_index)
    return await engine.submit()


async def _answer_wrongly(engine: LearningSessionEngine) -> SubmitOutcome:
    return await engine.skip()


def test_full_session_against_sandbox():
    paths = []

    async def run():
        async with Sandbox() as sandbox:
            deck_id = await sandbox.api.first_quiz_deck_id()
            engine = LearningSessionEngine(sandbox.api, paths.append, CONFIG)
            assert await engine.start(SessionTarget.for_deck(deck_id))
            assert len(engine.questions) == 4

            for play in (_answer_correctly, _answer_wrongly, _answer_correctly, _answer_correctly):
                assert await play(engine) is SubmitOutcome.APPLIED
                await engine.next()
            return engine

    engine = asyncio.run(run())

    session = engine.session
    assert engine.is_finished
    assert session.status is SessionStatus.COMPLETED
    assert session.correct_count == 3
    assert session.lives_remaining == 2
    assert session.stars_earned == 2
    assert session.total_xp_earned == 35
    assert engine.xp_earned == 35
    assert paths == [f"/child/session/{session.id}"]


def test_running_out_of_lives_fails_the_session():
    async def run():
        async with Sandbox() as sandbox:
            deck_id = await sandbox.api.first_quiz_deck_id()
            engine = LearningSessionEngine(sandbox.api, config=CONFIG)
            await engine.start(SessionTarget.for_deck(deck_id))

            steps = []
            for _ in range(3):
                await _answer_wrongly(engine)
                steps.append(await engine.next())
            return engine, steps

    engine, steps = asyncio.run(run())

    assert steps == [NextStep.ADVANCE, NextStep.ADVANCE, NextStep.FINALIZE]
    assert engine.outcome is SessionStatus.FAILED
    assert engine.session.stars_earned == 0
    assert engine.session.lives_remaining == 0


def test_resume_picks_up_where_the_child_left_off():
    async def run():
        async with Sandbox() as sandbox:
            node_id = await sandbox.skill_node_id("Meet the Animals")
            first = LearningSessionEngine(sandbox.api, config=CONFIG)
            await first.start(SessionTarget.for_skill_node(node_id))
            await _answer_correctly(first)
            await first.next()
            await _answer_wrongly(first)
            session_id = first.session.id
            first.teardown()

            second = LearningSessionEngine(sandbox.api, config=CONFIG)
            await second.resume(session_id)
            return second

    engine = asyncio.run(run())

    assert engine.current_index == 2
    assert engine.session.lives_remaining == 2
    assert engine.session.correct_count == 1
    assert not engine.is_finished


def test_skill_node_without_deck_sends_child_home():
    paths = []

    async def run():
        async with Sandbox() as sandbox:
            node_id = await sandbox.skill_node_id("Boss: Animal Kingdom")
            engine = LearningSessionEngine(sandbox.api, paths.append, CONFIG)
            await engine.start(SessionTarget.for_skill_node(node_id))

    with pytest.raises(SessionCreationError) as excinfo:
        asyncio.run(run())

    assert paths == ["/child/home"]
    assert isinstance(excinfo.value.__cause__, ApiError)
    assert excinfo.value.__cause__.status_code == 422


def test_server_rejects_duplicate_answers():
    async def run():
        async with Sandbox() as sandbox:
            deck_id = await sandbox.api.first_quiz_deck_id()
            created = await sandbox.api.create_session(SessionTarget.for_deck(deck_id))
            question = created.questions[0]
            await sandbox.api.submit_answer(created.session.id, question.id, AnswerResponse.choice(0))
            await sandbox.api.submit_answer(created.session.id, question.id, AnswerResponse.choice(0))

    with pytest.raises(ApiError) as excinfo:
        asyncio.run(run())

    assert excinfo.value.status_code == 422


def test_completing_twice_returns_the_same_result():
    async def run():
        async with Sandbox() as sandbox:
            deck_id = await sandbox.api.first_quiz_deck_id()
            created = await sandbox.api.create_session(SessionTarget.for_deck(deck_id))
            first = await sandbox.api.complete_session(created.session.id)
            second = await sandbox.api.complete_session(created.session.id)
            return first, second

    first, second = asyncio.run(run())

    assert (first.id, first.status, first.stars_earned) == (second.id, second.status, second.stars_earned)
    assert first.status is SessionStatus.COMPLETED
    assert first.stars_earned == 1
