import asyncio

import pytest

from learnquest.engine import EngineNotReadyError, LearningSessionEngine, NextStep, SubmitOutcome
from learnquest.exceptions import ApiError
from learnquest.models import QuestionType, SessionStatus, SessionTarget

from fakes import FakeGateway, make_question, make_questions, network_down

TARGET = SessionTarget.for_deck("deck-1")


async def _answer(engine: LearningSessionEngine, index: int) -> SubmitOutcome:
    engine.select_option(index)
    return await engine.submit()


def test_correct_count_over_a_full_session(navigator):
    gateway = FakeGateway(make_questions(4))
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        for choice in (1, 0, 1, 1):  # correct, wrong, correct, correct
            assert await _answer(engine, choice) is SubmitOutcome.APPLIED
            await engine.next()

    asyncio.run(run())

    assert engine.is_finished
    assert engine.outcome is SessionStatus.COMPLETED
    assert engine.session.correct_count == 3
    assert engine.xp_earned == 30
    assert navigator.paths == ["/child/session/s-1"]


def test_finalize_when_lives_run_out_before_last_question(navigator):
    gateway = FakeGateway(make_questions(3), lives=2)
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        await _answer(engine, 0)
        assert await engine.next() is NextStep.ADVANCE
        await _answer(engine, 0)
        assert engine.session.lives_remaining == 0
        return await engine.next()

    step = asyncio.run(run())

    assert step is NextStep.FINALIZE
    assert engine.current_index == 1
    assert engine.outcome is SessionStatus.FAILED
    assert len(gateway.calls_named("submit")) == 2
    assert len(gateway.calls_named("complete")) == 1


def test_skip_costs_exactly_one_life(navigator):
    question = make_question("q1", options=("A", "B", "C", "D"), correct_answer_index=1)
    gateway = FakeGateway([question, make_question("q2")])
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        before = engine.session.lives_remaining
        outcome = await engine.skip()
        return before, outcome

    before, outcome = asyncio.run(run())

    assert outcome is SubmitOutcome.APPLIED
    assert engine.feedback.is_correct is False
    assert engine.session.lives_remaining == before - 1
    _, _, _, response = gateway.calls_named("submit")[0]
    assert response.selected_option_index != 1


def test_skip_fill_blank(navigator):
    question = make_question("q1", question_type=QuestionType.FILL_BLANK)
    gateway = FakeGateway([question, make_question("q2")], text_answers={"q1": "puppy"})
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        return await engine.skip()

    assert asyncio.run(run()) is SubmitOutcome.APPLIED
    assert engine.session.lives_remaining == 2


def test_fill_blank_answer(navigator):
    question = make_question("q1", question_type=QuestionType.FILL_BLANK)
    gateway = FakeGateway([question], text_answers={"q1": "puppy"})
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        assert engine.select_option(0) is False
        assert engine.enter_text("puppy") is True
        return await engine.submit()

    assert asyncio.run(run()) is SubmitOutcome.APPLIED
    assert engine.session.correct_count == 1


def test_submit_without_selection_is_rejected(navigator, gateway):
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        assert engine.can_submit is False
        return await engine.submit()

    assert asyncio.run(run()) is SubmitOutcome.REJECTED_EMPTY
    assert gateway.calls_named("submit") == []


def test_status_stays_completed(navigator):
    gateway = FakeGateway(make_questions(1))
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        await _answer(engine, 1)
        await engine.next()
        assert engine.session.status is SessionStatus.COMPLETED
        # Nothing afterwards moves it back
        assert await engine.submit() is SubmitOutcome.REJECTED_SESSION_OVER
        assert await engine.skip() is SubmitOutcome.REJECTED_SESSION_OVER
        assert await engine.next() is None
        assert await engine.finalize() == engine.session

    asyncio.run(run())

    assert engine.session.status is SessionStatus.COMPLETED
    assert len(gateway.calls_named("complete")) == 1


def test_next_waits_for_an_answer(navigator, gateway):
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        return await engine.next()

    assert asyncio.run(run()) is None
    assert engine.current_index == 0


def test_cannot_change_answer_after_feedback(navigator, gateway):
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        await _answer(engine, 1)
        return engine.select_option(2)

    assert asyncio.run(run()) is False
    assert engine.state.selected_response.selected_option_index == 1


def test_hint_toggle_is_local(navigator):
    gateway = FakeGateway([make_question("q1", explanation="Cows say moo."), make_question("q2")])
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.start(TARGET)
        assert engine.hint is None
        assert engine.toggle_hint() is True
        assert engine.hint == "Cows say moo."
        assert engine.toggle_hint() is False
        assert engine.toggle_hint() is True
        await _answer(engine, 1)
        await engine.next()

    asyncio.run(run())

    assert engine.hint is None  # cleared on advance; q2 has no explanation
    assert engine.toggle_hint() is False
    assert engine.session.correct_count == 1
    assert gateway.calls_named("submit")[0][3].selected_option_index == 1


def test_resume_starts_at_first_unanswered(navigator):
    gateway = FakeGateway(make_questions(5))
    gateway.answered = ["q1", "q3"]
    engine = LearningSessionEngine(gateway, navigator)

    asyncio.run(engine.resume("s-1"))

    assert engine.current_index == 1
    assert engine.current_question.id == "q2"
    assert not engine.is_finished
    assert gateway.calls_named("create") == []


def test_resume_skips_over_questions_answered_out_of_order(navigator):
    gateway = FakeGateway(make_questions(3))
    gateway.answered = ["q2"]
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.resume("s-1")
        await _answer(engine, 1)
        assert await engine.next() is NextStep.ADVANCE
        # q2 already has an answer on the server
        assert await _answer(engine, 1) is SubmitOutcome.REJECTED_ALREADY_ANSWERED
        assert await engine.next() is NextStep.ADVANCE
        return engine.current_question.id

    assert asyncio.run(run()) == "q3"


def test_resume_of_fully_answered_session_finalizes_on_next(navigator):
    gateway = FakeGateway(make_questions(2))
    gateway.answered = ["q1", "q2"]
    gateway.correct = 2
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        await engine.resume("s-1")
        assert engine.current_question is None
        assert not engine.is_finished
        return await engine.next()

    assert asyncio.run(run()) is NextStep.FINALIZE
    assert engine.outcome is SessionStatus.COMPLETED


def test_resume_of_terminal_session_is_finished(navigator):
    gateway = FakeGateway(make_questions(3), lives=0)
    gateway.status = SessionStatus.FAILED
    gateway.answered = ["q1"]
    engine = LearningSessionEngine(gateway, navigator)

    asyncio.run(engine.resume("s-1"))

    assert engine.is_finished
    assert engine.outcome is SessionStatus.FAILED
    assert asyncio.run(engine.next()) is None
    assert gateway.calls_named("complete") == []


def test_late_response_does_not_touch_newer_session(navigator):
    async def run():
        old_gateway = FakeGateway(make_questions(3), session_id="old")
        old_gateway.gate = asyncio.Event()
        engine = LearningSessionEngine(old_gateway, navigator)
        await engine.start(TARGET)

        engine.select_option(1)
        pending = asyncio.create_task(engine.submit())
        await asyncio.sleep(0)

        # Navigate away to another session while the submit is in flight
        new_gateway = FakeGateway(make_questions(3), session_id="new")
        engine.gateway = new_gateway
        engine.bootstrap.gateway = new_gateway
        await engine.resume("new")

        old_gateway.gate.set()
        return engine, await pending

    engine, outcome = asyncio.run(run())

    assert outcome is SubmitOutcome.DISCARDED
    assert engine.session.id == "new"
    assert engine.session.correct_count == 0
    assert engine.feedback is None
    assert engine.xp_earned == 0


def test_xp_signal_reaches_listeners(navigator, gateway):
    engine = LearningSessionEngine(gateway, navigator)
    earned = []
    engine.on_xp_earned(lambda signal: earned.append(signal.xp_earned))

    async def run():
        await engine.start(TARGET)
        await _answer(engine, 1)
        await engine.next()
        await _answer(engine, 0)

    asyncio.run(run())

    assert earned == [10]


def test_engine_requires_a_session(gateway):
    engine = LearningSessionEngine(gateway)
    with pytest.raises(EngineNotReadyError):
        engine.session
    assert engine.is_finished is False


def test_duplicate_start_creates_one_session(navigator, gateway):
    engine = LearningSessionEngine(gateway, navigator)

    async def run():
        return await asyncio.gather(engine.start(TARGET), engine.start(TARGET))

    assert sorted(asyncio.run(run())) == [False, True]
    assert len(gateway.calls_named("create")) == 1
    assert navigator.paths == ["/child/session/s-1"]


def test_finalize_waits_for_the_answer_being_submitted(navigator):
    async def run():
        gateway = FakeGateway(make_questions(1))
        gateway.gate = asyncio.Event()
        engine = LearningSessionEngine(gateway, navigator)
        await engine.start(TARGET)

        engine.select_option(1)
        pending = asyncio.create_task(engine.submit())
        await asyncio.sleep(0)
        early = await engine.finalize()

        gateway.gate.set()
        outcome = await pending
        final = await engine.finalize()
        return engine, gateway, early, outcome, final

    engine, gateway, early, outcome, final = asyncio.run(run())

    assert early is None
    assert outcome is SubmitOutcome.APPLIED
    assert len(gateway.calls_named("complete")) == 1
    assert final.correct_count == 1
    assert engine.session == final
    assert engine.is_finished


def test_failed_resume_drops_the_previous_session(navigator, gateway):
    engine = LearningSessionEngine(gateway, navigator)
    asyncio.run(engine.start(TARGET))
    gateway.fail_get = network_down()

    with pytest.raises(ApiError):
        asyncio.run(engine.resume("s-2"))

    assert navigator.paths[-1] == "/child/home"
    with pytest.raises(EngineNotReadyError):
        engine.session
    assert engine.is_finished is False
