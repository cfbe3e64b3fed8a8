#!/usr/bin/env python3
"""Play a learning session in the terminal.

Usage:
    python scripts/play_session.py                         # First quiz deck
    python scripts/play_session.py --deck DECK_ID
    python scripts/play_session.py --skill-node NODE_ID
    python scripts/play_session.py --resume SESSION_ID
    python scripts/play_session.py --auto                  # Answer randomly
"""

import argparse
import asyncio
import logging
import random
import sys

from learnquest.client import LearningApiClient
from learnquest.config import settings
from learnquest.engine import LearningSessionEngine, NextStep, QuestionPhase, SubmitOutcome
from learnquest.exceptions import LearnQuestError
from learnquest.models import Question, SessionStatus, SessionTarget


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Play a LearnQuest learning session against the API",
    )
    target = parser.add_mutually_exclusive_group()
    target.add_argument("--deck", help="Deck id to start a session with")
    target.add_argument("--skill-node", help="Skill node id to start a session with")
    target.add_argument("--resume", metavar="SESSION_ID", help="Resume an existing session")

    parser.add_argument("--api-url", default=settings.api_url, help="Learning sessions API base URL")
    parser.add_argument("--auto", action="store_true", help="Answer (or skip) randomly")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser.parse_args()


def show_question(engine: LearningSessionEngine, question: Question) -> None:
    session = engine.session
    print()
    print(f"Question {engine.current_index + 1} of {len(engine.questions)}"
          f"   lives: {'♥' * session.lives_remaining}   XP: {engine.xp_earned}")
    print(f"  {question.question_text}")
    for i, option in enumerate(question.options):
        print(f"    {i + 1}. {option}")


def read_answer(engine: LearningSessionEngine, question: Question) -> str:
    """Prompt until the child submits, skips or asks for a hint."""
    while True:
        raw = input("Answer (number/text, 'h' for hint, 's' to skip): ").strip()
        if raw.lower() == "h":
            if engine.toggle_hint():
                print(f"  Hint: {engine.hint}")
            else:
                print("  No hint for this one.")
            continue
        if raw.lower() == "s":
            return "skip"
        if question.question_type.is_choice:
            if raw.isdigit() and engine.select_option(int(raw) - 1):
                return "submit"
            print("  Pick one of the option numbers.")
        elif engine.enter_text(raw) and raw:
            return "submit"


def auto_answer(engine: LearningSessionEngine, question: Question) -> str:
    if random.random() < 0.2:
        return "skip"
    if question.question_type.is_choice:
        engine.select_option(random.randrange(max(1, len(question.options))))
    else:
        engine.enter_text(random.choice(["puppy", "3", "maybe"]))
    return "submit"


def show_feedback(engine: LearningSessionEngine) -> None:
    feedback = engine.feedback
    if feedback is None:
        return
    print("  Correct! 🎉" if feedback.is_correct else "  Not quite! 😅")
    if feedback.explanation:
        print(f"  {feedback.explanation}")


def show_results(engine: LearningSessionEngine) -> None:
    session = engine.session
    title = "Quest Complete!" if engine.outcome is SessionStatus.COMPLETED else "Game Over"
    print()
    print("=" * 40)
    print(title)
    print(f"  Stars: {'★' * session.stars_earned}{'☆' * (settings.max_stars - session.stars_earned)}")
    print(f"  +{engine.xp_earned} XP earned")
    print(f"  {session.correct_count}/{session.total_questions} correct")
    print("=" * 40)


async def play(args: argparse.Namespace) -> int:
    config = settings.model_copy(update={"api_url": args.api_url})

    async with LearningApiClient(config) as api:
        engine = LearningSessionEngine(api, config=config)
        engine.on_xp_earned(lambda signal: print(f"  +{signal.xp_earned} XP"))

        try:
            if args.resume:
                await engine.resume(args.resume)
            else:
                if args.skill_node:
                    target = SessionTarget.for_skill_node(args.skill_node)
                else:
                    deck_id = args.deck or await api.first_quiz_deck_id()
                    if deck_id is None:
                        print("No quiz deck found.")
                        return 1
                    target = SessionTarget.for_deck(deck_id)
                await engine.start(target)
        except LearnQuestError as e:
            print(f"Could not open session: {e}")
            return 1

        print(f"Session {engine.session.id}")
        while not engine.is_finished:
            question = engine.current_question
            if question is not None and engine.phase(question.id) is QuestionPhase.UNANSWERED:
                show_question(engine, question)
                action = auto_answer(engine, question) if args.auto else read_answer(engine, question)
                try:
                    outcome = await (engine.skip() if action == "skip" else engine.submit())
                except LearnQuestError as e:
                    print(f"  Could not submit: {e}. Try again.")
                    continue
                if outcome is not SubmitOutcome.APPLIED:
                    print(f"  ({outcome.value})")
                    continue
                show_feedback(engine)

            try:
                step = await engine.next()
            except LearnQuestError as e:
                print(f"Could not finish the session: {e}")
                return 1
            if step is NextStep.FINALIZE:
                break

        show_results(engine)
    return 0


def main() -> int:
    args = parse_args()
    setup_logging(args.verbose)
    return asyncio.run(play(args))


if __name__ == "__main__":
    sys.exit(main())
