"""Deck, question and skill-node content for the sandbox backend."""

import json
import logging
from pathlib import Path

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from learnquest.models import QuestionType
from learnquest.server.db.models import DeckDB, QuestionDB, SkillNodeDB, generate_uuid

logger = logging.getLogger(__name__)

SAMPLE_CONTENT = Path(__file__).parent.parent / "data" / "sample_content.json"


class ContentService:
    """Service for reading and loading playable content."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_decks(self) -> list[tuple[DeckDB, int]]:
        """All decks with their question counts."""
        result = await self.db.execute(
            select(DeckDB, func.count(QuestionDB.id))
            .outerjoin(QuestionDB, QuestionDB.deck_id == DeckDB.id)
            .group_by(DeckDB.id)
            .order_by(DeckDB.created_at, DeckDB.name)
        )
        return [(deck, count) for deck, count in result.all()]

    async def deck_count(self) -> int:
        return await self.db.scalar(select(func.count()).select_from(DeckDB)) or 0

    async def load_from_json(self, filepath: Path = SAMPLE_CONTENT) -> int:
        """Load decks (with questions) and skill nodes from a JSON file.

        Returns the number of questions imported.
        """
        with open(filepath) as f:
            data = json.load(f)

        count = 0
        deck_ids: dict[str, str] = {}
        for deck_data in data.get("decks", []):
            deck = DeckDB(
                id=deck_data.get("id") or generate_uuid(),
                name=deck_data["name"],
                deck_type=deck_data.get("deck_type", "quiz"),
                difficulty=deck_data.get("difficulty", "easy"),
            )
            self.db.add(deck)
            await self.db.flush()
            deck_ids[deck.name] = deck.id

            for position, q in enumerate(deck_data.get("questions", [])):
                question_type = QuestionType(q.get("question_type", "mcq"))
                question = QuestionDB(
                    id=q.get("id") or generate_uuid(),
                    deck_id=deck.id,
                    position=q.get("position", position),
                    question_type=question_type.value,
                    question_text=q["question_text"],
                    correct_answer_index=q.get("correct_answer_index"),
                    correct_answer=q.get("correct_answer"),
                    explanation=q.get("explanation"),
                    xp_value=q.get("xp_value", 10),
                )
                question.set_options(q.get("options", []))
                self.db.add(question)
                count += 1

        for node_data in data.get("skill_nodes", []):
            deck_name = node_data.get("deck")
            node = SkillNodeDB(
                id=node_data.get("id") or generate_uuid(),
                title=node_data["title"],
                deck_id=deck_ids.get(deck_name) if deck_name else None,
                node_type=node_data.get("node_type", "lesson"),
                xp_reward=node_data.get("xp_reward", 0),
            )
            self.db.add(node)

        await self.db.flush()
        logger.info(f"Loaded {len(deck_ids)} decks and {count} questions from {filepath.name}")
        return count
