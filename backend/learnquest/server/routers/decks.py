"""Deck listing endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from learnquest.server.db import get_db
from learnquest.server.services.content import ContentService
from learnquest.server.services.serializers import deck_resource

router = APIRouter(prefix="/api/v1/decks", tags=["decks"])


@router.get("")
async def list_decks(db: AsyncSession = Depends(get_db)):
    """List all decks with their question counts."""
    service = ContentService(db)
    decks = await service.list_decks()
    return {"data": [deck_resource(deck, count) for deck, count in decks]}
