from fastapi import APIRouter
from typing import Dict, List

from card_packs import CARD_PACKS

card_packs_router = APIRouter(prefix="/api/card-packs", tags=["card-packs"])


@card_packs_router.get("", response_model=Dict[str, List[str]])
def list_card_packs():
    """Every known pack id with its ordered vote tokens."""
    return {pack_id: list(tokens) for pack_id, tokens in CARD_PACKS.items()}
