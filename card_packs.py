from typing import Dict, List

# Order is display order; every pack but "play" includes the "?" pass card
CARD_PACKS: Dict[str, List[str]] = {
    "fib": ["0", "1", "2", "3", "5", "8", "13", "21", "34", "55", "89", "?"],
    "goat": ["0", "½", "1", "2", "3", "5", "8", "13", "20", "40", "100", "?", "☕"],
    "seq": ["0", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "?"],
    "play": ["A♠", "2", "3", "5", "8", "♔"],
    "tshirt": ["XL", "L", "M", "S", "XS", "?"],
}


def is_card_pack(pack_id: str) -> bool:
    return pack_id in CARD_PACKS


def get_card_pack(pack_id: str) -> List[str]:
    """Tokens for a pack, or an empty list when the id is unknown."""
    return list(CARD_PACKS.get(pack_id, []))
