import re
from typing import Iterable, List, Optional

ROOM_ID_PATTERN = re.compile(r"^room-[0-9a-f-]{36}-[0-9a-f-]{36}$")

def normalize_interests(interests: Optional[Iterable[str]]) -> List[str]:
    """
    Drops empty tags and duplicates, keeping first-seen order.
    Tags are compared by exact string equality, so no case folding or trimming.
    """
    if not interests:
        return []
    seen = []
    for tag in interests:
        if tag and tag not in seen:
            seen.append(tag)
    return seen

def parse_interest_list(text: str) -> List[str]:
    """Splits a comma separated line typed at the prompt ("music, films")."""
    if not text:
        return []
    return normalize_interests(part.strip() for part in text.split(","))

def validate_room_id(room_id: str) -> bool:
    if not room_id:
        return False
    return bool(ROOM_ID_PATTERN.match(room_id))
