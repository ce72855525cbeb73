"""
Room codes, capability tokens, avatars and nickname filtering
"""

import random
import re
import string
import time
from typing import Iterable, Optional
from partyroom.core.config import settings

# No I, O, 0 or 1: they are easy to misread on a TV screen
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6

AVATAR_EMOJIS = [
    "😀", "😎", "🤩", "😊", "🥳", "🤓", "😇", "🦄", "🦊", "🐻", "🐼",
    "🐨", "🦁", "🐯", "🦋", "🌟", "⭐", "✨", "🎨", "🎭", "🎪", "🎯",
]

_TOKEN_ALPHABET = string.digits + string.ascii_lowercase


def generate_room_code() -> str:
    """Six symbols from the unambiguous alphabet; uniqueness is not checked here"""
    return "".join(random.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))


def _generate_token(prefix: str) -> str:
    millis = int(time.time() * 1000)
    suffix = "".join(random.choice(_TOKEN_ALPHABET) for _ in range(9))
    return f"{prefix}_{millis}_{suffix}"


def generate_host_id() -> str:
    return _generate_token("host")


def generate_player_id() -> str:
    return _generate_token("player")


def get_random_emoji() -> str:
    return random.choice(AVATAR_EMOJIS)


def filter_bad_words(text: str, words: Optional[Iterable[str]] = None,
                     mask: Optional[str] = None) -> str:
    """Mask every banned word, case-insensitively, anywhere in the text"""
    words = settings.BANNED_WORDS if words is None else words
    mask = settings.BAD_WORD_MASK if mask is None else mask
    filtered = text
    for word in words:
        if not word:
            continue
        filtered = re.sub(re.escape(word), mask, filtered, flags=re.IGNORECASE)
    return filtered


def sanitize_nickname(nickname: str) -> str:
    """Trim, cap the length and filter a nickname before it is stored"""
    trimmed = nickname.strip()[:settings.NICKNAME_MAX_LENGTH]
    return filter_bad_words(trimmed)[:settings.NICKNAME_MAX_LENGTH].strip()
