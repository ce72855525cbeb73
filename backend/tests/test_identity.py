"""
Room codes, tokens, avatars and nickname filtering
"""

import re

from partyroom.core.config import settings
from partyroom.services.identity import (
    AVATAR_EMOJIS,
    ROOM_CODE_ALPHABET,
    filter_bad_words,
    generate_host_id,
    generate_player_id,
    generate_room_code,
    get_random_emoji,
    sanitize_nickname,
)


def test_room_code_alphabet_has_no_ambiguous_symbols():
    assert len(ROOM_CODE_ALPHABET) == 32
    assert len(set(ROOM_CODE_ALPHABET)) == 32
    for symbol in "IO01":
        assert symbol not in ROOM_CODE_ALPHABET


def test_room_codes_are_six_symbols_from_alphabet():
    for _ in range(500):
        code = generate_room_code()
        assert len(code) == 6
        assert all(c in ROOM_CODE_ALPHABET for c in code)


def test_tokens_are_prefixed_and_distinct():
    host = generate_host_id()
    player = generate_player_id()
    assert re.fullmatch(r"host_\d+_[0-9a-z]{9}", host)
    assert re.fullmatch(r"player_\d+_[0-9a-z]{9}", player)
    assert len({generate_player_id() for _ in range(200)}) == 200


def test_emoji_palette():
    assert len(AVATAR_EMOJIS) == 22
    assert get_random_emoji() in AVATAR_EMOJIS


def test_filter_bad_words_is_case_insensitive():
    filtered = filter_bad_words("PlaceHolder and placeholder", words=["placeholder"], mask="***")
    assert filtered == "*** and ***"
    assert "placeholder" not in filtered.lower()


def test_filter_bad_words_treats_words_literally():
    assert filter_bad_words("a.b axb", words=["a.b"], mask="#") == "# axb"


def test_filter_uses_configured_word_list():
    assert settings.BANNED_WORDS[0] in ["placeholder"]
    assert filter_bad_words("PLACEHOLDER") == settings.BAD_WORD_MASK


def test_sanitize_nickname_trims_and_truncates():
    assert sanitize_nickname("  Sam  ") == "Sam"
    assert len(sanitize_nickname("x" * 50)) == settings.NICKNAME_MAX_LENGTH
    assert sanitize_nickname("placeholderBob") == "***Bob"
