from __future__ import annotations

import pytest

from kotoba.prompts import (
    EXPLANATION_KINDS,
    ask_prompt,
    build_messages,
    contains_kanji,
    explanation_prompt,
    grammar_prompt,
    speech_instructions,
    vocabulary_prompt,
)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("猫", True),
        ("実現", True),
        ("食べる", True),
        ("\u3400", True),  # extension A
        ("\uf900", True),  # compatibility ideograph
        ("cat", False),
        ("ねこ", False),
        ("カタカナ", False),
        ("", False),
    ],
)
def test_contains_kanji(text, expected):
    assert contains_kanji(text) is expected


def test_vocabulary_prompt_adds_kanji_sections_for_kanji():
    rendered = vocabulary_prompt("猫")
    assert "Kanji Breakdown" in rendered
    assert "Common Compounds" in rendered
    assert "Mnemonic" in rendered
    assert "9. **Quick Tips:**" in rendered


def test_vocabulary_prompt_omits_kanji_sections_without_kanji():
    rendered = vocabulary_prompt("cat")
    assert "Kanji Breakdown" not in rendered
    assert "Common Compounds" not in rendered
    assert "Mnemonic" not in rendered
    assert "6. **Quick Tips:**" in rendered


def test_token_budget_is_rendered():
    assert "256 tokens" in ask_prompt(256)
    assert "256 tokens" in vocabulary_prompt("猫", 256)
    assert "256 tokens" in grammar_prompt(256)


def test_explanation_prompt_selects_template():
    assert explanation_prompt("grammar", "ても") == grammar_prompt()
    assert explanation_prompt("vocabulary", "猫") == vocabulary_prompt("猫")
    with pytest.raises(ValueError):
        explanation_prompt("kanji", "猫")


def test_explanation_kinds_match_query_values():
    assert EXPLANATION_KINDS == ("vocabulary", "grammar")


def test_speech_instructions_only_for_instructable_models():
    assert speech_instructions("gpt-4o-mini-tts")
    assert speech_instructions("tts-1") is None
    assert speech_instructions("tts-1-hd") is None


def test_build_messages_keeps_prompt_separate():
    messages = build_messages("system text", "猫")
    assert messages == [
        {"role": "system", "content": "system text"},
        {"role": "user", "content": "猫"},
    ]
