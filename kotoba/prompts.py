"""Instruction templates sent ahead of the user's prompt.

Everything here is plain string composition; no network I/O happens in this
module. The token budget is interpolated so the model sees the same limit the
provider call enforces.
"""
from __future__ import annotations

from typing import Dict, List, Literal, get_args

MAX_TOKENS = 512

ExplanationKind = Literal["vocabulary", "grammar"]
EXPLANATION_KINDS = get_args(ExplanationKind)

# CJK Unified Ideographs, Extension A, Compatibility Ideographs
KANJI_RANGES = (
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0xF900, 0xFAFF),
)


def contains_kanji(text: str) -> bool:
    for char in text:
        code = ord(char)
        for start, end in KANJI_RANGES:
            if start <= code <= end:
                return True
    return False


def ask_prompt(max_tokens: int = MAX_TOKENS) -> str:
    return f"""
# Japanese Language Expert
Generate 3-5 Japanese-English sentences pairs using the specific word/topic provided by the user.
Each sentence pair must follow the schema: {{jp: "Japanese sentence", en: "English sentence", jp_reading: "Japanese sentence reading in hiragana"}}
The user's input will be in the following format: [word]::[reading]::[meaning;meaning;...]
Respect maximum token limit: {max_tokens} tokens
**Requirements for Each Sentence Pair:**
1. Include the exact user-provided word/topic at least once
2. Have furigana annotations for ALL kanji characters in the format: kanji[furigana]
3. Be grammatically correct and natural-sounding
4. Be culturally appropriate
5. Be relevant to the user-provided word/topic
6. If there are multiple possible translations, provide the most common one
7. If there are multiple possible readings for a kanji, provide the most common one
"""


_VOCABULARY_HEAD = """
# Japanese Language Expert
As a Japanese language expert, provide a concise explanation of the Japanese word or phrase given by the user, including:
1. **Word Information:** Japanese writing (in UTF-8 encoding), reading/pronunciation with furigana, word type
2. **Meaning:** Primary and secondary translations, similar terms and differences
3. **Usage:** Common contexts, formality level, frequency of use
4. **Cultural Context:** Nuances, implications, relevant background
5. **Examples:** 1-2 example sentences with translations showing proper usage
"""

_KANJI_SECTIONS = """6. **Kanji Breakdown:** For each kanji in the word: meaning, on'yomi and kun'yomi readings, and how it contributes to the word's meaning
7. **Common Compounds:** 2-3 other common words that share these kanji, with readings and meanings
8. **Mnemonic:** A short memory aid linking the kanji shapes or meanings to the word
"""

_VOCABULARY_TAIL = """{index}. **Quick Tips:** Common mistakes, memory aids (if helpful)
{next_index}. **Respect maximum token limit:** {max_tokens} tokens
Format with clear headings, proper furigana for kanji, and concise explanations.
"""

GRAMMAR_PROMPT = """
# Japanese Grammar Expert
As a Japanese grammar expert, provide a concise explanation of the grammar pattern given by the user, including:
1. **Pattern:** The pattern in Japanese with furigana, and its structure (what it attaches to and in which form)
2. **Meaning:** What the pattern expresses, with the closest English equivalents
3. **Formality:** Register and typical situations (spoken, written, polite, casual)
4. **Conjugation:** How the preceding word changes, with a short table when useful
5. **Examples:** 2-3 example sentences with furigana and translations
6. **Similar Patterns:** Patterns that are easily confused with this one and how they differ
7. **Quick Tips:** Common mistakes learners make
8. **Respect maximum token limit:** {max_tokens} tokens
Format with clear headings, proper furigana for kanji, and concise explanations.
"""

SPEECH_INSTRUCTIONS = """
Speak in natural, standard Tokyo Japanese.
Use a calm, clear delivery at a slightly slower pace than conversation, suitable for a language learner.
Pronounce every mora distinctly and keep pitch accent natural.
Pause briefly at commas and fully at sentence ends.
If the text contains English, read it with neutral English pronunciation.
"""


def vocabulary_prompt(text: str, max_tokens: int = MAX_TOKENS) -> str:
    parts = [_VOCABULARY_HEAD]
    index = 6
    if contains_kanji(text):
        parts.append(_KANJI_SECTIONS)
        index = 9
    parts.append(_VOCABULARY_TAIL.format(index=index, next_index=index + 1, max_tokens=max_tokens))
    return "".join(parts)


def grammar_prompt(max_tokens: int = MAX_TOKENS) -> str:
    return GRAMMAR_PROMPT.format(max_tokens=max_tokens)


def explanation_prompt(kind: ExplanationKind, text: str, max_tokens: int = MAX_TOKENS) -> str:
    if kind == "vocabulary":
        return vocabulary_prompt(text, max_tokens)
    if kind == "grammar":
        return grammar_prompt(max_tokens)
    raise ValueError(f"Unknown explanation type: {kind}")


def speech_instructions(model: str) -> str | None:
    """Delivery instructions, or None for models that do not accept them."""
    if model.startswith("gpt-4o"):
        return SPEECH_INSTRUCTIONS.strip()
    return None


def build_messages(system: str, prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": prompt},
    ]
