"""
Text signals shared by validators and remediations.

Script detection is done with explicit code-point ranges so the result does
not depend on regex engine Unicode tables:
  Arabic block: U+0600..U+06FF
  Arabic letters (for word morphology): U+0621..U+064A
  Latin: ASCII A-Z / a-z
"""

import re

ARABIC_BLOCK = (0x0600, 0x06FF)
ARABIC_LETTERS = (0x0621, 0x064A)

DEFINITE_ARTICLE = "ال"
FEMININE_ENDING = "ة"
PLURAL_ENDINGS = ("ين", "ات")

NUMBERED_ITEM = re.compile(r"\d+\.")
_TOKEN_SPLIT = re.compile(r"[\s\.,;:!?،؛؟()\[\]{}\"'«»]+")


def is_arabic(ch: str) -> bool:
    return ARABIC_BLOCK[0] <= ord(ch) <= ARABIC_BLOCK[1]


def is_arabic_letter(ch: str) -> bool:
    return ARABIC_LETTERS[0] <= ord(ch) <= ARABIC_LETTERS[1]


def is_latin(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z")


def has_arabic(text: str) -> bool:
    return any(is_arabic(ch) for ch in text)


def has_latin(text: str) -> bool:
    return any(is_latin(ch) for ch in text)


def arabic_ratio(text: str) -> float:
    """Fraction of characters in the Arabic block (0.0 for empty text)."""
    if not text:
        return 0.0
    return sum(1 for ch in text if is_arabic(ch)) / len(text)


def tokenize(text: str) -> list[str]:
    return [t for t in _TOKEN_SPLIT.split(text) if t]


def count_morphology_matches(text: str) -> int:
    """Count Arabic words showing the definite article, feminine ending or plural endings."""
    count = 0
    for word in tokenize(text):
        if not all(is_arabic(ch) for ch in word):
            continue
        if (
            word.startswith(DEFINITE_ARTICLE)
            and len(word) > 2
            and is_arabic_letter(word[2])
        ):
            count += 1
        if len(word) > 1 and word.endswith(FEMININE_ENDING) and is_arabic_letter(word[-2]):
            count += 1
        for ending in PLURAL_ENDINGS:
            if len(word) > len(ending) and word.endswith(ending):
                count += 1
    return count


def contains_code(text: str, markers: tuple[str, ...]) -> bool:
    return any(marker in text for marker in markers)


def has_indentation(text: str) -> bool:
    return any(line.startswith("  ") or line.startswith("\t") for line in text.split("\n"))


_IDENTIFIER = re.compile(
    r"\b[a-z][a-z0-9]*(?:_[a-z0-9]+)+\b"  # snake_case
    r"|\b[a-z][a-z0-9]*(?:[A-Z][a-z0-9]*)+\b"  # camelCase
)


def has_conventional_identifier(text: str) -> bool:
    return _IDENTIFIER.search(text) is not None


def mentions_language(text: str, language: str) -> bool:
    """Whole-word, case-insensitive match that treats `+` and `#` as word characters."""
    pattern = r"(?<![\w+#])" + re.escape(language.lower()) + r"(?![\w+#])"
    return re.search(pattern, text.lower()) is not None


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()
