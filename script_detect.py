"""script_detect.py — Writing-system detection and collation for author names.

Supports Russian (Cyrillic), Kazakh (extended Cyrillic) and English (Latin).
Used only to order articles; never to reject input.
"""

import re
import unicodedata

# Kazakh-specific Cyrillic letters, absent from Russian. Kazakh text is a
# superset of Russian Cyrillic, so this class is tested first.
KAZAKH_SPECIFIC = re.compile(r"[ӘәҒғҚқҢңӨөҰұҮүҺһІі]")
CYRILLIC_PATTERN = re.compile(r"[а-яА-ЯёЁ]")
LATIN_PATTERN = re.compile(r"[a-zA-Z]")

KAZAKH = "kazakh"
CYRILLIC = "cyrillic"
LATIN = "latin"

# Russian first, then Kazakh, then English
SCRIPT_PRIORITY = {CYRILLIC: 0, KAZAKH: 1, LATIN: 2}
SCRIPT_LOCALE = {CYRILLIC: "ru", KAZAKH: "kk", LATIN: "en"}
LANGUAGE_NAMES = {KAZAKH: "Қазақша", CYRILLIC: "Русский", LATIN: "English"}

_RUSSIAN_ALPHABET = "абвгдеёжзийклмнопрстуфхцчшщъыьэюя"
_KAZAKH_ALPHABET = "аәбвгғдеёжзийкқлмнңоөпрстуұүфхһцчшщъыіьэюя"
_LATIN_ALPHABET = "abcdefghijklmnopqrstuvwxyz"

_ALPHABETS = {
    CYRILLIC: {ch: i for i, ch in enumerate(_RUSSIAN_ALPHABET)},
    KAZAKH: {ch: i for i, ch in enumerate(_KAZAKH_ALPHABET)},
    LATIN: {ch: i for i, ch in enumerate(_LATIN_ALPHABET)},
}


def classify(author: str) -> str:
    """Return the script tag of an author name: kazakh > cyrillic > latin."""
    if not author or not isinstance(author, str):
        return LATIN
    if KAZAKH_SPECIFIC.search(author):
        return KAZAKH
    if CYRILLIC_PATTERN.search(author):
        return CYRILLIC
    return LATIN


def script_priority(script: str) -> int:
    return SCRIPT_PRIORITY.get(script, len(SCRIPT_PRIORITY))


def language_name(script: str) -> str:
    return LANGUAGE_NAMES.get(script, "Неизвестный")


def _fold_latin(ch: str) -> str:
    decomposed = unicodedata.normalize("NFD", ch)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def collation_key(name: str, script: str) -> tuple:
    """
    Case-insensitive sort key for `name` under the alphabet of `script`'s locale.

    Letters of the alphabet sort by alphabet position; whitespace and
    punctuation sort before letters; anything else sorts after the alphabet
    by code point.
    """
    alphabet = _ALPHABETS.get(script, _ALPHABETS[LATIN])
    key = []
    for ch in (name or "").casefold():
        if script == LATIN:
            ch = _fold_latin(ch) or ch
        for c in ch:
            if c in alphabet:
                key.append((1, alphabet[c]))
            elif c.isspace() or unicodedata.category(c).startswith("P"):
                key.append((0, ord(c)))
            else:
                key.append((2, ord(c)))
    return tuple(key)


def count_script_characters(text: str) -> dict[str, int]:
    """Count characters per script in `text`."""
    counts = {CYRILLIC: 0, KAZAKH: 0, LATIN: 0, "other": 0}
    for ch in text or "":
        if KAZAKH_SPECIFIC.match(ch):
            counts[KAZAKH] += 1
        elif CYRILLIC_PATTERN.match(ch):
            counts[CYRILLIC] += 1
        elif LATIN_PATTERN.match(ch):
            counts[LATIN] += 1
        elif not ch.isspace():
            counts["other"] += 1
    return counts
