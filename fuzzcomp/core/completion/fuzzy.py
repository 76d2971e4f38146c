"""Fuzzy matching primitives.

Matching is smart-case: a lower-case input character matches either case in
the candidate, an upper-case input character only matches itself.
"""

from collections.abc import Sequence

_LOWER_A = ord("a")
_LOWER_Z = ord("z")


def get_char_codes(text: str) -> list[int]:
    """Return the code points of `text`."""
    return [ord(ch) for ch in text]


def _char_matches(needle: int, code: int) -> bool:
    if code == needle:
        return True
    return _LOWER_A <= needle <= _LOWER_Z and code + 32 == needle


def fuzzy_match(codes: Sequence[int], text: str) -> bool:
    """Whether all of `codes` appear in order within `text`."""
    total = len(codes)
    if total > len(text):
        return False
    i = 0
    for ch in text:
        if i == total:
            break
        if _char_matches(codes[i], ord(ch)):
            i += 1
    return i == total


def match_score(word: str, input: str) -> float:
    """Rank how well `input` matches `word`, in the range [0, 1].

    Each matched character earns a point, with bonuses for matching at the
    start of the word, at a word boundary and for continuing a run.
    Returns 0 when `input` does not match.
    """
    if not input:
        return 0.0
    codes = get_char_codes(input)
    if not fuzzy_match(codes, word):
        return 0.0

    points = 0.0
    i = 0
    prev_matched = -2
    for j, ch in enumerate(word):
        if i == len(codes):
            break
        code = ord(ch)
        if not _char_matches(codes[i], code):
            continue
        points += 1.0
        if code == codes[i]:
            points += 0.25
        if j == 0:
            points += 1.5
        elif j == prev_matched + 1:
            points += 1.0
        elif _is_boundary(word, j):
            points += 0.75
        prev_matched = j
        i += 1

    best = len(codes) * 2.25 + 1.5
    # Shorter candidates rank above longer ones with the same match
    length_penalty = min((len(word) - len(input)) * 0.01, 0.1)
    return max(points / best - length_penalty, 0.0)


def _is_boundary(word: str, index: int) -> bool:
    prev, ch = word[index - 1], word[index]
    if not prev.isalnum():
        return True
    return prev.islower() and ch.isupper()
