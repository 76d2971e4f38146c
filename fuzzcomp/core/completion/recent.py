"""Recency bonus for previously accepted completions."""

RECENT_SCORE_STEP = 0.01
RECENT_SCORE_CAP = 0.1


class RecentScoreTable:
    """Score bonus per (first input character, word) pair.

    Bumped on every accepted completion and read when ranking candidates.
    Entries are never removed; each one is bounded by RECENT_SCORE_CAP.
    """

    def __init__(self) -> None:
        self._scores: dict[str, float] = {}

    @staticmethod
    def key(input: str, word: str) -> str:
        return f"{input[:1]}|{word}"

    def get(self, input: str, word: str) -> float:
        if not input:
            return 0.0
        return self._scores.get(self.key(input, word), 0.0)

    def add(self, input: str | None, word: str) -> float | None:
        """Record that `word` was accepted after typing `input`.

        Returns the new score, or None when there was nothing to record.
        """
        if not word or not input:
            return None
        key = self.key(input, word)
        value = round(self._scores.get(key, 0.0) + RECENT_SCORE_STEP, 2)
        self._scores[key] = min(value, RECENT_SCORE_CAP)
        return self._scores[key]

    def snapshot(self) -> dict[str, float]:
        return dict(self._scores)

    def __len__(self) -> int:
        return len(self._scores)
