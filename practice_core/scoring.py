"""Per-turn score impact

The transcript judge decides the recorded scores at the end of a debate. The
scorers here only feed the running scores shown while debating.
"""

from .config import TURN_SCORE_MAX, TURN_SCORE_MIN
from .types import Sender


class TurnScorer:
    """Scores a single message for its sender's running total"""

    source = "unknown"

    def score(self, sender: Sender, content: str) -> int:
        raise NotImplementedError


class HeuristicTurnScorer(TurnScorer):
    """Offline scorer: longer, more substantive messages score higher

    Always returns a value in [TURN_SCORE_MIN, TURN_SCORE_MAX].
    """

    source = "heuristic"

    def __init__(self, words_per_point: int = 4):
        self.words_per_point = words_per_point

    def score(self, sender: Sender, content: str) -> int:
        words = len(content.split())
        if words == 0:
            return 0
        bonus = min(TURN_SCORE_MAX - TURN_SCORE_MIN, words // self.words_per_point)
        return TURN_SCORE_MIN + bonus
