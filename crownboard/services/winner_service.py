"""
Random winner draws.

The pool is the deduplicated union of the leaderboards shown to the creator,
capped so the draw stays over the visible leading actors. Randomness is
injected: anything with ``random() -> float in [0, 1)`` works, so tests and
the CLI can pass a seeded ``random.Random``.
"""
import logging
import random
from typing import Iterable, List, Optional, Protocol, Sequence

from ..models.leaderboard import LeaderboardEntry
from ..utils.exceptions import EmptyPoolError

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 200


class RandomSource(Protocol):
    def random(self) -> float:
        ...


def build_winner_pool(
    *leaderboards: Iterable[LeaderboardEntry],
    max_size: int = DEFAULT_POOL_SIZE
) -> List[LeaderboardEntry]:
    """
    Union leaderboards by actor id, keeping first appearance.

    Earlier leaderboards win when an actor appears on several, so the entry
    kept is the one from the first board that listed it.
    """
    if max_size < 1:
        raise ValueError('max_size must be positive')

    seen = set()
    pool = []
    for board in leaderboards:
        for entry in board:
            if entry.actor_id in seen:
                continue
            seen.add(entry.actor_id)
            pool.append(entry)
            if len(pool) >= max_size:
                return pool
    return pool


def pick_winner(pool: Sequence[LeaderboardEntry], rng: Optional[RandomSource] = None) -> LeaderboardEntry:
    """
    Draw one entry uniformly at random.

    Raises:
        EmptyPoolError: If the pool has no entries
        ValueError: If the random source returns a value outside [0, 1)
    """
    if not pool:
        raise EmptyPoolError()

    rng = rng or random.SystemRandom()
    value = rng.random()
    if not 0 <= value < 1:
        raise ValueError(f'Random source returned {value!r}, expected a float in [0, 1)')

    winner = pool[int(value * len(pool))]
    logger.info('Picked winner %s from a pool of %d', winner.actor_id, len(pool))
    return winner
