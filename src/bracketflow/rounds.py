"""
Round partitioning: split a flat, ordered match list into rounds.

Strategies, tried in order:
- explicit: the caller passes a round-size plan (preferred for production use)
- power_of_two: len(matches) + 1 is a power of two, so the bracket is complete
- presence: matches with both parties known form round 0, the rest are sliced
  into halving rounds
- fallback: one round with every match, plus a StructuralAmbiguity warning
"""
import logging
import math
from typing import Dict, List, Optional, Sequence

from .errors import InvalidInputError, StructuralAmbiguity
from .models import Match

logger = logging.getLogger(__name__)

STRATEGY_EXPLICIT = 'explicit'
STRATEGY_POWER_OF_TWO = 'power_of_two'
STRATEGY_PRESENCE = 'presence'
STRATEGY_FALLBACK = 'fallback'


def is_power_of_two(value: int) -> bool:
    return value > 0 and (value & (value - 1)) == 0


def complete_round_sizes(num_matches: int) -> List[int]:
    """Round sizes of a complete bracket with num_matches + 1 teams.

    For 7 matches (8 teams): [4, 2, 1]. Empty if the bracket is not complete.
    """
    total_teams = num_matches + 1
    if num_matches < 1 or not is_power_of_two(total_teams):
        return []
    rounds_count = int(math.log2(total_teams))
    return [total_teams // 2 ** (round_num + 1) for round_num in range(rounds_count)]


def validate_unique_ids(matches: Sequence[Match], section: Optional[str] = None):
    seen = set()
    for match in matches:
        if match.id in seen:
            where = f" in section '{section}'" if section else ""
            raise InvalidInputError(f"Duplicate match id '{match.id}'{where}")
        seen.add(match.id)


def validate_round_sizes(round_sizes, num_matches: int) -> List[int]:
    if isinstance(round_sizes, (str, bytes, dict)):
        raise InvalidInputError(f"Round sizes must be a list of integers, got {round_sizes!r}")
    try:
        sizes = list(round_sizes)
    except TypeError:
        raise InvalidInputError(f"Round sizes must be a list of integers, got {round_sizes!r}")

    if not sizes:
        raise InvalidInputError("Round sizes plan is empty")
    for size in sizes:
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise InvalidInputError(f"Round sizes must be positive integers, got {size!r}")
    if sum(sizes) != num_matches:
        raise InvalidInputError(
            f"Round sizes {sizes} sum to {sum(sizes)} but there are {num_matches} matches"
        )
    return sizes


def slice_rounds(matches: Sequence[Match], sizes: Sequence[int]) -> List[List[Match]]:
    """Cut matches into contiguous rounds of the given sizes, in input order."""
    rounds = []
    index = 0
    for size in sizes:
        rounds.append(list(matches[index:index + size]))
        index += size
    return rounds


def _presence_rounds(matches: Sequence[Match]):
    """
    Reconstruct rounds from party presence.

    Returns (rounds, None) on success or (None, reason) when the input does not
    have a shape this heuristic can read without guessing.
    """
    one_sided = [m.id for m in matches if m.parties_present == 1]
    if one_sided:
        return None, f"matches with a single known party are ambiguous: {', '.join(one_sided)}"

    first_round = [m for m in matches if m.is_first_round]
    later = [m for m in matches if not m.is_first_round]
    if not first_round:
        return None, "no match has both parties known, so round 0 cannot be identified"

    # First-round matches must form a prefix of the input
    if any(m.is_first_round for m in matches[len(first_round):]):
        return None, "matches with known parties are interleaved with undecided matches"

    rounds = [first_round]
    index = 0
    previous_size = len(first_round)
    while index < len(later):
        if previous_size == 1:
            return None, f"{len(later) - index} match(es) remain after the final round"
        # The last round takes whatever is left
        size = min(math.ceil(previous_size / 2), len(later) - index)
        rounds.append(list(later[index:index + size]))
        index += size
        previous_size = size
    return rounds, None


def partition_rounds(matches: Sequence[Match], round_sizes=None, section: Optional[str] = None) -> Dict:
    """
    Partition an ordered match sequence into rounds.

    Args:
        matches: Match objects, in bracket order (round 0 first)
        round_sizes: Optional explicit plan, e.g. [4, 2, 1]; bypasses all heuristics
        section: Section name used in warnings and error messages

    Returns dict with:
    - 'rounds': list of rounds, each a list of Match (input objects, not copies)
    - 'strategy': which strategy produced the rounds
    - 'warnings': list of StructuralAmbiguity (empty unless the fallback was used)

    Raises InvalidInputError for an empty sequence, duplicate ids or a bad plan.
    """
    matches = list(matches)
    if not matches:
        where = f" for section '{section}'" if section else ""
        raise InvalidInputError(f"No matches given{where}")
    validate_unique_ids(matches, section)

    if round_sizes is not None:
        sizes = validate_round_sizes(round_sizes, len(matches))
        logger.debug("Partitioning %d matches with explicit plan %s", len(matches), sizes)
        return {'rounds': slice_rounds(matches, sizes), 'strategy': STRATEGY_EXPLICIT, 'warnings': []}

    sizes = complete_round_sizes(len(matches))
    if sizes:
        logger.debug("Partitioning %d matches as a complete bracket %s", len(matches), sizes)
        return {'rounds': slice_rounds(matches, sizes), 'strategy': STRATEGY_POWER_OF_TWO, 'warnings': []}

    rounds, reason = _presence_rounds(matches)
    if rounds is not None:
        logger.debug("Partitioning %d matches by party presence %s",
                     len(matches), [len(r) for r in rounds])
        return {'rounds': rounds, 'strategy': STRATEGY_PRESENCE, 'warnings': []}

    logger.debug("Falling back to a single round for %d matches: %s", len(matches), reason)
    warning = StructuralAmbiguity(
        f"Bracket structure not recognized ({reason}); showing all {len(matches)} matches as one round",
        section=section,
        strategy=STRATEGY_FALLBACK,
    )
    return {'rounds': [matches], 'strategy': STRATEGY_FALLBACK, 'warnings': [warning]}
