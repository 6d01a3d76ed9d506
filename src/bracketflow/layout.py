"""
Layout engine: 2D coordinates for matches and round labels.

Rounds are columns spaced x_spacing apart. Inside a column, matches are
spaced y_spacing apart and centred on a shared axis, chosen so that the
widest round of the section sits just under the label row.
"""
import logging
from typing import Dict, Optional, Sequence, Tuple

from .config import LayoutConfig
from .models import Match

logger = logging.getLogger(__name__)

Position = Tuple[float, float]


def round_label(round_idx: int, rounds: Sequence[Sequence[Match]]) -> str:
    """'Final' for a last column holding one match, 'Round N' otherwise."""
    if round_idx == len(rounds) - 1 and len(rounds[round_idx]) == 1:
        return "Final"
    return f"Round {round_idx + 1}"


def label_node_id(round_idx: int, section: Optional[str] = None) -> str:
    if section and section != 'main':
        return f"round-label-{section}-{round_idx}"
    return f"round-label-{round_idx}"


def label_node(node_id: str, label: str, x: float, y: float, section: Optional[str] = None) -> Dict:
    return {
        'id': node_id,
        'type': 'label',
        'position': {'x': x, 'y': y},
        'label': label,
        'section': section,
    }


def compute_base_y(rounds: Sequence[Sequence[Match]], label_y: float, config: LayoutConfig) -> float:
    """Vertical axis of a section: the widest round ends up right under the labels."""
    max_matches = max((len(r) for r in rounds), default=1)
    return label_y + config.label_offset + ((max(max_matches, 1) - 1) * config.y_spacing) / 2


def layout_rounds(rounds: Sequence[Sequence[Match]], origin_x: float, origin_y: float,
                  config: LayoutConfig, section: Optional[str] = None) -> Dict:
    """
    Place every match of one section.

    Returns dict with:
    - 'positions': match id -> (x, y), in round then position order
    - 'labels': round-label pseudo-nodes, one per round column
    - 'max_y': largest y used by the section, labels included
    """
    label_y = origin_y + config.label_y
    base_y = compute_base_y(rounds, label_y, config)

    positions = {}
    labels = []
    for round_idx, round_matches in enumerate(rounds):
        x = origin_x + round_idx * config.x_spacing
        round_y_offset = base_y - ((len(round_matches) - 1) * config.y_spacing) / 2
        for match_idx, match in enumerate(round_matches):
            positions[match.id] = (x, round_y_offset + match_idx * config.y_spacing)
        labels.append(label_node(
            label_node_id(round_idx, section), round_label(round_idx, rounds), x, label_y, section
        ))

    return {
        'positions': positions,
        'labels': labels,
        'max_y': section_max_y(positions, labels),
    }


def section_max_y(positions: Dict[str, Position], labels: Sequence[Dict] = ()) -> float:
    ys = [y for _, y in positions.values()]
    ys.extend(label['position']['y'] for label in labels)
    return max(ys) if ys else 0


def stack_offset(previous_max_y: float, config: LayoutConfig) -> float:
    """Vertical origin of the next section stacked below a section ending at previous_max_y."""
    return previous_max_y + config.section_margin


def is_overlapping(a: Position, b: Position, threshold: float) -> bool:
    """True if a and b are closer than threshold on both axes."""
    return abs(a[0] - b[0]) < threshold and abs(a[1] - b[1]) < threshold


def resolve_overlaps(positions: Dict[str, Position], config: LayoutConfig) -> Dict[str, Position]:
    """
    Move nodes apart until no two are within overlap_threshold on both axes.

    Nodes are visited in the mapping's order. Each node is bumped by
    (overlap_bump_x, overlap_bump_y) while it overlaps any node already placed,
    so earlier nodes never move and the result is deterministic. The input
    mapping is not modified. A second pass over the result moves nothing.
    """
    threshold = config.overlap_threshold
    bump_x, bump_y = config.overlap_bump_x, config.overlap_bump_y

    placed: Dict[str, Position] = {}
    for node_id, position in positions.items():
        x, y = position
        bumps = 0
        while any(is_overlapping((x, y), other, threshold) for other in placed.values()):
            x += bump_x
            y += bump_y
            bumps += 1
        if bumps:
            logger.debug("Moved node %s by %d bump(s) to (%s, %s)", node_id, bumps, x, y)
        placed[node_id] = (x, y)
    return placed
