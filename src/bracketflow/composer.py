"""
Bracket composition for single and double elimination.

Single elimination is one section. Double elimination lays out a winners
(upper) and a losers (lower) section independently, stacks the losers section
under the winners section and joins both finals in a synthetic Grand Final.

Both entry points return a dict with:
- 'type': 'single' or 'double'
- 'nodes': node id -> node dict (match nodes first, then label pseudo-nodes)
- 'edges': list of {'id', 'source', 'target', 'type', 'section'}
- 'warnings': list of StructuralAmbiguity
- 'rounds': section -> list of rounds, each a list of match ids
- 'strategies': section -> partition strategy used
- 'grand_final': id of the Grand Final node, or None (double elimination only)
"""
import logging
from typing import Dict, List, Optional, Sequence

from .advancement import build_edges, make_edge, predecessors, unique_edge_ids
from .config import resolve_config, LayoutConfig
from .errors import InvalidInputError, StructuralAmbiguity
from .layout import (
    label_node,
    layout_rounds,
    resolve_overlaps,
    section_max_y,
    stack_offset,
)
from .models import Match, Party, coerce_matches
from .rounds import partition_rounds

logger = logging.getLogger(__name__)

SECTION_MAIN = 'main'
SECTION_WINNERS = 'winners'
SECTION_LOSERS = 'losers'
SECTION_GRAND_FINAL = 'grand-final'

GRAND_FINAL_ID = 'grand-final'
RESERVED_PREFIXES = ('round-label-', 'section-label-')

SECTION_TITLES = {
    SECTION_WINNERS: 'Upper Bracket',
    SECTION_LOSERS: 'Lower Bracket',
}


def _check_reserved_ids(matches: Sequence[Match]):
    for match in matches:
        if match.id == GRAND_FINAL_ID or match.id.startswith(RESERVED_PREFIXES):
            raise InvalidInputError(f"Match id '{match.id}' is reserved for generated nodes")


def _layout_section(matches: List[Match], section: str, origin_y: float, config: LayoutConfig) -> Dict:
    """Partition, place and link one section."""
    partition = partition_rounds(matches, config.section_round_sizes(section), section)
    rounds = partition['rounds']
    placed = layout_rounds(rounds, config.origin_x, origin_y, config, section)
    positions = resolve_overlaps(placed['positions'], config)
    edge_section = None if section == SECTION_MAIN else section

    return {
        'section': section,
        'rounds': rounds,
        'strategy': partition['strategy'],
        'warnings': partition['warnings'],
        'positions': positions,
        'labels': placed['labels'],
        'edges': build_edges(rounds, edge_section),
        'max_y': section_max_y(positions, placed['labels']),
    }


def display_parties(match: Match, sources: Sequence[str]):
    """Parties to show for a match; unknown parties point at the match that feeds them."""
    def placeholder(slot):
        if slot < len(sources):
            return Party(name=f"Winner {sources[slot]}")
        return Party(name="TBD")

    top = match.top_party or placeholder(0)
    bottom = match.bottom_party or placeholder(1)
    return top, bottom


def _match_node(match: Match, position, section: str, round_idx: Optional[int], sources: Sequence[str]) -> Dict:
    top, bottom = display_parties(match, sources)
    return {
        'id': match.id,
        'type': 'match',
        'position': {'x': position[0], 'y': position[1]},
        'payload': match,
        'section': section,
        'round': round_idx,
        'top_party': top,
        'bottom_party': bottom,
    }


def _section_match_nodes(layout: Dict, positions: Dict, feeds: Dict[str, List[str]]) -> Dict[str, Dict]:
    nodes = {}
    for round_idx, round_matches in enumerate(layout['rounds']):
        for match in round_matches:
            nodes[match.id] = _match_node(
                match, positions[match.id], layout['section'], round_idx, feeds.get(match.id, [])
            )
    return nodes


def _round_ids(rounds) -> List[List[str]]:
    return [[match.id for match in round_matches] for round_matches in rounds]


def compute_single_elimination_layout(matches, config=None) -> Dict:
    """
    Lay out a single-elimination bracket.

    Args:
        matches: Match objects or match dicts, in bracket order
        config: LayoutConfig, dict of layout options or None for defaults

    Raises InvalidInputError for empty input, duplicate ids or a bad round plan.
    """
    config = resolve_config(config)
    matches = coerce_matches(matches)
    _check_reserved_ids(matches)

    section = _layout_section(matches, SECTION_MAIN, 0, config)
    feeds = predecessors(section['edges'])

    nodes = _section_match_nodes(section, section['positions'], feeds)
    for label in section['labels']:
        nodes[label['id']] = label

    logger.debug("Single elimination layout: %d matches in %d rounds (%s)",
                 len(matches), len(section['rounds']), section['strategy'])

    return {
        'type': 'single',
        'nodes': nodes,
        'edges': section['edges'],
        'warnings': list(section['warnings']),
        'rounds': {SECTION_MAIN: _round_ids(section['rounds'])},
        'strategies': {SECTION_MAIN: section['strategy']},
        'grand_final': None,
    }


def _grand_final_match() -> Match:
    return Match(
        id=GRAND_FINAL_ID,
        name='Grand Final',
        top_party=Party(name='Winner of winners-final'),
        bottom_party=Party(name='Winner of losers-final'),
    )


def _grand_final_blockers(winners: Dict, losers: Dict) -> List[str]:
    """Reasons the Grand Final cannot be placed; empty when both finals are known."""
    reasons = []
    for layout in (winners, losers):
        if layout['warnings']:
            reasons.append(f"{layout['section']} structure is ambiguous")
        elif len(layout['rounds'][-1]) != 1:
            reasons.append(f"{layout['section']} final round is not reached")
    return reasons


def compute_double_elimination_layout(winners_matches, losers_matches, config=None) -> Dict:
    """
    Lay out a double-elimination bracket: winners section on top, losers
    section stacked below it, Grand Final to the right of both finals.

    The Grand Final is synthesized only when both sections have a clear
    structure ending in a single final match; otherwise it is left out and a
    warning explains why.

    Raises InvalidInputError for empty sections, duplicate ids (within or
    across sections) or a bad round plan.
    """
    config = resolve_config(config)
    winners_matches = coerce_matches(winners_matches)
    losers_matches = coerce_matches(losers_matches)
    _check_reserved_ids(winners_matches + losers_matches)

    shared = {m.id for m in winners_matches} & {m.id for m in losers_matches}
    if shared:
        raise InvalidInputError(
            f"Match ids must be unique across sections, found in both: {', '.join(sorted(shared))}"
        )

    winners = _layout_section(winners_matches, SECTION_WINNERS, 0, config)
    # Losers section starts one margin below the lowest point of the winners section
    losers_origin = stack_offset(winners['max_y'], config)
    losers = _layout_section(losers_matches, SECTION_LOSERS, losers_origin, config)

    warnings = list(winners['warnings']) + list(losers['warnings'])
    edges = winners['edges'] + losers['edges']

    positions = dict(winners['positions'])
    positions.update(losers['positions'])

    grand_final = None
    blockers = _grand_final_blockers(winners, losers)
    if blockers:
        message = "Grand Final omitted: " + "; ".join(blockers)
        logger.debug(message)
        warnings.append(StructuralAmbiguity(message, section=SECTION_GRAND_FINAL))
    else:
        winners_final = winners['rounds'][-1][0]
        losers_final = losers['rounds'][-1][0]
        wx, wy = positions[winners_final.id]
        lx, ly = positions[losers_final.id]
        grand_final = _grand_final_match()
        positions[grand_final.id] = (max(wx, lx) + config.x_spacing, (wy + ly) / 2)
        edges.append(make_edge(winners_final.id, grand_final.id, SECTION_GRAND_FINAL))
        edges.append(make_edge(losers_final.id, grand_final.id, SECTION_GRAND_FINAL))

    edges = unique_edge_ids(edges)
    positions = resolve_overlaps(positions, config)
    feeds = predecessors(edges)

    nodes = {}
    nodes.update(_section_match_nodes(winners, positions, feeds))
    nodes.update(_section_match_nodes(losers, positions, feeds))
    if grand_final is not None:
        nodes[grand_final.id] = _match_node(
            grand_final, positions[grand_final.id], SECTION_GRAND_FINAL, None, feeds.get(grand_final.id, [])
        )

    for label in winners['labels'] + losers['labels']:
        nodes[label['id']] = label
    for section, y in ((SECTION_WINNERS, 10), (SECTION_LOSERS, losers_origin - 40)):
        node_id = f"section-label-{section}"
        nodes[node_id] = label_node(node_id, SECTION_TITLES[section], config.section_label_x, y, section)

    logger.debug("Double elimination layout: %d winners / %d losers matches, grand final %s",
                 len(winners_matches), len(losers_matches), "placed" if grand_final else "omitted")

    return {
        'type': 'double',
        'nodes': nodes,
        'edges': edges,
        'warnings': warnings,
        'rounds': {
            SECTION_WINNERS: _round_ids(winners['rounds']),
            SECTION_LOSERS: _round_ids(losers['rounds']),
        },
        'strategies': {
            SECTION_WINNERS: winners['strategy'],
            SECTION_LOSERS: losers['strategy'],
        },
        'grand_final': grand_final.id if grand_final else None,
    }


def _node_to_dict(node: Dict) -> Dict:
    data = dict(node)
    if node['type'] == 'match':
        data['payload'] = node['payload'].to_dict()
        data['top_party'] = node['top_party'].to_dict()
        data['bottom_party'] = node['bottom_party'].to_dict()
    data['position'] = dict(node['position'])
    return data


def layout_to_dict(result: Dict) -> Dict:
    """Plain, JSON/YAML-safe copy of a layout result."""
    return {
        'type': result['type'],
        'nodes': {node_id: _node_to_dict(node) for node_id, node in result['nodes'].items()},
        'edges': [dict(edge) for edge in result['edges']],
        'warnings': [warning.to_dict() for warning in result['warnings']],
        'rounds': {section: [list(r) for r in rounds] for section, rounds in result['rounds'].items()},
        'strategies': dict(result['strategies']),
        'grand_final': result['grand_final'],
    }


def compute_fixture_layout(fixture: Dict, config=None) -> Dict:
    """Dispatch a fixture loaded by load_fixture() to the right bracket type."""
    if fixture['type'] == 'double':
        return compute_double_elimination_layout(fixture['winners'], fixture['losers'], config)
    return compute_single_elimination_layout(fixture['matches'], config)
