"""
Advancement graph: which match feeds into which match of the next round.
"""
import math
from typing import Dict, List, Optional, Sequence

from .models import Match

EDGE_TYPE = 'smoothstep'


def source_indices(match_index: int, prev_size: int, cur_size: int) -> List[int]:
    """
    Positions in the previous round that feed match_index of the current round.

    Exact 2:1 rounds use standard pairing (2i, 2i+1). Uneven rounds map
    proportionally: the inclusive range [floor(i*r), floor((i+1)*r)] with
    r = prev_size / cur_size, clamped to valid positions, one entry per
    distinct position.
    """
    if prev_size == 2 * cur_size:
        return [2 * match_index, 2 * match_index + 1]

    ratio = prev_size / cur_size
    start = min(max(math.floor(match_index * ratio), 0), prev_size - 1)
    end = min(max(math.floor((match_index + 1) * ratio), 0), prev_size - 1)
    return list(range(start, end + 1))


def edge_id(source: str, target: str, section: Optional[str] = None) -> str:
    if section:
        return f"{section}-{source}-{target}"
    return f"{source}-{target}"


def make_edge(source: str, target: str, section: Optional[str] = None) -> Dict:
    return {
        'id': edge_id(source, target, section),
        'source': source,
        'target': target,
        'type': EDGE_TYPE,
        'section': section,
    }


def unique_edge_ids(edges: Sequence[Dict]) -> List[Dict]:
    """
    Make edge ids unique, keeping the first occurrence of each id as is.

    Joined ids can repeat when match ids contain '-' ('a-b' -> 'c' and
    'a' -> 'b-c' both read 'a-b-c'); repeats get a '#2', '#3', ... suffix.
    Edges are copied, never modified.
    """
    taken = set()
    unique = []
    for edge in edges:
        candidate = edge['id']
        counter = 1
        while candidate in taken:
            counter += 1
            candidate = f"{edge['id']}#{counter}"
        taken.add(candidate)
        unique.append(dict(edge, id=candidate))
    return unique


def build_edges(rounds: Sequence[Sequence[Match]], section: Optional[str] = None) -> List[Dict]:
    """
    Build directed edges from each match to the match it feeds into.

    Round 0 gets no incoming edges. Edges are returned in a stable order:
    by target round, target position, then source position. Ids are unique
    within the returned list.
    """
    edges = []
    for round_idx in range(1, len(rounds)):
        prev_round = rounds[round_idx - 1]
        cur_round = rounds[round_idx]
        if not prev_round:
            continue
        for match_idx, match in enumerate(cur_round):
            for src_idx in source_indices(match_idx, len(prev_round), len(cur_round)):
                edges.append(make_edge(prev_round[src_idx].id, match.id, section))
    return unique_edge_ids(edges)


def predecessors(edges: Sequence[Dict]) -> Dict[str, List[str]]:
    """Map each target match id to its source ids, in edge order."""
    feeds = {}
    for edge in edges:
        feeds.setdefault(edge['target'], []).append(edge['source'])
    return feeds
