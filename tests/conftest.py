"""
Shared pytest fixtures for bracket layout tests.

Running tests:
    pytest tests/                  - full suite
    pytest tests/ -m "not slow"   - skip the larger bracket sweeps
"""
import pytest
import sys
import os

# Add src directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from bracketflow.layout import is_overlapping
from bracketflow.models import Match, Party

DATA_DIR = os.path.join(os.path.dirname(__file__), '..', 'data')


def make_match(match_id, top=None, bottom=None, name=None):
    """Build a Match with optional party names."""
    return Match(
        id=match_id,
        name=name,
        top_party=Party(name=top) if top else None,
        bottom_party=Party(name=bottom) if bottom else None,
    )


def make_complete_bracket(num_teams, prefix='m'):
    """Matches of a complete bracket: first round filled in, later rounds undecided."""
    matches = []
    for i in range(num_teams // 2):
        matches.append(make_match(f'{prefix}{i + 1}', f'T{2 * i + 1}', f'T{2 * i + 2}'))
    for i in range(num_teams // 2, num_teams - 1):
        matches.append(make_match(f'{prefix}{i + 1}'))
    return matches


@pytest.fixture
def three_match_bracket():
    """Two opening matches feeding a final."""
    return [
        make_match('m1', 'A', 'B'),
        make_match('m2', 'C', 'D'),
        make_match('m3'),
    ]


@pytest.fixture
def eight_team_bracket():
    """Seven matches: 4 + 2 + 1."""
    return make_complete_bracket(8)


@pytest.fixture
def compact_config():
    """Default spacing with an overlap threshold below the spacing, so nothing gets bumped."""
    return {'overlapThreshold': 100}


@pytest.fixture
def data_dir():
    return DATA_DIR


def find_overlaps(positions, threshold):
    """Pairs of node ids closer than threshold on both axes, in input order."""
    items = list(positions.items())
    pairs = []
    for i, (id_a, pos_a) in enumerate(items):
        for id_b, pos_b in items[i + 1:]:
            if is_overlapping(pos_a, pos_b, threshold):
                pairs.append((id_a, id_b))
    return pairs
