"""
Bracket structuring and layout for single- and double-elimination brackets.
"""
from .advancement import build_edges, predecessors
from .composer import (
    compute_double_elimination_layout,
    compute_fixture_layout,
    compute_single_elimination_layout,
    layout_to_dict,
)
from .config import LayoutConfig, load_config, load_fixture
from .errors import InvalidInputError, StructuralAmbiguity
from .layout import layout_rounds, resolve_overlaps
from .models import Match, Party
from .rounds import partition_rounds

__all__ = [
    'InvalidInputError',
    'LayoutConfig',
    'Match',
    'Party',
    'StructuralAmbiguity',
    'build_edges',
    'compute_double_elimination_layout',
    'compute_fixture_layout',
    'compute_single_elimination_layout',
    'layout_rounds',
    'layout_to_dict',
    'load_config',
    'load_fixture',
    'partition_rounds',
    'predecessors',
    'resolve_overlaps',
]
