"""
Layout configuration.

Options can be given in camelCase (as bracket front-ends send them) or in
snake_case. Unrecognized options are ignored; omitted options take defaults.
"""
import logging
import os
from typing import Dict, Optional

import yaml

from .errors import InvalidInputError

logger = logging.getLogger(__name__)


# snake_case attribute -> default value
DEFAULTS = {
    'x_spacing': 400,
    'y_spacing': 200,
    'label_y': 50,
    'label_offset': 150,
    'origin_x': 100,
    'section_margin': 200,
    'section_label_x': 20,
    'overlap_threshold': 300,
    'overlap_bump_x': 0,
    'overlap_bump_y': None,  # None means "same as y_spacing"
}

_CAMEL_KEYS = {
    'xSpacing': 'x_spacing',
    'ySpacing': 'y_spacing',
    'labelY': 'label_y',
    'labelOffset': 'label_offset',
    'originX': 'origin_x',
    'sectionMargin': 'section_margin',
    'sectionLabelX': 'section_label_x',
    'overlapThreshold': 'overlap_threshold',
    'overlapBumpX': 'overlap_bump_x',
    'overlapBumpY': 'overlap_bump_y',
    'roundSizes': 'round_sizes',
}

# Values that must not be negative
_NON_NEGATIVE = ('x_spacing', 'y_spacing', 'label_offset', 'section_margin', 'overlap_threshold')


class LayoutConfig:
    def __init__(self, round_sizes=None, **options):
        self.round_sizes = round_sizes
        for key, default in DEFAULTS.items():
            setattr(self, key, options.pop(key, default))
        if options:
            logger.debug("Ignoring unrecognized layout options: %s", sorted(options))
        bump_follows_spacing = self.overlap_bump_y is None
        if bump_follows_spacing:
            self.overlap_bump_y = self.y_spacing
        self._validate(bump_follows_spacing)

    def _validate(self, bump_follows_spacing=False):
        for key in DEFAULTS:
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidInputError(f"Layout option '{key}' must be a number, got {value!r}")
        for key in _NON_NEGATIVE:
            if getattr(self, key) < 0:
                raise InvalidInputError(f"Layout option '{key}' must not be negative")
        if self.overlap_bump_x < 0 or self.overlap_bump_y < 0:
            raise InvalidInputError("Overlap bump vector must not point backwards")
        if self.overlap_bump_x == 0 and self.overlap_bump_y == 0:
            if bump_follows_spacing:
                raise InvalidInputError(
                    "Overlap bump defaults to ySpacing, which is 0; "
                    "set overlapBumpY or overlapBumpX to a positive value"
                )
            raise InvalidInputError("Overlap bump vector must not be zero")

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'LayoutConfig':
        """Build a config from a mapping of camelCase or snake_case options."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise InvalidInputError(f"Layout config must be a mapping, got {type(data).__name__}")
        options = {}
        for key, value in data.items():
            options[_CAMEL_KEYS.get(key, key)] = value
        return cls(**options)

    def section_round_sizes(self, section: str):
        """Explicit round-size plan for one section, or None.

        Single elimination takes a plain list; double elimination takes a
        mapping keyed by section ('winners'/'losers', or 'upper'/'lower').
        """
        plan = self.round_sizes
        if plan is None:
            return None
        if isinstance(plan, dict):
            aliases = {'winners': 'upper', 'losers': 'lower'}
            if section in plan:
                return plan[section]
            return plan.get(aliases.get(section, section))
        if section == 'main':
            return plan
        raise InvalidInputError(
            "Double elimination round sizes must be a mapping with 'winners' and 'losers' plans"
        )

    def to_dict(self) -> Dict:
        data = {key: getattr(self, key) for key in DEFAULTS}
        data['round_sizes'] = self.round_sizes
        return data

    def __repr__(self):
        return f"LayoutConfig({self.to_dict()})"


def resolve_config(config) -> LayoutConfig:
    """Accept a LayoutConfig, a dict of options or None."""
    if isinstance(config, LayoutConfig):
        return config
    return LayoutConfig.from_dict(config)


def load_config(file_path: str, overrides: Optional[Dict] = None) -> LayoutConfig:
    """Load layout options from a YAML file, merging them over the defaults."""
    data = {}
    if file_path and os.path.exists(file_path):
        with open(file_path, 'r', encoding='utf-8') as f:
            loaded = yaml.safe_load(f)
        if loaded:
            if not isinstance(loaded, dict):
                raise InvalidInputError(f"Layout config in {file_path} must be a mapping")
            data.update(loaded)
    if overrides:
        if not isinstance(overrides, dict):
            raise InvalidInputError("Layout config overrides must be a mapping")
        data.update(overrides)
    return LayoutConfig.from_dict(data)


def load_fixture(file_path: str) -> Dict:
    """
    Load a bracket fixture from YAML.

    A fixture is either {'type': 'single', 'matches': [...]} or
    {'type': 'double', 'winners': [...], 'losers': [...]}, with an optional
    'config' mapping of layout options.
    """
    with open(file_path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise InvalidInputError(f"Fixture {file_path} must be a mapping")

    bracket_type = data.get('type')
    if bracket_type is None:
        bracket_type = 'double' if ('winners' in data or 'upper' in data) else 'single'
    if bracket_type not in ('single', 'double'):
        raise InvalidInputError(f"Unknown bracket type '{bracket_type}' in {file_path}")
    data['type'] = bracket_type

    if bracket_type == 'double':
        data['winners'] = data.get('winners', data.get('upper'))
        data['losers'] = data.get('losers', data.get('lower'))
        required = ('winners', 'losers')
    else:
        required = ('matches',)
    for key in required:
        if not isinstance(data.get(key), list):
            raise InvalidInputError(f"Fixture {file_path} needs a '{key}' list")
    return data
