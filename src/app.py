"""
Flask preview application for bracket layouts.

Serves the diagram data (nodes, edges, warnings) of the bracket fixtures in
DATA_DIR as JSON. Read-only: fixtures are YAML files on disk, no match data is
accepted over HTTP.
"""
import os
import re

import yaml
from flask import Flask, jsonify

from bracketflow import (
    InvalidInputError,
    compute_fixture_layout,
    layout_to_dict,
    load_config,
    load_fixture,
)

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))

# Shared layout options for all fixtures; fixture-level 'config' overrides it
LAYOUT_CONFIG_NAME = 'layout'

_FIXTURE_NAME_RE = re.compile(r'^[A-Za-z0-9_-]+$')


def _fixture_path(name: str) -> str:
    return os.path.join(DATA_DIR, f'{name}.yaml')


def list_fixtures() -> list:
    """List the readable bracket fixtures in DATA_DIR, sorted by name."""
    if not os.path.isdir(DATA_DIR):
        return []
    fixtures = []
    for filename in sorted(os.listdir(DATA_DIR)):
        name, ext = os.path.splitext(filename)
        if ext != '.yaml' or name == LAYOUT_CONFIG_NAME or not _FIXTURE_NAME_RE.match(name):
            continue
        try:
            fixture = load_fixture(os.path.join(DATA_DIR, filename))
        except (InvalidInputError, yaml.YAMLError) as e:
            app.logger.warning(f'Skipping unreadable fixture {filename}: {e}')
            continue
        fixtures.append({'name': name, 'type': fixture['type']})
    return fixtures


def build_fixture_layout(name: str) -> dict:
    """Load fixture `name` and compute its serialized layout."""
    fixture = load_fixture(_fixture_path(name))
    config = load_config(_fixture_path(LAYOUT_CONFIG_NAME), overrides=fixture.get('config'))
    return layout_to_dict(compute_fixture_layout(fixture, config))


@app.route('/api/brackets')
def api_list_brackets():
    """List available bracket fixtures."""
    return jsonify({'success': True, 'brackets': list_fixtures()})


@app.route('/api/brackets/<name>')
def api_bracket_layout(name):
    """Diagram data for one bracket fixture."""
    if name == LAYOUT_CONFIG_NAME or not _FIXTURE_NAME_RE.match(name) \
            or not os.path.exists(_fixture_path(name)):
        return jsonify({'success': False, 'error': f'Bracket "{name}" not found.'}), 404

    try:
        layout = build_fixture_layout(name)
    except (InvalidInputError, yaml.YAMLError) as e:
        app.logger.warning(f'Invalid bracket fixture {name}: {e}')
        return jsonify({'success': False, 'error': str(e)}), 400

    return jsonify({'success': True, 'layout': layout})


if __name__ == '__main__':
    app.run(debug=True, port=5000)
