#!/usr/bin/env python3
"""
Bracket layout preview tool.

Loads a bracket fixture (YAML) and prints its rounds, edges and warnings, or
the full layout as YAML/JSON for a rendering layer.

Usage:
    python src/main.py data/single_elimination.yaml
    python src/main.py data/double_elimination.yaml --format json
    python src/main.py my_bracket.yaml --config data/layout.yaml --verbose

Exit codes:
    0: Success
    1: Fixture or config file not found
    2: Invalid bracket input
"""
import argparse
import json
import logging
import os
import sys

import yaml

from bracketflow import (
    InvalidInputError,
    compute_fixture_layout,
    layout_to_dict,
    load_config,
    load_fixture,
)


def format_summary(result):
    lines = []
    for section, rounds in result['rounds'].items():
        strategy = result['strategies'][section]
        lines.append(f"# Section {section} ({strategy})")
        for round_idx, match_ids in enumerate(rounds):
            lines.append(f"Round {round_idx + 1}: {', '.join(match_ids)}")
    if result['grand_final']:
        lines.append(f"# Grand Final: {result['grand_final']}")

    lines.append(f"# Edges ({len(result['edges'])})")
    for edge in result['edges']:
        lines.append(f"{edge['source']} -> {edge['target']}")

    for warning in result['warnings']:
        lines.append(f"Warning: {warning}")
    return "\n".join(lines)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Compute the diagram layout of a bracket fixture.')
    parser.add_argument('fixture', help='Path to a bracket fixture (YAML)')
    parser.add_argument('--config', help='Path to a layout config file (YAML)')
    parser.add_argument('--format', choices=['text', 'yaml', 'json'], default='text',
                        help='Output format (default: text)')
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    for path in (args.fixture, args.config):
        if path and not os.path.exists(path):
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1

    try:
        fixture = load_fixture(args.fixture)
        config = load_config(args.config, overrides=fixture.get('config'))
        result = compute_fixture_layout(fixture, config)
    except (InvalidInputError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.format == 'json':
        print(json.dumps(layout_to_dict(result), indent=2))
    elif args.format == 'yaml':
        print(yaml.dump(layout_to_dict(result), default_flow_style=False, sort_keys=False))
    else:
        print(format_summary(result))
    return 0


if __name__ == '__main__':
    sys.exit(main())
