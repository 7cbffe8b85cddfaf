"""
Tests for the command-line entry point.

Run with: python -m pytest tests/test_cli.py -v
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cgpengine.__main__ import main, parse_args, build_initializer
from cgpengine.problems.initializers import HollandRoyalRoadInitializer, ParityInitializer


class TestCommandLine:
    """Tests for argument parsing and short runs."""

    def test_defaults(self):
        args = parse_args(['royal-road'])
        assert args.nodes == 300
        assert args.topology == 'classic'
        assert args.offspring == 4
        assert not args.real_valued

    def test_unknown_problem(self):
        with pytest.raises(SystemExit):
            parse_args(['knapsack'])

    def test_build_initializer(self):
        """Problem name picks the initializer; options become parameter overrides."""
        assert isinstance(build_initializer(parse_args(['royal-road'])), HollandRoyalRoadInitializer)
        initializer = build_initializer(parse_args(['parity', '--bits', '4', '--nodes', '20']))
        assert isinstance(initializer, ParityInitializer)
        assert initializer.num_bits == 4
        assert initializer.parameter_overrides['num_function_nodes'] == 20

    def test_short_parity_run(self, capsys, tmp_path):
        """A short run prints the summary and writes a final checkpoint."""
        exit_code = main([
            'parity', '--bits', '2', '--nodes', '10', '--generations', '20',
            '--seed', '1', '--checkpoint-dir', str(tmp_path),
        ])
        out = capsys.readouterr().out
        assert exit_code in (0, 1)
        assert 'Evolution Run' in out
        assert 'Circuit:' in out
        assert list(tmp_path.glob('*_gen*.json'))
