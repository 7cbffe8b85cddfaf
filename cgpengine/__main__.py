"""
Command-line entry point.

Usage:
    python -m cgpengine royal-road [options]
    python -m cgpengine parity --bits 3 [options]

Options:
    --nodes N           Number of function nodes (default: 300)
    --levels-back N     Levels-back (classic) or layer width (fixed_layer)
    --topology T        classic | fixed_layer (default: classic)
    --offspring N       λ in the (1+λ) strategy (default: 4)
    --mutation-rate R   Fraction of genes mutated per child (default: 0.02)
    --real-valued       Evolve real-valued genomes
    --generations N     Maximum generations (default: 10000)
    --workers N         Parallel workers (default: 1)
    --seed N            Random seed for reproducibility
    --checkpoint-dir D  Write JSON checkpoints to D
    --resume PATH       Resume from checkpoint file
    --verbose           Debug logging
"""

import argparse
import logging
import sys

from .core.parameters import TOPOLOGIES, TOPOLOGY_CLASSIC
from .problems.initializers import HollandRoyalRoadInitializer, ParityInitializer
from .evolution.engine import EvolutionEngine, EvolutionConfig


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog='cgpengine',
        description='Run a Cartesian Genetic Programming benchmark'
    )
    parser.add_argument(
        'problem', choices=['royal-road', 'parity'],
        help='Benchmark to run'
    )
    parser.add_argument(
        '--bits', type=int, default=3,
        help='Input bits for the parity problem (default: 3)'
    )
    parser.add_argument(
        '--nodes', type=int, default=300,
        help='Number of function nodes (default: 300)'
    )
    parser.add_argument(
        '--levels-back', type=int, default=None,
        help='Levels-back (classic) or layer width (fixed_layer)'
    )
    parser.add_argument(
        '--topology', choices=TOPOLOGIES, default=TOPOLOGY_CLASSIC,
        help='Connection topology (default: classic)'
    )
    parser.add_argument(
        '--offspring', type=int, default=4,
        help='Offspring per generation (default: 4)'
    )
    parser.add_argument(
        '--mutation-rate', type=float, default=0.02,
        help='Fraction of genes mutated per child (default: 0.02)'
    )
    parser.add_argument(
        '--real-valued', action='store_true',
        help='Evolve real-valued genomes'
    )
    parser.add_argument(
        '--generations', type=int, default=10000,
        help='Maximum number of generations (default: 10000)'
    )
    parser.add_argument(
        '--workers', type=int, default=1,
        help='Number of parallel workers (default: 1)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    parser.add_argument(
        '--checkpoint-dir', type=str, default=None,
        help='Directory for JSON checkpoints'
    )
    parser.add_argument(
        '--resume', type=str, default=None,
        help='Path to checkpoint file to resume from'
    )
    parser.add_argument(
        '--verbose', action='store_true',
        help='Enable debug logging'
    )
    return parser.parse_args(argv)


def build_initializer(args):
    overrides = {
        'num_function_nodes': args.nodes,
        'levels_back': args.levels_back,
        'topology': args.topology,
        'seed': args.seed,
    }
    if args.problem == 'royal-road':
        return HollandRoyalRoadInitializer(**overrides)
    return ParityInitializer(num_bits=args.bits, **overrides)


def print_banner():
    print("=" * 70)
    print("   CGP ENGINE - Cartesian Genetic Programming")
    print("=" * 70)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    print_banner()
    composite = build_initializer(args).initialize()
    config = EvolutionConfig(
        offspring=args.offspring,
        mutation_rate=args.mutation_rate,
        real_valued=args.real_valued,
        max_generations=args.generations,
        n_workers=args.workers,
        checkpoint_every=100 if args.checkpoint_dir else 0,
        checkpoint_dir=args.checkpoint_dir,
    )
    engine = EvolutionEngine(composite, config)
    if args.resume:
        engine.load_checkpoint(args.resume)

    print(f"\nProblem:    {composite.problem.name}")
    print(f"Genome:     {composite.parameters.num_function_nodes} nodes, "
          f"{composite.parameters.topology} topology")
    print(f"Strategy:   (1+{config.offspring}), mutation rate {config.mutation_rate}\n")

    result = engine.evolve()

    print("\n" + "=" * 70)
    print(result.summary())
    if args.problem == 'parity':
        expressions = composite.evaluator.describe(result.best_individual)
        print(f"Circuit: {expressions[0]}")
    print("=" * 70)
    return 0 if result.solved else 1


if __name__ == '__main__':
    sys.exit(main())
