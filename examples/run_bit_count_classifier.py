#!/usr/bin/env python3
"""
Bit-Count Classifier Evolution Run

Evolves a Boolean circuit whose outputs are split into one block per class;
the predicted class is the block with the most bits set.

Data comes from an .npz archive with `inputs` (instances x features) and
`labels` arrays, e.g. binarized MNIST digits. Without one, a small synthetic
benchmark of noisy class prototypes is generated.

Usage:
    python examples/run_bit_count_classifier.py [options]

Options:
    --benchmark PATH    .npz file with inputs and labels
    --classes N         Number of classes (default: 10)
    --bits-per-class N  Output bits per class (default: 50)
    --policy P          hard | margin (default: margin)
    --nodes N           Number of function nodes (default: 500)
    --generations N     Number of generations (default: 2000)
    --workers N         Parallel workers (default: cpu_count - 1)
    --seed N            Random seed for reproducibility
"""

import argparse
import logging
import sys
from pathlib import Path
from multiprocessing import cpu_count

import numpy as np

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from cgpengine.problems.initializers import BitCountClassifierInitializer
from cgpengine.problems.bit_count import POLICIES, POLICY_MARGIN
from cgpengine.evolution.engine import EvolutionEngine, EvolutionConfig


def parse_args():
    parser = argparse.ArgumentParser(
        description='Evolve a bit-count classifier circuit'
    )
    parser.add_argument(
        '--benchmark', type=str, default=None,
        help='.npz file with inputs and labels'
    )
    parser.add_argument(
        '--classes', type=int, default=10,
        help='Number of classes (default: 10)'
    )
    parser.add_argument(
        '--bits-per-class', type=int, default=50,
        help='Output bits per class (default: 50)'
    )
    parser.add_argument(
        '--policy', choices=POLICIES, default=POLICY_MARGIN,
        help='Fitness policy (default: margin)'
    )
    parser.add_argument(
        '--nodes', type=int, default=500,
        help='Number of function nodes (default: 500)'
    )
    parser.add_argument(
        '--generations', type=int, default=2000,
        help='Number of generations (default: 2000)'
    )
    parser.add_argument(
        '--workers', type=int, default=None,
        help='Number of parallel workers (default: cpu_count - 1)'
    )
    parser.add_argument(
        '--seed', type=int, default=None,
        help='Random seed for reproducibility'
    )
    return parser.parse_args()


def print_banner():
    print("=" * 70)
    print("   CGP ENGINE - Bit-Count Classifier Evolution")
    print("=" * 70)


def synthetic_benchmark(num_classes: int, num_features: int = 16, per_class: int = 8, seed: int = None):
    """Noisy copies of one random binary prototype per class."""
    rng = np.random.default_rng(seed)
    prototypes = rng.integers(0, 2, size=(num_classes, num_features))
    labels = np.repeat(np.arange(num_classes), per_class)
    flips = rng.random((len(labels), num_features)) < 0.1
    inputs = prototypes[labels] ^ flips
    return inputs, labels


def progress_callback(gen: int, total: int, stats: dict):
    """Print progress during evolution."""
    pct = 100 * gen / total
    print(
        f"\r   Gen {gen:5d}/{total} ({pct:5.1f}%) | "
        f"Parent fitness: {stats['parent_fitness']:.1f} | "
        f"Active nodes: {stats['active_nodes']:4d}",
        end='', flush=True
    )


def main():
    args = parse_args()
    logging.basicConfig(level=logging.WARNING)

    print_banner()

    if args.benchmark:
        initializer = BitCountClassifierInitializer(
            benchmark_file=args.benchmark,
            num_classes=args.classes,
            bits_per_class=args.bits_per_class,
            policy=args.policy,
            num_function_nodes=args.nodes,
            seed=args.seed,
        )
    else:
        inputs, labels = synthetic_benchmark(args.classes, seed=args.seed)
        initializer = BitCountClassifierInitializer(
            inputs=inputs,
            labels=labels,
            num_classes=args.classes,
            bits_per_class=args.bits_per_class,
            policy=args.policy,
            num_function_nodes=args.nodes,
            seed=args.seed,
        )
    composite = initializer.initialize()

    n_workers = args.workers or max(1, cpu_count() - 1)
    config = EvolutionConfig(
        offspring=4,
        mutation_rate=0.01,
        max_generations=args.generations,
        report_every=0,
        n_workers=n_workers,
    )

    print("\nConfiguration:")
    print(f"   Instances:          {composite.num_instances}")
    print(f"   Features:           {composite.parameters.num_variables}")
    print(f"   Classes:            {args.classes} x {args.bits_per_class} bits")
    print(f"   Policy:             {args.policy}")
    print(f"   Function nodes:     {composite.parameters.num_function_nodes}")
    print(f"   Workers:            {n_workers}")

    engine = EvolutionEngine(composite, config)
    result = engine.evolve(progress_callback=progress_callback)
    print()  # New line after progress

    print("\n" + "=" * 70)
    print(result.summary())
    print(f"Accuracy: {composite.problem.accuracy(result.best_individual):.3f}")
    print("=" * 70)


if __name__ == '__main__':
    main()
