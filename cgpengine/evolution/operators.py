"""
Mutation operators for CGP genomes.

Operators never edit a genome in place: they copy the parent's genes, mutate
the copy and build a new Species, whose constructor re-checks every gene
against its legal range.

- Integer genomes: a mutated gene is redrawn uniformly from
  [min_gene, max_gene] of its position, excluding the current value.
- Real genomes: a mutated gene is perturbed with Gaussian noise and clipped
  to [0, 1]; reinterpretation maps it back onto a legal choice.
"""

from typing import Sequence, Optional
import numpy as np

from ..core.species import Species, GenomeLayout, REAL_GENE_MIN, REAL_GENE_MAX
from .individual import Individual, generate_individual_id


def _redraw(layout: GenomeLayout, position: int, current: int, rng: np.random.Generator) -> int:
    """New legal value for an integer gene, different from current when possible."""
    low = layout.min_gene(position)
    high = layout.max_gene(position)
    if high == low:
        return low
    # Draw from the range with the current value removed
    value = int(rng.integers(low, high))
    return value + 1 if value >= current else value


def _mutate_positions(
    individual: Individual,
    positions: Sequence[int],
    rng: np.random.Generator,
    sigma: float,
) -> np.ndarray:
    species = individual.species
    genes = species.genome.copy()

    for position in positions:
        if species.real_valued:
            perturbed = genes[position] + rng.normal(0.0, sigma)
            genes[position] = float(np.clip(perturbed, REAL_GENE_MIN, REAL_GENE_MAX))
        else:
            genes[position] = _redraw(species.layout, int(position), int(genes[position]), rng)
    return genes


def _child(parent: Individual, genes: np.ndarray, generation: int, prefix: str) -> Individual:
    return Individual(
        species=Species(parent.species.parameters, genes),
        individual_id=generate_individual_id(generation, prefix),
        generation=generation,
        parents=(parent.individual_id,),
    )


def point_mutation(
    individual: Individual,
    rng: np.random.Generator,
    generation: int,
    mutation_rate: float = 0.05,
    num_genes: Optional[int] = None,
    sigma: float = 0.1,
) -> Individual:
    """
    Mutate a fixed number of distinct genes.

    Args:
        individual: Parent individual
        rng: numpy Generator
        generation: Generation number for the child
        mutation_rate: Fraction of genes to mutate (when num_genes is None)
        num_genes: Exact number of genes to mutate
        sigma: Gaussian step for real-valued genes

    Returns:
        New mutated individual (the parent is not modified)
    """
    size = len(individual.species)
    if num_genes is None:
        num_genes = max(1, int(round(mutation_rate * size)))
    num_genes = min(num_genes, size)

    positions = rng.choice(size, size=num_genes, replace=False)
    genes = _mutate_positions(individual, positions, rng, sigma)
    return _child(individual, genes, generation, 'mut')


def probabilistic_mutation(
    individual: Individual,
    rng: np.random.Generator,
    generation: int,
    mutation_rate: float = 0.05,
    sigma: float = 0.1,
) -> Individual:
    """Mutate each gene independently with probability mutation_rate."""
    size = len(individual.species)
    positions = np.flatnonzero(rng.random(size) < mutation_rate)
    genes = _mutate_positions(individual, positions, rng, sigma)
    return _child(individual, genes, generation, 'pmut')


# Registry of mutation operators selectable by EvolutionConfig.mutation
MUTATIONS = {
    'point': point_mutation,
    'probabilistic': probabilistic_mutation,
}
