"""
Individuals: a species plus lineage and fitness bookkeeping.

The species carries all genetic meaning; Individual only adds what the run
driver tracks (identity, generation, parents, fitness).
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Any
import uuid

import numpy as np

from ..core.parameters import CGPParameters
from ..core.species import Species, random_species


def generate_individual_id(generation: int = 0, prefix: str = '') -> str:
    """Generate a unique individual identifier."""
    short_uuid = uuid.uuid4().hex[:8]
    if prefix:
        return f"{prefix}_gen{generation}_{short_uuid}"
    return f"gen{generation}_{short_uuid}"


@dataclass
class Individual:
    """
    A candidate program in the population.

    Attributes:
        species: Genome and layout
        individual_id: Unique identifier
        generation: Generation in which this individual was created
        parents: Parent identifiers (for lineage tracking)
        fitness: Fitness after evaluation (None if not yet evaluated)
    """
    species: Species
    individual_id: str
    generation: int
    parents: Tuple[str, ...]
    fitness: Optional[float] = None

    @property
    def real_valued(self) -> bool:
        return self.species.real_valued

    @property
    def genome(self) -> np.ndarray:
        return self.species.genome

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            'genome': self.species.to_list(),
            'real_valued': self.species.real_valued,
            'individual_id': self.individual_id,
            'generation': self.generation,
            'parents': list(self.parents),
            'fitness': self.fitness,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], parameters: CGPParameters) -> 'Individual':
        """Create Individual from dictionary (e.g., loaded from JSON)."""
        dtype = np.float64 if data.get('real_valued') else np.int64
        return cls(
            species=Species(parameters, np.asarray(data['genome'], dtype=dtype)),
            individual_id=data['individual_id'],
            generation=data['generation'],
            parents=tuple(data['parents']),
            fitness=data.get('fitness'),
        )

    def copy(self) -> 'Individual':
        """Copy sharing the (read-only) species."""
        return Individual(
            species=self.species,
            individual_id=self.individual_id,
            generation=self.generation,
            parents=self.parents,
            fitness=self.fitness,
        )

    def __repr__(self) -> str:
        fitness_str = f", fitness={self.fitness:.4f}" if self.fitness is not None else ""
        kind = 'real' if self.real_valued else 'int'
        return (
            f"Individual(id={self.individual_id}, {kind}, size={len(self.species)}, "
            f"gen={self.generation}{fitness_str})"
        )


def create_random_individual(
    parameters: CGPParameters,
    rng: Optional[np.random.Generator] = None,
    generation: int = 0,
    real_valued: bool = False,
    prefix: str = 'rand',
) -> Individual:
    """
    Create a random individual with a valid genome.

    Args:
        parameters: Run parameters defining the genome layout
        rng: numpy Generator (seeded from parameters.seed if omitted)
        generation: Generation number for this individual
        real_valued: Use a real-valued genome instead of an integer one
        prefix: Prefix for the individual ID

    Returns:
        A randomly initialized Individual
    """
    return Individual(
        species=random_species(parameters, rng, real_valued=real_valued),
        individual_id=generate_individual_id(generation, prefix),
        generation=generation,
        parents=('random',),
    )
