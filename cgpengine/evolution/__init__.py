"""
(1+λ) evolution over CGP genomes.

Key components:
- Individual: species plus lineage and fitness
- Operators: point and probabilistic mutation
- EvolutionEngine: the generational loop with neutral drift
- Checkpoint: JSON run state for resumption
"""

from .individual import Individual, create_random_individual, generate_individual_id
from .operators import point_mutation, probabilistic_mutation, MUTATIONS
from .engine import EvolutionEngine, EvolutionConfig, EvolutionResult
from .checkpoint import EvolutionCheckpoint, EvolutionHistory, GenerationStats

__all__ = [
    # Individuals
    'Individual',
    'create_random_individual',
    'generate_individual_id',
    # Operators
    'point_mutation',
    'probabilistic_mutation',
    'MUTATIONS',
    # Engine
    'EvolutionEngine',
    'EvolutionConfig',
    'EvolutionResult',
    # Checkpointing
    'EvolutionCheckpoint',
    'EvolutionHistory',
    'GenerationStats',
]
