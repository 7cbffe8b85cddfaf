"""
CGP Engine - Cartesian Genetic Programming for black-box synthesis.

Candidate programs are flat integer (or real-valued) genomes decoded into
DAGs of primitive-function nodes, executed on benchmark inputs and scored
by a pluggable black-box problem.

Key components:
- Species / GenomeLayout: gene roles and legal ranges from position arithmetic
- FunctionSet: Boolean and arithmetic primitive sets
- Evaluator: active-node decoding and execution
- BlackBoxProblem: Royal Road, bit-count classifier, logic synthesis scorers
- Initializers: wire a run together into a Composite
- EvolutionEngine: (1+λ) search with neutral drift

Example usage:
    from cgpengine import HollandRoyalRoadInitializer, EvolutionEngine, EvolutionConfig

    composite = HollandRoyalRoadInitializer(num_function_nodes=300, seed=1).initialize()
    engine = EvolutionEngine(composite, EvolutionConfig(max_generations=2000))
    result = engine.evolve()

    print(result.summary())
"""

from .core import (
    CGPError,
    UnsupportedType,
    OutOfRange,
    UnknownOpcode,
    LengthMismatch,
    LengthError,
    InvalidConfig,
    UnsupportedOperation,
    CGPParameters,
    FunctionSet,
    BooleanFunctions,
    ArithmeticFunctions,
    get_function_set,
    GeneRole,
    GenomeLayout,
    Species,
    random_species,
    Evaluator,
)
from .problems import (
    BlackBoxProblem,
    HollandRoyalRoadProblem,
    BitCountClassifierProblem,
    LogicSynthesisProblem,
    Composite,
    HollandRoyalRoadInitializer,
    BitCountClassifierInitializer,
    ParityInitializer,
)
from .evolution import (
    Individual,
    create_random_individual,
    EvolutionEngine,
    EvolutionConfig,
    EvolutionResult,
)

__version__ = '0.1.0'

__all__ = [
    # Errors
    'CGPError',
    'UnsupportedType',
    'OutOfRange',
    'UnknownOpcode',
    'LengthMismatch',
    'LengthError',
    'InvalidConfig',
    'UnsupportedOperation',
    # Representation
    'CGPParameters',
    'FunctionSet',
    'BooleanFunctions',
    'ArithmeticFunctions',
    'get_function_set',
    'GeneRole',
    'GenomeLayout',
    'Species',
    'random_species',
    'Evaluator',
    # Problems
    'BlackBoxProblem',
    'HollandRoyalRoadProblem',
    'BitCountClassifierProblem',
    'LogicSynthesisProblem',
    'Composite',
    'HollandRoyalRoadInitializer',
    'BitCountClassifierInitializer',
    'ParityInitializer',
    # Evolution
    'Individual',
    'create_random_individual',
    'EvolutionEngine',
    'EvolutionConfig',
    'EvolutionResult',
]
