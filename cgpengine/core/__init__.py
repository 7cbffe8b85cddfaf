"""Core CGP representation: parameters, function sets, genome decoding, evaluation."""

from .errors import (
    CGPError,
    UnsupportedType,
    OutOfRange,
    UnknownOpcode,
    LengthMismatch,
    LengthError,
    InvalidConfig,
    UnsupportedOperation,
)
from .parameters import CGPParameters, TOPOLOGY_CLASSIC, TOPOLOGY_FIXED_LAYER
from .functions import (
    FunctionSet,
    BooleanFunctions,
    ArithmeticFunctions,
    FUNCTION_SETS,
    get_function_set,
)
from .species import GeneRole, GenomeLayout, Species, random_species
from .evaluator import Evaluator

__all__ = [
    'CGPError',
    'UnsupportedType',
    'OutOfRange',
    'UnknownOpcode',
    'LengthMismatch',
    'LengthError',
    'InvalidConfig',
    'UnsupportedOperation',
    'CGPParameters',
    'TOPOLOGY_CLASSIC',
    'TOPOLOGY_FIXED_LAYER',
    'FunctionSet',
    'BooleanFunctions',
    'ArithmeticFunctions',
    'FUNCTION_SETS',
    'get_function_set',
    'GeneRole',
    'GenomeLayout',
    'Species',
    'random_species',
    'Evaluator',
]
