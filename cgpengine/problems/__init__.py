"""Black-box problems (scorers) and the initializers that set them up."""

from .base import BlackBoxProblem
from .royal_road import HollandRoyalRoadProblem
from .bit_count import BitCountClassifierProblem
from .logic import LogicSynthesisProblem
from .initializers import (
    Composite,
    BlackBoxInitializer,
    HollandRoyalRoadInitializer,
    BitCountClassifierInitializer,
    ParityInitializer,
)

__all__ = [
    'BlackBoxProblem',
    'HollandRoyalRoadProblem',
    'BitCountClassifierProblem',
    'LogicSynthesisProblem',
    'Composite',
    'BlackBoxInitializer',
    'HollandRoyalRoadInitializer',
    'BitCountClassifierInitializer',
    'ParityInitializer',
]
