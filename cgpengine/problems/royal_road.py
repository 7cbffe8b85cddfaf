"""
Holland's Royal Road - a deceptive hierarchical building-block benchmark.

The phenotype is a 240-bit string: 2^k = 16 regions of b = 8 block bits
followed by g = 7 gap bits (ignored). Score = PART + BONUS:

- PART rewards partially filled blocks up to m* = 4 ones, then penalizes
  5-7 ones; a full block earns nothing here.
- BONUS rewards complete blocks level by level. At level l the regions are
  grouped into contiguous sets of 2^l; the first complete set at a level
  earns u* = 1.0, every further complete set u = 0.3.

The engine minimizes, so the reported fitness is 12.8 - (PART + BONUS),
where 12.8 is the score of the all-complete string.
"""

from typing import Sequence, Any
import numpy as np

from .base import BlackBoxProblem
from ..core.errors import LengthError, InvalidConfig


K = 4
BLOCK_BITS = 8
GAP_BITS = 7
NUM_REGIONS = 2 ** K
REGION_LENGTH = BLOCK_BITS + GAP_BITS
STRING_LENGTH = NUM_REGIONS * REGION_LENGTH

# Payoff per block, keyed by the number of ones among its 8 block bits
PART_PAYOFF = {
    0: 0.00, 1: 0.02, 2: 0.04, 3: 0.06, 4: 0.08,
    5: -0.02, 6: -0.04, 7: -0.06, 8: 0.00,
}
U_STAR = 1.0
U = 0.3
MAX_FITNESS = 12.8

# Scores are summed in hundredths so the optimum reports exactly 0.0
_PART_CENTS = {ones: int(round(payoff * 100)) for ones, payoff in PART_PAYOFF.items()}
_U_STAR_CENTS = int(round(U_STAR * 100))
_U_CENTS = int(round(U * 100))
_MAX_CENTS = int(round(MAX_FITNESS * 100))


def block_ones(phenotype: Sequence) -> np.ndarray:
    """Number of set (non-zero) bits in each region's block, ignoring gaps."""
    bits = np.asarray(phenotype).reshape(NUM_REGIONS, REGION_LENGTH)[:, :BLOCK_BITS]
    return np.count_nonzero(bits, axis=1)


def complete_regions(phenotype: Sequence) -> np.ndarray:
    """Boolean mask of regions whose block bits are all set."""
    return block_ones(phenotype) == BLOCK_BITS


def _part_cents(phenotype: Sequence) -> int:
    return sum(_PART_CENTS[int(ones)] for ones in block_ones(phenotype))


def _bonus_cents(phenotype: Sequence) -> int:
    complete = complete_regions(phenotype)
    total = 0
    for level in range(K + 1):
        set_size = 2 ** level
        sets_found = 0
        for start in range(0, NUM_REGIONS, set_size):
            if complete[start:start + set_size].all():
                total += _U_STAR_CENTS if sets_found == 0 else _U_CENTS
                sets_found += 1
    return total


def part_fitness(phenotype: Sequence) -> float:
    """PART component of the Royal Road score."""
    return _part_cents(phenotype) / 100


def bonus_fitness(phenotype: Sequence) -> float:
    """BONUS component of the Royal Road score."""
    return _bonus_cents(phenotype) / 100


class HollandRoyalRoadProblem(BlackBoxProblem):
    """
    Royal Road scorer over a 240-output phenotype.

    The target vector carries no information; the landscape is defined by
    the phenotype alone.
    """

    name = "Holland's Royal Road Problem"
    single_bit_outputs = True

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        if self.parameters.num_outputs != STRING_LENGTH:
            raise InvalidConfig(
                f"Royal Road needs {STRING_LENGTH} outputs, parameters declare "
                f"{self.parameters.num_outputs}"
            )

    def evaluate(self, target: Sequence, phenotype_output: Sequence) -> float:
        if len(phenotype_output) != STRING_LENGTH:
            raise LengthError(
                f"Royal Road expects a {STRING_LENGTH}-bit string, got {len(phenotype_output)}"
            )
        score = _part_cents(phenotype_output) + _bonus_cents(phenotype_output)
        return (_MAX_CENTS - score) / 100

    def validate(self, individual: Any) -> int:
        """Number of complete regions, summed over benchmark instances."""
        return sum(
            int(complete_regions(self.phenotype(individual, i)).sum())
            for i in range(self.num_instances)
        )
