"""
Classification by bit counting.

The phenotype is split into num_classes contiguous blocks of equal width.
The predicted class is the block with the most set bits (ties go to the
lowest class index). Two fitness policies are supported:

- 'hard':   0.0 when the prediction is correct, 1.0 otherwise
- 'margin': -(bits set in the true block) when correct, and
            50 + (max bits set - bits set in the true block) when wrong

validate() always reports plain accuracy (instances correct), whichever
policy drives selection.
"""

from typing import Any, Sequence
import numpy as np

from .base import BlackBoxProblem
from ..core.errors import InvalidConfig, OutOfRange


POLICY_HARD = 'hard'
POLICY_MARGIN = 'margin'
POLICIES = (POLICY_HARD, POLICY_MARGIN)

# Fixed offset separating any wrong prediction from any correct one
MARGIN_PENALTY = 50


class BitCountClassifierProblem(BlackBoxProblem):
    """
    Bit-count classifier scorer.

    Each target vector holds the true class label as its first element.
    """

    name = 'Bit-Count Classifier Problem'
    single_bit_outputs = True

    def __init__(
        self,
        *args,
        num_classes: int = 10,
        policy: str = POLICY_HARD,
        **kwargs,
    ):
        super().__init__(*args, **kwargs)
        if num_classes < 1:
            raise InvalidConfig(f"num_classes must be positive, got {num_classes}")
        if self.parameters.num_outputs % num_classes != 0:
            raise InvalidConfig(
                f"Total outputs ({self.parameters.num_outputs}) must be a multiple "
                f"of {num_classes} classes"
            )
        if policy not in POLICIES:
            raise InvalidConfig(f"Unknown policy '{policy}'. Available: {', '.join(POLICIES)}")

        self.num_classes = num_classes
        self.policy = policy
        self.bits_per_class = self.parameters.num_outputs // num_classes

    def class_bit_counts(self, phenotype_output: Sequence) -> np.ndarray:
        """Number of non-zero outputs in each class block."""
        self.check_output_length(phenotype_output)
        blocks = np.asarray(phenotype_output).reshape(self.num_classes, self.bits_per_class)
        return np.count_nonzero(blocks, axis=1)

    def predict(self, phenotype_output: Sequence) -> int:
        """Argmax class; np.argmax returns the first maximum, i.e. the lowest index."""
        return int(np.argmax(self.class_bit_counts(phenotype_output)))

    def _label(self, target: Sequence) -> int:
        label = int(target[0])
        if not 0 <= label < self.num_classes:
            raise OutOfRange(f"Label {label} outside [0, {self.num_classes - 1}]")
        return label

    def evaluate(self, target: Sequence, phenotype_output: Sequence) -> float:
        true_label = self._label(target)
        counts = self.class_bit_counts(phenotype_output)
        best_class = int(np.argmax(counts))
        correct = best_class == true_label

        if self.policy == POLICY_HARD:
            return 0.0 if correct else 1.0

        bits_true = int(counts[true_label])
        if correct:
            return -float(bits_true)
        return float(MARGIN_PENALTY + (int(counts[best_class]) - bits_true))

    def validate(self, individual: Any) -> int:
        """Number of benchmark instances classified correctly."""
        return sum(
            int(self.predict(self.phenotype(individual, i)) == self._label(self.outputs[i]))
            for i in range(self.num_instances)
        )

    def accuracy(self, individual: Any) -> float:
        return self.validate(individual) / self.num_instances
