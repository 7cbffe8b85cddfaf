"""
Function sets - the primitive operations a CGP node can perform.

A function set maps an opcode to (arity, evaluation rule, display name) and
pins the element dtype the primitives operate over. Two variants ship:
- Boolean: bitwise logic over integer dtypes (logic synthesis, bit strings)
- Arithmetic: protected arithmetic over floating dtypes (symbolic regression)

Function sets are immutable after construction and safe to share between
concurrent evaluations.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
import operator
from typing import Callable, Dict, Sequence, Tuple, Type, Any
import numpy as np

from .errors import UnsupportedType, UnknownOpcode, LengthMismatch, InvalidConfig


# =============================================================================
# Boolean primitives
# =============================================================================

def bool_and(a, b):
    return a & b


def bool_or(a, b):
    return a | b


def bool_nand(a, b):
    return ~(a & b)


def bool_nor(a, b):
    return ~(a | b)


def bool_buf(a):
    return a


def bool_not(a):
    return ~a


def bool_xor(a, b):
    return a ^ b


def bool_xnor(a, b):
    return ~(a ^ b)


# =============================================================================
# Arithmetic primitives
# =============================================================================

def arith_add(a, b):
    return a + b


def arith_sub(a, b):
    return a - b


def arith_mul(a, b):
    return a * b


def arith_div(a, b):
    """Protected division: 1.0 wherever the denominator is zero."""
    a = np.asarray(a)
    b = np.asarray(b)
    out = np.ones(np.broadcast(a, b).shape, dtype=np.result_type(a, b))
    return np.divide(a, b, out=out, where=(b != 0))


def arith_neg(a):
    return -a


def arith_id(a):
    return a


@dataclass(frozen=True)
class Primitive:
    """One entry of a function set."""
    name: str
    arity: int
    func: Callable


class FunctionSet(ABC):
    """
    Base class for function sets.

    Subclasses declare `primitives` (indexed by opcode) and the numpy dtype
    kind they support. Construction fails with UnsupportedType when the
    requested dtype cannot represent the primitive domain.
    """

    name: str = 'abstract'
    primitives: Tuple[Primitive, ...] = ()
    default_dtype: Any = np.int64

    def __init__(self, dtype: Any = None):
        try:
            self.dtype = np.dtype(self.default_dtype if dtype is None else dtype)
        except TypeError as e:
            raise UnsupportedType(f"{dtype!r} is not a numpy dtype") from e
        if not self.supports_dtype(self.dtype):
            raise UnsupportedType(
                f"{type(self).__name__} does not support dtype {self.dtype}"
            )

    @classmethod
    @abstractmethod
    def supports_dtype(cls, dtype: np.dtype) -> bool:
        """Whether this set's primitives are defined over dtype."""

    @property
    def num_functions(self) -> int:
        return len(self.primitives)

    @property
    def max_arity(self) -> int:
        return max(p.arity for p in self.primitives)

    def _primitive(self, opcode: int) -> Primitive:
        try:
            index = operator.index(opcode)
        except TypeError:
            raise UnknownOpcode(f"Illegal function number: {opcode!r}") from None
        if isinstance(opcode, bool) or not 0 <= index < len(self.primitives):
            raise UnknownOpcode(f"Illegal function number: {opcode}")
        return self.primitives[index]

    def call(self, inputs: Sequence, opcode: int):
        """
        Apply the primitive named by opcode to the first arity_of(opcode) inputs.

        Inputs may be scalars or equally-shaped arrays (one value per benchmark
        instance); the result has the function set's dtype.
        """
        primitive = self._primitive(opcode)
        if len(inputs) < primitive.arity:
            raise LengthMismatch(
                f"{primitive.name} needs {primitive.arity} inputs, got {len(inputs)}"
            )
        args = [np.asarray(v, dtype=self.dtype) for v in inputs[:primitive.arity]]
        with np.errstate(over='ignore', invalid='ignore'):
            result = np.asarray(primitive.func(*args), dtype=self.dtype)
        return result[()]

    def arity_of(self, opcode: int) -> int:
        return self._primitive(opcode).arity

    def name_of(self, opcode: int) -> str:
        return self._primitive(opcode).name

    def input_label(self, index: int) -> str:
        return f"x{index}"

    def __repr__(self):
        return f"{type(self).__name__}(n={self.num_functions}, dtype={self.dtype})"


class BooleanFunctions(FunctionSet):
    """
    AND, OR, NAND, NOR, BUF, NOT, XOR, XNOR over integer dtypes.

    Bitwise semantics cover the full element width; callers mask results
    when only single-bit semantics are wanted.
    """

    name = 'boolean'
    default_dtype = np.int64
    primitives = (
        Primitive('AND', 2, bool_and),
        Primitive('OR', 2, bool_or),
        Primitive('NAND', 2, bool_nand),
        Primitive('NOR', 2, bool_nor),
        Primitive('BUF', 1, bool_buf),
        Primitive('NOT', 1, bool_not),
        Primitive('XOR', 2, bool_xor),
        Primitive('XNOR', 2, bool_xnor),
    )

    @classmethod
    def supports_dtype(cls, dtype: np.dtype) -> bool:
        return np.issubdtype(dtype, np.integer)


class ArithmeticFunctions(FunctionSet):
    """Protected arithmetic over floating dtypes."""

    name = 'arithmetic'
    default_dtype = np.float64
    primitives = (
        Primitive('ADD', 2, arith_add),
        Primitive('SUB', 2, arith_sub),
        Primitive('MUL', 2, arith_mul),
        Primitive('DIV', 2, arith_div),
        Primitive('NEG', 1, arith_neg),
        Primitive('ID', 1, arith_id),
    )

    @classmethod
    def supports_dtype(cls, dtype: np.dtype) -> bool:
        return np.issubdtype(dtype, np.floating)


# Registry of function set variants selectable by run configuration
FUNCTION_SETS: Dict[str, Type[FunctionSet]] = {
    'boolean': BooleanFunctions,
    'arithmetic': ArithmeticFunctions,
}


# Opcodes of the Boolean set, for readable genomes in tests and examples
AND, OR, NAND, NOR, BUF, NOT, XOR, XNOR = range(8)


def get_function_set(name: str, dtype: Any = None) -> FunctionSet:
    """Instantiate a function set by name."""
    if name not in FUNCTION_SETS:
        available = ', '.join(FUNCTION_SETS.keys())
        raise InvalidConfig(f"Unknown function set '{name}'. Available: {available}")
    return FUNCTION_SETS[name](dtype)
