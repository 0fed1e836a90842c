"""
random_art/ast_nodes.py - Expression tree nodes and random construction
"""
import logging
import random
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional, Sequence, Union

import numpy as np

logger = logging.getLogger(__name__)

Number = Union[float, np.ndarray]

# exp() overflows a double just above 709, saturate before that
EXP_LIMIT = 700.0


class Value(Enum):
    """Coordinate a terminal node is bound to"""
    X = 'x'
    Y = 'y'


class Opcode(Enum):
    """Closed set of node operations"""
    SUBSTITUTE = 'substitute'
    MULT = 'mult'
    AVERAGE = 'avg'
    SIN = 'sin'
    COS = 'cos'
    SCALED_SIGMOID = 'sigmoid'
    SQRT = 'sqrt'

    @property
    def arity(self) -> int:
        return ARITY[self]


ARITY = {
    Opcode.SUBSTITUTE: 0,
    Opcode.MULT: 2,
    Opcode.AVERAGE: 2,
    Opcode.SIN: 1,
    Opcode.COS: 1,
    Opcode.SCALED_SIGMOID: 1,
    Opcode.SQRT: 1,
}

# Primitive sets for random generation
VALUES = tuple(Value)
OPCODES = tuple(Opcode)
UNARY_OPS = tuple(op for op in OPCODES if op.arity == 1)
BINARY_OPS = tuple(op for op in OPCODES if op.arity == 2)


class ASTNode(ABC):
    """Base class for all expression nodes.

    Nodes are frozen once their constructor returns, so a finished tree can
    be evaluated from any number of threads without locking.
    """

    __slots__ = ('_frozen',)

    op: Opcode

    def _freeze(self) -> None:
        object.__setattr__(self, '_frozen', True)

    def __setattr__(self, name, value):
        if getattr(self, '_frozen', False):
            raise AttributeError(f"{type(self).__name__} is immutable")
        object.__setattr__(self, name, value)

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def arity(self) -> int:
        return self.op.arity

    @property
    @abstractmethod
    def children(self) -> tuple:
        """Child subtrees, left to right"""

    def evaluate(self, x: Number, y: Number) -> Number:
        """Evaluate this subtree at coordinates (x, y)"""
        return evaluate(self, x, y)

    def get_all_nodes(self) -> List['ASTNode']:
        """Get all nodes in this subtree, pre-order"""
        nodes = [self]
        for child in self.children:
            nodes.extend(child.get_all_nodes())
        return nodes

    def get_depth(self) -> int:
        """Longest path (in edges) from this node to a terminal"""
        if not self.children:
            return 0
        return 1 + max(child.get_depth() for child in self.children)


class Variable(ASTNode):
    """Terminal node returning the x or y coordinate"""

    __slots__ = ('value',)

    def __init__(self, value: Value):
        if not isinstance(value, Value):
            raise ValueError(f"Terminal must be bound to a Value, got {value!r}")
        self.value = value
        self._freeze()

    @property
    def op(self) -> Opcode:
        return Opcode.SUBSTITUTE

    @property
    def children(self) -> tuple:
        return ()

    def __str__(self):
        return self.value.value

    def __repr__(self):
        return f"Variable({self.value.name})"


class UnaryOp(ASTNode):
    """Unary operations: sin, cos, sigmoid, sqrt"""

    __slots__ = ('op', 'child')

    def __init__(self, op: Opcode, child: ASTNode):
        if op not in UNARY_OPS:
            raise ValueError(f"{op} is not a unary operation")
        self.op = op
        self.child = child
        self._freeze()

    @property
    def children(self) -> tuple:
        return (self.child,)

    def __str__(self):
        return f"{self.op.value}({self.child})"

    def __repr__(self):
        return f"UnaryOp({self.op.name}, {self.child!r})"


class BinaryOp(ASTNode):
    """Binary operations: mult, avg"""

    __slots__ = ('op', 'left', 'right')

    def __init__(self, op: Opcode, left: ASTNode, right: ASTNode):
        if op not in BINARY_OPS:
            raise ValueError(f"{op} is not a binary operation")
        self.op = op
        self.left = left
        self.right = right
        self._freeze()

    @property
    def children(self) -> tuple:
        return (self.left, self.right)

    def __str__(self):
        return f"{self.op.value}({self.left}, {self.right})"

    def __repr__(self):
        return f"BinaryOp({self.op.name}, {self.left!r}, {self.right!r})"


def scaled_sigmoid(v: Number) -> Number:
    """Logistic curve rescaled to (-1, 1), saturating instead of overflowing"""
    return 2.0 / (1.0 + np.exp(-np.clip(v, -EXP_LIMIT, EXP_LIMIT))) - 1.0


def evaluate(node: ASTNode, x: Number, y: Number) -> Number:
    """Evaluate an expression tree at (x, y).

    Works on plain floats as well as numpy arrays of coordinates. The result
    is nominally in [-1, 1] but nothing here clamps it; see
    random_art.generators.to_channel.
    """
    op = node.op
    if op is Opcode.SUBSTITUTE:
        return x if node.value is Value.X else y
    if op is Opcode.MULT:
        return evaluate(node.left, x, y) * evaluate(node.right, x, y)
    if op is Opcode.AVERAGE:
        return (evaluate(node.left, x, y) + evaluate(node.right, x, y)) / 2.0
    if op is Opcode.SIN:
        return np.sin(evaluate(node.child, x, y) * np.pi)
    if op is Opcode.COS:
        return np.cos(evaluate(node.child, x, y) * np.pi)
    if op is Opcode.SCALED_SIGMOID:
        return scaled_sigmoid(evaluate(node.child, x, y))
    if op is Opcode.SQRT:
        # abs() first, sqrt is undefined for negative arguments
        return np.sqrt(np.abs(evaluate(node.child, x, y)))
    raise ValueError(f"Unknown opcode: {op}")


def random_terminal(rng) -> Variable:
    return Variable(rng.choice(VALUES))


def create_random_node(max_depth: int, rng: Optional[random.Random] = None) -> ASTNode:
    """Create a random expression tree no deeper than max_depth.

    rng only needs a ``choice(sequence)`` method. Each node costs one opcode
    draw (skipped at depth 0) and each terminal one value draw; the left
    subtree of a binary node is drawn before the right one.
    """
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        raise ValueError(f"max_depth must be an int, got {max_depth!r}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if rng is None:
        rng = random.Random()

    tree = _build(max_depth, rng)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Built tree: %d nodes, depth %d (max %d)",
                     len(tree.get_all_nodes()), tree.get_depth(), max_depth)
    return tree


def _build(depth: int, rng) -> ASTNode:
    if depth == 0:
        return random_terminal(rng)

    op = rng.choice(OPCODES)
    if op is Opcode.SUBSTITUTE:
        return random_terminal(rng)
    if op in UNARY_OPS:
        return UnaryOp(op, _build(depth - 1, rng))
    left = _build(depth - 1, rng)
    right = _build(depth - 1, rng)
    return BinaryOp(op, left, right)


def random_trees(count: int, max_depth: int, rng: Optional[random.Random] = None) -> Sequence[ASTNode]:
    """Build ``count`` independent trees from one random source, in order"""
    if rng is None:
        rng = random.Random()
    return tuple(create_random_node(max_depth, rng) for _ in range(count))
