"""
random_art - Images from random expression trees

A random expression tree maps normalized pixel coordinates (x, y) to a
value in roughly [-1, 1], which is rescaled into a grayscale or RGB channel.
"""

__version__ = "0.1.0"
__author__ = "Random Art Project"

from .ast_nodes import (
    ASTNode, Variable, UnaryOp, BinaryOp, Value, Opcode,
    create_random_node, random_trees, evaluate, scaled_sigmoid,
    VALUES, OPCODES, UNARY_OPS, BINARY_OPS, EXP_LIMIT
)
from .config import ArtConfig
from .generators import (
    PixelGenerator, GrayscaleGenerator, RgbGenerator, make_generator,
    to_channel, to_channel_array, create_coordinate_grids,
    generate_image, render_image, save_image
)

__all__ = [
    'ASTNode', 'Variable', 'UnaryOp', 'BinaryOp', 'Value', 'Opcode',
    'create_random_node', 'random_trees', 'evaluate', 'scaled_sigmoid',
    'VALUES', 'OPCODES', 'UNARY_OPS', 'BINARY_OPS', 'EXP_LIMIT',
    'ArtConfig',
    'PixelGenerator', 'GrayscaleGenerator', 'RgbGenerator', 'make_generator',
    'to_channel', 'to_channel_array', 'create_coordinate_grids',
    'generate_image', 'render_image', 'save_image',
]
