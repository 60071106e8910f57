"""
Tree-sitter parser initialization and C# file parsing utilities.

This module is the tree acquirer: it turns a document path into a parsed
syntax tree, or raises TreeAcquisitionError when no tree can be obtained.
"""

import logging
from typing import Tuple
import tree_sitter_c_sharp as tscsharp
from tree_sitter import Language, Node, Parser, Tree

# Configure logging
logger = logging.getLogger(__name__)

# Module-level language constant
CSHARP_LANGUAGE = Language(tscsharp.language())


class TreeAcquisitionError(RuntimeError):
    """Raised when a document cannot be turned into a syntax tree."""

    def __init__(self, file_path: str, reason: str):
        super().__init__(f"Cannot acquire syntax tree for {file_path}: {reason}")
        self.file_path = file_path
        self.reason = reason


def create_parser() -> Parser:
    """Create and configure a tree-sitter parser for C#.

    Parsers are not thread-safe; every worker creates its own.

    Returns:
        A Parser instance configured with the C# language.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"enum Color { Red }")
    """
    parser = Parser(CSHARP_LANGUAGE)
    logger.debug("Created tree-sitter C# parser")
    return parser


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of C# source code.

    Args:
        source: UTF-8 encoded bytes of C# source code.

    Returns:
        A Tree object representing the parsed AST.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"enum Color { Red }")
        >>> tree.root_node.type
        'compilation_unit'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    parser = create_parser()
    tree = parser.parse(source)

    if tree.root_node.has_error:
        logger.warning("Parsed tree contains syntax errors")

    logger.debug("Parsed %d bytes of C# code", len(source))
    return tree


def read_source(file_path: str) -> bytes:
    """Read a C# document and normalize it to UTF-8 bytes.

    A UTF-8 byte order mark is dropped so that tree-sitter byte offsets
    and the returned buffer line up.

    Raises:
        TreeAcquisitionError: If the file cannot be read or is not valid UTF-8.
    """
    try:
        with open(file_path, "rb") as f:
            raw = f.read()
    except OSError as e:
        logger.error("Error reading file %s: %s", file_path, e)
        raise TreeAcquisitionError(file_path, str(e)) from e

    try:
        text = raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        logger.error("File %s is not valid UTF-8: %s", file_path, e)
        raise TreeAcquisitionError(file_path, "not valid UTF-8") from e

    return text.encode("utf-8")


def parse_file(file_path: str) -> Tuple[Tree, bytes]:
    """Parse a C# source file from disk.

    Args:
        file_path: Path to the .cs file.

    Returns:
        A tuple of (Tree, source_bytes) where:
        - Tree is the parsed AST
        - source_bytes is the UTF-8 content the tree was parsed from

    Raises:
        TreeAcquisitionError: If the file cannot be read or decoded.

    Example:
        >>> tree, source = parse_file("Colors.cs")
        >>> tree.root_node.type
        'compilation_unit'
    """
    source_bytes = read_source(file_path)
    tree = parse_bytes(source_bytes)
    logger.debug("Successfully parsed file: %s", file_path)
    return tree, source_bytes


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree."""
    count = 0
    stack: list[Node] = [tree.root_node]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        stack.extend(node.children)
    return count
