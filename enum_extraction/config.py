"""
Configuration constants for C# enum extraction.

Defines the tree-sitter node type strings and documentation markers used
by the enum discoverer and member extractor.
"""

from typing import FrozenSet, Set

# Enum declaration node type
ENUM_DECLARATION: str = "enum_declaration"

# Enum body and member node types
ENUM_MEMBER_LIST: str = "enum_member_declaration_list"
ENUM_MEMBER: str = "enum_member_declaration"

# Identifier node type (member/enum names)
IDENTIFIER_NODE: str = "identifier"

# Error-recovery node type and attribute lists seen inside it
ERROR_NODE: str = "ERROR"
ATTRIBUTE_LIST: str = "attribute_list"
ASSIGNMENT_NODE: str = "assignment_expression"

# Comment node type (includes //, ///, /* */, /** */)
COMMENT_NODE: str = "comment"

# Preprocessor directives are trivia between tokens, like comments
PREPROCESSOR_PREFIX: str = "preproc"

# Initializer token between member name and value
EQUALS_TOKEN: str = "="

# Verbatim identifier marker (@class)
VERBATIM_PREFIX: str = "@"

# XML documentation comment markers
DOC_LINE_PREFIX: str = "///"
DOC_BLOCK_PREFIX: str = "/**"
DOC_BLOCK_SUFFIX: str = "*/"

# Element whose content is reported as the member comment
SUMMARY_TAG: str = "summary"

# Regular C# source file extensions
CSHARP_EXTENSIONS: Set[str] = {
    ".cs",
}

# File name suffixes of generated sources (lower-case)
GENERATED_SUFFIXES: tuple = (
    ".g.cs",
    ".g.i.cs",
    ".designer.cs",
)

# Build output directories that never hold regular project documents
EXCLUDED_DIRS: FrozenSet[str] = frozenset({
    "bin",
    "obj",
    "node_modules",
})

# Descriptor file extensions
PROJECT_EXTENSIONS: Set[str] = {
    ".csproj",
}
SOLUTION_SUFFIXES: tuple = (
    "sln",
    "slnx",
)

# Table layout
REPORT_COLUMNS: tuple = (
    "Name",
    "Value",
    "Comment",
)

# Aggregation policy defaults
DEFAULT_CONTINUE_ON_PROJECT_ERROR: bool = False

# Legacy .sln project type GUID for solution folders (not buildable projects)
SOLUTION_FOLDER_TYPE_GUID: str = "2150E333-8FDC-42A3-9474-1A3956D46DE8"
