"""
Enum Extraction Engine

Tree-sitter-based C# source parser and enum inventory builder.
Extracts enum declarations, their members' initializer text, and the
<summary> of each member's XML documentation comment.
"""

from enum_extraction.models import EnumRecord, MemberRecord
from enum_extraction.parser import (
    TreeAcquisitionError,
    create_parser,
    parse_file,
    parse_bytes,
    count_error_nodes,
)
from enum_extraction.traversal import discover_enum_declarations, extract_enums_from_tree
from enum_extraction.workspace import (
    ProjectLoadFailure,
    ProjectSpec,
    SolutionSpec,
    load_project,
    load_solution,
)
from enum_extraction.extractor import (
    ExtractionStats,
    InventoryError,
    InventoryResult,
    ProjectResult,
    process_document,
    process_project,
    process_single_project,
    process_solution,
    run_inventory,
    sort_enum_records,
)

__all__ = [
    # Data models
    "EnumRecord",
    "MemberRecord",
    "ExtractionStats",
    "ProjectResult",
    "InventoryResult",
    "InventoryError",
    # Low-level parsing
    "TreeAcquisitionError",
    "create_parser",
    "parse_file",
    "parse_bytes",
    "count_error_nodes",
    # Mid-level extraction
    "discover_enum_declarations",
    "extract_enums_from_tree",
    # Descriptors
    "ProjectLoadFailure",
    "ProjectSpec",
    "SolutionSpec",
    "load_project",
    "load_solution",
    # High-level orchestration
    "process_document",
    "process_project",
    "process_single_project",
    "process_solution",
    "run_inventory",
    "sort_enum_records",
]
