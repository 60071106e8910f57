"""
High-level orchestrator for C# enum extraction.

This module provides the document, project and solution level entry points
and the final name sort of the combined inventory.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Dict, Iterable

from core.structured_logging import phase_scope, project_scope, submit_in_context
from enum_extraction.config import DEFAULT_CONTINUE_ON_PROJECT_ERROR
from enum_extraction.models import EnumRecord
from enum_extraction.parser import TreeAcquisitionError, parse_file, count_error_nodes
from enum_extraction.traversal import extract_enums_from_tree
from enum_extraction.workspace import (
    ProjectSpec,
    SolutionSpec,
    is_regular_source_document,
    is_solution_path,
    load_project,
    load_solution,
)

logger = logging.getLogger(__name__)


class InventoryError(RuntimeError):
    """Raised when one or more projects failed and partial results are not allowed."""

    def __init__(self, failed_projects: List[str]):
        super().__init__(
            f"{len(failed_projects)} project(s) failed: {', '.join(failed_projects)}"
        )
        self.failed_projects = failed_projects


class ExtractionStats:
    """Statistics for an extraction operation."""

    def __init__(self):
        self.documents_processed = 0
        self.documents_failed = 0
        self.enums_extracted = 0
        self.members_extracted = 0
        self.parse_errors = 0

    def merge(self, other: "ExtractionStats") -> None:
        """Add another stats object's counters to this one."""
        self.documents_processed += other.documents_processed
        self.documents_failed += other.documents_failed
        self.enums_extracted += other.enums_extracted
        self.members_extracted += other.members_extracted
        self.parse_errors += other.parse_errors

    def to_dict(self) -> Dict[str, int]:
        """Convert stats to dictionary."""
        return {
            "documents_processed": self.documents_processed,
            "documents_failed": self.documents_failed,
            "enums_extracted": self.enums_extracted,
            "members_extracted": self.members_extracted,
            "parse_errors": self.parse_errors,
        }

    def __str__(self) -> str:
        """String representation of stats."""
        return (
            f"ExtractionStats(processed={self.documents_processed}, "
            f"failed={self.documents_failed}, enums={self.enums_extracted}, "
            f"members={self.members_extracted}, parse_errors={self.parse_errors})"
        )


@dataclass
class DocumentExtractionDiagnostics:
    """Per-document extraction diagnostics."""

    records: List[EnumRecord]
    parse_error_count: int


@dataclass
class ProjectResult:
    """Outcome of one project's aggregation: records, or the error that stopped it."""

    project_name: str
    records: List[EnumRecord] = field(default_factory=list)
    stats: ExtractionStats = field(default_factory=ExtractionStats)
    failed_documents: List[str] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


@dataclass
class InventoryResult:
    """Sorted inventory plus the per-project outcomes it was built from."""

    records: List[EnumRecord]
    projects: List[ProjectResult]

    @property
    def stats(self) -> ExtractionStats:
        total = ExtractionStats()
        for project in self.projects:
            total.merge(project.stats)
        return total

    @property
    def failed_projects(self) -> List[str]:
        return [p.project_name for p in self.projects if not p.succeeded]

    @property
    def failed_documents(self) -> List[str]:
        return [
            f"{p.project_name}:{doc}"
            for p in self.projects
            for doc in p.failed_documents
        ]


def resolve_relative_path(file_path: str, base_dir: str) -> str:
    """Path of ``file_path`` relative to ``base_dir``; absolute if not computable."""
    try:
        return os.path.relpath(file_path, base_dir)
    except ValueError:
        logger.warning(
            "Cannot compute relative path for %s from %s. Using absolute path.",
            file_path,
            base_dir,
        )
        return os.path.abspath(file_path)


def _process_document_with_diagnostics(
    file_path: str,
    project_name: str,
    base_dir: str,
) -> DocumentExtractionDiagnostics:
    """Extract enum records from a single document with parse diagnostics."""
    if not is_regular_source_document(file_path):
        raise ValueError(f"File {file_path} is not a regular C# source document")

    relative_path = resolve_relative_path(file_path, base_dir)
    logger.debug("Extracting enums from %s", relative_path)

    tree, source_bytes = parse_file(file_path)
    parse_error_count = count_error_nodes(tree) if tree.root_node.has_error else 0

    if parse_error_count:
        logger.warning(
            "File %s contains syntax errors (%d error nodes)",
            relative_path,
            parse_error_count,
        )

    records = extract_enums_from_tree(
        tree=tree,
        source_bytes=source_bytes,
        project_name=project_name,
        file_path=relative_path,
    )

    return DocumentExtractionDiagnostics(
        records=records,
        parse_error_count=parse_error_count,
    )


def process_document(
    file_path: str,
    project_name: str,
    base_dir: str,
) -> List[EnumRecord]:
    """Extract all enum records from a single C# document.

    Args:
        file_path: Absolute or relative path to the .cs file.
        project_name: Display name of the owning project.
        base_dir: Project base directory used for relative paths.

    Returns:
        Enum records in source order (possibly empty).

    Raises:
        TreeAcquisitionError: If no syntax tree can be obtained.
        ValueError: If the file is not a regular C# source document.

    Example:
        >>> records = process_document("/src/Demo/Colors.cs", "Demo", "/src/Demo")
        >>> records[0].title
        'Color - Demo - Colors.cs:2'
    """
    return _process_document_with_diagnostics(file_path, project_name, base_dir).records


def process_project(project: ProjectSpec) -> ProjectResult:
    """Run the document processor over every regular document of a project.

    A document whose tree cannot be acquired is dropped on its own: the
    failure is logged, counted and listed, and the rest of the project is
    still processed. Any other error propagates.

    Args:
        project: The project descriptor.

    Returns:
        ProjectResult with the concatenated records of all documents.
    """
    result = ProjectResult(project_name=project.name)
    stats = result.stats

    with project_scope(project.name):
        logger.info("Processing %d documents", len(project.documents))

        for file_path in project.documents:
            if not is_regular_source_document(file_path):
                logger.debug("Skipping non-regular document %s", file_path)
                continue

            try:
                diagnostics = _process_document_with_diagnostics(
                    file_path=file_path,
                    project_name=project.name,
                    base_dir=project.base_dir,
                )
            except TreeAcquisitionError as e:
                logger.error("Dropping document without syntax tree: %s", e)
                stats.documents_failed += 1
                result.failed_documents.append(
                    resolve_relative_path(file_path, project.base_dir)
                )
                continue

            result.records.extend(diagnostics.records)
            stats.documents_processed += 1
            stats.enums_extracted += len(diagnostics.records)
            stats.members_extracted += sum(len(r.values) for r in diagnostics.records)
            stats.parse_errors += diagnostics.parse_error_count

        logger.info("Project complete: %s", stats)
    return result


def _run_project_task(project: ProjectSpec) -> ProjectResult:
    """Worker body: turn an escaping error into an explicit failed result."""
    try:
        return process_project(project)
    except Exception as e:
        logger.error("Project %s failed: %s", project.name, e, exc_info=True)
        return ProjectResult(project_name=project.name, error=e)


def sort_enum_records(records: Iterable[EnumRecord]) -> List[EnumRecord]:
    """Stable ordinal sort by enum name; equal names keep discovery order."""
    return sorted(records, key=lambda record: record.name)


def _collect_results(
    results: List[ProjectResult],
    continue_on_project_error: bool,
) -> InventoryResult:
    """Apply the project failure policy and flatten the successful results."""
    failed = [r for r in results if not r.succeeded]
    if failed:
        names = [r.project_name for r in failed]
        if not continue_on_project_error:
            raise InventoryError(names) from failed[0].error
        logger.warning("Continuing without failed projects: %s", ", ".join(names))

    records = [record for r in results if r.succeeded for record in r.records]
    return InventoryResult(records=sort_enum_records(records), projects=results)


def process_solution(
    solution: SolutionSpec,
    max_workers: Optional[int] = None,
    continue_on_project_error: bool = DEFAULT_CONTINUE_ON_PROJECT_ERROR,
) -> InventoryResult:
    """Aggregate every project of a solution concurrently.

    Each project runs as its own thread-pool task and always runs to
    completion, whatever happens to the others. The combined list is only
    built after all tasks have finished. Projects whose descriptor failed to
    load are reported as failed projects under the same policy.

    Args:
        solution: The solution descriptor.
        max_workers: Thread pool size; None selects the executor default.
        continue_on_project_error: If True, report the records of the
            projects that succeeded. If False, raise when any project failed.

    Returns:
        InventoryResult with records sorted by name.

    Raises:
        InventoryError: If a project failed and continue_on_project_error is False.
    """
    logger.info(
        "Processing solution %s (%d projects, %d failed to load)",
        solution.name,
        len(solution.projects),
        len(solution.load_failures),
    )

    with phase_scope("scan"):
        with ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="enum-scan",
        ) as pool:
            futures = [
                submit_in_context(pool, _run_project_task, project)
                for project in solution.projects
            ]
        # Executor exit is the join barrier
        results = [future.result() for future in futures]

    results.extend(
        ProjectResult(project_name=failure.name, error=failure.error)
        for failure in solution.load_failures
    )

    inventory = _collect_results(results, continue_on_project_error)
    logger.info("Solution complete: %s", inventory.stats)
    return inventory


def process_single_project(
    project: ProjectSpec,
    continue_on_project_error: bool = DEFAULT_CONTINUE_ON_PROJECT_ERROR,
) -> InventoryResult:
    """Aggregate a lone project into a sorted inventory."""
    with phase_scope("scan"):
        result = _run_project_task(project)
    return _collect_results([result], continue_on_project_error)


def run_inventory(
    input_path: str,
    max_workers: Optional[int] = None,
    continue_on_project_error: bool = DEFAULT_CONTINUE_ON_PROJECT_ERROR,
    extra_excluded_dirs: Iterable[str] = (),
) -> InventoryResult:
    """Load a project or solution descriptor and build its sorted inventory.

    Args:
        input_path: Path to a .csproj, .sln or .slnx file.
        max_workers: Thread pool size for solutions.
        continue_on_project_error: Project failure policy, see process_solution.
        extra_excluded_dirs: Directory names to skip in addition to bin/obj.

    Returns:
        InventoryResult with records sorted by name.

    Example:
        >>> result = run_inventory("Demo.sln")
        >>> [r.name for r in result.records]
        ['Color', 'Shape']
    """
    if is_solution_path(input_path):
        with phase_scope("load"):
            solution = load_solution(input_path, extra_excluded_dirs=extra_excluded_dirs)
        return process_solution(
            solution,
            max_workers=max_workers,
            continue_on_project_error=continue_on_project_error,
        )

    with phase_scope("load"):
        project = load_project(input_path, extra_excluded_dirs=extra_excluded_dirs)
    return process_single_project(project, continue_on_project_error=continue_on_project_error)
