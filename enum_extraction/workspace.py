"""Project and solution descriptors for the enum inventory.

Loads ``.csproj`` files into ``ProjectSpec`` (name, base directory and the
regular C# documents it compiles) and ``.sln`` / ``.slnx`` files into
``SolutionSpec``.
"""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from enum_extraction.config import (
    CSHARP_EXTENSIONS,
    EXCLUDED_DIRS,
    GENERATED_SUFFIXES,
    PROJECT_EXTENSIONS,
    SOLUTION_FOLDER_TYPE_GUID,
    SOLUTION_SUFFIXES,
)

logger = logging.getLogger(__name__)

_SLN_PROJECT_RE = re.compile(
    r'^Project\("\{(?P<type>[^}]*)\}"\)\s*=\s*"(?P<name>[^"]*)"\s*,\s*'
    r'"(?P<path>[^"]*)"\s*,\s*"\{(?P<guid>[^}]*)\}"',
    re.MULTILINE,
)


@dataclass(frozen=True)
class ProjectSpec:
    """A project: display name, base directory and its documents."""

    name: str
    file_path: str
    base_dir: str
    documents: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectLoadFailure:
    """A project listed in a solution whose descriptor could not be loaded."""

    name: str
    file_path: str
    error: Exception


@dataclass(frozen=True)
class SolutionSpec:
    """A solution: display name, its projects and the ones that failed to load."""

    name: str
    file_path: str
    projects: list[ProjectSpec] = field(default_factory=list)
    load_failures: list[ProjectLoadFailure] = field(default_factory=list)


def is_solution_path(path: str) -> bool:
    """True when ``path`` names a solution (``*.sln`` / ``*.slnx``)."""
    return path.lower().endswith(SOLUTION_SUFFIXES)


def is_regular_source_document(path: str) -> bool:
    """True for regular C# documents (not scripts, markup or generated code)."""
    lower = os.path.basename(path).lower()
    if os.path.splitext(lower)[1] not in CSHARP_EXTENSIONS:
        return False
    return not lower.endswith(GENERATED_SUFFIXES)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _is_excluded_dir(name: str, excluded: frozenset[str]) -> bool:
    return name.startswith(".") or name.lower() in excluded


def _walk_documents(base_dir: Path, excluded: frozenset[str]) -> set[Path]:
    found: set[Path] = set()
    for root, dirs, files in os.walk(base_dir):
        dirs[:] = [d for d in dirs if not _is_excluded_dir(d, excluded)]
        for file in files:
            if is_regular_source_document(file):
                found.add(Path(root, file).resolve())
    return found


def _expand_item(base_dir: Path, spec: str, excluded: frozenset[str]) -> set[Path]:
    """Expand one MSBuild item spec (literal path or glob) to existing files."""
    spec = spec.strip().replace("\\", "/")
    if not spec:
        return set()
    if "$(" in spec or "@(" in spec:
        logger.warning("Skipping item with unevaluated MSBuild expression: %s", spec)
        return set()

    if any(ch in spec for ch in "*?"):
        if Path(spec).is_absolute():
            logger.warning("Skipping absolute glob item: %s", spec)
            return set()
        # MSBuild "dir/**" means every file below dir
        if spec.endswith("**"):
            spec += "/*"
        matches: set[Path] = set()
        for match in base_dir.glob(spec):
            if not match.is_file():
                continue
            rel_dirs = Path(os.path.relpath(match, base_dir)).parts[:-1]
            if any(_is_excluded_dir(p, excluded) for p in rel_dirs if p != ".."):
                continue
            matches.add(match.resolve())
        return matches

    candidate = Path(spec)
    if not candidate.is_absolute():
        candidate = base_dir / candidate
    if not candidate.is_file():
        logger.warning("Compile item not found: %s", candidate)
        return set()
    return {candidate.resolve()}


def _split_items(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [part for part in raw.split(";") if part.strip()]


def _uses_default_compile_items(root: ET.Element) -> bool:
    sdk_style = bool(root.get("Sdk")) or any(
        _local_name(el.tag) == "Sdk"
        or (_local_name(el.tag) == "Import" and el.get("Sdk"))
        for el in root.iter()
    )
    if not sdk_style:
        return False
    for el in root.iter():
        if _local_name(el.tag) in ("EnableDefaultCompileItems", "EnableDefaultItems"):
            if (el.text or "").strip().lower() == "false":
                return False
    return True


def load_project(
    path: str,
    extra_excluded_dirs: Iterable[str] = (),
) -> ProjectSpec:
    """Load a ``.csproj`` file and resolve its compiled documents.

    SDK-style projects compile ``**/*.cs`` by default; ``<Compile Include>``
    adds and ``<Compile Remove>`` removes items. Legacy projects compile
    only their explicit items.

    Raises:
        FileNotFoundError: If the project file does not exist.
        ValueError: If the file is not a project or is not valid XML.
    """
    project_path = Path(path).resolve()
    if not project_path.is_file():
        raise FileNotFoundError(f"Project file not found: {project_path}")
    if project_path.suffix.lower() not in PROJECT_EXTENSIONS:
        raise ValueError(
            f"{project_path} is not a C# project. Expected one of: {PROJECT_EXTENSIONS}"
        )

    try:
        root = ET.parse(project_path).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Failed to parse project XML at {project_path}: {exc}") from exc

    base_dir = project_path.parent
    excluded = EXCLUDED_DIRS | frozenset(d.lower() for d in extra_excluded_dirs)

    documents: set[Path] = set()
    if _uses_default_compile_items(root):
        documents |= _walk_documents(base_dir, excluded)

    for el in root.iter():
        if _local_name(el.tag) != "Compile":
            continue
        for spec in _split_items(el.get("Include")):
            documents |= {
                d for d in _expand_item(base_dir, spec, excluded)
                if is_regular_source_document(str(d))
            }
        for spec in _split_items(el.get("Remove")):
            documents -= _expand_item(base_dir, spec, excluded)

    project = ProjectSpec(
        name=project_path.stem,
        file_path=str(project_path),
        base_dir=str(base_dir),
        documents=tuple(sorted(str(d) for d in documents)),
    )
    logger.info("Loaded project %s with %d documents", project.name, len(project.documents))
    return project


def _read_sln_project_paths(solution_path: Path) -> list[str]:
    text = solution_path.read_text(encoding="utf-8-sig")
    paths: list[str] = []
    for match in _SLN_PROJECT_RE.finditer(text):
        if match.group("type").upper() == SOLUTION_FOLDER_TYPE_GUID:
            continue
        paths.append(match.group("path"))
    return paths


def _read_slnx_project_paths(solution_path: Path) -> list[str]:
    try:
        root = ET.parse(solution_path).getroot()
    except ET.ParseError as exc:
        raise ValueError(f"Failed to parse solution XML at {solution_path}: {exc}") from exc
    return [
        el.get("Path", "")
        for el in root.iter()
        if _local_name(el.tag) == "Project" and el.get("Path")
    ]


def load_solution(
    path: str,
    extra_excluded_dirs: Iterable[str] = (),
) -> SolutionSpec:
    """Load a ``.sln`` / ``.slnx`` file and every C# project it lists.

    Solution folders and non-C# projects are skipped; listed projects whose
    file is missing are skipped with a warning. A project that exists but
    cannot be loaded is recorded in ``load_failures`` instead of raising.

    Raises:
        FileNotFoundError: If the solution file does not exist.
        ValueError: If the solution file is malformed.
    """
    solution_path = Path(path).resolve()
    if not solution_path.is_file():
        raise FileNotFoundError(f"Solution file not found: {solution_path}")

    if solution_path.suffix.lower() == ".slnx":
        raw_paths = _read_slnx_project_paths(solution_path)
    else:
        raw_paths = _read_sln_project_paths(solution_path)

    extra = tuple(extra_excluded_dirs)
    projects: list[ProjectSpec] = []
    load_failures: list[ProjectLoadFailure] = []
    for raw in raw_paths:
        rel = raw.strip().replace("\\", "/")
        if Path(rel).suffix.lower() not in PROJECT_EXTENSIONS:
            logger.debug("Skipping non C# solution entry: %s", raw)
            continue
        project_path = (solution_path.parent / rel).resolve()
        if not project_path.is_file():
            logger.warning("Project listed in solution not found: %s", project_path)
            continue
        try:
            projects.append(load_project(str(project_path), extra_excluded_dirs=extra))
        except (OSError, ValueError) as e:
            logger.error("Failed to load project %s: %s", project_path, e)
            load_failures.append(
                ProjectLoadFailure(name=project_path.stem, file_path=str(project_path), error=e)
            )

    solution = SolutionSpec(
        name=solution_path.stem,
        file_path=str(solution_path),
        projects=projects,
        load_failures=load_failures,
    )
    logger.info(
        "Loaded solution %s with %d projects (%d failed to load)",
        solution.name,
        len(projects),
        len(load_failures),
    )
    return solution
