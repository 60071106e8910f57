"""
Integration tests for extractor.py

Tests document, project and solution aggregation and the final sort.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from enum_extraction import extractor
from enum_extraction.extractor import (
    ExtractionStats,
    InventoryError,
    process_document,
    process_project,
    process_single_project,
    process_solution,
    run_inventory,
    sort_enum_records,
)
from enum_extraction.models import EnumRecord, MemberRecord
from enum_extraction.workspace import ProjectSpec, SolutionSpec, load_project

SDK_PROJECT = '<Project Sdk="Microsoft.NET.Sdk">\n</Project>\n'

COLORS_CS = """

enum Color {
    Red,
    Green = 5,
    /// <summary>blue comment</summary>
    Blue
}
"""


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def _record(name: str, project: str = "P") -> EnumRecord:
    return EnumRecord(name=name, project_name=project, relative_file_path="F.cs", line_number=0)


class TestExtractionStats(unittest.TestCase):
    """Test ExtractionStats class."""

    def test_creation(self):
        stats = ExtractionStats()
        self.assertEqual(stats.documents_processed, 0)
        self.assertEqual(stats.documents_failed, 0)
        self.assertEqual(stats.enums_extracted, 0)

    def test_merge_and_to_dict(self):
        a = ExtractionStats()
        a.documents_processed = 2
        a.enums_extracted = 3
        b = ExtractionStats()
        b.documents_processed = 1
        b.documents_failed = 1

        a.merge(b)
        result = a.to_dict()
        self.assertEqual(result["documents_processed"], 3)
        self.assertEqual(result["documents_failed"], 1)
        self.assertEqual(result["enums_extracted"], 3)

    def test_str_representation(self):
        stats = ExtractionStats()
        stats.documents_processed = 3
        self.assertIn("processed=3", str(stats))


class TestSortEnumRecords(unittest.TestCase):
    """Test the final ordering."""

    def test_sorted_by_name(self):
        records = [_record("Shape"), _record("Color"), _record("Mode")]
        self.assertEqual([r.name for r in sort_enum_records(records)], ["Color", "Mode", "Shape"])

    def test_ordinal_comparison(self):
        records = [_record("alpha"), _record("Zeta"), _record("_x")]
        self.assertEqual([r.name for r in sort_enum_records(records)], ["Zeta", "_x", "alpha"])

    def test_equal_names_keep_input_order(self):
        records = [_record("B", "first"), _record("A"), _record("B", "second"), _record("B", "third")]
        self.assertEqual(
            [(r.name, r.project_name) for r in sort_enum_records(records)],
            [("A", "P"), ("B", "first"), ("B", "second"), ("B", "third")],
        )


class _ProjectTreeTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()

    def tearDown(self):
        self._tmp.cleanup()


class TestProcessDocument(_ProjectTreeTestCase):
    """Test extracting from a single document."""

    def test_colors_document(self):
        path = _write(self.root / "Demo" / "Colors.cs", COLORS_CS)
        records = process_document(str(path), "Demo", str(self.root / "Demo"))

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].title, "Color - Demo - Colors.cs:2")
        self.assertEqual(
            records[0].values,
            (
                MemberRecord("Red", "", ""),
                MemberRecord("Green", "5", ""),
                MemberRecord("Blue", "", "blue comment"),
            ),
        )

    def test_relative_path_of_nested_file(self):
        path = _write(self.root / "Demo" / "Models" / "Shape.cs", "class C\n{\n    enum Shape { Circle }\n}\n")
        records = process_document(str(path), "Demo", str(self.root / "Demo"))

        self.assertEqual(records[0].relative_file_path, os.path.join("Models", "Shape.cs"))
        self.assertEqual(records[0].line_number, 2)

    def test_non_regular_document_raises(self):
        path = _write(self.root / "build.csx", "enum A { X }")
        with self.assertRaises(ValueError):
            process_document(str(path), "Demo", str(self.root))


class TestProcessProject(_ProjectTreeTestCase):
    """Test project aggregation and the per-document failure policy."""

    def test_concatenates_documents(self):
        proj = _write(self.root / "Demo" / "Demo.csproj", SDK_PROJECT)
        _write(self.root / "Demo" / "Colors.cs", COLORS_CS)
        _write(self.root / "Demo" / "Shapes.cs", "enum Shape { Circle }\nenum Size { S, M, L }\n")

        result = process_project(load_project(str(proj)))

        self.assertTrue(result.succeeded)
        self.assertEqual(sorted(r.name for r in result.records), ["Color", "Shape", "Size"])
        self.assertTrue(all(r.project_name == "Demo" for r in result.records))
        self.assertEqual(result.stats.documents_processed, 2)
        self.assertEqual(result.stats.enums_extracted, 3)
        self.assertEqual(result.stats.members_extracted, 7)

    def test_empty_project(self):
        project = ProjectSpec(name="Empty", file_path=str(self.root / "Empty.csproj"), base_dir=str(self.root))
        result = process_project(project)

        self.assertTrue(result.succeeded)
        self.assertEqual(result.records, [])

    def test_unreadable_document_drops_only_that_document(self):
        good = _write(self.root / "Demo" / "Colors.cs", COLORS_CS)
        bad = self.root / "Demo" / "Broken.cs"
        bad.write_bytes(b"enum Caf\xe9 { A }")
        missing = self.root / "Demo" / "Missing.cs"
        project = ProjectSpec(
            name="Demo",
            file_path=str(self.root / "Demo" / "Demo.csproj"),
            base_dir=str(self.root / "Demo"),
            documents=(str(bad), str(good), str(missing)),
        )

        result = process_project(project)

        self.assertTrue(result.succeeded)
        self.assertEqual([r.name for r in result.records], ["Color"])
        self.assertEqual(result.failed_documents, ["Broken.cs", "Missing.cs"])
        self.assertEqual(result.stats.documents_failed, 2)
        self.assertEqual(result.stats.documents_processed, 1)

    def test_internal_failure_propagates(self):
        good = _write(self.root / "Demo" / "Colors.cs", COLORS_CS)
        project = ProjectSpec(name="Demo", file_path="", base_dir=str(self.root / "Demo"), documents=(str(good),))

        with patch.object(extractor, "extract_enums_from_tree", side_effect=RuntimeError("boom")):
            with self.assertRaises(RuntimeError):
                process_project(project)


class TestProcessSolution(_ProjectTreeTestCase):
    """Test concurrent solution aggregation and the project failure policy."""

    def _solution(self) -> SolutionSpec:
        projects = []
        for name, source in (
            ("App", "enum Mode { Fast, Slow }\nenum Color { Cyan }\n"),
            ("Bad", "enum Broken { A }\n"),
            ("Lib", COLORS_CS),
        ):
            proj = _write(self.root / name / f"{name}.csproj", SDK_PROJECT)
            _write(self.root / name / f"{name}Enums.cs", source)
            projects.append(load_project(str(proj)))
        return SolutionSpec(name="Demo", file_path=str(self.root / "Demo.sln"), projects=projects)

    @staticmethod
    def _failing_for_bad(real):
        def wrapper(tree, source_bytes, project_name, file_path):
            if project_name == "Bad":
                raise RuntimeError("parser fault")
            return real(tree=tree, source_bytes=source_bytes, project_name=project_name, file_path=file_path)
        return wrapper

    def test_flattens_and_sorts_all_projects(self):
        solution = self._solution()
        result = process_solution(solution, max_workers=3)

        # Equal names follow project order, since results are joined in submission order
        self.assertEqual(
            [(r.name, r.project_name) for r in result.records],
            [("Broken", "Bad"), ("Color", "App"), ("Color", "Lib"), ("Mode", "App")],
        )
        self.assertEqual(result.failed_projects, [])
        self.assertEqual(result.stats.documents_processed, 3)

    def test_project_failure_aborts_by_default(self):
        solution = self._solution()
        real = extractor.extract_enums_from_tree
        with patch.object(extractor, "extract_enums_from_tree", side_effect=self._failing_for_bad(real)):
            with self.assertRaises(InventoryError) as ctx:
                process_solution(solution, max_workers=2)

        self.assertEqual(ctx.exception.failed_projects, ["Bad"])
        self.assertIsInstance(ctx.exception.__cause__, RuntimeError)

    def test_project_failure_does_not_stop_others(self):
        solution = self._solution()
        real = extractor.extract_enums_from_tree
        with patch.object(extractor, "extract_enums_from_tree", side_effect=self._failing_for_bad(real)):
            result = process_solution(solution, max_workers=2, continue_on_project_error=True)

        self.assertEqual(result.failed_projects, ["Bad"])
        self.assertEqual(
            sorted((r.name, r.project_name) for r in result.records),
            [("Color", "App"), ("Color", "Lib"), ("Mode", "App")],
        )

    def test_empty_solution(self):
        solution = SolutionSpec(name="Empty", file_path=str(self.root / "Empty.sln"))
        result = process_solution(solution)
        self.assertEqual(result.records, [])
        self.assertEqual(result.projects, [])


class TestRunInventory(_ProjectTreeTestCase):
    """Test descriptor-driven entry point."""

    def test_project_path(self):
        proj = _write(self.root / "Demo" / "Demo.csproj", SDK_PROJECT)
        _write(self.root / "Demo" / "Colors.cs", COLORS_CS)
        _write(self.root / "Demo" / "A.cs", "enum Zed { Z }\nenum Alpha { A }\n")

        result = run_inventory(str(proj))
        self.assertEqual([r.name for r in result.records], ["Alpha", "Color", "Zed"])

    def test_solution_path(self):
        _write(self.root / "App" / "App.csproj", SDK_PROJECT)
        _write(self.root / "App" / "Mode.cs", "enum Mode { A }")
        sln = _write(
            self.root / "Demo.sln",
            'Project("{9A19103F-16F7-4668-BE54-9A1E7A4F7556}") = "App", "App\\App.csproj", '
            '"{22222222-2222-2222-2222-222222222222}"\nEndProject\n',
        )

        result = run_inventory(str(sln), max_workers=1)
        self.assertEqual([(r.name, r.project_name) for r in result.records], [("Mode", "App")])

    def _solution_with_broken_project(self) -> str:
        _write(self.root / "Good" / "Good.csproj", SDK_PROJECT)
        _write(self.root / "Good" / "A.cs", "enum A { X }")
        _write(self.root / "Bad" / "Bad.csproj", "<Project><ItemGroup></Project>")
        slnx = _write(
            self.root / "Demo.slnx",
            '<Solution>\n  <Project Path="Good/Good.csproj" />\n'
            '  <Project Path="Bad/Bad.csproj" />\n</Solution>\n',
        )
        return str(slnx)

    def test_unloadable_project_does_not_stop_others(self):
        result = run_inventory(self._solution_with_broken_project(), continue_on_project_error=True)

        self.assertEqual([r.name for r in result.records], ["A"])
        self.assertEqual(result.failed_projects, ["Bad"])

    def test_unloadable_project_aborts_by_default(self):
        with self.assertRaises(InventoryError) as ctx:
            run_inventory(self._solution_with_broken_project())

        self.assertEqual(ctx.exception.failed_projects, ["Bad"])
        self.assertIsInstance(ctx.exception.__cause__, ValueError)

    def test_single_project_failure_policy(self):
        project = ProjectSpec(name="Demo", file_path="", base_dir=str(self.root))
        with patch.object(extractor, "process_project", side_effect=RuntimeError("boom")):
            with self.assertRaises(InventoryError):
                process_single_project(project)


if __name__ == "__main__":
    unittest.main()
