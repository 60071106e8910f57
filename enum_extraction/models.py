"""
Data models for extracted C# enum declarations.
"""

from dataclasses import dataclass, asdict, field
from typing import Dict, Any, Tuple


@dataclass(frozen=True)
class MemberRecord:
    """A single enum member.

    Attributes:
        name: Member identifier exactly as written.
        value_text: Verbatim initializer expression, or "" when none is written.
        comment_text: Cleaned <summary> text of the member's own doc comment, or "".
    """

    name: str
    value_text: str = ""
    comment_text: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class EnumRecord:
    """Represents a single discovered enum declaration.

    Attributes:
        name: Declared enum type name (not necessarily unique).
        project_name: Display name of the owning project.
        relative_file_path: Declaring file, relative to the project directory.
        line_number: 0-indexed line of the declaration start.
        values: Members in declaration order.
    """

    name: str
    project_name: str
    relative_file_path: str
    line_number: int
    values: Tuple[MemberRecord, ...] = field(default_factory=tuple)

    @property
    def title(self) -> str:
        """Table title: ``{name} - {project} - {file}:{line}``."""
        return (
            f"{self.name} - {self.project_name} - "
            f"{self.relative_file_path}:{self.line_number}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to a dictionary suitable for JSON serialization.

        Returns:
            Dictionary representation with ``values`` as a list of member dicts.
        """
        payload = asdict(self)
        payload["values"] = [member.to_dict() for member in self.values]
        return payload
