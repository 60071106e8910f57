"""
AST traversal and enum extraction logic.

This module walks a C# syntax tree, discovers every enum declaration at any
nesting depth, and extracts each member's initializer text together with
the <summary> of the member's own XML documentation comment.
"""

import logging
import re
import xml.etree.ElementTree as ET
from typing import List, Optional, Tuple
from tree_sitter import Node, Tree

from enum_extraction.config import (
    ENUM_DECLARATION,
    ENUM_MEMBER_LIST,
    ENUM_MEMBER,
    IDENTIFIER_NODE,
    ERROR_NODE,
    ATTRIBUTE_LIST,
    ASSIGNMENT_NODE,
    COMMENT_NODE,
    PREPROCESSOR_PREFIX,
    EQUALS_TOKEN,
    VERBATIM_PREFIX,
    DOC_LINE_PREFIX,
    DOC_BLOCK_PREFIX,
    DOC_BLOCK_SUFFIX,
    SUMMARY_TAG,
)
from enum_extraction.models import EnumRecord, MemberRecord

logger = logging.getLogger(__name__)
_XML_TAG_RE = re.compile(r"<(/?)([A-Za-z_][\w:.\-]*)(?:\s[^<>]*?)?(/?)>")


def node_text(node: Node, source_bytes: bytes) -> str:
    """Return the exact source text covered by a node."""
    return source_bytes[node.start_byte:node.end_byte].decode("utf-8")


def is_doc_line_comment(comment_text: str) -> bool:
    """Check if a comment is a single-line XML doc comment (``///``).

    ``////`` and longer runs of slashes are ordinary comments.
    """
    stripped = comment_text.lstrip()
    return stripped.startswith(DOC_LINE_PREFIX) and not stripped.startswith("////")


def is_doc_block_comment(comment_text: str) -> bool:
    """Check if a comment is a delimited XML doc comment (``/** ... */``).

    ``/**/`` is an empty ordinary comment.
    """
    stripped = comment_text.lstrip()
    return stripped.startswith(DOC_BLOCK_PREFIX) and not stripped.startswith("/**/")


def _strip_doc_line(comment_text: str) -> str:
    stripped = comment_text.lstrip()
    if stripped.startswith(DOC_LINE_PREFIX):
        stripped = stripped[len(DOC_LINE_PREFIX):]
    return stripped


def _strip_doc_block(comment_text: str) -> str:
    body = comment_text.strip()
    if body.startswith(DOC_BLOCK_PREFIX):
        body = body[len(DOC_BLOCK_PREFIX):]
    if body.endswith(DOC_BLOCK_SUFFIX):
        body = body[:-len(DOC_BLOCK_SUFFIX)]

    lines = []
    for line in body.split("\n"):
        stripped = line.strip()
        # Continuation '*' is comment exterior, not content
        if stripped.startswith("*"):
            stripped = stripped[1:]
        lines.append(stripped)
    return "\n".join(lines)


def _contains_member(node: Node) -> bool:
    stack = list(node.children)
    while stack:
        current = stack.pop()
        if current.type in (ENUM_MEMBER, ERROR_NODE):
            return True
        stack.extend(current.children)
    return False


def _is_trivia(node: Node) -> bool:
    if node.type == COMMENT_NODE:
        return True
    # A #if block holding members is content, not trivia
    return node.type.startswith(PREPROCESSOR_PREFIX) and not _contains_member(node)


def get_leading_trivia(node: Node) -> List[Node]:
    """Collect the comment/directive nodes that form a node's leading trivia.

    Walks backward through siblings until the previous token. Comments that
    start on the line where the previous token ends are that token's trailing
    trivia and are excluded.

    Args:
        node: The AST node whose leading trivia is wanted.

    Returns:
        Trivia nodes in source order (possibly empty).
    """
    trivia = []
    sibling = node.prev_sibling
    while sibling is not None and _is_trivia(sibling):
        trivia.append(sibling)
        sibling = sibling.prev_sibling

    if sibling is not None:
        boundary_row = sibling.end_point.row
        trivia = [t for t in trivia if t.start_point.row > boundary_row]

    trivia.reverse()
    return trivia


def get_leading_doc_blocks(node: Node, source_bytes: bytes) -> List[str]:
    """Group a node's leading documentation comments into blocks.

    Consecutive ``///`` lines on adjacent rows form one block; each
    ``/** */`` comment is a block of its own. Any other trivia ends the
    current block.

    Args:
        node: The AST node to find documentation for.
        source_bytes: The raw source file bytes.

    Returns:
        Block contents in source order, with comment markers removed.
    """
    blocks: List[str] = []
    current: List[str] = []
    last_row = -1

    for trivia in get_leading_trivia(node):
        text = node_text(trivia, source_bytes) if trivia.type == COMMENT_NODE else ""

        if is_doc_line_comment(text):
            if current and trivia.start_point.row != last_row + 1:
                blocks.append("\n".join(current))
                current = []
            current.append(_strip_doc_line(text))
            last_row = trivia.end_point.row
            continue

        if current:
            blocks.append("\n".join(current))
            current = []
        if is_doc_block_comment(text):
            blocks.append(_strip_doc_block(text))

    if current:
        blocks.append("\n".join(current))
    return blocks


def clean_summary_content(content: str) -> str:
    """Strip comment markers and whitespace from summary content.

    Args:
        content: Raw text between <summary> and </summary>.

    Returns:
        Content with ``///`` removed, every line trimmed, and the result trimmed.
    """
    lines = [line.strip() for line in content.replace(DOC_LINE_PREFIX, "").splitlines()]
    return "\n".join(lines).strip()


def _raw_summary_content(doc_xml: str) -> Optional[str]:
    """Return the source text between the first top-level <summary> tags.

    Tags are matched by name at depth 0 of the block, so a <summary> nested
    in another element is ignored. A self-closing <summary/> is empty.
    Returns None when no top-level summary element is closed.
    """
    depth = 0
    start = None
    inner = 0
    for match in _XML_TAG_RE.finditer(doc_xml):
        closing, name, self_closing = match.group(1), match.group(2), match.group(3)

        if start is None:
            if not closing and depth == 0 and name == SUMMARY_TAG:
                if self_closing:
                    return ""
                start = match.end()
            elif closing:
                depth = max(0, depth - 1)
            elif not self_closing:
                depth += 1
            continue

        if closing:
            if inner == 0 and name == SUMMARY_TAG:
                return doc_xml[start:match.start()]
            inner = max(0, inner - 1)
        elif not self_closing:
            inner += 1
    return None


def extract_summary_text(doc_xml: str) -> str:
    """Extract the first top-level <summary> element's content from a doc block.

    The content is the source text between the tags: entities stay encoded
    and nested markup such as ``<see cref="X"/>`` is kept as written. Only
    direct children of the block are considered and the tag match is
    case-sensitive. Malformed XML is scanned the same way.

    Args:
        doc_xml: Documentation block with comment markers removed.

    Returns:
        Cleaned summary text, or "" when the block has no summary.
    """
    try:
        root = ET.fromstring(f"<doc>{doc_xml}</doc>")
    except ET.ParseError as e:
        logger.debug("Malformed documentation XML (%s); scanning tags", e)
    else:
        if root.find(SUMMARY_TAG) is None:
            return ""

    content = _raw_summary_content(doc_xml)
    if content is None:
        return ""
    return clean_summary_content(content)


def get_member_comment(member: Node, source_bytes: bytes) -> str:
    """Return the summary of a member's own first documentation block, or ""."""
    blocks = get_leading_doc_blocks(member, source_bytes)
    if not blocks:
        return ""
    return extract_summary_text(blocks[0])


def get_member_name(member: Node, source_bytes: bytes) -> Optional[str]:
    """Return a member identifier exactly as written (``@`` kept)."""
    name_node = member.child_by_field_name("name")
    if name_node is None:
        name_node = next(
            (c for c in member.named_children if c.type == IDENTIFIER_NODE),
            None,
        )
    if name_node is None:
        return None
    return node_text(name_node, source_bytes)


def get_member_value(member: Node, source_bytes: bytes) -> str:
    """Return the verbatim initializer text of a member, or "" if none."""
    value_node = member.child_by_field_name("value")
    if value_node is None:
        seen_equals = False
        for child in member.children:
            if seen_equals and child.is_named and not _is_trivia(child):
                value_node = child
                break
            if child.type == EQUALS_TOKEN:
                seen_equals = True
    if value_node is None:
        return ""
    return node_text(value_node, source_bytes)


def extract_member(member: Node, source_bytes: bytes) -> Optional[MemberRecord]:
    """Build a MemberRecord from an enum_member_declaration node.

    Args:
        member: An enum_member_declaration node.
        source_bytes: The raw source file bytes.

    Returns:
        The member record, or None if the member has no name (error recovery).
    """
    name = get_member_name(member, source_bytes)
    if not name:
        logger.debug("Skipping unnamed enum member at line %d", member.start_point.row)
        return None

    return MemberRecord(
        name=name,
        value_text=get_member_value(member, source_bytes),
        comment_text=get_member_comment(member, source_bytes),
    )


def _recover_error_members(error: Node, source_bytes: bytes, members: List[MemberRecord]) -> None:
    """Recover members from an ERROR node inside an enum body.

    The node's tokens are split on commas; each piece that starts with an
    identifier is a member, with the text after ``=`` as its value.
    """
    segment: List[Node] = []

    def flush() -> None:
        parts = [n for n in segment if n.type != ATTRIBUTE_LIST]
        segment.clear()
        if not parts:
            return
        value_text = ""
        if len(parts) == 1 and parts[0].type == ASSIGNMENT_NODE:
            # "C = 3" recovered as an expression
            name_node = parts[0].child_by_field_name("left")
            right = parts[0].child_by_field_name("right")
            if right is not None:
                value_text = node_text(right, source_bytes)
        else:
            name_node = parts[0]
            if len(parts) > 2 and parts[1].type == EQUALS_TOKEN:
                value_text = source_bytes[parts[2].start_byte:parts[-1].end_byte].decode("utf-8")
        if name_node is None or name_node.type != IDENTIFIER_NODE:
            return
        doc_anchor = name_node if name_node.prev_sibling is not None else error
        members.append(
            MemberRecord(
                name=node_text(name_node, source_bytes),
                value_text=value_text,
                comment_text=get_member_comment(doc_anchor, source_bytes),
            )
        )

    for child in error.children:
        if child.type == ",":
            flush()
        elif child.type == ENUM_MEMBER:
            flush()
            member = extract_member(child, source_bytes)
            if member is not None:
                members.append(member)
        elif child.type == ERROR_NODE or child.type.startswith(PREPROCESSOR_PREFIX):
            flush()
            _collect_members(child, source_bytes, members)
        elif child.type != COMMENT_NODE:
            segment.append(child)
    flush()


def _collect_members(node: Node, source_bytes: bytes, members: List[MemberRecord]) -> None:
    """Append the members below ``node`` in source order.

    Members inside ``#if``/``#elif``/``#else`` branches are all collected;
    nested enum declarations are not entered.
    """
    for child in node.children:
        if child.type == ENUM_MEMBER:
            member = extract_member(child, source_bytes)
            if member is not None:
                members.append(member)
        elif child.type == ERROR_NODE:
            _recover_error_members(child, source_bytes, members)
        elif child.type in (ENUM_DECLARATION, COMMENT_NODE):
            continue
        elif child.named_child_count:
            _collect_members(child, source_bytes, members)


def extract_enum_members(node: Node, source_bytes: bytes) -> Tuple[MemberRecord, ...]:
    """Extract all members of an enum declaration in declaration order."""
    body = node.child_by_field_name("body")
    if body is None:
        body = next((c for c in node.named_children if c.type == ENUM_MEMBER_LIST), None)
    if body is None:
        return ()

    members: List[MemberRecord] = []
    _collect_members(body, source_bytes, members)
    if body.has_error:
        logger.warning(
            "Enum body at line %d has syntax errors; recovered %d members",
            node.start_point.row,
            len(members),
        )
    return tuple(members)


def extract_enum_name(node: Node, source_bytes: bytes) -> Optional[str]:
    """Extract an enum's name as its value text (verbatim ``@`` removed).

    Args:
        node: An enum_declaration node.
        source_bytes: The raw source file bytes.

    Returns:
        The enum name, or None if the declaration is nameless.
    """
    name_node = node.child_by_field_name("name")
    if name_node is None:
        name_node = next(
            (c for c in node.named_children if c.type == IDENTIFIER_NODE),
            None,
        )
    if name_node is None:
        return None
    name = node_text(name_node, source_bytes)
    if name.startswith(VERBATIM_PREFIX):
        name = name[len(VERBATIM_PREFIX):]
    return name or None


def discover_enum_declarations(root: Node) -> List[Node]:
    """Find every enum_declaration node at or below ``root``.

    Preorder walk, so results follow source order; enums nested in types,
    namespaces, other enums or error-recovery nodes are all included.

    Args:
        root: Root of the subtree to search (included in the search).

    Returns:
        Enum declaration nodes in source order.
    """
    found = []
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == ENUM_DECLARATION:
            found.append(node)
        stack.extend(reversed(node.children))
    return found


def extract_enums_from_tree(
    tree: Tree,
    source_bytes: bytes,
    project_name: str,
    file_path: str,
) -> List[EnumRecord]:
    """Extract all enum records from a parsed C# AST.

    This is the main entry point for enum extraction.

    Args:
        tree: The parsed AST tree.
        source_bytes: The raw source file bytes.
        project_name: Owning project's display name.
        file_path: File path relative to the project directory.

    Returns:
        List of enum records in source order.
    """
    records = []
    for node in discover_enum_declarations(tree.root_node):
        name = extract_enum_name(node, source_bytes)
        if not name:
            logger.debug("Skipping nameless enum at %s:%d", file_path, node.start_point.row)
            continue

        record = EnumRecord(
            name=name,
            project_name=project_name,
            relative_file_path=file_path,
            line_number=node.start_point.row,
            values=extract_enum_members(node, source_bytes),
        )
        logger.debug(
            "Extracted enum %s (%d members) at %s:%d",
            name,
            len(record.values),
            file_path,
            record.line_number,
        )
        records.append(record)

    logger.debug("Extracted %d enums from %s", len(records), file_path)
    return records
