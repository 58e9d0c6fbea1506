import os
import tempfile
import unittest

from promptlens.engine.core import (
    HeaderRange,
    Section,
    classify,
    document_dir,
    extract_placeholders,
    extract_sections,
    normalize_link_target,
    parse_document,
    parse_header,
    resolve_link,
)
from promptlens.models import DocumentCategory


class TestClassify(unittest.TestCase):
    def test_suffixes(self):
        self.assertEqual(classify("/w/helper.agent.md"), DocumentCategory.AGENT)
        self.assertEqual(classify("/w/FIX.PROMPT.MD"), DocumentCategory.PROMPT)
        self.assertEqual(classify("/w/base.system.md"), DocumentCategory.SYSTEM)
        self.assertEqual(classify("/w/py.instructions.md"), DocumentCategory.INSTRUCTIONS)

    def test_exact_basenames(self):
        self.assertEqual(classify("/w/AGENTS.md"), DocumentCategory.AGENTS_MD)
        self.assertEqual(
            classify("/w/.github/copilot-instructions.md"),
            DocumentCategory.COPILOT_INSTRUCTIONS,
        )
        self.assertEqual(classify("/w/anything/SKILL.md"), DocumentCategory.SKILL)

    def test_skill_directories(self):
        self.assertEqual(classify("/w/.github/skills/demo/usage.md"), DocumentCategory.SKILL)
        self.assertEqual(classify("/w/skills/demo/notes.md"), DocumentCategory.SKILL)

    def test_unknown(self):
        self.assertEqual(classify("/w/README.md"), DocumentCategory.UNKNOWN)
        self.assertEqual(classify("/w/skills/demo/script.py"), DocumentCategory.UNKNOWN)


class TestParseHeader(unittest.TestCase):
    def test_valid_mapping(self):
        header, header_range = parse_header(["---", "name: demo", "---", "body"])
        self.assertEqual(header, {"name": "demo"})
        self.assertEqual(header_range, HeaderRange(start_line=0, end_line=2))

    def test_unclosed_header_is_no_header(self):
        self.assertEqual(parse_header(["---", "name: demo", "body"]), (None, None))

    def test_invalid_yaml_keeps_range(self):
        header, header_range = parse_header(["---", "name: [unclosed", "---"])
        self.assertIsNone(header)
        self.assertEqual(header_range, HeaderRange(start_line=0, end_line=2))

    def test_non_mapping_keeps_range(self):
        header, header_range = parse_header(["---", "- a", "- b", "---"])
        self.assertIsNone(header)
        self.assertEqual(header_range.end_line, 3)

    def test_no_header(self):
        self.assertEqual(parse_header(["# Title", "---"]), (None, None))
        self.assertEqual(parse_header([]), (None, None))


class TestSectionsAndPlaceholders(unittest.TestCase):
    def test_sections_end_before_next_heading(self):
        lines = "# Role\nYou help.\n## Rules\nBe brief.\nCite sources.".split("\n")
        self.assertEqual(
            extract_sections(lines),
            [Section("Role", 0, 1), Section("Rules", 2, 4)],
        )

    def test_placeholders_map_to_lines(self):
        lines = ["Hi {{name}}", "{{name}} asked about {{topic}}", "{{ spaced }}"]
        self.assertEqual(extract_placeholders(lines), {"name": [0, 1], "topic": [1]})


class TestLinks(unittest.TestCase):
    def test_normalize_link_target(self):
        self.assertEqual(normalize_link_target("<shared.prompt.md>"), "shared.prompt.md")
        self.assertEqual(normalize_link_target('b.prompt.md "Title"'), "b.prompt.md")
        self.assertIsNone(normalize_link_target("#section"))
        self.assertIsNone(normalize_link_target("https://example.com/a.prompt.md"))
        self.assertIsNone(normalize_link_target("mailto:someone@example.com"))
        self.assertIsNone(normalize_link_target("   "))

    def test_traversal_outside_root_is_unresolved(self):
        with tempfile.TemporaryDirectory() as root:
            doc_dir = os.path.join(root, "prompts")
            self.assertIsNone(resolve_link("../../../etc/passwd", doc_dir, root))

    def test_target_inside_root_resolves(self):
        with tempfile.TemporaryDirectory() as root:
            doc_dir = os.path.join(root, "prompts")
            self.assertEqual(
                resolve_link("shared.prompt.md#intro", doc_dir, root),
                os.path.abspath(os.path.join(doc_dir, "shared.prompt.md")),
            )

    def test_absolute_target_without_root_is_rejected(self):
        self.assertIsNone(resolve_link("/etc/base.prompt.md", "/w"))
        self.assertEqual(
            resolve_link("base.prompt.md", "/w"),
            os.path.abspath("/w/base.prompt.md"),
        )

    def test_document_dir(self):
        self.assertEqual(document_dir("file:///w/a/main.prompt.md"), "/w/a")
        self.assertEqual(document_dir("/w/a/main.prompt.md"), "/w/a")
        self.assertIsNone(document_dir("main.prompt.md"))
        self.assertEqual(document_dir("sub/main.prompt.md", "/w"), os.path.join("/w", "sub"))
        self.assertIsNone(document_dir("untitled:Untitled-1"))

    def test_parse_document_collects_prompt_links_only(self):
        text = (
            "See [shared](shared.prompt.md) and [site](https://e.com/a.prompt.md)\n"
            "and [notes](notes.txt) and [other](other.agent.md#usage)"
        )
        doc = parse_document(text, "file:///w/main.prompt.md", "/w")

        targets = [link.target for link in doc.links]
        self.assertEqual(targets, ["shared.prompt.md", "other.agent.md"])
        first = doc.links[0]
        self.assertEqual(first.resolved_path, os.path.abspath("/w/shared.prompt.md"))
        self.assertEqual((first.line, first.column, first.end_column), (0, 4, 30))
        self.assertEqual((first.target_start_column, first.target_end_column), (13, 29))
        self.assertEqual(doc.links[1].line, 1)


class TestParseDocument(unittest.TestCase):
    TEXT = "---\ndescription: Reviews code\n---\n# Role\nReview {{language}} code.\n"

    def test_parse_is_idempotent(self):
        first = parse_document(self.TEXT, "/w/review.agent.md")
        second = parse_document(self.TEXT, "/w/review.agent.md")
        self.assertEqual(first, second)

    def test_fields(self):
        doc = parse_document(self.TEXT, "/w/review.agent.md")
        self.assertEqual(doc.category, DocumentCategory.AGENT)
        self.assertEqual(doc.header, {"description": "Reviews code"})
        self.assertEqual(doc.header_range, HeaderRange(0, 2))
        self.assertEqual(doc.placeholders, {"language": [4]})
        self.assertEqual(doc.sections[0].name, "Role")
        self.assertEqual(doc.body_text, "# Role\nReview {{language}} code.\n")

    def test_malformed_header_never_raises(self):
        doc = parse_document("---\nkey: [\n---\nBody", "/w/x.agent.md")
        self.assertIsNone(doc.header)
        self.assertEqual(doc.body_text, "Body")


if __name__ == "__main__":
    unittest.main()
