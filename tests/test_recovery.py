"""Tests for the parse -> extract -> repair recovery pipeline."""
import json

import pytest

from sitesmith.core import recovery
from sitesmith.core.recovery import RecoveryFailure, RecoveryStage, recover_document, recover_list


def _explode(*args, **kwargs):
    raise AssertionError("should not be called")


class TestSuccessfulRecovery:
    """Outputs that end up as a usable document."""

    def test_fenced_payload_is_extracted(self):
        raw = '```json\n{"files":{"a.txt":"hi"}}\n```'
        result = recover_document(raw)

        assert result.ok
        assert result.stage == RecoveryStage.EXTRACTED
        assert result.document.files["a.txt"].content == "hi"
        assert result.document.files["a.txt"].language == "plaintext"

    def test_missing_comma_between_objects_is_repaired(self):
        raw = '{"files": {"a.txt": "hi"} {"b.txt": "bye"}}'
        result = recover_document(raw)

        assert result.ok
        assert result.stage == RecoveryStage.REPAIRED
        assert set(result.document.files) == {"a.txt", "b.txt"}
        assert result.document.files["b.txt"].content == "bye"

    def test_valid_json_skips_extraction_and_repair(self, monkeypatch):
        monkeypatch.setattr(recovery, "extract_candidates", _explode)
        monkeypatch.setattr(recovery, "repair_json", _explode)

        result = recover_document('{"files": {"index.html": "<p>x</p>"}}')

        assert result.ok
        assert result.stage == RecoveryStage.DIRECT
        assert result.document.files["index.html"].language == "html"

    def test_object_entries_keep_their_language(self):
        raw = '{"files": {"src/app.js": {"content": "x", "language": "typescript"}, "b.css": {"content": "y"}}}'
        files = recover_document(raw).document.files

        assert files["src/app.js"].language == "typescript"
        assert files["b.css"].language == "css"

    def test_non_string_content_is_serialized(self):
        files = recover_document('{"files": {"package.json": {"name": "demo"}}}').document.files

        assert files["package.json"].content == '{\n  "name": "demo"\n}'
        assert files["package.json"].language == "json"

    def test_fenced_payload_with_inner_fence_in_content(self):
        doc = {"files": {"README.md": "```bash\nnpm i\n```", "a.js": "x"}}
        result = recover_document("```json\n" + json.dumps(doc) + "\n```")

        assert result.ok
        assert result.document.files["README.md"].content == "```bash\nnpm i\n```"
        assert result.document.files["README.md"].language == "markdown"

    def test_raw_newlines_inside_strings_are_tolerated(self):
        result = recover_document('{"files": {"a.txt": "line1\nline2"}}')

        assert result.ok
        assert result.document.files["a.txt"].content == "line1\nline2"


class TestFailureClassification:
    """Each failure kind is returned, never raised."""

    @pytest.mark.parametrize("raw", ["just words", '"just words"', "", None])
    def test_no_candidate(self, raw):
        result = recover_document(raw)

        assert not result.ok
        assert result.failure == RecoveryFailure.NO_CANDIDATE

    def test_unrepairable_syntax(self):
        result = recover_document('Here: {"files": {{{ nope')

        assert result.failure == RecoveryFailure.UNREPAIRABLE_SYNTAX
        assert result.document is None

    def test_missing_files_key_after_extraction(self):
        result = recover_document('Result: {"pages": ["a"]}')

        assert result.failure == RecoveryFailure.MISSING_REQUIRED_SHAPE
        assert result.stage == RecoveryStage.EXTRACTED

    def test_missing_files_key_on_direct_parse(self, monkeypatch):
        monkeypatch.setattr(recovery, "extract_candidates", _explode)

        result = recover_document('{"pages": {}}')

        assert result.failure == RecoveryFailure.MISSING_REQUIRED_SHAPE
        assert result.stage == RecoveryStage.DIRECT

    def test_files_must_be_a_mapping(self):
        result = recover_document('{"files": ["a.txt"]}')

        assert result.failure == RecoveryFailure.MISSING_REQUIRED_SHAPE

    def test_unescaped_quote_before_comma_is_not_repaired(self):
        """A quote followed by ',' reads as a terminator, so this stays broken."""
        result = recover_document('{"files": {"a.txt": "say "hi", ok"}}')

        assert result.failure == RecoveryFailure.UNREPAIRABLE_SYNTAX


class TestRecoverList:
    def test_plain_array(self):
        assert recover_list('[{"name": "A"}]') == [{"name": "A"}]

    def test_array_wrapped_in_prose_and_fences(self):
        raw = 'Sure:\n```json\n[{"name": "A", "url": "https://a.example"}]\n```\nThat is all.'
        assert recover_list(raw) == [{"name": "A", "url": "https://a.example"}]

    def test_array_needing_repair(self):
        assert recover_list('[{"name": "A"} {"name": "B"},]') == [{"name": "A"}, {"name": "B"}]

    @pytest.mark.parametrize("raw", ['{"name": "A"}', "no competitors found", None])
    def test_nothing_list_shaped(self, raw):
        assert recover_list(raw) is None
