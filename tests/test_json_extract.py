"""Unit tests for JSON candidate extraction from raw model text."""
import json

from sitesmith.core.json_extract import extract_array_candidates, extract_candidates, extract_fenced_code


class TestFencedBlocks:
    """Fenced ```json blocks win over everything else."""

    def test_json_fence_is_extracted(self):
        raw = 'Here you go:\n```json\n{"files":{"a.txt":"hi"}}\n```\nThanks!'
        assert extract_candidates(raw) == ['{"files":{"a.txt":"hi"}}']

    def test_last_fence_is_taken(self):
        raw = '```json\n{"a": 1}\n```\nActually, use this one:\n```\n{"b": 2}\n```'
        assert extract_candidates(raw) == ['{"b": 2}']

    def test_fence_inside_a_string_value_does_not_end_the_block(self):
        doc = {"files": {"README.md": "```bash\nnpm i\n```", "a.js": "x"}}
        raw = "```json\n" + json.dumps(doc) + "\n```"

        assert extract_candidates(raw) == [json.dumps(doc)]

    def test_prose_object_after_fence_is_kept_as_fallback(self):
        raw = '```json\n{"a": 1}\n```\nNote: {"b": 2}'
        assert extract_candidates(raw) == ['{"b": 2}', '{"a": 1}']

    def test_non_json_fence_is_ignored(self):
        raw = "```html\n<p>hello</p>\n```"
        assert extract_candidates(raw) == []


class TestBraceScan:
    """Without fences the object closed by the final brace is used."""

    def test_object_inside_prose(self):
        raw = 'Sure! {"files": {"a": "b"}} Hope it helps.'
        assert extract_candidates(raw) == ['{"files": {"a": "b"}}']

    def test_last_object_wins(self):
        raw = 'first {"a": 1} then {"b": 2}'
        assert extract_candidates(raw) == ['{"b": 2}']

    def test_braces_inside_strings_do_not_confuse_matching(self):
        raw = 'x {"a": "}{"} y'
        assert extract_candidates(raw) == ['{"a": "}{"}']

    def test_unclosed_object_falls_back_to_whole_text(self):
        raw = '  {"files": {"a.txt": "hi"  '
        assert extract_candidates(raw) == ['{"files": {"a.txt": "hi"']


class TestNothingFound:
    def test_plain_words(self):
        assert extract_candidates("just words") == []

    def test_empty_and_none(self):
        assert extract_candidates("") == []
        assert extract_candidates(None) == []


class TestFencedCode:
    def test_any_language_fence(self):
        assert extract_fenced_code("```python\nprint('x')\n```") == "print('x')"

    def test_unfenced_text_is_stripped(self):
        assert extract_fenced_code("  body { color: red; }\n") == "body { color: red; }"


class TestArrayCandidates:
    def test_array_in_prose(self):
        raw = 'Here are some: [{"name": "A"}, {"name": "B"}] hope that helps'
        assert extract_array_candidates(raw) == ['[{"name": "A"}, {"name": "B"}]']

    def test_fenced_array_is_last(self):
        raw = '```json\n[{"name": "A"}]\n```\n[see above]'
        assert extract_array_candidates(raw) == ['[{"name": "A"}]\n```\n[see above]', '[{"name": "A"}]']

    def test_no_array(self):
        assert extract_array_candidates('{"name": "A"}') == []
