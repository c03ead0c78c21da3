"""
Tests for boolean subtraction and body extraction.
"""

import pytest

from cadassist.core.boolean import subtract, subtract_single
from cadassist.core.extract import extract_bodies, extract_bodies_as_single_body, extract_body
from cadassist.enums import ChainRule, EntityKind, ErrorKind
from cadassist.errors import HostOperationError, InvalidInputError


class TestSubtract:
    """Tests for subtract() and subtract_single()."""

    def test_none_tools_skipped(self, doc):
        target = doc.body("BLOCK")
        tools = [doc.body("PIN(1)"), None, doc.body("PIN(2)")]

        feature = subtract(doc, target, tools)

        assert feature.kind == EntityKind.FEATURE
        builder = doc.committed[0]
        assert builder.target is target
        assert [t.name for t in builder.tools] == ["PIN(1)", "PIN(2)"]

    def test_empty_tools(self, doc):
        with pytest.raises(InvalidInputError):
            subtract(doc, doc.body("BLOCK"), [])
        assert doc.builders_created == 0

    def test_host_failure(self, doc):
        doc.fail_commits = {"boolean": {1}}

        with pytest.raises(HostOperationError) as exc_info:
            subtract(doc, doc.body("BLOCK"), [doc.body("PIN")])

        assert exc_info.value.operation == "subtract"
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert doc.balanced

    def test_single_copy_flag(self, doc):
        subtract_single(doc, doc.body("BLOCK"), doc.body("PIN"), copy_tools=True)
        assert doc.committed[0].copy_tools is True

    def test_single_defaults_to_consuming_tool(self, doc):
        subtract_single(doc, doc.body("BLOCK"), doc.body("PIN"))
        assert doc.committed[0].copy_tools is False

    def test_single_missing_tool(self, doc):
        with pytest.raises(InvalidInputError):
            subtract_single(doc, doc.body("BLOCK"), None)
        assert doc.calls == []


class TestExtract:
    """Tests for the three extract variants and their sentinels."""

    def test_single_body_from_many(self, doc):
        bodies = [doc.body("A"), doc.body("B")]

        result = extract_bodies_as_single_body(doc, bodies)

        assert result.ok
        assert result.value.kind == EntityKind.BODY
        builder = doc.committed[0]
        assert builder.rules[0].rule == ChainRule.BODY_DUMB
        assert list(builder.rules[0].seeds) == bodies
        assert builder.associative and builder.inherit_material
        assert builder.hide_original is False

    def test_single_body_failure_is_none(self, doc):
        doc.fail_commits = {"extract": {1}}

        result = extract_bodies_as_single_body(doc, [doc.body("A")])

        assert result.value is None
        assert result.error_kind == ErrorKind.HOST_REJECTED
        assert doc.balanced

    def test_extract_bodies_list(self, doc):
        result = extract_bodies(doc, doc.body("A"))
        assert len(result.value) == 1

    def test_extract_bodies_failure_is_empty(self, doc):
        doc.fail_commits = {"extract": {1}}
        result = extract_bodies(doc, doc.body("A"))
        assert result.value == []

    def test_extract_body_copy(self, doc):
        original = doc.body("A")
        result = extract_body(doc, original)
        assert result.ok
        assert result.value is not original

    def test_extract_body_failure_returns_original(self, doc):
        original = doc.body("A")
        doc.fail_commits = {"extract": {1}}

        result = extract_body(doc, original)

        assert result.value is original
        assert result.error_kind == ErrorKind.HOST_REJECTED

    @pytest.mark.parametrize("func,arg", [
        (extract_bodies_as_single_body, None),
        (extract_bodies_as_single_body, []),
        (extract_bodies, None),
        (extract_body, None),
    ])
    def test_missing_input(self, doc, func, arg):
        with pytest.raises(InvalidInputError):
            func(doc, arg)
        assert doc.calls == []
