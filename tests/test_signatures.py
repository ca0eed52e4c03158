"""Tests for signature comparison."""

from __future__ import annotations

from primpact.breaking.signatures import (
    diff_signatures,
    extract_param_type,
    parse_signature,
    split_parameters,
)


class TestSplitParameters:
    def test_nested_generics_and_objects(self):
        params = split_parameters("a: Map<string, number>, b: { x: number, y: string }, c")
        assert params == ["a: Map<string, number>", "b: { x: number, y: string }", "c"]

    def test_arrow_function_type(self):
        params = split_parameters("cb: (err: Error, data: string) => void, opts: Options")
        assert params == ["cb: (err: Error, data: string) => void", "opts: Options"]

    def test_empty(self):
        assert split_parameters("  ") == []


class TestParseSignature:
    def test_params_and_return_type(self):
        sig = parse_signature("(a: string, b?: number): Promise<void>")
        assert sig.params == ["a: string", "b?: number"]
        assert sig.return_type == "Promise<void>"

    def test_no_return_type(self):
        sig = parse_signature("(a: string)")
        assert sig.return_type is None

    def test_not_a_signature(self):
        sig = parse_signature("string")
        assert sig.params == []
        assert sig.return_type is None


class TestExtractParamType:
    def test_simple(self):
        assert extract_param_type("b?: number") == "number"

    def test_rest_parameter(self):
        assert extract_param_type("...args: string[]") == "string[]"

    def test_untyped(self):
        assert extract_param_type("x") == "x"

    def test_function_type(self):
        assert extract_param_type("cb: (a: A) => void") == "(a: A) => void"


class TestDiffSignatures:
    def test_both_missing(self):
        result = diff_signatures(None, None)
        assert not result.changed

    def test_added_and_removed(self):
        assert diff_signatures(None, "(a)").details == ["signature added"]
        assert diff_signatures("(a)", None).details == ["signature removed"]

    def test_identical(self):
        result = diff_signatures("(a: string):  void", "(a: string): void")
        assert not result.changed
        assert result.details == ["signatures are identical"]

    def test_parameter_count(self):
        result = diff_signatures("(a: string): void", "(a: string, b: number): void")
        assert result.changed
        assert result.details == ["parameter count changed from 1 to 2"]

    def test_parameter_type(self):
        result = diff_signatures("(b?: number)", "(b?: string)")
        assert result.details == ["parameter 'b' type changed from 'number' to 'string'"]

    def test_return_type_changes(self):
        assert diff_signatures("(): void", "(): string").details == [
            "return type changed from 'void' to 'string'"
        ]
        assert diff_signatures("()", "(): string").details == ["return type added: 'string'"]
        assert diff_signatures("(): string", "()").details == [
            "return type removed (was 'string')"
        ]

    def test_rename_only_is_generic_change(self):
        result = diff_signatures("(a: string)", "(b: string)")
        assert result.changed
        assert result.details == ["signature changed"]

    def test_description_joins_details(self):
        result = diff_signatures("(a: string): void", "(a: number, b: number): string")
        assert result.description == "; ".join(result.details)
        assert len(result.details) == 3
