"""
Unit tests for contracts/grammar.py

Covers:
- Shorthand strings: types, synonyms, optional marker, defaults, arrays
- Object declarations and required normalization
- Compile-time errors
- Endpoint merging and callback precedence
"""

import logging

import pytest

from param_router.contracts.grammar import (
    InvalidParamShapeError,
    InvalidTypeError,
    ParamDeclarationError,
    compile_param,
    merge_endpoint_config,
    parse_shorthand,
)
from param_router.contracts.registry import ParamSpec, ParamType, RouterSettings


def mk_param(param_type, default=None, required=True, **kwargs):
    return ParamSpec(type=param_type, default=default, required=required, **kwargs)


class TestSimpleTypes:
    """Bare type names are required params without defaults."""

    @pytest.mark.parametrize("token,expected", [
        ("string", ParamType.STRING),
        ("number", ParamType.NUMBER),
        ("float", ParamType.NUMBER),
        ("double", ParamType.NUMBER),
        ("bool", ParamType.BOOL),
        ("boolean", ParamType.BOOL),
        ("Number", ParamType.NUMBER),
        ("BOOLEAN", ParamType.BOOL),
    ])
    def test_type_synonyms(self, token, expected):
        assert compile_param(token) == mk_param(expected)

    @pytest.mark.parametrize("token", ["integer", "int", "short", "long", "Integer"])
    def test_integer_synonyms(self, token):
        assert compile_param(token) == mk_param(ParamType.NUMBER, integer=True)

    def test_plain_number_is_not_integer(self):
        assert compile_param("number").integer is False

    def test_unknown_type_raises(self):
        with pytest.raises(InvalidTypeError):
            compile_param("something")


class TestOptionalParams:
    """Parentheses alone mean optional, with no default."""

    def test_empty_parentheses(self):
        assert compile_param("string()") == mk_param(ParamType.STRING, None, False)
        assert compile_param("number()") == mk_param(ParamType.NUMBER, None, False)
        assert compile_param("bool()") == mk_param(ParamType.BOOL, None, False)

    def test_unknown_type_raises(self):
        with pytest.raises(InvalidTypeError):
            compile_param("something()")


class TestDefaults:
    """Defaults go through the same coercion as request values."""

    def test_typed_defaults(self):
        assert compile_param("string(hello)") == mk_param(ParamType.STRING, "hello", False)
        assert compile_param("number(20)") == mk_param(ParamType.NUMBER, 20, False)
        assert compile_param("bool(false)") == mk_param(ParamType.BOOL, False, False)

    def test_unknown_type_raises(self):
        with pytest.raises(InvalidTypeError):
            compile_param("something(someval)")

    def test_array_default_is_split(self):
        spec = compile_param("number[](1,2,3)")
        assert spec.array is True
        assert spec.default == [1, 2, 3]
        assert spec.required is False

    def test_array_without_default(self):
        spec = compile_param("string[]")
        assert spec.array is True
        assert spec.required is True
        assert spec.default is None

    def test_unparsable_default_is_dropped(self):
        spec = compile_param("number(abc)")
        assert spec.default is None
        assert spec.required is False

    def test_integer_default_must_be_whole(self):
        assert compile_param("integer(3)").default == 3
        assert compile_param("integer(2.5)").default is None
        assert compile_param("int[](1,2.5)").default is None

    def test_array_default_with_bad_item_is_dropped(self):
        spec = compile_param("number[](1,x)")
        assert spec.default is None
        assert spec.required is False


class TestParseShorthand:
    """The parser only splits; coercion happens afterwards."""

    def test_parts(self):
        decl = parse_shorthand("number[](1,2)")
        assert decl.type_token == "number"
        assert decl.array is True
        assert decl.optional is True
        assert decl.default_text == "1,2"

    def test_no_group(self):
        decl = parse_shorthand("string")
        assert decl.optional is False
        assert decl.default_text is None

    @pytest.mark.parametrize("text", ["", "number(1", "[]number", "num ber", "number)"])
    def test_malformed(self, text):
        with pytest.raises(InvalidParamShapeError):
            parse_shorthand(text)


class TestObjectDeclarations:
    """Objects need a type; required is normalized."""

    def test_minimal(self):
        assert compile_param({"type": "string"}) == mk_param(ParamType.STRING)

    def test_explicit_required(self):
        assert compile_param({"type": "string", "required": False}) == mk_param(ParamType.STRING, None, False)
        assert compile_param({"type": "string", "required": True}) == mk_param(ParamType.STRING, None, True)

    def test_default_makes_optional(self):
        assert compile_param({"type": "string", "default": "test"}) == mk_param(ParamType.STRING, "test", False)

    def test_default_beats_required_true(self):
        spec = compile_param({"type": "number", "default": 3, "required": True})
        assert spec.required is False

    @pytest.mark.parametrize("token", [False, 0, "false", "no", "N", "0", "f"])
    def test_falsy_required_tokens(self, token):
        assert compile_param({"type": "number", "required": token}).required is False

    def test_array_is_strict_bool(self):
        assert compile_param({"type": "number", "array": 1}).array is True
        assert compile_param({"type": "number", "array": ""}).array is False

    def test_bounds_and_callbacks_are_kept(self):
        check = lambda spec, value: None
        spec = compile_param({"type": "number", "min": 10, "max": 20, "validate": check})
        assert spec.min == 10
        assert spec.max == 20
        assert spec.validate is check

    def test_unknown_type_raises(self):
        with pytest.raises(InvalidTypeError):
            compile_param({"type": "date"})

    @pytest.mark.parametrize("raw", [{"default": 1}, 42, None, ["number"]])
    def test_bad_shapes(self, raw):
        with pytest.raises(InvalidParamShapeError):
            compile_param(raw)

    def test_errors_share_a_base(self):
        assert issubclass(InvalidTypeError, ParamDeclarationError)
        assert issubclass(InvalidParamShapeError, ValueError)

    def test_scalar_default_for_array_is_kept_verbatim(self):
        spec = compile_param({"type": "number", "array": True, "default": 5}, "ids")
        assert spec.array is True
        assert spec.default == 5
        assert spec.required is False
        assert spec.to_shorthand() == "number[](5)"

    def test_scalar_default_for_array_with_debug_logging(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="param_router.grammar"):
            compile_param({"type": "number", "array": True, "default": 5}, "ids")
        assert "compiled param ids as number[](5)" in caplog.text

    def test_integer_type(self):
        assert compile_param({"type": "int"}).integer is True
        assert compile_param({"type": "number"}).integer is False


class TestShorthandRendering:
    """to_shorthand() renders a spec that compiles back to itself."""

    @pytest.mark.parametrize("text", [
        "string", "number()", "number(20)", "bool(false)", "number[](1,2)", "string(foo)",
        "integer", "integer(-4)", "int[](1,2)",
    ])
    def test_round_trip(self, text):
        spec = compile_param(text)
        assert compile_param(spec.to_shorthand()) == spec


class TestMergeEndpointConfig:
    """Precedence: per-param > endpoint > global."""

    def test_defaults_from_global(self):
        settings = RouterSettings()
        config = merge_endpoint_config(settings, {"params": {"a": "number"}})
        assert config.param_order == ["body", "query", "params", "cookies"]
        assert config.param_map == "args"
        assert config.params["a"] == mk_param(ParamType.NUMBER)

    def test_endpoint_options_win_over_global(self):
        settings = RouterSettings(paramOrder=["query"], paramMap="input")
        config = merge_endpoint_config(settings, {"paramOrder": ["cookies", "query"], "paramMap": "values"})
        assert config.param_order == ["cookies", "query"]
        assert config.param_map == "values"

    def test_global_options_fill_gaps(self):
        settings = RouterSettings(param_order="query,body", param_map="input")
        config = merge_endpoint_config(settings, {"description": "x"})
        assert config.param_order == ["query", "body"]
        assert config.param_map == "input"
        assert config.description == "x"

    def test_callback_precedence(self):
        global_error = lambda errors: "global"
        endpoint_error = lambda errors: "endpoint"
        param_error = lambda errors: "param"
        settings = RouterSettings(error=global_error)

        config = merge_endpoint_config(settings, {
            "error": endpoint_error,
            "params": {
                "a": "number",
                "b": {"type": "number", "error": param_error},
            },
        })
        assert config.params["a"].error is endpoint_error
        assert config.params["b"].error is param_error
        assert config.error is endpoint_error

    def test_global_callbacks_backfill(self):
        check = lambda spec, value: None
        done = lambda params, proceed: proceed()
        settings = RouterSettings(validate=check, success=done)
        config = merge_endpoint_config(settings, {"params": {"a": "string"}})
        assert config.params["a"].validate is check
        assert config.params["a"].success is done

    def test_declared_spec_is_not_mutated(self):
        spec = ParamSpec(type=ParamType.STRING)
        settings = RouterSettings(error=lambda errors: None)
        config = merge_endpoint_config(settings, {"params": {"a": spec}})
        assert config.params["a"].error is not None
        assert spec.error is None

    def test_bad_declaration_aborts(self):
        with pytest.raises(InvalidTypeError):
            merge_endpoint_config(RouterSettings(), {"params": {"a": "uuid"}})
