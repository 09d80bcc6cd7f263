"""
Schema compiler - turns parameter declarations into ParamSpec objects.

Two declaration styles are accepted:

Shorthand strings, TYPE[ARRAY](DEFAULT):
    "number"          required number
    "number()"        optional number, no default
    "number(20)"      optional number, default 20
    "integer(3)"      optional whole number, default 3
    "string[](a,b)"   optional list of strings, default ["a", "b"]

Objects with at least a "type" key:
    {"type": "number", "min": 10, "max": 99}
    {"type": "string", "required": "no"}

Compilation runs once per endpoint registration. Any problem with a
declaration is a programming error and is raised immediately.
"""

import logging
import re
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from .normalize import coerce_value
from .registry import EndpointConfig, ParamSpec, RouterSettings, is_integer_token, lookup_type


logger = logging.getLogger('param_router.grammar')

_SHORTHAND = re.compile(
    r"^\s*(?P<type>[A-Za-z_]\w*)\s*(?P<array>\[\s*\])?\s*(?:\((?P<default>.*)\))?\s*$",
    re.DOTALL,
)

FALSY_REQUIRED = frozenset({"false", "f", "no", "n", "0"})


class ParamDeclarationError(ValueError):
    """Raised when a parameter declaration cannot be compiled."""

    def __init__(self, message: str, param: str = None, declaration: Any = None):
        super().__init__(message)
        self.param = param
        self.declaration = declaration


class InvalidTypeError(ParamDeclarationError):
    """The declared type token is not a recognized primitive or synonym."""


class InvalidParamShapeError(ParamDeclarationError):
    """The declaration is neither a shorthand string nor an object with a type."""


@dataclass(frozen=True)
class ShorthandDeclaration:
    """Parsed, not yet coerced, shorthand string."""
    type_token: str
    array: bool
    optional: bool
    default_text: Optional[str]


def parse_shorthand(text: str) -> ShorthandDeclaration:
    """
    Split a shorthand string into its parts.

    Raises:
        InvalidParamShapeError: If the text does not follow the grammar
    """
    match = _SHORTHAND.match(text)
    if not match:
        raise InvalidParamShapeError(
            f"Invalid parameter declaration: {text!r}",
            declaration=text,
        )
    default_text = match.group("default")
    return ShorthandDeclaration(
        type_token=match.group("type"),
        array=match.group("array") is not None,
        optional=default_text is not None,
        default_text=default_text if default_text else None,
    )


def is_falsy_token(value: Any) -> bool:
    """True for False, 0 and the strings false/f/no/n/0 (any case)."""
    if value is False:
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return isinstance(value, str) and value.strip().lower() in FALSY_REQUIRED


def compile_param(raw: Any, name: str = None) -> ParamSpec:
    """
    Compile one parameter declaration.

    Args:
        raw: Shorthand string, mapping with a "type" key, or a ParamSpec
        name: Parameter name, used in error messages only

    Returns:
        Normalized ParamSpec

    Raises:
        InvalidTypeError: If the type token is not recognized
        InvalidParamShapeError: If the declaration has the wrong shape
    """
    if isinstance(raw, ParamSpec):
        return raw
    if isinstance(raw, str):
        spec = _compile_shorthand(parse_shorthand(raw), name)
    elif isinstance(raw, Mapping) and "type" in raw:
        spec = _compile_object(raw, name)
    else:
        raise InvalidParamShapeError(
            f"Expected a type string or an object with a type"
            + (f" for '{name}'" if name else "")
            + f", got {type(raw).__name__}",
            param=name,
            declaration=raw,
        )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("compiled param %s as %s", name, spec.to_shorthand())
    return spec


def _resolve_type(token: Any, name: Optional[str], declaration: Any):
    param_type = lookup_type(token)
    if param_type is None:
        raise InvalidTypeError(
            f"Unknown parameter type {token!r}" + (f" for '{name}'" if name else ""),
            param=name,
            declaration=declaration,
        )
    return param_type


def _compile_shorthand(decl: ShorthandDeclaration, name: Optional[str]) -> ParamSpec:
    param_type = _resolve_type(decl.type_token, name, decl)
    integer = is_integer_token(decl.type_token)
    default = None
    if decl.default_text is not None:
        default = coerce_value(
            param_type, decl.default_text, array=decl.array, integer=integer
        )
        if decl.array and not default:
            default = None
    return ParamSpec(
        type=param_type,
        array=decl.array,
        default=default,
        required=not decl.optional,
        integer=integer,
    )


def _compile_object(raw: Mapping, name: Optional[str]) -> ParamSpec:
    param_type = _resolve_type(raw["type"], name, raw)
    default = raw.get("default")
    array = bool(raw.get("array", False))

    if "required" in raw and is_falsy_token(raw["required"]):
        required = False
    else:
        required = default is None

    return ParamSpec(
        type=param_type,
        array=array,
        default=default,
        required=required,
        min=raw.get("min"),
        max=raw.get("max"),
        integer=is_integer_token(raw["type"]),
        validate=raw.get("validate"),
        error=raw.get("error"),
        success=raw.get("success"),
        description=raw.get("description"),
    )


def _get(raw: Any, *keys: str) -> Any:
    """First non-None value among keys of a mapping or attributes of an object."""
    for key in keys:
        if isinstance(raw, Mapping):
            value = raw.get(key)
        else:
            value = getattr(raw, key, None)
        if value is not None:
            return value
    return None


def merge_endpoint_config(settings: RouterSettings, raw: Any) -> EndpointConfig:
    """
    Build the effective configuration for one endpoint.

    Compiles every declared parameter, then back-fills callbacks on each
    parameter (endpoint, then global) and endpoint options (global).
    Precedence is always per-param > endpoint > global.

    Args:
        settings: Router-wide settings
        raw: Endpoint declaration (mapping or EndpointConfig)

    Returns:
        EndpointConfig with compiled params and resolved callbacks
    """
    error = _get(raw, "error") or settings.on_error
    validate = _get(raw, "validate") or settings.on_validate
    success = _get(raw, "success") or settings.on_success

    params = {}
    for param_name, declaration in (_get(raw, "params") or {}).items():
        spec = replace(compile_param(declaration, param_name))
        if spec.error is None:
            spec.error = error
        if spec.validate is None:
            spec.validate = validate
        if spec.success is None:
            spec.success = success
        params[param_name] = spec

    param_order = _get(raw, "paramOrder", "param_order") or settings.param_order
    if isinstance(param_order, str):
        param_order = [item.strip() for item in param_order.split(",") if item.strip()]

    return EndpointConfig(
        params=params,
        param_order=list(param_order),
        param_map=_get(raw, "paramMap", "param_map") or settings.param_map,
        error=error,
        validate=validate,
        success=success,
        description=_get(raw, "description"),
    )
