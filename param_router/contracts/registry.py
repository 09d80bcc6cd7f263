"""
Parameter registry - data model shared by the compiler and the verifier.

Each router owns one Context:
- endpoints: path -> METHOD -> EndpointConfig
- settings: RouterSettings (global defaults and callbacks)
- blueprint: the Flask blueprint routes are registered on

An EndpointConfig holds one ParamSpec per declared parameter, with callbacks
already resolved (per-param > endpoint > global) by the compiler.
"""

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_PARAM_ORDER = ["body", "query", "params", "cookies"]
DEFAULT_PARAM_MAP = "args"

_router_ids = itertools.count(1)


class ParamType(Enum):
    """Primitive parameter types."""
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"

    @property
    def label(self) -> str:
        """Name reported back to clients in error maps."""
        return "boolean" if self is ParamType.BOOL else self.value


# Grammar synonyms, matched case-insensitively
TYPE_SYNONYMS: Dict[str, ParamType] = {
    "string": ParamType.STRING,
    "number": ParamType.NUMBER,
    "float": ParamType.NUMBER,
    "double": ParamType.NUMBER,
    "integer": ParamType.NUMBER,
    "int": ParamType.NUMBER,
    "short": ParamType.NUMBER,
    "long": ParamType.NUMBER,
    "bool": ParamType.BOOL,
    "boolean": ParamType.BOOL,
}


# Number synonyms that only accept whole values
INTEGER_TOKENS = frozenset({"integer", "int", "short", "long"})


def lookup_type(token: Any) -> Optional[ParamType]:
    """Resolve a type token (or ParamType) to a ParamType, None if unknown."""
    if isinstance(token, ParamType):
        return token
    if not isinstance(token, str):
        return None
    return TYPE_SYNONYMS.get(token.strip().lower())


def is_integer_token(token: Any) -> bool:
    return isinstance(token, str) and token.strip().lower() in INTEGER_TOKENS


@dataclass
class ParamSpec:
    """Compiled specification for a single parameter."""
    type: ParamType
    array: bool = False
    default: Any = None
    required: bool = True
    min: Optional[float] = None     # string: length, number: value
    max: Optional[float] = None
    integer: bool = False           # number declared as integer/int/short/long
    validate: Optional[Callable] = None
    error: Optional[Callable] = None
    success: Optional[Callable] = None
    description: Optional[str] = None

    def __post_init__(self):
        # A default always makes the parameter optional
        if self.default is not None:
            self.required = False

    def to_shorthand(self) -> str:
        """Render this spec back into the shorthand grammar."""
        from .normalize import stringify

        type_name = "integer" if self.integer else self.type.value
        text = type_name + ("[]" if self.array else "")
        if self.required:
            return text
        if self.default is None:
            return text + "()"
        if self.array:
            # object declarations may give a single value as an array default
            values = self.default if isinstance(self.default, (list, tuple)) else [self.default]
            inner = ",".join(stringify(self.type, v) for v in values)
        else:
            inner = stringify(self.type, self.default)
        return f"{text}({inner})"


@dataclass
class EndpointConfig:
    """Effective configuration for one (path, method) pair."""
    params: Dict[str, ParamSpec] = field(default_factory=dict)
    param_order: List[str] = field(default_factory=lambda: list(DEFAULT_PARAM_ORDER))
    param_map: str = DEFAULT_PARAM_MAP
    error: Optional[Callable] = None
    validate: Optional[Callable] = None
    success: Optional[Callable] = None
    description: Optional[str] = None


class RouterSettings(BaseModel):
    """
    Router-wide configuration.

    Accepts both the keys used in endpoint declarations (paramOrder,
    paramMap, error, validate, success) and the snake_case field names.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        extra='ignore',
        arbitrary_types_allowed=True,
    )

    param_order: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PARAM_ORDER), alias="paramOrder"
    )
    param_map: str = Field(default=DEFAULT_PARAM_MAP, alias="paramMap")
    prefix: Optional[str] = None
    on_error: Optional[Callable] = Field(default=None, alias="error")
    on_validate: Optional[Callable] = Field(default=None, alias="validate")
    on_success: Optional[Callable] = Field(default=None, alias="success")
    name: Optional[str] = None
    url_prefix: Optional[str] = None

    @field_validator('param_order', mode='before')
    @classmethod
    def split_param_order(cls, v):
        """Allow "query,body" as well as a list."""
        if v is None or v == '':
            return list(DEFAULT_PARAM_ORDER)
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return list(v)

    @field_validator('prefix', mode='before')
    @classmethod
    def normalize_prefix(cls, v):
        if v is None or v == '':
            return None
        v = "/" + str(v).strip("/")
        return None if v == "/" else v

    def blueprint_name(self) -> str:
        return self.name or f"param_router_{next(_router_ids)}"


@dataclass
class Context:
    """Registration-scoped state for one router."""
    settings: RouterSettings
    blueprint: Any = None
    endpoints: Dict[str, Dict[str, EndpointConfig]] = field(default_factory=dict)

    def add_endpoint(self, path: str, method: str, config: EndpointConfig) -> str:
        """Store an endpoint config. Returns the key it was stored under."""
        key = (self.settings.prefix or "") + path
        self.endpoints.setdefault(key, {})[method.upper()] = config
        return key

    def get_endpoint(self, key: str, method: str) -> Optional[EndpointConfig]:
        return self.endpoints.get(key, {}).get(method.upper())


@dataclass(frozen=True)
class HandlerOnly:
    """Registration without a schema: handlers are installed unchanged."""
    handlers: Tuple[Callable, ...]


@dataclass(frozen=True)
class WithSchema:
    """Registration with a parameter schema in front of the handlers."""
    config: Any
    handlers: Tuple[Callable, ...]


RouteRegistration = Union[HandlerOnly, WithSchema]


def classify_registration(config: Any, handlers: Sequence[Callable]) -> RouteRegistration:
    """
    Decide once, at registration, whether a route carries a schema.

    A bare callable in the config position is the first handler of a
    pass-through registration.
    """
    if config is None:
        return HandlerOnly(tuple(handlers))
    if callable(config) and not isinstance(config, (dict, EndpointConfig)):
        return HandlerOnly((config,) + tuple(handlers))
    return WithSchema(config, tuple(handlers))
