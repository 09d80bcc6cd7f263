"""
Built-in parameter checks.

For each declared parameter, at most one error is recorded:
1. Custom validator (if any) - replaces every built-in check
2. Required check ("not set")
3. Max check ("value exceeds max value")
4. Min check ("value below min value")

Bounds apply to string length and number value; bool ignores them. For
arrays, each element is checked.

Errors are collected for every parameter before any response decision is
made. Nothing here raises on bad input.
"""

from typing import Any, Dict, Optional

from .registry import EndpointConfig, ParamSpec, ParamType


NOT_SET = "not set"
EXCEEDS_MAX = "value exceeds max value"
BELOW_MIN = "value below min value"


class ParamError(Exception):
    """A request-time problem with one parameter."""

    def __init__(self, param: str, spec: ParamSpec, message: str):
        super().__init__(message)
        self.param = param
        self.spec = spec
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "type": self.spec.type.label,
            "error": self.message,
        }


class MissingParameterError(ParamError):
    """Required parameter absent (or unparsable) after extraction."""

    def __init__(self, param: str, spec: ParamSpec):
        super().__init__(param, spec, NOT_SET)


class RangeError(ParamError):
    """Value outside the declared min/max."""

    def __init__(self, param: str, spec: ParamSpec, bound_name: str, bound: float):
        message = EXCEEDS_MAX if bound_name == "max" else BELOW_MIN
        super().__init__(param, spec, message)
        self.bound_name = bound_name
        self.bound = bound

    def to_dict(self) -> Dict[str, Any]:
        info = super().to_dict()
        info[self.bound_name] = self.bound
        return info


class ValidationError(ParamError):
    """Custom validator returned an error message."""


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, list) and not value)


def _is_bound(bound: Any) -> bool:
    return isinstance(bound, (int, float)) and not isinstance(bound, bool)


def _measure(spec: ParamSpec, value: Any) -> Optional[float]:
    """Quantity compared against min/max, None when bounds do not apply."""
    if spec.type is ParamType.STRING and isinstance(value, str):
        return len(value)
    if spec.type is ParamType.NUMBER and _is_bound(value):
        return value
    return None


def check_param(name: str, spec: ParamSpec, value: Any) -> Optional[ParamError]:
    """
    Check one parameter value against its spec.

    Returns:
        ParamError if the value is not acceptable, None if valid
    """
    if spec.validate is not None:
        message = spec.validate(spec, value)
        if message:
            return ValidationError(name, spec, str(message))
        return None

    if is_missing(value):
        if spec.required:
            return MissingParameterError(name, spec)
        return None

    items = value if isinstance(value, list) else [value]
    measures = [m for m in (_measure(spec, item) for item in items) if m is not None]

    if _is_bound(spec.max) and any(m > spec.max for m in measures):
        return RangeError(name, spec, "max", spec.max)
    if _is_bound(spec.min) and any(m < spec.min for m in measures):
        return RangeError(name, spec, "min", spec.min)
    return None


def check_params(params: Dict[str, Any], endpoint: EndpointConfig) -> Dict[str, ParamError]:
    """
    Check every declared parameter.

    Args:
        params: Extracted (coerced, not yet filled) values
        endpoint: Endpoint configuration with compiled specs

    Returns:
        Map of parameter name -> ParamError, empty if all params are valid
    """
    errors = {}
    for name, spec in endpoint.params.items():
        error = check_param(name, spec, params.get(name))
        if error is not None:
            errors[name] = error
    return errors


def errors_to_dict(errors: Dict[str, ParamError]) -> Dict[str, Dict[str, Any]]:
    """Serialize an error map for callbacks and response bodies."""
    return {name: error.to_dict() for name, error in errors.items()}
