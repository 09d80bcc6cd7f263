"""
Parameter contract package.

Provides the shorthand grammar compiler, value coercion, built-in checks
and the request-time verifier.
"""

from .registry import (
    ParamType,
    ParamSpec,
    EndpointConfig,
    RouterSettings,
    Context,
    HandlerOnly,
    WithSchema,
    RouteRegistration,
    classify_registration,
)
from .normalize import coerce_value, stringify
from .grammar import (
    ParamDeclarationError,
    InvalidTypeError,
    InvalidParamShapeError,
    compile_param,
    parse_shorthand,
    merge_endpoint_config,
)
from .validate import (
    ParamError,
    MissingParameterError,
    RangeError,
    ValidationError,
    check_params,
)
from .wrapper import VerificationResult, extract_params, fill_params, verify

__all__ = [
    'ParamType',
    'ParamSpec',
    'EndpointConfig',
    'RouterSettings',
    'Context',
    'HandlerOnly',
    'WithSchema',
    'RouteRegistration',
    'classify_registration',
    'coerce_value',
    'stringify',
    'ParamDeclarationError',
    'InvalidTypeError',
    'InvalidParamShapeError',
    'compile_param',
    'parse_shorthand',
    'merge_endpoint_config',
    'ParamError',
    'MissingParameterError',
    'RangeError',
    'ValidationError',
    'check_params',
    'VerificationResult',
    'extract_params',
    'fill_params',
    'verify',
]
