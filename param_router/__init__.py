"""
Declarative request-parameter verification for Flask routes.

    from param_router import Router

    router = Router()

    @router.get("/search", {"params": {"q": "string", "page": "number(1)"}})
    def search():
        ...
"""

from .router import Router
from .api_map import build_api_map
from .contracts import (
    ParamType,
    ParamSpec,
    EndpointConfig,
    RouterSettings,
    InvalidTypeError,
    InvalidParamShapeError,
    MissingParameterError,
    RangeError,
    ValidationError,
    compile_param,
    verify,
)

__all__ = [
    'Router',
    'build_api_map',
    'ParamType',
    'ParamSpec',
    'EndpointConfig',
    'RouterSettings',
    'InvalidTypeError',
    'InvalidParamShapeError',
    'MissingParameterError',
    'RangeError',
    'ValidationError',
    'compile_param',
    'verify',
]
