"""
Request-time verifier and the Flask view wrapper that runs it.

Usage (installed for you by Router.register):
    view = verified_view(context, "/test", "GET", (handler,))
    blueprint.add_url_rule("/test", view_func=view, methods=["GET"])

Per request:
1. Extract raw values from the source bags in param_order (first bag wins)
2. Coerce declared keys; undeclared keys pass through untouched
3. Check declared params (custom validator or required/max/min)
4. On errors: resolved error callback, else a 422 response
5. Fill unset params with their compiled defaults
6. Attach the filled map to g.<param_map>
7. Resolved success callback, else continue to the handler chain

verify() covers steps 1-5 and is independent of Flask.
"""

import functools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from flask import g, request

from ..middleware.error_envelope import make_failure_response
from ..sources import SourceBag, request_sources
from .normalize import coerce_value
from .registry import Context, EndpointConfig
from .validate import ParamError, check_params, errors_to_dict, is_missing


logger = logging.getLogger('param_router.verifier')


@dataclass
class VerificationResult:
    """Outcome of verify(): filled params, or the errors that stopped it."""
    params: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, ParamError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_map(self) -> Dict[str, Dict[str, Any]]:
        return errors_to_dict(self.errors)


def extract_params(endpoint: EndpointConfig, sources: Mapping[str, SourceBag]) -> Dict[str, Any]:
    """
    Pull values out of the source bags in priority order.

    The first bag (in param_order) holding a key claims it; later bags are
    not consulted for that key, even if the claimed value fails to parse.

    Args:
        endpoint: Endpoint configuration
        sources: Map of bag name -> SourceBag

    Returns:
        Map of key -> coerced value (declared keys) or raw value (others)
    """
    params: Dict[str, Any] = {}
    for bag_name in endpoint.param_order:
        bag = sources.get(bag_name)
        if bag is None:
            continue
        for key in bag.keys():
            if key in params:
                continue
            raw = bag.get(key)
            spec = endpoint.params.get(key)
            if spec is None:
                params[key] = raw
            else:
                params[key] = coerce_value(
                    spec.type, raw, array=spec.array, integer=spec.integer
                )
    return params


def fill_params(params: Dict[str, Any], endpoint: EndpointConfig) -> Dict[str, Any]:
    """
    Substitute compiled defaults for unset (None or empty list) declared params.

    A default of None means the param stays absent. Running this twice is
    a no-op.
    """
    filled = dict(params)
    for name, spec in endpoint.params.items():
        if is_missing(filled.get(name)):
            filled[name] = spec.default
    return filled


def verify(endpoint: EndpointConfig, sources: Mapping[str, SourceBag]) -> VerificationResult:
    """
    Extract, coerce, check and fill the params for one request.

    Never raises for bad input: every problem ends up in result.errors,
    keyed by param name, with all params checked.
    """
    params = extract_params(endpoint, sources)
    errors = check_params(params, endpoint)
    if errors:
        return VerificationResult(params=params, errors=errors)
    return VerificationResult(params=fill_params(params, endpoint))


def _resolve_callback(endpoint: EndpointConfig, names: Sequence[str], attr: str) -> Optional[Callable]:
    """Most specific callback: first named param that has one, else endpoint."""
    for name in names:
        callback = getattr(endpoint.params[name], attr, None)
        if callback is not None:
            return callback
    return getattr(endpoint, attr)


def run_handlers(handlers: Sequence[Callable], kwargs: Dict[str, Any]) -> Any:
    """
    Call handlers in order; the first non-None return is the response.

    Same contract as Flask's before_request functions.
    """
    result = None
    for handler in handlers:
        result = handler(**kwargs)
        if result is not None:
            return result
    return result


def verified_view(context: Context, key: str, method: str, handlers: Sequence[Callable]) -> Callable:
    """
    Wrap a handler chain with parameter verification.

    The endpoint config is looked up by (key, method) on every request, so
    the wrapper always sees what the router registered.

    Args:
        context: Router context holding the endpoint map
        key: Endpoint map key (prefix + path)
        method: Upper-case HTTP method
        handlers: Handler chain to run once params are valid

    Returns:
        Flask view function
    """
    method = method.upper()

    @functools.wraps(handlers[-1])
    def wrapper(**kwargs):
        endpoint = context.get_endpoint(key, method)
        result = verify(endpoint, request_sources(request))

        if not result.ok:
            errors = result.error_map()
            _log_failure(key, method, errors)
            on_error = _resolve_callback(endpoint, list(result.errors), "error")
            if on_error is not None:
                return on_error(errors)
            return make_failure_response(errors)

        logger.debug("params verified: %s %s -> g.%s", method, key, endpoint.param_map)
        setattr(g, endpoint.param_map, result.params)

        def proceed():
            return run_handlers(handlers, kwargs)

        on_success = _resolve_callback(endpoint, list(endpoint.params), "success")
        if on_success is not None:
            return on_success(result.params, proceed)
        return proceed()

    return wrapper


def _log_failure(key: str, method: str, errors: Dict[str, Dict[str, Any]]) -> None:
    """Log failed verification for observability."""
    logger.warning(
        f"Param verification failed: endpoint={method} {key} params={sorted(errors)}",
        extra={
            "event": "param_verification_failed",
            "endpoint": key,
            "method": method,
            "details": errors,
        }
    )
