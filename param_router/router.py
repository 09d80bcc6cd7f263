"""
Router - a Flask blueprint whose routes can declare their parameters.

Usage:
    router = Router({"paramMap": "args"})

    @router.get("/users/<user_id>", {"params": {"user_id": "number", "limit": "number(20)"}})
    def list_users(user_id):
        params = g.args   # {"user_id": 7, "limit": 20}
        ...

    router.get("/health", health)          # bare handler: no verification
    router.get("/api", router.api)         # API map of this router

    app = Flask(__name__)
    router.init_app(app, url_prefix="/v1")

Endpoint declarations are compiled when the route is registered; schema
errors (unknown type, malformed declaration) raise right there.
"""

import functools
import logging
from typing import Any, Callable, Dict, Optional, Union

from flask import Blueprint, Flask, jsonify, request

from .api_map import build_api_map
from .contracts.grammar import merge_endpoint_config
from .contracts.registry import (
    Context,
    EndpointConfig,
    HandlerOnly,
    RouterSettings,
    classify_registration,
)
from .contracts.wrapper import run_handlers, verified_view


logger = logging.getLogger('param_router.router')


class Router:
    """
    Proxy over a Flask Blueprint that installs the param verifier.

    Args:
        configuration: Router-wide settings (dict or RouterSettings)
        blueprint: Existing blueprint to register on; one is created if omitted
    """

    def __init__(
        self,
        configuration: Optional[Union[Dict[str, Any], RouterSettings]] = None,
        blueprint: Optional[Blueprint] = None,
    ):
        if isinstance(configuration, RouterSettings):
            settings = configuration
        else:
            settings = RouterSettings.model_validate(configuration or {})
        if blueprint is None:
            blueprint = Blueprint(
                settings.blueprint_name(), __name__, url_prefix=settings.url_prefix
            )
        self.context = Context(settings=settings, blueprint=blueprint)
        # local endpoint name -> path as registered, for mount path lookup
        self._rules: Dict[str, str] = {}

    @property
    def blueprint(self) -> Blueprint:
        return self.context.blueprint

    @property
    def settings(self) -> RouterSettings:
        return self.context.settings

    @property
    def endpoints(self) -> Dict[str, Dict[str, EndpointConfig]]:
        """Registered endpoint configs: path -> METHOD -> EndpointConfig."""
        return self.context.endpoints

    def register(self, method: str, path: str, config: Any = None, *handlers: Callable):
        """
        Register a route, with or without a parameter schema.

        Args:
            method: HTTP method
            path: Flask rule, e.g. "/items/<item_id>"
            config: Endpoint declaration, or a bare handler for pass-through
            handlers: Handler chain; omit to use the call as a decorator

        Returns:
            Decorator if no handler was given, else what add_url_rule returns

        Raises:
            InvalidTypeError, InvalidParamShapeError: On bad param declarations
        """
        method = method.upper()
        registration = classify_registration(config, handlers)

        if not registration.handlers:
            def decorator(fn: Callable) -> Callable:
                self.register(method, path, config, fn)
                return fn
            return decorator

        if isinstance(registration, HandlerOnly):
            view = _chain(registration.handlers)
        else:
            endpoint = merge_endpoint_config(self.settings, registration.config)
            key = self.context.add_endpoint(path, method, endpoint)
            view = verified_view(self.context, key, method, registration.handlers)
            logger.info(
                "registered %s %s params=%s", method, key, list(endpoint.params)
            )

        name = _endpoint_name(method, path)
        self._rules[name] = path
        return self.blueprint.add_url_rule(path, endpoint=name, view_func=view, methods=[method])

    def get(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("GET", path, config, *handlers)

    def post(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("POST", path, config, *handlers)

    def put(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("PUT", path, config, *handlers)

    def patch(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("PATCH", path, config, *handlers)

    def delete(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("DELETE", path, config, *handlers)

    def head(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("HEAD", path, config, *handlers)

    def options(self, path: str, config: Any = None, *handlers: Callable):
        return self.register("OPTIONS", path, config, *handlers)

    def register_router(self, child: "Router", url_prefix: Optional[str] = None) -> None:
        """Nest another router under this one."""
        self.blueprint.register_blueprint(child.blueprint, url_prefix=url_prefix)

    def init_app(self, app: Flask, **options) -> None:
        """Register this router's blueprint on a Flask app."""
        app.register_blueprint(self.blueprint, **options)

    def api(self, **kwargs):
        """
        View returning the API map for this router.

        Keys carry the configured prefix if there is one, otherwise the
        path this view is mounted under.
        """
        base = "" if self.settings.prefix else self._mount_path()
        return jsonify(build_api_map(self.endpoints, base))

    def _mount_path(self) -> str:
        """Mount path of this router, derived from the rule serving the request."""
        rule = request.url_rule
        if rule is None or not request.endpoint:
            return ""
        local_name = request.endpoint.rsplit(".", 1)[-1]
        if not request.endpoint.endswith(f"{self.blueprint.name}.{local_name}"):
            return ""
        local_path = self._rules.get(local_name)
        if local_path is None or not rule.rule.endswith(local_path):
            return ""
        return rule.rule[: len(rule.rule) - len(local_path)]


def _endpoint_name(method: str, path: str) -> str:
    # Blueprint endpoint names may not contain dots
    return f"{method.lower()}_{path}".replace(".", "_")


def _chain(handlers) -> Callable:
    if len(handlers) == 1:
        return handlers[0]

    @functools.wraps(handlers[-1])
    def chained(**kwargs):
        return run_handlers(handlers, kwargs)

    return chained
