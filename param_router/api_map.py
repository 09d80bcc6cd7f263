"""
API map - serializes registered endpoints for client discovery.

Shape:
{
    "/test": {
        "GET": {
            "description": "...",
            "paramOrder": ["body", "query", "params", "cookies"],
            "paramMap": "args",
            "params": {
                "var1": {"type": "number", "array": false, "required": true}
            }
        }
    }
}

Keys whose value is unset (description, default, min, max) are omitted.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .contracts.registry import EndpointConfig, ParamSpec


class ParamDoc(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    array: bool
    required: bool
    default: Optional[Any] = None
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None

    @classmethod
    def from_spec(cls, spec: ParamSpec) -> "ParamDoc":
        return cls(
            type=spec.type.value,
            array=spec.array,
            required=spec.required,
            default=spec.default,
            min=spec.min,
            max=spec.max,
        )


class EndpointDoc(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    description: Optional[str] = None
    param_order: List[str] = Field(alias="paramOrder")
    param_map: str = Field(alias="paramMap")
    params: Dict[str, ParamDoc] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, config: EndpointConfig) -> "EndpointDoc":
        return cls(
            description=config.description,
            param_order=list(config.param_order),
            param_map=config.param_map,
            params={name: ParamDoc.from_spec(spec) for name, spec in config.params.items()},
        )


def join_path(base: str, path: str) -> str:
    """Join a mount path and a route path without doubling slashes."""
    base = (base or "").rstrip("/")
    if not base:
        return path
    return base + (path if path.startswith("/") else "/" + path)


def build_api_map(
    endpoints: Dict[str, Dict[str, EndpointConfig]],
    base: str = "",
) -> Dict[str, Dict[str, Dict[str, Any]]]:
    """
    Serialize an endpoint map.

    Args:
        endpoints: path -> METHOD -> EndpointConfig
        base: Mount path prepended to every key

    Returns:
        JSON-ready dict
    """
    api = {}
    for path, methods in endpoints.items():
        api[join_path(base, path)] = {
            method: EndpointDoc.from_config(config).model_dump(by_alias=True, exclude_none=True)
            for method, config in methods.items()
        }
    return api
