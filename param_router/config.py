import os

from dotenv import load_dotenv

load_dotenv()


DEVELOPMENT_ENVS = {"dev", "development"}
TRUTHY = {"1", "true", "yes", "on"}


def _current_env() -> str:
    return (
        os.environ.get("ENV")
        or os.environ.get("FLASK_ENV")
        or os.environ.get("APP_ENV")
        or ""
    ).lower()


def is_diagnostics_enabled() -> bool:
    """
    Whether 422 responses carry the structured error map.

    PARAM_ROUTER_DIAGNOSTICS wins when set. Otherwise diagnostics are on
    only in a development environment (ENV / FLASK_ENV / APP_ENV).
    Read on every call so tests and reloads see the current environment.
    """
    override = os.environ.get("PARAM_ROUTER_DIAGNOSTICS")
    if override is not None and override.strip() != "":
        return override.strip().lower() in TRUTHY
    return _current_env() in DEVELOPMENT_ENVS


class Config:
    # Same status for missing, unparsable, out-of-range and custom failures
    FAILURE_STATUS = 422
    FAILURE_MESSAGE = 'Required parameters are missing'
