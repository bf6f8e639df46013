import importlib.util
import inspect
import types
from typing import Callable

import requests

BreakOracleFn = Callable[[int], bool]

PLUGIN_FUNC_NAME = "breaks"


class PluginLoadError(RuntimeError):
    pass


class PluginSignatureError(TypeError):
    pass


def threshold_oracle(secret_f: int) -> BreakOracleFn:
    """Monotone oracle: every floor at or above secret_f breaks the probe."""

    def breaks(floor: int) -> bool:
        return floor >= secret_f

    return breaks


def load_module_from_file(module_file_path: str) -> types.ModuleType:
    """Load a Python module file."""
    spec = importlib.util.spec_from_file_location("oracle_fn", module_file_path)
    if spec is None or spec.loader is None:
        raise PluginLoadError(f"Could not load spec for: {module_file_path}")
    mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(mod)  # executes user code
    return mod


def load_oracle_fn(module_file_path: str) -> BreakOracleFn:
    """Load the user defined break oracle from a Python module file."""
    mod = load_module_from_file(module_file_path)
    fn = getattr(mod, PLUGIN_FUNC_NAME, None)
    if fn is None or not callable(fn):
        raise PluginLoadError(
            f"Plugin must define `{PLUGIN_FUNC_NAME}(floor: int) -> bool`"
        )

    sig = inspect.signature(fn)
    params = list(sig.parameters.values())
    if len(params) != 1 or params[0].kind not in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        raise PluginSignatureError(
            f"{PLUGIN_FUNC_NAME} must accept exactly one positional arg: (floor: int)"
        )
    return fn


def fetch_building(endpoint: str, *, timeout: float = 10) -> int:
    """Fetch the number of floors of the demo building."""
    response = requests.get(f"{endpoint}/building", timeout=timeout)
    if response.status_code != 200:
        raise ValueError(
            f"Failed to get {endpoint}/building: {response.status_code} {response.text}"
        )
    return int(response.json()["floors"])


def http_oracle(endpoint: str, *, timeout: float = 10) -> BreakOracleFn:
    """Oracle that drops the probe on the demo API's hidden building."""
    session = requests.Session()

    def breaks(floor: int) -> bool:
        response = session.post(f"{endpoint}/drop", json={"floor": floor}, timeout=timeout)
        response.raise_for_status()
        return bool(response.json()["broke"])

    return breaks
