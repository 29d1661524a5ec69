"""Resolution of ``module:attribute`` import strings."""

import importlib
from typing import Any


def import_string(path: str) -> Any:
    """Import ``package.module:Attribute`` (or ``package.module.Attribute``).

    Raises:
        ImportError: If the module or the attribute cannot be found
    """
    if ":" in path:
        module_path, _, attr_path = path.partition(":")
    else:
        module_path, _, attr_path = path.rpartition(".")
    if not module_path or not attr_path:
        raise ImportError(f"Invalid import string: {path!r}")

    obj: Any = importlib.import_module(module_path)
    for attr in attr_path.split("."):
        try:
            obj = getattr(obj, attr)
        except AttributeError as e:
            raise ImportError(f"{module_path} has no attribute {attr_path}") from e
    return obj
