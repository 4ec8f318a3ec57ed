"""Selection of the configuration object among a module's exports."""

from numbers import Number
from typing import Any, Mapping

from .api import DEFAULT_EXPORT
from .errors import ConfigLoadError, ErrorCause

__all__ = ["resolve_export", "is_object"]


def is_object(value: Any) -> bool:
    """Check whether a value can stand for a configuration object.

    Scalars (`None`, booleans, numbers, strings and bytes) cannot.

    Parameters
    ----------
    value : Any
        Value to check

    Returns
    -------
    bool
        `True` for containers and other structured objects
    """
    return value is not None and not isinstance(value, (Number, str, bytes))


def resolve_export(bindings: Mapping[str, Any]) -> Any:
    """Pick the single usable configuration object of a module.

    The `default` export wins if it is an object. Otherwise the module must
    export exactly one other name.

    Parameters
    ----------
    bindings : Mapping[str, Any]
        Name to value exports of the module

    Returns
    -------
    Any
        Configuration object

    Raises
    ------
    ConfigLoadError
        With cause `no_exports` if nothing usable is exported, or
        `uncertain_export` if several named exports compete
    """
    default = bindings.get(DEFAULT_EXPORT)
    if is_object(default):
        return default

    names = [name for name in bindings if name != DEFAULT_EXPORT]
    if not names:
        raise ConfigLoadError(
            "The config file must export something.", cause=ErrorCause.NO_EXPORTS
        )
    if len(names) > 1:
        raise ConfigLoadError(
            "The config file must only have one export (or provide a default). "
            f"Found: {', '.join(sorted(names))}",
            cause=ErrorCause.UNCERTAIN_EXPORT,
        )

    return bindings[names[0]]
