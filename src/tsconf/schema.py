"""Schema validation layer on top of the config resolution pipeline.

Shapes are declared as pydantic models. Both the default config used to
bootstrap a missing file and the loaded config are validated, and every
failing field is reported on its own line::

    port: Input should be a valid integer
    database.host: Field required
"""

import os
from typing import Any, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from .errors import ConfigLoadError, ErrorCause
from .models import CreationRequest
from .resolver import ConfigResolver

__all__ = ["load_config_with_schema", "format_validation_errors", "validate_against"]

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_errors(error: ValidationError) -> str:
    """Convert a pydantic validation error into one line per failing field.

    Parameters
    ----------
    error : ValidationError
        Validation error raised by pydantic

    Returns
    -------
    str
        Lines of the form `<dotted.field.path or root>: <message>`
    """
    lines = []
    for err in error.errors():
        path = ".".join(str(loc) for loc in err["loc"]) or "root"
        lines.append(f"{path}: {err['msg']}")

    return "\n".join(lines)


def validate_against(
    schema: Type[ModelT], obj: Any, strict: bool = True
) -> Union[ModelT, ValidationError]:
    """Validate an object, returning the error instead of raising it.

    Config values arrive as JSON-like data (strings for enums and dates), so
    the object is validated with the JSON rules of pydantic: strict mode still
    refuses coercions such as `"8080"` to `int`, but accepts `"dev"` for an
    enum member. Objects that cannot be serialized to JSON are validated as
    Python objects instead.

    Parameters
    ----------
    schema : Type[BaseModel]
        Model to validate against
    obj : Any
        Configuration object
    strict : bool, default True
        If `True`, values are not coerced into the declared types

    Returns
    -------
    Union[BaseModel, ValidationError]
        Model instance, or the validation error
    """
    try:
        payload = to_json(obj)
    except PydanticSerializationError:
        payload = None

    try:
        if payload is None:
            return schema.model_validate(obj, strict=strict)
        return schema.model_validate_json(payload, strict=strict)
    except ValidationError as err:
        return err


async def load_config_with_schema(
    path: Union[str, os.PathLike],
    schema: Type[ModelT],
    create_if_not_found: Optional[CreationRequest] = None,
    resolver: Optional[ConfigResolver] = None,
    strict: bool = True,
) -> ModelT:
    """Load a config file and validate it against a pydantic model.

    Parameters
    ----------
    path : Union[str, os.PathLike]
        Absolute path to the config file
    schema : Type[BaseModel]
        Model the config must adhere to
    create_if_not_found : CreationRequest, optional
        Default config written when the file does not exist. It is validated
        before anything touches the filesystem.
    resolver : ConfigResolver, optional
        Resolver to delegate the loading to (default: a new ConfigResolver)
    strict : bool, default True
        If `True`, values are not coerced into the declared types

    Returns
    -------
    BaseModel
        Instance of `schema` holding the validated config

    Raises
    ------
    ConfigLoadError
        With cause `invalid_default_config_format` if the default config does
        not match the schema, `invalid_config_format` if the loaded config
        does not, or any cause raised by the resolver
    """
    if create_if_not_found is not None:
        result = validate_against(schema, create_if_not_found.default_config, strict)
        if isinstance(result, ValidationError):
            raise ConfigLoadError(
                "create_if_not_found.default_config did not match schema. "
                f"Validation errors: \n{format_validation_errors(result)}",
                cause=ErrorCause.INVALID_DEFAULT_CONFIG_FORMAT,
            ) from result

    if resolver is None:
        resolver = ConfigResolver()

    obj = await resolver.resolve(path, create_if_not_found)

    result = validate_against(schema, obj, strict)
    if isinstance(result, ValidationError):
        raise ConfigLoadError(
            "Config file did not match schema. Validation errors: \n"
            f"{format_validation_errors(result)}",
            cause=ErrorCause.INVALID_CONFIG_FORMAT,
        ) from result

    return result
