"""Data structures exchanged between the stages of the loading pipeline."""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union


@dataclass(frozen=True)
class PackageSource:
    """Type declaration provided by an installed package.

    Attributes
    ----------
    package_name : str
        Name used as the import source (e.g. `@acme/config-types`)
    """

    package_name: str


@dataclass(frozen=True)
class LocalSource:
    """Type declaration provided by a file on disk.

    Attributes
    ----------
    absolute_path : str
        Absolute path to the file declaring the type
    """

    absolute_path: str

    def __post_init__(self):
        if not os.path.isabs(self.absolute_path):
            raise ValueError(
                f"Type declaration path must be absolute: received "
                f"'{self.absolute_path}'"
            )


@dataclass(frozen=True)
class TypeConstraint:
    """Named type the generated `config` constant is annotated with.

    Attributes
    ----------
    identifier : str
        Name of the type
    source : Union[PackageSource, LocalSource]
        Where the type is imported from
    """

    identifier: str
    source: Union[PackageSource, LocalSource]

    def __post_init__(self):
        if not isinstance(self.source, (PackageSource, LocalSource)):
            raise TypeError(
                "Type constraint source must be a PackageSource or a LocalSource, "
                f"got {type(self.source).__name__}"
            )


@dataclass
class CreationRequest:
    """Instructions for bootstrapping a config file that does not exist yet.

    Attributes
    ----------
    default_config : Mapping[str, Any]
        Object written to the new file (and validated, if a schema is used)
    immediately_use : bool, default False
        If `True`, return `default_config` straight away instead of halting
        so that the generated file can be reviewed
    type_constraint : TypeConstraint, optional
        Type to annotate the generated config constant with
    """

    default_config: Mapping[str, Any]
    immediately_use: bool = False
    type_constraint: Optional[TypeConstraint] = None


@dataclass
class NativeLoadResult:
    """Outcome of an attempt to execute a config file directly.

    Attributes
    ----------
    success : bool
        Whether the module was executed
    bindings : Dict[str, Any]
        Exports of the module (empty on failure)
    environment_incapable : bool
        `True` if the host cannot interpret this kind of source at all
    error : BaseException, optional
        Failure raised by the loader
    """

    success: bool
    bindings: Dict[str, Any] = field(default_factory=dict)
    environment_incapable: bool = False
    error: Optional[BaseException] = None
