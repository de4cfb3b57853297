"""Deployment data models.

The deployment source serves entries as a loosely tagged record: a ``type``
plus optional ``transform``/``action`` payloads. A deployment keeps its
entries raw; each one is validated on its own when it is classified into the
``Operation`` sum type, so a malformed entry is skipped rather than rejecting
the whole deployment.
"""

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

DEFAULT_PARSER = "tsx"


class WireModel(BaseModel):
    """Base for payloads served by the deployment source (camelCase keys)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class EntryType(str, Enum):
    """Tag of a deployment entry."""

    TRANSFORM = "TRANSFORM"
    ACTION = "ACTION"


class ActionName(str, Enum):
    """Supported repository actions."""

    INSTALL_DEPENDENCY = "install-dependency"
    REMOVE_DEPENDENCY = "remove-dependency"
    UPGRADE_DEPENDENCY = "upgrade-dependency"
    FILE_CREATE = "file-create"
    FILE_DELETE = "file-delete"
    FILE_MOVE = "file-move"
    FOLDER_CREATE = "folder-create"
    FOLDER_DELETE = "folder-delete"
    FOLDER_MOVE = "folder-move"


class ArgumentKey(str, Enum):
    """Keys an action argument may carry."""

    DEPENDENCY_NAME = "dependency-name"
    VERSION = "version"
    FILE_PATH = "file-path"
    FILE_CONTENT = "file-content"
    FOLDER_PATH = "folder-path"
    SOURCE_PATH = "source-path"
    DESTINATION_PATH = "destination-path"


def _none_as_empty_list(value: Any) -> Any:
    return [] if value is None else value


class Source(WireModel):
    """A single source file of a transform."""

    id: str | None = None
    name: str
    code: str = ""

    @field_validator("code", mode="before")
    @classmethod
    def null_code_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class Transform(WireModel):
    """A code-modification unit made of one or more source files."""

    id: str
    parser: str | None = None
    sources: list[Source] = Field(default_factory=list)
    deployment_id: str | None = None
    transform_id: str | None = None

    @field_validator("sources", mode="before")
    @classmethod
    def null_sources_as_empty(cls, value: Any) -> Any:
        return _none_as_empty_list(value)


class Action(WireModel):
    """A declarative repository action.

    ``name`` is kept as a plain string so that an unknown action degrades to a
    skipped command instead of rejecting the whole deployment.
    """

    name: str

    @property
    def kind(self) -> ActionName | None:
        try:
            return ActionName(self.name)
        except ValueError:
            return None


class Argument(WireModel):
    """Key/value argument of an action. Unrecognized keys are ignored."""

    key: str
    value: str = ""

    @field_validator("value", mode="before")
    @classmethod
    def scalar_as_text(cls, value: Any) -> Any:
        # Scalars are substituted into commands as their text form
        if value is None:
            return ""
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
        return value


class TransformOnDeployment(WireModel):
    """A deployment entry as served by the deployment source."""

    type: str
    deployment_id: str | None = None
    transform_id: str | None = None
    transform: Transform | None = None
    action_id: str | None = None
    action: Action | None = None
    arguments: list[Argument] = Field(default_factory=list)

    @field_validator("arguments", mode="before")
    @classmethod
    def null_arguments_as_empty(cls, value: Any) -> Any:
        return _none_as_empty_list(value)


class Deployment(WireModel):
    """A bundle of transforms and actions to apply to a repository.

    ``transforms`` holds the entries as served. Use ``parse_entry`` (via the
    classifier) to validate one entry at a time.
    """

    id: str
    title: str
    description: str = ""
    transforms: list[Any] = Field(default_factory=list)

    @field_validator("transforms", mode="before")
    @classmethod
    def null_transforms_as_empty(cls, value: Any) -> Any:
        return _none_as_empty_list(value)


def parse_entry(raw: Any) -> TransformOnDeployment:
    """Validate a single raw deployment entry.

    Raises:
        pydantic.ValidationError: If the entry is malformed
    """
    return TransformOnDeployment.model_validate(raw)


def raw_entry_type(raw: Any) -> str:
    """Best-effort tag of a raw entry, for log lines about skipped entries."""
    if isinstance(raw, TransformOnDeployment):
        return raw.type
    if isinstance(raw, dict):
        return str(raw.get("type"))
    return type(raw).__name__


# Classified operations


class TransformOperation(BaseModel):
    """Run a transform against the working tree."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["transform"] = "transform"
    transform: Transform

    @property
    def parser(self) -> str:
        return self.transform.parser or DEFAULT_PARSER

    @property
    def label(self) -> str:
        return f"transform:{self.transform.id}"


class ActionOperation(BaseModel):
    """Run a single resolved repository action."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["action"] = "action"
    action: Action
    arguments: tuple[Argument, ...] = ()

    @property
    def label(self) -> str:
        return f"action:{self.action.name}"


class UnsupportedOperation(BaseModel):
    """An entry that is neither a well-formed transform nor action."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["unsupported"] = "unsupported"
    entry_type: str
    reason: str

    @property
    def label(self) -> str:
        return f"unsupported:{self.entry_type}"


Operation = Annotated[
    Union[TransformOperation, ActionOperation, UnsupportedOperation],
    Field(discriminator="kind"),
]
