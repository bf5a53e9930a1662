"""
Display-list commands handed to the compiler by the binary decoder.

Command Hierarchy:
    Command (abstract)
    ├── PlaceObject     (type: 'PlaceObject')
    ├── RemoveObject    (type: 'RemoveObject')
    ├── ShowFrame       (type: 'ShowFrame')
    ├── FrameLabel      (type: 'FrameLabel')
    ├── DefineShape     (type: 'DefineShape')
    └── DefineSprite    (type: 'DefineSprite', nests its own commands)

Every command serializes to a dict with a "type" key so a decoded stream can
be stored as JSON and read back with command_from_dict().

A PlaceObject without a character id is a "move": it only updates the
transform of whatever already sits at that depth.
"""

from typing import Any, ClassVar, Dict, Iterable, Iterator, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from .model.transform import BlendMode, ColorTransform, Matrix


class Command(BaseModel):
    """Base class for all display-list commands."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra='ignore',
        use_enum_values=True,
    )

    command_type: ClassVar[str] = "Command"

    # Registry of command classes by command_type
    _registry: ClassVar[Dict[str, Type['Command']]] = {}

    type_name: str = Field(default='Command', alias='type')

    def __init_subclass__(cls, **kwargs):
        """Register command subclass in registry."""
        super().__init_subclass__(**kwargs)
        if cls.command_type != "Command":
            Command._registry[cls.command_type] = cls

    @model_validator(mode='before')
    @classmethod
    def _set_type(cls, data: Any) -> Any:
        """Stamp the concrete command type, whatever the caller passed."""
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if k not in ('type', 'type_name')}
            data['type'] = cls.command_type
        return data

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict, omitting unset optionals."""
        return self.model_dump(by_alias=True, mode='json', exclude_none=True)


class PlaceObject(Command):
    """Place a character at a depth, or move what is already there."""

    command_type: ClassVar[str] = "PlaceObject"

    depth: int = Field(ge=0)
    character_id: Optional[int] = Field(default=None, ge=0)
    matrix: Optional[Matrix] = None
    color_transform: Optional[ColorTransform] = None
    blend_mode: Optional[BlendMode] = None
    filters: Optional[list[dict[str, Any]]] = None

    @property
    def is_move(self) -> bool:
        """True if this command only modifies the object at its depth."""
        return self.character_id is None


class RemoveObject(Command):
    """Remove whatever occupies a depth."""

    command_type: ClassVar[str] = "RemoveObject"

    depth: int = Field(ge=0)


class ShowFrame(Command):
    """Complete the current frame."""

    command_type: ClassVar[str] = "ShowFrame"


class FrameLabel(Command):
    """Name the current frame."""

    command_type: ClassVar[str] = "FrameLabel"

    name: str


class DefineShape(Command):
    """Define a leaf shape character. Geometry is not carried."""

    command_type: ClassVar[str] = "DefineShape"

    character_id: int = Field(alias='id', ge=0)


class DefineSprite(Command):
    """Define a sprite (movie clip) character with its own timeline."""

    command_type: ClassVar[str] = "DefineSprite"

    character_id: int = Field(alias='id', ge=0)
    # Frame count declared by the container header (informational)
    frame_count: Optional[int] = Field(default=None, ge=0)
    commands: tuple[Command, ...] = Field(default_factory=tuple)

    @model_validator(mode='before')
    @classmethod
    def _parse_commands(cls, data: Any) -> Any:
        """Convert nested command dicts to command instances."""
        if isinstance(data, dict) and 'commands' in data:
            data = {**data, 'commands': tuple(parse_commands(data['commands']))}
        return data

    @field_serializer('commands')
    def _serialize_commands(self, commands: tuple[Command, ...], _info) -> list[dict[str, Any]]:
        return [command.to_dict() for command in commands]


def get_command_class(command_type: str) -> Type[Command]:
    """
    Get the command class for a command type.

    Args:
        command_type: Type string, e.g. 'PlaceObject'

    Returns:
        Command class

    Raises:
        ValueError: If the type is unknown
    """
    try:
        return Command._registry[command_type]
    except KeyError:
        raise ValueError(f"Unknown command type: {command_type!r}") from None


def command_from_dict(data: dict[str, Any]) -> Command:
    """
    Create a command instance from a serialized dictionary.

    Args:
        data: Dict with a "type" key naming the command

    Returns:
        Command instance of the appropriate type
    """
    if 'type' not in data:
        raise ValueError(f"Command is missing its 'type': {data!r}")
    return get_command_class(data['type']).model_validate(data)


def parse_commands(items: Iterable[Any]) -> Iterator[Command]:
    """Yield commands, converting serialized dicts where needed."""
    for item in items:
        if isinstance(item, Command):
            yield item
        elif isinstance(item, dict):
            yield command_from_dict(item)
        else:
            raise ValueError(f"Not a command: {item!r}")


def iter_definitions(commands: Iterable[Command]) -> Iterator[DefineShape | DefineSprite]:
    """
    Yield every character definition in a stream, including definitions
    nested inside sprite streams, in stream order.
    """
    stack: list[Iterator[Command]] = [iter(commands)]
    while stack:
        command = next(stack[-1], None)
        if command is None:
            stack.pop()
            continue
        if isinstance(command, (DefineShape, DefineSprite)):
            yield command
        if isinstance(command, DefineSprite):
            stack.append(iter(command.commands))
