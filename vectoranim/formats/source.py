"""
MovieSource - a decoded movie: its metadata plus the root command stream.

JSON layout written by decoders and read by the command line:
{
    "name": "hero",
    "frame_rate": 24,
    "root_matrix": {"a": 0.5, "b": 0, "c": 0, "d": 0.5, "tx": 100, "ty": 40},
    "commands": [
        {"type": "DefineShape", "id": 1},
        {"type": "DefineSprite", "id": 2, "frame_count": 2, "commands": [...]},
        {"type": "PlaceObject", "depth": 1, "character_id": 1,
         "matrix": {"a": 1, "b": 0, "c": 0, "d": 1, "tx": 10, "ty": 0}},
        {"type": "FrameLabel", "name": "run"},
        {"type": "ShowFrame"}
    ]
}
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from vectoranim.commands import Command, parse_commands
from vectoranim.model import Matrix


class MovieSource(BaseModel):
    """Decoded movie handed to the compiler."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    name: str = Field(default='animation')
    frame_rate: float = Field(default=24.0, ge=0)
    commands: tuple[Command, ...] = Field(default_factory=tuple)
    # Placement of the root clip in its host, if the decoder reported one
    root_matrix: Optional[Matrix] = Field(default=None)

    @model_validator(mode='before')
    @classmethod
    def _parse_commands(cls, data: Any) -> Any:
        """Convert serialized command dicts to command instances."""
        if isinstance(data, dict) and 'commands' in data:
            data = {**data, 'commands': tuple(parse_commands(data['commands']))}
        return data

    @field_serializer('commands')
    def _serialize_commands(self, commands: tuple[Command, ...], _info) -> list[dict[str, Any]]:
        return [command.to_dict() for command in commands]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode='json', exclude_none=True)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'MovieSource':
        return cls.model_validate(data)

    def save(self, path: Union[str, Path], indent: int = 2) -> None:
        """Write the movie to a JSON file."""
        Path(path).write_text(json.dumps(self.to_dict(), indent=indent), encoding='utf-8')

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'MovieSource':
        """
        Load a movie from a JSON file.

        Raises:
            ValueError: On unknown command types
            pydantic.ValidationError: On structurally invalid commands
        """
        return cls.from_dict(json.loads(Path(path).read_text(encoding='utf-8')))
