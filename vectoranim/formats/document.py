"""
AnimationDocument - Pydantic model for the compiled animation and its JSON and MessagePack I/O.

This is the single class for both the output data model and file operations.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

import msgpack
from pydantic import BaseModel, ConfigDict, Field

from vectoranim.model import Animation


class AnimationDocument(BaseModel):
    """
    Portable animation document consumed by renderers.

    Serialization format:
    {
        "name": "hero",
        "frame_rate": 24,
        "base_animations": {
            "12": {"time_lines": {"1": [FrameSpan, ...]}, "total_frames": 8}
        },
        "animations": {
            "run": {"time_lines": {...}, "total_frames": 15},
            "jump": {"time_lines": {...}, "total_frames": 15}
        }
    }

    Example usage:
        # Load from file
        doc = AnimationDocument.load('hero.json')

        # Save to file
        doc.save('hero.json', indent=2)

        # Compact binary copy
        doc.save_packed('hero.an')
    """

    model_config = ConfigDict(
        populate_by_name=True,
        validate_assignment=False,
        extra='ignore',
    )

    name: str = Field(default='animation')
    frame_rate: float = Field(default=24.0, ge=0)

    # Sprite id -> compiled sub-animation
    base_animations: dict[int, Animation] = Field(default_factory=dict)
    # Label name -> slice of the root timeline, in frame order
    animations: dict[str, Animation] = Field(default_factory=dict)

    def to_api_dict(self) -> dict[str, Any]:
        """
        Convert to a JSON-compatible dictionary.

        Returns:
            Dict matching the renderer format (integer keys become strings)
        """
        return self.model_dump(by_alias=True, mode='json')

    def to_json(self, indent: Optional[int] = None) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_api_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'AnimationDocument':
        """Create a document from a serialized dictionary."""
        return cls.model_validate(data)

    def get_animation(self, name: str) -> Optional[Animation]:
        return self.animations.get(name)

    def get_base_animation(self, character_id: int) -> Optional[Animation]:
        return self.base_animations.get(character_id)

    # --- File I/O ---

    def save(self, path: Union[str, Path], indent: Optional[int] = None) -> None:
        """
        Save the document to a JSON file.

        Args:
            path: Output file path
            indent: JSON indentation, None for compact output
        """
        Path(path).write_text(self.to_json(indent=indent), encoding='utf-8')

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'AnimationDocument':
        """
        Load a document from a JSON file.

        Args:
            path: Path to the JSON file

        Returns:
            AnimationDocument instance
        """
        return cls.from_dict(json.loads(Path(path).read_text(encoding='utf-8')))

    def save_packed(self, path: Union[str, Path]) -> None:
        """
        Save the document as MessagePack.

        Same structure as the JSON file, in a compact binary encoding for
        runtimes that load animations directly.

        Args:
            path: Output file path, conventionally ``*.an``
        """
        Path(path).write_bytes(msgpack.packb(self.to_api_dict(), use_bin_type=True))

    @classmethod
    def load_packed(cls, path: Union[str, Path]) -> 'AnimationDocument':
        """Load a document written by save_packed()."""
        return cls.from_dict(msgpack.unpackb(Path(path).read_bytes(), raw=False))
