"""
Pytest fixtures for vectoranim tests
"""

import pytest

from vectoranim import (
    ColorTransform,
    DefineShape,
    DefineSprite,
    FrameLabel,
    Matrix,
    MovieSource,
    PlaceObject,
    RemoveObject,
    ShowFrame,
)


@pytest.fixture
def rotated_matrix() -> Matrix:
    """A quarter-turn rotation."""
    return Matrix(a=0.0, b=1.0, c=-1.0, d=0.0)


@pytest.fixture
def walk_cycle() -> tuple:
    """
    Sprite stream: a leg shape placed at depth 1 moves every frame for two
    frames, then holds for a third.
    :return: The sprite's command tuple
    """
    return (
        PlaceObject(depth=1, character_id=1, matrix=Matrix(tx=0)),
        ShowFrame(),
        PlaceObject(depth=1, matrix=Matrix(tx=5)),
        ShowFrame(),
        PlaceObject(depth=1, matrix=Matrix(tx=5)),
        ShowFrame(),
    )


@pytest.fixture
def hero_movie(walk_cycle) -> MovieSource:
    """
    Root movie: a shape and a sprite, two labelled animations and a lead-in
    frame before the first label.
    :return: The decoded movie
    """
    return MovieSource(
        name='hero',
        frame_rate=24,
        commands=(
            DefineShape(character_id=1),
            DefineSprite(character_id=2, frame_count=3, commands=walk_cycle),
            DefineShape(character_id=3),
            PlaceObject(depth=1, character_id=3),
            ShowFrame(),
            FrameLabel(name='walk'),
            PlaceObject(depth=2, character_id=2, matrix=Matrix(tx=100, ty=50)),
            ShowFrame(),
            ShowFrame(),
            FrameLabel(name='fade'),
            PlaceObject(depth=2, color_transform=ColorTransform(mult_color=(1, 1, 1, 0.5))),
            ShowFrame(),
            RemoveObject(depth=2),
            ShowFrame(),
        ),
    )
