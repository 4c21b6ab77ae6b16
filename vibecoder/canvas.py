#!/usr/bin/env python3
"""
Drawing-command interpreter.

Each visual batch is a complete frame, not a diff, so only the latest batch
is replayed. Earlier batches stay in the session history untouched.
"""

import logging
import re
import time
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence, Tuple, Union

from PIL import Image, ImageColor, ImageDraw, ImageFont

from .contracts import (
    DrawingCommand,
    FillCommand,
    CircleCommand,
    RectCommand,
    TextCommand,
    ClearCommand,
)

logger = logging.getLogger(__name__)

CANVAS_WIDTH = 800
CANVAS_HEIGHT = 600

DEFAULT_BACKGROUND = '#000000'
DEFAULT_SHAPE_COLOR = '#FFFFFF'
PLACEHOLDER_BACKGROUND = '#333333'
PLACEHOLDER_TEXT_COLOR = '#666666'

# How long the "just updated" affirmation lasts after a new batch
FLASH_SECONDS = 1.5

_RGB_TUPLE = re.compile(
    r'^\s*(?:rgb)?\s*\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)\s*$',
    re.IGNORECASE,
)

Layer = Union[CircleCommand, RectCommand, TextCommand]


def normalize_color(value: Optional[str], default: str) -> str:
    """
    Normalize a model-supplied color to '#RRGGBB'.

    Accepts '#RGB', '#RRGGBB', '(r, g, b)', 'rgb(r, g, b)' and CSS color
    names. Anything else gives the default.
    """
    if not value or value == 'undefined':
        return default

    match = _RGB_TUPLE.match(value)
    if match:
        rgb = tuple(int(part) for part in match.groups())
        if any(part > 255 for part in rgb):
            return default
    else:
        try:
            rgb = ImageColor.getrgb(value.strip())[:3]
        except ValueError:
            return default

    return '#{:02X}{:02X}{:02X}'.format(*rgb)


@dataclass(frozen=True)
class Frame:
    """One rendered canvas frame"""
    width: int
    height: int
    background: str
    layers: Tuple[Layer, ...] = ()
    placeholder: Optional[str] = None

    @property
    def is_placeholder(self) -> bool:
        return self.placeholder is not None

    def to_image(self) -> Image.Image:
        """Rasterize the frame with Pillow"""
        image = Image.new('RGB', (self.width, self.height), self.background)
        draw = ImageDraw.Draw(image)
        font = ImageFont.load_default()

        if self.placeholder:
            _draw_centered_text(
                draw, self.width / 2, self.height / 2, self.placeholder,
                PLACEHOLDER_TEXT_COLOR, font,
            )
            return image

        for layer in self.layers:
            if isinstance(layer, CircleCommand):
                draw.ellipse(
                    [layer.x - layer.radius, layer.y - layer.radius,
                     layer.x + layer.radius, layer.y + layer.radius],
                    fill=layer.color,
                )
            elif isinstance(layer, RectCommand):
                x0, x1 = sorted((layer.x, layer.x + layer.width))
                y0, y1 = sorted((layer.y, layer.y + layer.height))
                draw.rectangle([x0, y0, x1, y1], fill=layer.color)
            elif isinstance(layer, TextCommand):
                _draw_centered_text(draw, layer.x, layer.y, layer.text, layer.color, font)

        return image

    def save(self, path: str) -> None:
        self.to_image().save(path)


def _draw_centered_text(draw, x, y, text, color, font) -> None:
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    draw.text((x - (right - left) / 2, y - (bottom - top) / 2), text, fill=color, font=font)


class CanvasRenderer:
    """Replays the latest batch of drawing commands onto a fresh frame"""

    def __init__(
        self,
        width: int = CANVAS_WIDTH,
        height: int = CANVAS_HEIGHT,
        placeholder_text: str = 'OS not loaded',
    ):
        self.width = width
        self.height = height
        self.placeholder_text = placeholder_text

    def placeholder_frame(self) -> Frame:
        return Frame(
            width=self.width,
            height=self.height,
            background=PLACEHOLDER_BACKGROUND,
            placeholder=self.placeholder_text,
        )

    def render(self, batches: Sequence[Sequence[DrawingCommand]]) -> Frame:
        """Render the last batch; an empty history gives the placeholder frame"""
        if not batches:
            return self.placeholder_frame()

        background = DEFAULT_BACKGROUND
        layers = []

        for command in batches[-1]:
            if isinstance(command, FillCommand):
                # Covers everything drawn so far
                background = normalize_color(command.color, DEFAULT_BACKGROUND)
                layers = []
            elif isinstance(command, ClearCommand):
                background = DEFAULT_BACKGROUND
                layers = []
            elif isinstance(command, (CircleCommand, RectCommand, TextCommand)):
                layers.append(
                    replace(command, color=normalize_color(command.color, DEFAULT_SHAPE_COLOR))
                )
            else:
                logger.debug("Skipping unsupported drawing command: %r", command)

        return Frame(
            width=self.width,
            height=self.height,
            background=background,
            layers=tuple(layers),
        )


class UpdateFlash:
    """
    Derives the short-lived "just updated" signal from the batch count.

    Only the moment of the last increase is remembered; the boolean itself is
    always computed.
    """

    def __init__(self, window: float = FLASH_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.window = window
        self.clock = clock
        self._last_count = 0
        self._changed_at: Optional[float] = None

    def observe(self, batch_count: int) -> None:
        if batch_count > self._last_count:
            self._changed_at = self.clock()
        self._last_count = batch_count

    def just_updated(self) -> bool:
        if self._changed_at is None:
            return False
        return self.clock() - self._changed_at < self.window
