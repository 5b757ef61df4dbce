"""
Framebuffer for the CHIP-8 VM
=============================

The CHIP-8 display is a 64x32 monochrome grid. The only ways to change it
are the CLS instruction and the DRW instruction, which XORs an 8-pixel-wide
sprite onto the grid and reports whether any lit pixel was switched off.

Pixels are stored row-major in a flat bytearray (index = y * 64 + x), one
byte per pixel holding 0 or 1.

Host-facing helpers:
- pixel_at()/get_text() for inspection
- needs_redraw/acknowledge_redraw() edge-triggered change tracking
- render_image() PNG export via Pillow

Copyright (c) 2025 chip8-vm contributors
"""

import io
from dataclasses import dataclass
from typing import List


WIDTH = 64
HEIGHT = 32
SPRITE_WIDTH = 8


@dataclass
class DisplayState:
    """
    Change-tracking state.

    Attributes:
        dirty: Framebuffer changed since the host last acknowledged a redraw
        draw_count: DRW/CLS operations performed since reset
    """
    dirty: bool = True
    draw_count: int = 0


class Display:
    """
    64x32 XOR framebuffer.

    Example:
        >>> display = Display()
        >>> display.draw_sprite(0, 0, bytes([0xF0]))
        False
        >>> display.pixel_at(3, 0)
        True
        >>> display.draw_sprite(0, 0, bytes([0xF0]))
        True
    """

    def __init__(self):
        self._pixels = bytearray(WIDTH * HEIGHT)
        self._state = DisplayState()

    @property
    def width(self) -> int:
        return WIDTH

    @property
    def height(self) -> int:
        return HEIGHT

    @property
    def needs_redraw(self) -> bool:
        """True if the framebuffer changed since acknowledge_redraw()."""
        return self._state.dirty

    @property
    def draw_count(self) -> int:
        return self._state.draw_count

    def acknowledge_redraw(self) -> None:
        """Host has presented the current frame."""
        self._state.dirty = False

    def reset(self) -> None:
        """Clear pixels and request an initial redraw."""
        self._pixels[:] = bytes(WIDTH * HEIGHT)
        self._state = DisplayState()

    def clear(self) -> None:
        """Switch every pixel off (CLS)."""
        self._pixels[:] = bytes(WIDTH * HEIGHT)
        self._state.dirty = True
        self._state.draw_count += 1

    def pixel_at(self, x: int, y: int) -> bool:
        """
        Get one pixel.

        Raises:
            ValueError: If (x, y) lies outside the 64x32 grid
        """
        if not (0 <= x < WIDTH and 0 <= y < HEIGHT):
            raise ValueError(f"Pixel ({x}, {y}) outside {WIDTH}x{HEIGHT} display")
        return self._pixels[y * WIDTH + x] != 0

    def draw_sprite(self, x: int, y: int, sprite: bytes, wrap: bool = True) -> bool:
        """
        XOR a sprite onto the framebuffer.

        Each sprite byte is one row, most significant bit leftmost. The
        origin is always wrapped onto the screen. With `wrap` set every
        pixel wraps around the edges; otherwise pixels that would fall off
        the right or bottom edge are dropped.

        Args:
            x: Horizontal origin (any non-negative int)
            y: Vertical origin (any non-negative int)
            sprite: Row bytes, up to 15
            wrap: Wrap pixels around the edges instead of clipping

        Returns:
            True if any lit pixel was switched off (collision)
        """
        x0 = x % WIDTH
        y0 = y % HEIGHT
        collision = False

        for row, bits in enumerate(sprite):
            py = y0 + row
            if py >= HEIGHT:
                if not wrap:
                    break
                py %= HEIGHT
            for col in range(SPRITE_WIDTH):
                if not bits & (0x80 >> col):
                    continue
                px = x0 + col
                if px >= WIDTH:
                    if not wrap:
                        break
                    px %= WIDTH
                index = py * WIDTH + px
                if self._pixels[index]:
                    collision = True
                self._pixels[index] ^= 1

        self._state.dirty = True
        self._state.draw_count += 1
        return collision

    def get_pixel_buffer(self) -> bytes:
        """Row-major copy of the framebuffer (one byte per pixel, 0 or 1)."""
        return bytes(self._pixels)

    def get_rows(self, on: str = "#", off: str = ".") -> List[str]:
        """Framebuffer as one string per row."""
        return [
            "".join(
                on if self._pixels[y * WIDTH + x] else off
                for x in range(WIDTH)
            )
            for y in range(HEIGHT)
        ]

    def get_text(self, on: str = "#", off: str = ".") -> str:
        """Framebuffer as newline-separated rows."""
        return "\n".join(self.get_rows(on, off))

    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return sum(self._pixels)

    def render_image(
        self,
        scale: int = 8,
        ink_color: tuple = (230, 230, 230),
        paper_color: tuple = (16, 16, 16),
    ) -> bytes:
        """
        Render the framebuffer as a PNG image.

        Args:
            scale: Screen pixels per CHIP-8 pixel
            ink_color: RGB for lit pixels
            paper_color: RGB for unlit pixels

        Returns:
            PNG image bytes
        """
        from PIL import Image

        if scale < 1:
            raise ValueError(f"Scale must be >= 1, got {scale}")

        img = Image.new("RGB", (WIDTH, HEIGHT), color=paper_color)
        for y in range(HEIGHT):
            for x in range(WIDTH):
                if self._pixels[y * WIDTH + x]:
                    img.putpixel((x, y), ink_color)
        if scale > 1:
            img = img.resize((WIDTH * scale, HEIGHT * scale), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()
