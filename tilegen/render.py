from __future__ import annotations

import logging
import math
import os
from typing import Any, Iterable, Mapping, Tuple

import pygame

from .grid import Grid

logger = logging.getLogger(__name__)

MAX_SCALE = 2.0  # zoom-in cap; zooming out is unbounded
ZOOM_FACTOR = 0.95  # per wheel notch
MOVEMENT_SPEED = 20  # pixels per frame

DEFAULT_COLOR = (200, 200, 200)
UNDECIDED_COLOR = (255, 255, 255)
BORDER_COLOR = (200, 200, 200)

KEY_BINDINGS = {"w": pygame.K_w, "a": pygame.K_a, "s": pygame.K_s, "d": pygame.K_d}


class Camera:
    """Pan/zoom transform: screen = translate + world * scale."""

    def __init__(self, scale: float = 1.0, translate_x: float = 0.0, translate_y: float = 0.0):
        self.scale = scale
        self.translate_x = translate_x
        self.translate_y = translate_y

    def zoom(self, direction: int):
        """Positive direction zooms in (wheel up), negative zooms out."""
        if direction > 0:
            self.scale = min(self.scale / ZOOM_FACTOR, MAX_SCALE)
        elif direction < 0:
            self.scale *= ZOOM_FACTOR

    def move(self, pressed: Iterable[str], speed: float = MOVEMENT_SPEED):
        # WASD moves the view, so the world shifts the opposite way
        pressed = set(pressed)
        if "w" in pressed:
            self.translate_y += speed
        if "s" in pressed:
            self.translate_y -= speed
        if "a" in pressed:
            self.translate_x += speed
        if "d" in pressed:
            self.translate_x -= speed

    def tile_pixels(self, tile_size: int) -> int:
        return max(1, round(tile_size * self.scale))

    def visible_cells(
        self, width: int, height: int, tile_size: int, screen_size: Tuple[int, int]
    ) -> Tuple[int, int, int, int]:
        """Half-open cell range (x0, y0, x1, y1) that intersects the screen."""
        size = self.tile_pixels(tile_size)
        screen_w, screen_h = screen_size
        x0 = max(0, math.floor(-self.translate_x / size))
        y0 = max(0, math.floor(-self.translate_y / size))
        x1 = min(width, math.ceil((screen_w - self.translate_x) / size))
        y1 = min(height, math.ceil((screen_h - self.translate_y) / size))
        return x0, y0, max(x0, x1), max(y0, y1)


class GridRenderer:
    """
    Pygame renderer for collapsed label grids.

    Each label is drawn with its tile image when the tile table names one that
    loads, otherwise as a solid block of its color.
    """

    def __init__(
        self,
        tiles: Mapping[str, Mapping[str, Any]],
        tile_size: int = 32,
        background_color: Tuple[int, int, int] = (255, 255, 255),
    ):
        if not pygame.get_init():
            pygame.init()
        self.tiles = tiles
        self.tile_size = tile_size
        self.background_color = background_color
        self.tile_images = self._load_tile_images()
        self._scaled: dict[tuple[str, int], pygame.Surface] = {}

    def _load_tile_images(self) -> dict[str, pygame.Surface]:
        tile_images = {}
        for tile_name, tile_data in self.tiles.items():
            image_path = tile_data.get("image")
            if image_path is None:
                surf = pygame.Surface((self.tile_size, self.tile_size))
                surf.fill(tuple(tile_data.get("color", DEFAULT_COLOR)))
                tile_images[tile_name] = surf
                continue

            normalized_path = os.path.normpath(image_path)
            try:
                image = pygame.image.load(normalized_path)
                if image.get_width() != self.tile_size or image.get_height() != self.tile_size:
                    image = pygame.transform.scale(image, (self.tile_size, self.tile_size))
                tile_images[tile_name] = image
            except (pygame.error, FileNotFoundError):
                logger.warning("Failed to load image: %s", normalized_path)
                tile_images[tile_name] = self._create_placeholder(tile_name)
        return tile_images

    def _create_placeholder(self, tile_name: str) -> pygame.Surface:
        """Grey tile with the label written on it, for images that failed to load"""
        surf = pygame.Surface((self.tile_size, self.tile_size))
        surf.fill(DEFAULT_COLOR)
        font = pygame.font.SysFont(None, 20)
        text = font.render(tile_name, True, (0, 0, 0))
        surf.blit(text, text.get_rect(center=(self.tile_size // 2, self.tile_size // 2)))
        pygame.draw.rect(surf, (100, 100, 100), (0, 0, self.tile_size, self.tile_size), 1)
        return surf

    def _scaled_image(self, tile_name: str, size: int) -> pygame.Surface:
        key = (tile_name, size)
        image = self._scaled.get(key)
        if image is None:
            image = self.tile_images[tile_name]
            if size != self.tile_size:
                image = pygame.transform.scale(image, (size, size))
            self._scaled[key] = image
        return image

    def draw(self, surface: pygame.Surface, grid: Grid, camera: Camera | None = None) -> pygame.Surface:
        """Draw the cells of ``grid`` that fall inside ``surface``."""
        camera = camera or Camera()
        surface.fill(self.background_color)
        size = camera.tile_pixels(self.tile_size)
        x0, y0, x1, y1 = camera.visible_cells(
            grid.width, grid.height, self.tile_size, surface.get_size()
        )

        for y in range(y0, y1):
            for x in range(x0, x1):
                px = round(camera.translate_x + x * size)
                py = round(camera.translate_y + y * size)
                label = grid.label_at(x, y)
                if label is not None and label in self.tile_images:
                    surface.blit(self._scaled_image(label, size), (px, py))
                else:
                    pygame.draw.rect(surface, UNDECIDED_COLOR, (px, py, size, size))
                    pygame.draw.rect(surface, BORDER_COLOR, (px, py, size, size), 1)
        return surface

    def handle_events(self, camera: Camera) -> bool:
        """
        Handle Pygame events.

        Returns:
            bool: True if the window should close, False otherwise
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return True
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return True
            if event.type == pygame.MOUSEWHEEL:
                camera.zoom(event.y)
        return False

    def run_viewer(
        self,
        grid: Grid,
        screen_size: Tuple[int, int] = (640, 480),
        caption: str = "Wave Function Collapse",
    ):
        screen = pygame.display.set_mode(screen_size)
        pygame.display.set_caption(caption)
        camera = Camera()
        clock = pygame.time.Clock()

        running = True
        while running:
            if self.handle_events(camera):
                running = False
                continue
            keys = pygame.key.get_pressed()
            camera.move(name for name, code in KEY_BINDINGS.items() if keys[code])
            self.draw(screen, grid, camera)
            pygame.display.flip()
            clock.tick(60)

        self.close()

    def close(self):
        pygame.quit()
