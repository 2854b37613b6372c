# renderer.py
"""
Software point renderer for the galaxy scene.

Projects every point cloud in the scene through the camera and accumulates
the per-vertex colours additively into a floating-point framebuffer. There
is no depth test: overlapping particles brighten each other, which is what
gives the galaxy core its glow.
"""
import logging
from typing import Tuple

import numpy as np
from numba import jit

from camera import PerspectiveCamera
from constants import BACKGROUND_COLOR, MAX_PIXEL_RATIO
from galaxy import ADDITIVE_BLENDING, PointCloud
from scene import Scene

# --- Data Contracts ---
#
# class PointsRenderer:
#   - render(self, scene: Scene, camera: PerspectiveCamera) -> np.ndarray:
#     - Inputs: the scene to draw and the camera to draw it through.
#     - Outputs: uint8 array of shape (fb_width, fb_height, 3), laid out
#       x-major so it can be blitted with pygame.surfarray.
#     - Side Effects: overwrites the internal float framebuffer.
#     - Invariants: fb size = display size * pixel_ratio, and
#       pixel_ratio <= MAX_PIXEL_RATIO.


@jit(nopython=True)
def _splat_points_numba(frame, screen_x, screen_y, point_px, visible, colors):
    """
    Numba-jitted additive splatting of square points into `frame`.

    frame has shape (width, height, 3). Each visible point adds its colour
    to every pixel of a point_px x point_px square centred on it.
    """
    width = frame.shape[0]
    height = frame.shape[1]
    for i in range(screen_x.shape[0]):
        if not visible[i]:
            continue
        side = point_px[i]
        half = side // 2
        x0 = int(np.floor(screen_x[i])) - half
        y0 = int(np.floor(screen_y[i])) - half
        r = colors[i, 0]
        g = colors[i, 1]
        b = colors[i, 2]
        for dx in range(side):
            px = x0 + dx
            if px < 0 or px >= width:
                continue
            for dy in range(side):
                py = y0 + dy
                if py < 0 or py >= height:
                    continue
                frame[px, py, 0] += r
                frame[px, py, 1] += g
                frame[px, py, 2] += b


class PointsRenderer:
    """
    Draws the point clouds of a scene into an RGB byte image.
    """
    def __init__(self, width: int, height: int, pixel_ratio: float = 1.0,
                 background: Tuple[int, int, int] = BACKGROUND_COLOR):
        """
        Initializes the renderer for a display area of width x height.

        Args:
            width (int): Display width in screen pixels.
            height (int): Display height in screen pixels.
            pixel_ratio (float): Framebuffer pixels per screen pixel. Capped
                at MAX_PIXEL_RATIO.
            background (tuple): Clear colour as 0-255 RGB.
        """
        self.background = np.array(background, dtype=np.float32) / 255.0
        self.pixel_ratio = 1.0
        self.width = 0
        self.height = 0
        self.frame = np.zeros((1, 1, 3), dtype=np.float32)
        self.set_pixel_ratio(pixel_ratio)
        self.set_size(width, height)
        logging.info(
            f"PointsRenderer initialized ({width}x{height}, "
            f"pixel ratio {self.pixel_ratio:.2f})."
        )

    @property
    def framebuffer_size(self) -> Tuple[int, int]:
        return self.frame.shape[0], self.frame.shape[1]

    def set_pixel_ratio(self, ratio: float):
        """Sets the framebuffer density, capped at MAX_PIXEL_RATIO."""
        if ratio <= 0:
            raise ValueError(f"pixel_ratio must be positive, got {ratio}.")
        capped = min(float(ratio), MAX_PIXEL_RATIO)
        if capped != ratio:
            logging.debug(f"Pixel ratio {ratio} capped to {capped}.")
        self.pixel_ratio = capped
        if self.width and self.height:
            self.set_size(self.width, self.height)

    def set_size(self, width: int, height: int):
        """Resizes the framebuffer for a display area of width x height."""
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        fb_width = max(1, int(round(self.width * self.pixel_ratio)))
        fb_height = max(1, int(round(self.height * self.pixel_ratio)))
        self.frame = np.zeros((fb_width, fb_height, 3), dtype=np.float32)
        logging.debug(f"Framebuffer resized to {fb_width}x{fb_height}.")

    def _point_sizes(self, cloud: PointCloud, depth: np.ndarray) -> np.ndarray:
        """Pixel side length of each point, never below one pixel."""
        material = cloud.material
        fb_height = self.frame.shape[1]
        if material.size_attenuation:
            safe_depth = np.maximum(depth, 1e-6)
            sizes = material.size * (fb_height * 0.5) / safe_depth
        else:
            sizes = np.full(depth.shape, material.size)
        return np.maximum(1, np.rint(sizes)).astype(np.int64)

    def render(self, scene: Scene, camera: PerspectiveCamera) -> np.ndarray:
        """Renders `scene` through `camera` and returns the RGB byte image."""
        fb_width, fb_height = self.framebuffer_size
        self.frame[:, :] = self.background

        for cloud in scene.points():
            if cloud.disposed:
                logging.warning("Skipping a disposed point cloud still present in the scene.")
                continue
            if cloud.material.blending != ADDITIVE_BLENDING:
                raise ValueError(f"Unsupported blending mode '{cloud.material.blending}'.")

            buffer = cloud.buffer
            screen_x, screen_y, depth, visible = camera.project(buffer.positions, fb_width, fb_height)
            point_px = self._point_sizes(cloud, depth)

            # Cull points whose whole square lies off screen.
            visible &= (screen_x > -point_px) & (screen_x < fb_width + point_px)
            visible &= (screen_y > -point_px) & (screen_y < fb_height + point_px)

            _splat_points_numba(
                self.frame, screen_x, screen_y, point_px, visible,
                buffer.colors.astype(np.float32, copy=False)
            )

        return np.rint(np.clip(self.frame, 0.0, 1.0) * 255.0).astype(np.uint8)
