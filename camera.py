# camera.py
"""
Perspective camera and damped orbit controls for the render host.

The camera projects world-space points to screen pixels; the orbit
controls move the camera around a target point in response to mouse drags
and wheel notches, easing the motion over several frames.
"""
import logging
import math
from typing import Sequence, Tuple

import numpy as np

from constants import (
    CAMERA_FAR, CAMERA_FOV, CAMERA_NEAR, CAMERA_POSITION,
    ORBIT_DAMPING_FACTOR, ORBIT_MAX_DISTANCE, ORBIT_MIN_DISTANCE,
    ORBIT_ROTATE_SPEED, ORBIT_ZOOM_SPEED
)

# --- Data Contracts ---
#
# PerspectiveCamera.project(points, width, height)
#     -> (screen_x, screen_y, depth, visible):
#   - Inputs:
#     - points: float array of shape (N, 3), world coordinates.
#     - width, height: size of the target framebuffer in pixels.
#   - Outputs: four arrays of shape (N,). screen_x/screen_y are pixel
#     coordinates (origin top-left, y down); depth is the distance along
#     the view direction; visible is False for points outside the near/far
#     range.
#   - Invariants: the camera's aspect must match width / height for the
#     projection to be undistorted. Call update_projection_matrix() after
#     changing fov or aspect.

WORLD_UP = np.array([0.0, 1.0, 0.0])

# Keeps the orbit away from the poles, where the view basis degenerates.
_POLAR_EPSILON = 1e-3


class PerspectiveCamera:
    """A pinhole camera looking at a target point."""
    def __init__(
        self,
        fov: float = CAMERA_FOV,
        aspect: float = 1.0,
        near: float = CAMERA_NEAR,
        far: float = CAMERA_FAR,
        position: Sequence[float] = CAMERA_POSITION,
    ):
        self.fov = float(fov)
        self.aspect = float(aspect)
        self.near = float(near)
        self.far = float(far)
        self.position = np.array(position, dtype=np.float64)
        self.target = np.zeros(3, dtype=np.float64)
        self.focal = 1.0
        self.update_projection_matrix()

    def update_projection_matrix(self):
        """Recomputes the projection after fov or aspect changes."""
        self.focal = 1.0 / math.tan(math.radians(self.fov) / 2.0)
        logging.debug(f"Camera projection updated (fov={self.fov}, aspect={self.aspect:.3f}).")

    def view_basis(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Returns the (right, up, forward) unit vectors of the view."""
        forward = self.target - self.position
        forward /= np.linalg.norm(forward)
        right = np.cross(forward, WORLD_UP)
        norm = np.linalg.norm(right)
        if norm < 1e-9:
            # Looking straight along the up axis; any horizontal right works.
            right = np.array([1.0, 0.0, 0.0])
        else:
            right /= norm
        up = np.cross(right, forward)
        return right, up, forward

    def project(self, points: np.ndarray, width: int, height: int):
        """Projects world-space points onto a width x height framebuffer."""
        right, up, forward = self.view_basis()
        relative = np.asarray(points, dtype=np.float64) - self.position
        view_x = relative @ right
        view_y = relative @ up
        depth = relative @ forward

        visible = (depth > self.near) & (depth < self.far)
        safe_depth = np.where(visible, depth, 1.0)

        ndc_x = (self.focal / self.aspect) * view_x / safe_depth
        ndc_y = self.focal * view_y / safe_depth
        screen_x = (ndc_x + 1.0) * 0.5 * width
        screen_y = (1.0 - ndc_y) * 0.5 * height
        return screen_x, screen_y, depth, visible


class OrbitControls:
    """
    Orbits a camera around its target with damped rotation and dolly.

    Input handlers only accumulate deltas; update() must be called once per
    frame to move the camera.
    """
    def __init__(
        self,
        camera: PerspectiveCamera,
        damping_factor: float = ORBIT_DAMPING_FACTOR,
        rotate_speed: float = ORBIT_ROTATE_SPEED,
        zoom_speed: float = ORBIT_ZOOM_SPEED,
        min_distance: float = ORBIT_MIN_DISTANCE,
        max_distance: float = ORBIT_MAX_DISTANCE,
    ):
        self.camera = camera
        self.enable_damping = damping_factor > 0
        self.damping_factor = damping_factor
        self.rotate_speed = rotate_speed
        self.zoom_speed = zoom_speed
        self.min_distance = min_distance
        self.max_distance = max_distance

        offset = camera.position - camera.target
        self.distance = float(np.linalg.norm(offset))
        self.theta = math.atan2(offset[0], offset[2]) # Azimuth around +y
        self.phi = math.acos(np.clip(offset[1] / self.distance, -1.0, 1.0)) # Polar from +y

        self.delta_theta = 0.0
        self.delta_phi = 0.0
        self.scale = 1.0

    def rotate(self, dx: float, dy: float, viewport_height: int):
        """Accumulates a rotation from a mouse drag of (dx, dy) pixels."""
        self.delta_theta -= 2.0 * math.pi * dx / viewport_height * self.rotate_speed
        self.delta_phi -= 2.0 * math.pi * dy / viewport_height * self.rotate_speed

    def dolly(self, notches: float):
        """Moves towards the target for positive wheel notches, away for negative."""
        self.scale *= self.zoom_speed ** notches

    def update(self) -> bool:
        """
        Applies the pending deltas and repositions the camera.

        Returns:
            bool: True if the camera moved.
        """
        old_position = self.camera.position.copy()

        if self.enable_damping:
            self.theta += self.delta_theta * self.damping_factor
            self.phi += self.delta_phi * self.damping_factor
        else:
            self.theta += self.delta_theta
            self.phi += self.delta_phi
        self.phi = min(max(self.phi, _POLAR_EPSILON), math.pi - _POLAR_EPSILON)
        self.distance = min(max(self.distance * self.scale, self.min_distance), self.max_distance)

        sin_phi = math.sin(self.phi)
        offset = np.array([
            self.distance * sin_phi * math.sin(self.theta),
            self.distance * math.cos(self.phi),
            self.distance * sin_phi * math.cos(self.theta),
        ])
        self.camera.position = self.camera.target + offset

        if self.enable_damping:
            self.delta_theta *= 1.0 - self.damping_factor
            self.delta_phi *= 1.0 - self.damping_factor
        else:
            self.delta_theta = 0.0
            self.delta_phi = 0.0
        self.scale = 1.0

        return not np.allclose(old_position, self.camera.position)
