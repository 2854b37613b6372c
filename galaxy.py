# galaxy.py
"""
Generates the spiral galaxy point cloud.

This module defines the galaxy parameter set, the particle buffer that
holds one generated galaxy, the point-cloud primitive handed to the scene,
and the GalaxyController that owns the current cloud and replaces it
whenever the parameters change.
"""
import logging
import math
import time
from collections import namedtuple
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional, Tuple

import numpy as np

from constants import DEFAULT_GALAXY

# --- Data Contracts ---
#
# layout_particles(params, radii, jitter) -> ParticleBuffer:
#   - Inputs:
#     - params: a validated GalaxyParameters.
#     - radii: float array of shape (count,), each value in [0, radius].
#     - jitter: float array of shape (count, 3), signed samples in [-1, 1]
#       already raised to randomness_power (sign * u ** power).
#   - Outputs: a new ParticleBuffer.
#   - Invariants: particle i sits on branch (i mod branches); its colour
#     is the linear mix of inside/outside colours at t = radii[i] / radius.
#
# generate_galaxy(params, scene, previous, rng) -> PointCloud:
#   - Side Effects: removes `previous` from `scene` and disposes it, then
#     adds the new cloud. Nothing is touched if validation fails.

RGB = Tuple[float, float, float]

ADDITIVE_BLENDING = "additive"

Particle = namedtuple("Particle", ["position", "color"])


class InvalidParameterError(ValueError):
    """Raised when galaxy parameters fall outside what the generator accepts."""


def parse_color(value: Any) -> RGB:
    """
    Converts a colour given as '#rrggbb' or an RGB sequence to float channels.

    A sequence of three integers is read as 0-255 channels; any other
    sequence is read as 0-1 floats and left unscaled, so out-of-range
    floats are caught by validate_parameters.
    """
    if isinstance(value, str):
        text = value.strip().lstrip('#')
        if len(text) != 6:
            raise InvalidParameterError(f"Colour '{value}' is not in #rrggbb form.")
        try:
            channels = [int(text[i:i + 2], 16) for i in (0, 2, 4)]
        except ValueError as e:
            raise InvalidParameterError(f"Colour '{value}' is not valid hex.") from e
        return tuple(c / 255.0 for c in channels)

    try:
        raw = list(value)
        channels = [float(c) for c in raw]
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"Colour {value!r} is not an RGB sequence.") from e
    if len(channels) != 3:
        raise InvalidParameterError(f"Colour {value!r} must have exactly 3 channels.")
    if all(isinstance(c, (int, np.integer)) and not isinstance(c, bool) for c in raw):
        channels = [c / 255.0 for c in channels]
    return tuple(channels)


def color_to_hex(color: RGB) -> str:
    """Formats float RGB channels as '#rrggbb'."""
    return '#' + ''.join(f"{int(round(min(max(c, 0.0), 1.0) * 255)):02x}" for c in color)


def _config_integer(name: str, value: Any) -> int:
    """Converts a config value to int, refusing booleans and fractional numbers."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not float(value).is_integer():
        raise ValueError(f"{name} must be a whole number, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class GalaxyParameters:
    """The full set of inputs to one galaxy generation."""
    count: int = DEFAULT_GALAXY['count']
    size: float = DEFAULT_GALAXY['size']
    radius: float = DEFAULT_GALAXY['radius']
    branches: int = DEFAULT_GALAXY['branches']
    spin: float = DEFAULT_GALAXY['spin']
    randomness: float = DEFAULT_GALAXY['randomness']
    randomness_power: float = DEFAULT_GALAXY['randomness_power']
    inside_color: RGB = parse_color(DEFAULT_GALAXY['inside_color'])
    outside_color: RGB = parse_color(DEFAULT_GALAXY['outside_color'])

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "GalaxyParameters":
        """
        Builds parameters from the 'galaxy' section of the configuration.

        Missing keys fall back to the application defaults. Unknown keys
        (such as 'seed') are ignored.
        """
        merged = dict(DEFAULT_GALAXY)
        merged.update({k: v for k, v in config.items() if k in DEFAULT_GALAXY})
        try:
            params = cls(
                count=_config_integer("count", merged["count"]),
                size=float(merged['size']),
                radius=float(merged['radius']),
                branches=_config_integer("branches", merged["branches"]),
                spin=float(merged['spin']),
                randomness=float(merged['randomness']),
                randomness_power=float(merged['randomness_power']),
                inside_color=parse_color(merged['inside_color']),
                outside_color=parse_color(merged['outside_color']),
            )
        except (TypeError, ValueError) as e:
            msg = f"Configuration error: invalid galaxy parameters: {e}"
            logging.critical(msg)
            raise InvalidParameterError(msg) from e
        validate_parameters(params)
        return params

    def with_changes(self, **changes: Any) -> "GalaxyParameters":
        """Returns a copy with the given fields replaced."""
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        """Returns the parameters as plain values, colours as hex strings."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        values['inside_color'] = color_to_hex(self.inside_color)
        values['outside_color'] = color_to_hex(self.outside_color)
        return values


def validate_parameters(params: GalaxyParameters) -> None:
    """
    Rejects parameter sets the generator cannot turn into a galaxy.

    Raises:
        InvalidParameterError: On the first violated constraint.
    """
    for name in ('count', 'branches'):
        value = getattr(params, name)
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise InvalidParameterError(f"{name} must be an integer, got {value!r}.")
        if value < 1:
            raise InvalidParameterError(f"{name} must be at least 1, got {value}.")

    for name in ('size', 'radius', 'spin', 'randomness', 'randomness_power'):
        value = getattr(params, name)
        if not math.isfinite(value):
            raise InvalidParameterError(f"{name} must be finite, got {value}.")

    if params.radius <= 0:
        raise InvalidParameterError(f"radius must be positive, got {params.radius}.")
    if params.size <= 0:
        raise InvalidParameterError(f"size must be positive, got {params.size}.")
    if params.randomness < 0:
        raise InvalidParameterError(f"randomness must not be negative, got {params.randomness}.")
    if params.randomness_power < 1:
        raise InvalidParameterError(
            f"randomness_power must be at least 1, got {params.randomness_power}."
        )

    for name in ('inside_color', 'outside_color'):
        color = getattr(params, name)
        if len(color) != 3 or not all(0.0 <= c <= 1.0 for c in color):
            raise InvalidParameterError(f"{name} channels must lie in [0, 1], got {color}.")


class ParticleBuffer:
    """
    One generated galaxy: parallel per-particle position and colour records.
    """
    def __init__(self, positions: np.ndarray, colors: np.ndarray):
        if positions.shape != colors.shape or positions.ndim != 2 or positions.shape[1] != 3:
            raise ValueError(
                f"positions {positions.shape} and colors {colors.shape} "
                f"must both have shape (count, 3)."
            )
        self.positions = positions
        self.colors = colors

    def __len__(self) -> int:
        return self.positions.shape[0]

    def particle(self, index: int) -> Particle:
        """Returns the position and colour of particle `index` as tuples."""
        return Particle(
            tuple(float(v) for v in self.positions[index]),
            tuple(float(v) for v in self.colors[index]),
        )

    def position_array(self) -> np.ndarray:
        """Flat (x, y, z, x, y, z, ...) view of the positions."""
        return self.positions.reshape(-1)

    def color_array(self) -> np.ndarray:
        """Flat (r, g, b, r, g, b, ...) view of the colours."""
        return self.colors.reshape(-1)


class PointsMaterial:
    """Render settings for a point cloud. Honoured by the PointsRenderer."""
    def __init__(self, size: float):
        self.size = size
        self.size_attenuation = True
        self.depth_write = False
        self.blending = ADDITIVE_BLENDING
        self.vertex_colors = True
        self.disposed = False

    def dispose(self):
        self.disposed = True


class PointCloud:
    """
    The scene primitive built from one ParticleBuffer.

    Once disposed, the cloud no longer holds its buffer and must not be
    rendered or added to a scene again.
    """
    def __init__(self, buffer: ParticleBuffer, material: PointsMaterial):
        self.buffer: Optional[ParticleBuffer] = buffer
        self.material = material

    @property
    def disposed(self) -> bool:
        return self.buffer is None

    @property
    def count(self) -> int:
        return 0 if self.buffer is None else len(self.buffer)

    def dispose(self):
        """Releases the particle buffer and the material."""
        self.buffer = None
        self.material.dispose()


def draw_jitter(rng: np.random.Generator, count: int, power: float) -> np.ndarray:
    """
    Draws signed per-axis jitter samples of shape (count, 3).

    Each sample is a uniform [0, 1) value raised to `power`, so larger powers
    pull the magnitudes towards zero, with an independent random sign.
    """
    magnitudes = rng.random((count, 3)) ** power
    signs = np.where(rng.random((count, 3)) < 0.5, 1.0, -1.0)
    return signs * magnitudes


def layout_particles(params: GalaxyParameters, radii: np.ndarray, jitter: np.ndarray) -> ParticleBuffer:
    """
    Places particles on the spiral arms and colours them by radius.

    Particles are assigned to branches round-robin by index, so the arms
    fill evenly at any count.
    """
    radii = np.asarray(radii, dtype=np.float64)
    jitter = np.asarray(jitter, dtype=np.float64)
    count = radii.shape[0]

    branch_index = np.arange(count) % params.branches
    branch_angle = branch_index / params.branches * 2.0 * np.pi
    angle = branch_angle + radii * params.spin

    # Jitter grows with the particle's distance from the centre.
    offsets = jitter * params.randomness * radii[:, np.newaxis]

    positions = np.empty((count, 3), dtype=np.float32)
    positions[:, 0] = np.cos(angle) * radii + offsets[:, 0]
    positions[:, 1] = offsets[:, 1]
    positions[:, 2] = np.sin(angle) * radii + offsets[:, 2]

    inside = np.array(params.inside_color, dtype=np.float64)
    outside = np.array(params.outside_color, dtype=np.float64)
    t = (radii / params.radius)[:, np.newaxis]
    colors = (inside + (outside - inside) * t).astype(np.float32)

    return ParticleBuffer(positions, colors)


def generate_buffer(params: GalaxyParameters, rng: np.random.Generator) -> ParticleBuffer:
    """Validates `params` and generates a fresh ParticleBuffer from `rng`."""
    validate_parameters(params)
    radii = rng.random(params.count) * params.radius
    jitter = draw_jitter(rng, params.count, params.randomness_power)
    return layout_particles(params, radii, jitter)


def generate_galaxy(
    params: GalaxyParameters,
    scene,
    previous: Optional[PointCloud] = None,
    rng: Optional[np.random.Generator] = None,
) -> PointCloud:
    """
    Builds a new galaxy cloud and swaps it into `scene`.

    Args:
        params: The parameters to generate from.
        scene: Any container exposing add(obj) and remove(obj).
        previous: The cloud to replace. It is removed and disposed first.
        rng: Random source. A fresh unseeded generator is used if omitted.

    Raises:
        InvalidParameterError: If `params` is rejected. `previous` is left
            untouched in that case.
    """
    validate_parameters(params)
    if rng is None:
        rng = np.random.default_rng()

    if previous is not None:
        scene.remove(previous)
        previous.dispose()
        logging.debug("Previous galaxy removed from scene and disposed.")

    start = time.perf_counter()
    buffer = generate_buffer(params, rng)
    cloud = PointCloud(buffer, PointsMaterial(params.size))
    scene.add(cloud)
    elapsed_ms = (time.perf_counter() - start) * 1000.0

    logging.info(
        f"Galaxy generated: {params.count} particles, {params.branches} branches, "
        f"radius {params.radius:.2f}, spin {params.spin:.3f} ({elapsed_ms:.1f} ms)."
    )
    logging.debug(
        f"Particle buffers created. Positions shape: {buffer.positions.shape}, "
        f"Colors shape: {buffer.colors.shape}"
    )
    return cloud


class GalaxyController:
    """
    Owns the galaxy currently shown in the scene.

    All regeneration goes through this object, which removes and disposes
    the previous cloud before building the next one, so the scene never
    holds more than one galaxy.
    """
    def __init__(self, scene, params: GalaxyParameters, seed: Optional[int] = None):
        """
        Initializes the controller. No galaxy exists until generate() runs.

        Args:
            scene: The render host's scene container.
            params: Initial parameters, also used by reset().
            seed: Seed for the controller's random source. None draws
                fresh entropy.
        """
        validate_parameters(params)
        self.scene = scene
        self.defaults = params
        self.parameters = params
        self.seed = seed
        # One generator serves every regeneration, so a seeded run replays
        # the same sequence of galaxies.
        self.rng = np.random.default_rng(seed)
        self.current_cloud: Optional[PointCloud] = None
        logging.info(f"GalaxyController initialized (seed={seed}).")

    def generate(self) -> PointCloud:
        """Generates a galaxy from the current parameters with a new random draw."""
        return self.apply_parameters(self.parameters)

    def apply_parameters(self, params: GalaxyParameters) -> PointCloud:
        """
        Replaces the current galaxy with one generated from `params`.

        Raises:
            InvalidParameterError: If `params` is rejected. The current
                galaxy and parameters are kept.
        """
        try:
            cloud = generate_galaxy(params, self.scene, self.current_cloud, self.rng)
        except InvalidParameterError as e:
            logging.error(f"Rejected galaxy parameters: {e}")
            raise
        self.current_cloud = cloud
        self.parameters = params
        logging.debug(f"Galaxy parameters now: {params.as_dict()}")
        return cloud

    def reset(self) -> PointCloud:
        """Restores the initial parameters and regenerates."""
        logging.info("Galaxy parameters reset to defaults.")
        return self.apply_parameters(self.defaults)

    def dispose(self):
        """Removes and disposes the current galaxy, if any."""
        if self.current_cloud is not None:
            self.scene.remove(self.current_cloud)
            self.current_cloud.dispose()
            self.current_cloud = None
            logging.info("Galaxy disposed.")
