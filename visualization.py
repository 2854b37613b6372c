# visualization.py
"""
Handles the window, input and drawing of the galaxy viewer using Pygame.
"""
import logging
from typing import Dict, Optional, Tuple

import pygame

from camera import OrbitControls, PerspectiveCamera
from constants import (
    CAMERA_FAR, CAMERA_FOV, CAMERA_NEAR, CAMERA_POSITION, FPS, FULLSCREEN,
    ORBIT_DAMPING_FACTOR, UI_BACKGROUND_ALPHA, UI_PANEL_WIDTH,
    WINDOW_HEIGHT, WINDOW_WIDTH
)
from controls import ControlPanel, SliderControl
from galaxy import GalaxyController
from renderer import PointsRenderer
from scene import Scene

# --- Data Contracts ---
#
# class Visualizer:
#   - __init__(self, controller, scene, vis_params, camera_params):
#     - Inputs:
#       - controller: GalaxyController owning the current galaxy.
#       - scene: the Scene the controller adds its clouds to.
#       - vis_params: "visualization" section of config.json.
#       - camera_params: "camera" section of config.json.
#     - Side Effects: Initializes Pygame and creates a resizable display.
#
#   - draw(self) -> bool:
#     - Outputs:
#       - bool: False if the user has quit, True otherwise.
#     - Side Effects: Handles Pygame events (orbiting, panel edits,
#       resizing), renders the scene and the panel, and flips the display.
#       Panel commits regenerate the galaxy synchronously inside this call.

CHANNEL_TRACK_COLORS = ((220, 70, 70), (70, 200, 90), (80, 120, 230))


class Visualizer:
    """
    Renders the galaxy and the parameter panel and handles user input.
    """
    def __init__(self, controller: GalaxyController, scene: Scene,
                 vis_params: Optional[dict] = None, camera_params: Optional[dict] = None):
        """
        Initializes Pygame, the display window, the camera and the panel.
        """
        vis_params = vis_params if vis_params is not None else {}
        camera_params = camera_params if camera_params is not None else {}

        pygame.init()
        pygame.font.init()

        if vis_params.get('fullscreen', FULLSCREEN):
            display_info = pygame.display.Info()
            width, height = display_info.current_w, display_info.current_h
            self.screen = pygame.display.set_mode((width, height), pygame.FULLSCREEN)
        else:
            width = vis_params.get('window_width', WINDOW_WIDTH)
            height = vis_params.get('window_height', WINDOW_HEIGHT)
            self.screen = pygame.display.set_mode((width, height), pygame.RESIZABLE)

        pygame.display.set_caption("Galaxy Generator")
        self.clock = pygame.time.Clock()
        self.fps = vis_params.get('fps', FPS)

        self.controller = controller
        self.scene = scene

        # The render area is the total width minus the UI panel
        self.sim_width = max(1, width - UI_PANEL_WIDTH)
        self.sim_height = height

        self.camera = PerspectiveCamera(
            fov=camera_params.get('fov', CAMERA_FOV),
            aspect=self.sim_width / self.sim_height,
            near=camera_params.get('near', CAMERA_NEAR),
            far=camera_params.get('far', CAMERA_FAR),
            position=camera_params.get('position', CAMERA_POSITION),
        )
        self.orbit = OrbitControls(
            self.camera, damping_factor=camera_params.get('damping_factor', ORBIT_DAMPING_FACTOR)
        )
        self.orbit_dragging = False

        self.renderer = PointsRenderer(
            self.sim_width, self.sim_height, pixel_ratio=vis_params.get('pixel_ratio', 1.0)
        )

        self.panel = ControlPanel(controller.parameters, controller.apply_parameters)

        # Use a cleaner, sans-serif font. Pygame will fall back if 'Segoe UI' is not found.
        try:
            self.font_title = pygame.font.SysFont("Segoe UI", 16, bold=True)
            self.font_main = pygame.font.SysFont("Segoe UI", 14)
            self.font_main_bold = pygame.font.SysFont("Segoe UI", 14, bold=True)
        except pygame.error:
            logging.warning("Segoe UI font not found, falling back to default sans-serif.")
            self.font_title = pygame.font.SysFont(None, 20, bold=True)
            self.font_main = pygame.font.SysFont(None, 18)
            self.font_main_bold = pygame.font.SysFont(None, 18, bold=True)

        # --- UI Color Palette ---
        self.button_color = (80, 80, 80)
        self.button_hover_color = (110, 110, 110)
        self.track_color = (70, 70, 70)
        self.track_fill_color = (150, 150, 170)
        self.knob_color = (235, 235, 235)
        self.text_color_title = (255, 255, 255)
        self.text_color_key = (200, 200, 200)
        self.text_color_value = (255, 255, 255)

        # --- Panel Layout ---
        self.panel_padding = 20
        self.row_height = 38
        self.track_offset = 20
        self.track_height = 6
        self.track_hit_margin = 12 # Extra vertical pixels that still grab a track
        self.swatch_size = 12
        self._layout_panel()

        logging.info(f"Visualizer initialized with Pygame display ({width}x{height}).")

    def _layout_panel(self):
        """Computes button and slider rectangles for the current window size."""
        x = self.sim_width + self.panel_padding
        inner_width = UI_PANEL_WIDTH - 2 * self.panel_padding
        half_width = (inner_width - 10) // 2

        button_y = 40
        self.regenerate_button_rect = pygame.Rect(x, button_y, half_width, 30)
        self.reset_button_rect = pygame.Rect(x + half_width + 10, button_y, half_width, 30)

        self.ui_panel_surface = pygame.Surface((UI_PANEL_WIDTH, self.sim_height), pygame.SRCALPHA)
        self.ui_panel_surface.fill((40, 40, 40, UI_BACKGROUND_ALPHA))

        self.row_rects: Dict[str, pygame.Rect] = {}
        self.track_rects: Dict[str, pygame.Rect] = {}
        y = self.reset_button_rect.bottom + 15
        for control in self.panel.controls:
            self.row_rects[control.key] = pygame.Rect(x, y, inner_width, self.row_height)
            self.track_rects[control.key] = pygame.Rect(
                x, y + self.track_offset, inner_width, self.track_height
            )
            y += self.row_height

    def resize(self, width: int, height: int):
        """Adapts the camera, framebuffer and panel to a new window size."""
        self.screen = pygame.display.get_surface()
        self.sim_width = max(1, width - UI_PANEL_WIDTH)
        self.sim_height = max(1, height)

        self.camera.aspect = self.sim_width / self.sim_height
        self.camera.update_projection_matrix()
        self.renderer.set_size(self.sim_width, self.sim_height)
        self._layout_panel()
        logging.info(f"Window resized to {width}x{height}.")

    def _control_at(self, pos: Tuple[int, int]) -> Optional[SliderControl]:
        """Returns the slider whose row contains `pos`, if any."""
        for control in self.panel.controls:
            if self.row_rects[control.key].collidepoint(pos):
                return control
        return None

    def _track_at(self, pos: Tuple[int, int]) -> Optional[SliderControl]:
        """Returns the slider whose track hit area contains `pos`, if any."""
        for control in self.panel.controls:
            hit_area = self.track_rects[control.key].inflate(0, self.track_hit_margin)
            if hit_area.collidepoint(pos):
                return control
        return None

    def _track_fraction(self, control: SliderControl, x: int) -> float:
        track = self.track_rects[control.key]
        return (x - track.left) / track.width

    def _handle_mouse_down(self, pos: Tuple[int, int]):
        if pos[0] < self.sim_width:
            self.orbit_dragging = True
            return
        if self.regenerate_button_rect.collidepoint(pos):
            logging.info("Regenerate requested by user.")
            self.controller.generate()
        elif self.reset_button_rect.collidepoint(pos):
            self.controller.reset()
            self.panel.sync(self.controller.parameters)
        else:
            control = self._track_at(pos)
            if control is not None:
                self.panel.begin_drag(control, self._track_fraction(control, pos[0]))

    def handle_events(self) -> bool:
        """
        Processes pending Pygame events.

        Returns:
            bool: False if the user asked to quit, True otherwise.
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                logging.info("Quit event received. Shutting down visualizer.")
                return False

            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                logging.info("ESC key pressed. Shutting down visualizer.")
                return False

            if event.type == pygame.VIDEORESIZE:
                self.resize(event.w, event.h)

            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._handle_mouse_down(event.pos)

            if event.type == pygame.MOUSEMOTION:
                if self.panel.dragging:
                    self.panel.drag(self._track_fraction(self.panel.active, event.pos[0]))
                elif self.orbit_dragging:
                    self.orbit.rotate(event.rel[0], event.rel[1], self.sim_height)

            if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.orbit_dragging = False
                if self.panel.dragging:
                    self.panel.end_drag()

            if event.type == pygame.MOUSEWHEEL:
                mouse_pos = pygame.mouse.get_pos()
                if mouse_pos[0] < self.sim_width:
                    self.orbit.dolly(event.y)
                else:
                    control = self._control_at(mouse_pos)
                    if control is not None:
                        # event.y is 1 for scroll up, -1 for scroll down
                        self.panel.nudge(control, event.y)
        return True

    def _draw_button(self, rect: pygame.Rect, text: str, mouse_pos: Tuple[int, int]):
        """Draws a button and handles its hover state."""
        color = self.button_hover_color if rect.collidepoint(mouse_pos) else self.button_color
        pygame.draw.rect(self.screen, color, rect, border_radius=5)
        text_surf = self.font_main.render(text, True, self.text_color_title)
        self.screen.blit(text_surf, text_surf.get_rect(center=rect.center))

    def _display_color(self, field: str) -> Tuple[int, int, int]:
        """The colour a field shows on the panel, including an in-progress drag."""
        return tuple(
            int(self.panel.display_value(self.panel.control(f"{field}.{name}")))
            for name in ('r', 'g', 'b')
        )

    def _draw_controls(self):
        """Renders every slider with its label, value and track."""
        for control in self.panel.controls:
            row = self.row_rects[control.key]
            track = self.track_rects[control.key]
            value = self.panel.display_value(control)

            label_x = row.left
            if control.channel == 0:
                swatch = pygame.Rect(row.left, row.top + 3, self.swatch_size, self.swatch_size)
                pygame.draw.rect(self.screen, self._display_color(control.field), swatch)
                label_x += self.swatch_size + 6

            font = self.font_main_bold if control is self.panel.active else self.font_main
            label_surf = font.render(control.label, True, self.text_color_key)
            self.screen.blit(label_surf, (label_x, row.top))
            value_surf = self.font_main.render(control.format(value), True, self.text_color_value)
            self.screen.blit(value_surf, value_surf.get_rect(topright=(row.right, row.top)))

            pygame.draw.rect(self.screen, self.track_color, track, border_radius=3)
            fill = track.copy()
            fill.width = int(track.width * control.fraction(value))
            fill_color = (
                self.track_fill_color if control.channel is None
                else CHANNEL_TRACK_COLORS[control.channel]
            )
            if fill.width > 0:
                pygame.draw.rect(self.screen, fill_color, fill, border_radius=3)
            pygame.draw.circle(self.screen, self.knob_color, (fill.right, track.centery), 6)

    def _draw_status(self):
        """Renders the title and the particle count / frame rate line."""
        x = self.sim_width + self.panel_padding
        title_surf = self.font_title.render("Galaxy", True, self.text_color_title)
        self.screen.blit(title_surf, (x, 12))

        cloud = self.controller.current_cloud
        count = cloud.count if cloud is not None else 0
        status = f"{count} particles | {self.clock.get_fps():.0f} fps"
        status_surf = self.font_main.render(status, True, self.text_color_key)
        self.screen.blit(status_surf, (x, self.sim_height - 25))

    def _draw_scene(self):
        """Renders the galaxy and blits it to the render area."""
        image = self.renderer.render(self.scene, self.camera)
        surface = pygame.surfarray.make_surface(image)
        if surface.get_size() != (self.sim_width, self.sim_height):
            surface = pygame.transform.smoothscale(surface, (self.sim_width, self.sim_height))
        self.screen.blit(surface, (0, 0))

    def draw(self) -> bool:
        """
        Handles events, then draws the galaxy and the UI.

        Returns:
            bool: False if the application should exit, True otherwise.
        """
        if not self.handle_events():
            return False

        self.orbit.update()

        self.screen.fill((0, 0, 0))
        self._draw_scene()

        mouse_pos = pygame.mouse.get_pos()
        self.screen.blit(self.ui_panel_surface, (self.sim_width, 0))
        self._draw_status()
        self._draw_button(self.regenerate_button_rect, "Regenerate", mouse_pos)
        self._draw_button(self.reset_button_rect, "Reset", mouse_pos)
        self._draw_controls()

        pygame.display.flip()
        return True

    def tick(self) -> float:
        """Waits for the next frame. Returns the elapsed milliseconds."""
        return self.clock.tick(self.fps)

    def close(self):
        """Shuts down Pygame."""
        pygame.font.quit()
        pygame.quit()
