"""
Tests for the Pygame visualizer, run against SDL's dummy video driver.
"""
import json

import pygame
import pytest

from constants import UI_PANEL_WIDTH
from galaxy import GalaxyController, GalaxyParameters
from main import main
from visualization import Visualizer


@pytest.fixture
def visualizer(scene):
    controller = GalaxyController(scene, GalaxyParameters(count=400), seed=21)
    vis = Visualizer(controller, scene, {"window_width": 520, "window_height": 640})
    controller.generate()
    yield vis
    vis.close()


def _post(event_type, **attrs):
    pygame.event.post(pygame.event.Event(event_type, **attrs))


def test_draw_renders_a_frame(visualizer):
    assert visualizer.draw() is True
    assert visualizer.sim_width == 520 - UI_PANEL_WIDTH


def test_quit_event_stops_the_loop(visualizer):
    _post(pygame.QUIT)
    assert visualizer.draw() is False


def test_resize_updates_camera_and_framebuffer(visualizer):
    visualizer.resize(700, 400)
    assert visualizer.camera.aspect == pytest.approx(400 / 400)
    assert visualizer.renderer.framebuffer_size == (400, 400)
    assert visualizer.track_rects["count"].left == 400 + visualizer.panel_padding


def test_slider_release_regenerates(visualizer, scene):
    first = visualizer.controller.current_cloud
    track = visualizer.track_rects["branches"]

    _post(pygame.MOUSEBUTTONDOWN, pos=(track.left, track.centery), button=1)
    visualizer.handle_events()
    assert visualizer.panel.dragging
    assert visualizer.controller.current_cloud is first

    _post(pygame.MOUSEBUTTONUP, pos=(track.left, track.centery), button=1)
    visualizer.handle_events()
    assert visualizer.controller.parameters.branches == 2
    assert first.disposed
    assert scene.points() == [visualizer.controller.current_cloud]


def test_clicking_a_slider_label_commits_nothing(visualizer, scene):
    first = visualizer.controller.current_cloud
    row = visualizer.row_rects["count"]

    _post(pygame.MOUSEBUTTONDOWN, pos=(row.left + 2, row.top + 2), button=1)
    _post(pygame.MOUSEBUTTONUP, pos=(row.left + 2, row.top + 2), button=1)
    visualizer.handle_events()

    assert not visualizer.panel.dragging
    assert visualizer.controller.parameters.count == 400
    assert visualizer.controller.current_cloud is first
    assert not first.disposed


def test_reset_button_restores_defaults(visualizer):
    controller = visualizer.controller
    controller.apply_parameters(controller.parameters.with_changes(spin=4.0))
    _post(pygame.MOUSEBUTTONDOWN, pos=visualizer.reset_button_rect.center, button=1)
    visualizer.handle_events()
    assert controller.parameters.spin == GalaxyParameters().spin
    assert visualizer.panel.parameters == controller.parameters


def test_regenerate_button_keeps_parameters(visualizer):
    controller = visualizer.controller
    first = controller.current_cloud
    _post(pygame.MOUSEBUTTONDOWN, pos=visualizer.regenerate_button_rect.center, button=1)
    visualizer.handle_events()
    assert controller.current_cloud is not first
    assert first.disposed
    assert controller.current_cloud.count == 400
    assert controller.parameters.count == 400


def test_main_runs_a_bounded_loop(tmp_path, restore_root_logger):
    config = {
        "galaxy": {"seed": 4, "count": 300},
        "visualization": {"window_width": 480, "window_height": 360},
        "run_control": {"max_frames": 3, "profile": True},
        "logging": {"level": "INFO", "log_file": str(tmp_path / "galaxy.log")},
    }
    path = tmp_path / "config.json"
    path.write_text(json.dumps(config), encoding="utf-8")
    main(str(path))
    assert "Galaxy Generator Shutting Down" in (tmp_path / "galaxy.log").read_text()
