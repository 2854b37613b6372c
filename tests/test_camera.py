"""
Tests for the perspective camera projection and the damped orbit controls.
"""
import math

import numpy as np
import pytest

from camera import OrbitControls, PerspectiveCamera


@pytest.fixture
def camera():
    return PerspectiveCamera(fov=75, aspect=2.0, near=0.1, far=100, position=(3, 3, 3))


class TestProjection:
    def test_target_projects_to_centre(self, camera):
        sx, sy, depth, visible = camera.project(np.zeros((1, 3)), 200, 100)
        assert sx[0] == pytest.approx(100.0)
        assert sy[0] == pytest.approx(50.0)
        assert depth[0] == pytest.approx(math.sqrt(27))
        assert visible[0]

    def test_screen_axes_follow_view(self, camera):
        points = np.array([[1.0, 0.0, -1.0], [0.0, 1.0, 0.0]])
        sx, sy, _, visible = camera.project(points, 200, 100)
        assert visible.all()
        assert sx[0] > 100.0 # to the right of the camera
        assert sy[1] < 50.0 # above the target, so higher on screen

    def test_points_outside_near_far_are_hidden(self, camera):
        points = np.array([[6.0, 6.0, 6.0], [-80.0, -80.0, -80.0], [3.01, 3.01, 3.01]])
        _, _, _, visible = camera.project(points, 200, 100)
        assert not visible.any()

    def test_wider_fov_shrinks_the_image(self, camera):
        point = np.array([[1.0, 0.0, -1.0]])
        narrow_x = camera.project(point, 200, 100)[0][0]
        camera.fov = 120
        camera.update_projection_matrix()
        wide_x = camera.project(point, 200, 100)[0][0]
        assert abs(wide_x - 100.0) < abs(narrow_x - 100.0)

    def test_aspect_scales_horizontal_offset(self, camera):
        point = np.array([[1.0, 0.0, -1.0]])
        offset_wide = camera.project(point, 200, 100)[0][0] - 100.0
        camera.aspect = 1.0
        camera.update_projection_matrix()
        offset_square = camera.project(point, 100, 100)[0][0] - 50.0
        assert offset_wide == pytest.approx(offset_square)

    def test_view_basis_is_orthonormal(self, camera):
        right, up, forward = camera.view_basis()
        for v in (right, up, forward):
            assert np.linalg.norm(v) == pytest.approx(1.0)
        assert np.dot(right, up) == pytest.approx(0.0, abs=1e-12)
        assert np.dot(up, forward) == pytest.approx(0.0, abs=1e-12)


class TestOrbitControls:
    def test_idle_update_does_not_move(self, camera):
        controls = OrbitControls(camera)
        start = camera.position.copy()
        assert controls.update() is False
        np.testing.assert_allclose(camera.position, start)

    def test_damped_rotation_eases_in(self, camera):
        controls = OrbitControls(camera, damping_factor=0.05)
        theta = controls.theta
        controls.rotate(-100, 0, 400)
        total = 2 * math.pi * 100 / 400

        assert controls.update() is True
        assert controls.theta - theta == pytest.approx(total * 0.05)

        for _ in range(400):
            controls.update()
        assert controls.theta - theta == pytest.approx(total, rel=1e-3)

    def test_rotation_preserves_distance(self, camera):
        controls = OrbitControls(camera)
        controls.rotate(50, 30, 400)
        for _ in range(20):
            controls.update()
        assert np.linalg.norm(camera.position) == pytest.approx(math.sqrt(27))

    def test_undamped_rotation_applies_at_once(self, camera):
        controls = OrbitControls(camera, damping_factor=0.0)
        theta = controls.theta
        controls.rotate(-100, 0, 400)
        controls.update()
        assert controls.theta - theta == pytest.approx(2 * math.pi * 100 / 400)
        assert controls.delta_theta == 0.0

    def test_polar_angle_is_clamped(self, camera):
        controls = OrbitControls(camera, damping_factor=0.0)
        controls.rotate(0, 10000, 400)
        controls.update()
        assert 0.0 < controls.phi < 0.01
        assert np.isfinite(camera.project(np.zeros((1, 3)), 100, 100)[0]).all()

    def test_dolly_changes_distance_within_limits(self, camera):
        controls = OrbitControls(camera, zoom_speed=0.5, min_distance=1.0, max_distance=10.0)
        controls.dolly(1)
        controls.update()
        assert controls.distance == pytest.approx(math.sqrt(27) / 2)
        controls.dolly(5)
        controls.update()
        assert controls.distance == pytest.approx(1.0)
        controls.dolly(-20)
        controls.update()
        assert controls.distance == pytest.approx(10.0)
