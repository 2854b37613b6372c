"""
Tests for the control panel: declared ranges, snapping, and the
commit-on-release policy that triggers regeneration.
"""
import pytest

from constants import PARAMETER_RANGES
from controls import ControlPanel, build_controls
from galaxy import GalaxyController, GalaxyParameters, InvalidParameterError


@pytest.fixture
def commits():
    return []


@pytest.fixture
def panel(commits):
    return ControlPanel(GalaxyParameters(), commits.append)


class TestSliderControl:
    def test_every_parameter_has_a_control(self):
        keys = [c.key for c in build_controls()]
        for field in PARAMETER_RANGES:
            assert field in keys
        for field in ("inside_color", "outside_color"):
            for channel in "rgb":
                assert f"{field}.{channel}" in keys
        assert len(keys) == len(PARAMETER_RANGES) + 6

    def test_ranges_match_declared_table(self, panel):
        count = panel.control("count")
        assert (count.minimum, count.maximum, count.step) == (100, 1000000, 100)
        power = panel.control("randomness_power")
        assert (power.minimum, power.maximum, power.step) == (1.0, 10.0, 0.001)
        channel = panel.control("outside_color.b")
        assert (channel.minimum, channel.maximum, channel.step) == (0, 255, 1)

    @pytest.mark.parametrize("key, value, expected", [
        ("count", 123456, 123500),
        ("count", 5, 100),
        ("count", 5000000, 1000000),
        ("radius", 0.004, 0.01),
        ("spin", 5.5, 5.0),
        ("spin", -7.0, -5.0),
        ("randomness_power", 3.14159, 3.142),
        ("branches", 7.6, 8),
        ("inside_color.g", 300, 255),
    ])
    def test_clamp_snaps_to_range_and_step(self, panel, key, value, expected):
        assert panel.control(key).clamp(value) == expected

    def test_integer_fields_stay_integers(self, panel):
        assert isinstance(panel.control("branches").clamp(4.2), int)
        assert isinstance(panel.control("count").value_at(0.3), int)

    def test_value_at_and_fraction_are_consistent(self, panel):
        branches = panel.control("branches")
        assert branches.value_at(0.0) == 2
        assert branches.value_at(1.0) == 20
        assert branches.value_at(0.5) == 11
        assert branches.fraction(11) == pytest.approx(0.5)
        assert branches.value_at(-3.0) == 2

    def test_colour_channel_reads_and_writes_0_to_255(self, panel):
        channel = panel.control("inside_color.r")
        params = GalaxyParameters()
        assert channel.read(params) == 255
        updated = channel.write(params, 51)
        assert updated.inside_color[0] == pytest.approx(0.2)
        assert updated.inside_color[1:] == params.inside_color[1:]

    def test_format_uses_step_precision(self, panel):
        assert panel.control("size").format(0.01) == "0.010"
        assert panel.control("radius").format(5.0) == "5.00"
        assert panel.control("count").format(100000) == "100000"


class TestCommitPolicy:
    def test_dragging_does_not_commit(self, panel, commits):
        branches = panel.control("branches")
        panel.begin_drag(branches, 0.0)
        panel.drag(0.25)
        panel.drag(1.0)
        assert commits == []
        assert panel.display_value(branches) == 20
        assert panel.parameters.branches == 5

    def test_release_commits_final_value_once(self, panel, commits):
        branches = panel.control("branches")
        panel.begin_drag(branches, 0.0)
        panel.drag(1.0)
        result = panel.end_drag()
        assert len(commits) == 1
        assert commits[0].branches == 20
        assert result == commits[0]
        assert panel.parameters.branches == 20
        assert not panel.dragging

    def test_end_drag_without_drag_does_nothing(self, panel, commits):
        assert panel.end_drag() is None
        assert commits == []

    def test_unchanged_commit_does_not_regenerate(self, panel, commits):
        assert panel.commit(panel.control("radius"), 5.0) is None
        assert commits == []

    def test_nudge_commits_one_step(self, panel, commits):
        panel.nudge(panel.control("branches"), 1)
        panel.nudge(panel.control("spin"), -2)
        assert [c.branches for c in commits] == [6, 6]
        assert commits[-1].spin == pytest.approx(-2.002)

    def test_commit_clamps_out_of_range_values(self, panel, commits):
        panel.commit(panel.control("randomness"), -1.0)
        assert commits[0].randomness == 0.0

    def test_colour_commit_changes_one_channel(self, panel, commits):
        panel.commit(panel.control("outside_color.r"), 0)
        assert commits[0].outside_color[0] == 0.0
        assert commits[0].outside_color[2] == GalaxyParameters().outside_color[2]

    def test_rejected_commit_keeps_previous_parameters(self):
        def reject(params):
            raise InvalidParameterError("rejected")

        panel = ControlPanel(GalaxyParameters(), reject)
        assert panel.commit(panel.control("branches"), 9) is None
        assert panel.parameters.branches == 5

    def test_sync_drops_drag_and_shows_new_parameters(self, panel):
        panel.begin_drag(panel.control("spin"), 0.9)
        panel.sync(GalaxyParameters(spin=1.5))
        assert not panel.dragging
        assert panel.display_value(panel.control("spin")) == 1.5


def test_commit_regenerates_through_controller(scene):
    params = GalaxyParameters(count=300)
    controller = GalaxyController(scene, params, seed=11)
    first = controller.generate()
    panel = ControlPanel(controller.parameters, controller.apply_parameters)

    panel.begin_drag(panel.control("count"), 0.0)
    panel.end_drag()

    assert first.disposed
    assert scene.points() == [controller.current_cloud]
    assert controller.current_cloud.count == 100
    assert controller.parameters.count == 100
