# controls.py
"""
Parameter control panel logic.

Binds every galaxy parameter to a slider with a declared range and step,
and decides when an edit becomes a regeneration. Dragging a slider only
changes the value shown on the panel; the change is committed when the drag
ends. Drawing and mouse hit-testing live in the Visualizer.
"""
import logging
import math
from typing import Callable, List, Optional

from constants import COLOR_CHANNEL_RANGE, PARAMETER_RANGES
from galaxy import GalaxyParameters, InvalidParameterError

# --- Data Contracts ---
#
# class ControlPanel:
#   - __init__(self, params: GalaxyParameters, on_commit: Callable):
#     - Inputs:
#       - params: the parameters currently shown.
#       - on_commit: called with the new GalaxyParameters on every commit
#         that changes them. Typically GalaxyController.apply_parameters.
#
#   - begin_drag / drag / end_drag:
#     - Side Effects: begin_drag and drag only update the pending value.
#       end_drag commits it.
#
#   - commit(self, control, value) -> Optional[GalaxyParameters]:
#     - Outputs: the new parameters, or None if nothing changed or the
#       commit was rejected.
#     - Invariants: committed values are clamped to the control's range
#       and snapped to its step.

CHANNEL_NAMES = ('R', 'G', 'B')

# Panel rows in display order: (field, label).
NUMERIC_FIELDS = [
    ('count', 'Count'),
    ('size', 'Size'),
    ('radius', 'Radius'),
    ('branches', 'Branches'),
    ('spin', 'Spin'),
    ('randomness', 'Randomness'),
    ('randomness_power', 'Randomness Power'),
]
COLOR_FIELDS = [
    ('inside_color', 'Inside'),
    ('outside_color', 'Outside'),
]
INTEGER_FIELDS = {'count', 'branches'}


class SliderControl:
    """
    One slider on the panel, bound to a parameter field or a colour channel.
    """
    def __init__(self, field: str, label: str, minimum: float, maximum: float,
                 step: float, channel: Optional[int] = None):
        self.field = field
        self.label = label
        self.minimum = minimum
        self.maximum = maximum
        self.step = step
        self.channel = channel
        self.integer = channel is not None or field in INTEGER_FIELDS
        # Number of decimals needed to print one step exactly.
        self.decimals = 0 if self.integer else max(0, -int(math.floor(math.log10(step))))

    @property
    def key(self) -> str:
        if self.channel is None:
            return self.field
        return f"{self.field}.{CHANNEL_NAMES[self.channel].lower()}"

    def clamp(self, value: float):
        """Clamps `value` to the range and snaps it to the nearest step."""
        value = min(max(value, self.minimum), self.maximum)
        steps = round((value - self.minimum) / self.step)
        snapped = min(self.minimum + steps * self.step, self.maximum)
        if self.integer:
            return int(round(snapped))
        return round(snapped, self.decimals)

    def fraction(self, value: float) -> float:
        """Position of `value` along the slider track, in [0, 1]."""
        span = self.maximum - self.minimum
        return min(max((value - self.minimum) / span, 0.0), 1.0)

    def value_at(self, fraction: float):
        """The snapped value at a position along the slider track."""
        fraction = min(max(fraction, 0.0), 1.0)
        return self.clamp(self.minimum + fraction * (self.maximum - self.minimum))

    def read(self, params: GalaxyParameters):
        """Reads this control's value from `params`."""
        value = getattr(params, self.field)
        if self.channel is None:
            return value
        return int(round(value[self.channel] * 255))

    def write(self, params: GalaxyParameters, value) -> GalaxyParameters:
        """Returns a copy of `params` with this control's field set to `value`."""
        if self.channel is None:
            return params.with_changes(**{self.field: value})
        color = list(getattr(params, self.field))
        color[self.channel] = value / 255.0
        return params.with_changes(**{self.field: tuple(color)})

    def format(self, value) -> str:
        if self.integer:
            return str(int(value))
        return f"{value:.{self.decimals}f}"


def build_controls() -> List[SliderControl]:
    """Creates the panel's sliders with their declared ranges."""
    controls = []
    for field, label in NUMERIC_FIELDS:
        minimum, maximum, step = PARAMETER_RANGES[field]
        controls.append(SliderControl(field, label, minimum, maximum, step))
    for field, label in COLOR_FIELDS:
        minimum, maximum, step = COLOR_CHANNEL_RANGE
        for channel, name in enumerate(CHANNEL_NAMES):
            controls.append(
                SliderControl(field, f"{label} {name}", minimum, maximum, step, channel=channel)
            )
    return controls


class ControlPanel:
    """
    Holds the panel's sliders and applies the commit policy.
    """
    def __init__(self, params: GalaxyParameters,
                 on_commit: Callable[[GalaxyParameters], object]):
        self.controls = build_controls()
        self.parameters = params
        self.on_commit = on_commit
        self.active: Optional[SliderControl] = None
        self.pending_value = None
        logging.info(f"ControlPanel initialized with {len(self.controls)} controls.")

    def control(self, key: str) -> SliderControl:
        """Looks up a slider by key, e.g. 'radius' or 'inside_color.g'."""
        for control in self.controls:
            if control.key == key:
                return control
        raise KeyError(key)

    def display_value(self, control: SliderControl):
        """The value to show: the pending drag value while dragging, else the committed one."""
        if control is self.active and self.pending_value is not None:
            return self.pending_value
        return control.read(self.parameters)

    @property
    def dragging(self) -> bool:
        return self.active is not None

    def begin_drag(self, control: SliderControl, fraction: float):
        self.active = control
        self.pending_value = control.value_at(fraction)

    def drag(self, fraction: float):
        if self.active is not None:
            self.pending_value = self.active.value_at(fraction)

    def end_drag(self) -> Optional[GalaxyParameters]:
        """Finishes the drag in progress and commits its value."""
        if self.active is None:
            return None
        control, value = self.active, self.pending_value
        self.cancel_drag()
        return self.commit(control, value)

    def cancel_drag(self):
        self.active = None
        self.pending_value = None

    def nudge(self, control: SliderControl, steps: int) -> Optional[GalaxyParameters]:
        """Moves a slider by whole steps and commits immediately."""
        return self.commit(control, control.read(self.parameters) + steps * control.step)

    def commit(self, control: SliderControl, value) -> Optional[GalaxyParameters]:
        """
        Commits a new value for one control and triggers regeneration.

        Returns:
            The new parameters, or None if the value did not change them or
            the regeneration rejected them.
        """
        value = control.clamp(value)
        new_params = control.write(self.parameters, value)
        if new_params == self.parameters:
            logging.debug(f"Commit of {control.key} left parameters unchanged; not regenerating.")
            return None

        logging.info(f"Parameter committed: {control.label} = {control.format(value)}")
        try:
            self.on_commit(new_params)
        except InvalidParameterError as e:
            logging.warning(f"Commit of {control.key} rejected, keeping previous galaxy: {e}")
            return None
        self.parameters = new_params
        return new_params

    def sync(self, params: GalaxyParameters):
        """Shows `params`, e.g. after a reset, dropping any drag in progress."""
        self.cancel_drag()
        self.parameters = params
