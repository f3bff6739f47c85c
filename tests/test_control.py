"""
Control API Tests
=================
"""
import pytest

from orrery.control import SimulationControl
from orrery.errors import ConfigurationError, InvalidDateError, UnknownBodyError


@pytest.fixture
def control(simulation):
    simulation.update(0.0)
    return SimulationControl(simulation)


class TestControl:
    def test_set_speed_and_pause(self, control):
        control.set_speed(-120)
        control.pause()
        assert control.config.clock.speed_multiplier == -120.0
        assert control.config.clock.paused
        assert control.toggle_pause() is False

    @pytest.mark.parametrize("speed", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_speed_rejected(self, control, speed):
        control.set_speed(3600)
        with pytest.raises(ConfigurationError):
            control.set_speed(speed)
        assert control.config.clock.speed_multiplier == 3600.0

    def test_invalid_coordinate_system_leaves_state(self, control):
        with pytest.raises(ConfigurationError):
            control.set_coordinate_system("Heliocentrik")
        assert control.config.coordinate_system == "Heliocentric"

    def test_reference_plane(self, control):
        control.set_reference_plane("Ecliptic")
        assert control.config.reference_plane == "Ecliptic"
        with pytest.raises(ConfigurationError):
            control.set_reference_plane("Galactic")
        assert control.config.reference_plane == "Ecliptic"

    def test_planet_scale_must_be_positive(self, control):
        with pytest.raises(ConfigurationError):
            control.set_planet_scale(0)
        control.set_planet_scale(1000)
        assert control.config.planet_scale == 1000.0

    def test_visibility_toggles(self, control):
        control.set_visible("small_moons", True)
        assert control.config.show_small_moons
        assert control.toggle("stars") is False
        with pytest.raises(ConfigurationError):
            control.set_visible("comets")

    def test_set_date_does_not_pause(self, control):
        control.set_date("2031-01-01")
        assert control.simulation.current_date.year == 2031
        assert not control.config.clock.paused

    def test_set_date_rejects_garbage(self, control):
        with pytest.raises(InvalidDateError):
            control.set_date("31/31/2031")

    def test_focus_on_moon_and_exit(self, control):
        control.focus("ganymede")
        assert control.simulation.focus.node.name == "Ganymede"
        assert control.status()["focus"] == "Ganymede"
        control.exit_focus()
        assert not control.simulation.focus.active

    def test_focus_unknown_body(self, control):
        with pytest.raises(UnknownBodyError):
            control.focus("Nibiru")

    def test_precision_toggle(self, control):
        control.disable_precision()
        assert not control.simulation.virtual_origin.enabled
        control.enable_precision()
        assert control.simulation.virtual_origin.enabled

    def test_status(self, control):
        status = control.status()
        assert status["coordinate_system"] == "Heliocentric"
        assert len(status["camera"]) == 3
