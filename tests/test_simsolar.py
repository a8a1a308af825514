import pytest

from iotacore.simsolar import SimSolar
from iotacore.utilities import unixtime

MIDNIGHT = unixtime(2021, 6, 1)


@pytest.fixture
def solar():
    sim = SimSolar()
    sim.config(600, 1800, 2000)
    return sim


def test_config_reads_hhmm(solar):
    assert solar.config(630, 1945, 500) is True
    assert solar.sunrise == pytest.approx(6.5)
    assert solar.sunset == pytest.approx(19.75)
    assert solar.peak_power == 500


def test_peak_at_midday(solar):
    assert solar.power(MIDNIGHT + 12 * 3600) == pytest.approx(2000)


@pytest.mark.parametrize("hour", [0, 3, 5, 19, 23])
def test_no_power_at_night(solar, hour):
    assert solar.power(MIDNIGHT + hour * 3600) == pytest.approx(0, abs=1e-9)


def test_power_is_symmetric_about_midday(solar):
    assert solar.power(MIDNIGHT + 9 * 3600) == pytest.approx(solar.power(MIDNIGHT + 15 * 3600))


def test_energy_empty_interval(solar):
    assert solar.energy(MIDNIGHT + 100, MIDNIGHT + 100) == 0
    assert solar.energy(MIDNIGHT + 200, MIDNIGHT + 100) == 0


def test_energy_matches_integrated_power(solar):
    step = 60
    integrated = sum(solar.power(t) * step / 3600 for t in range(MIDNIGHT, MIDNIGHT + 86400, step))
    assert solar.energy(MIDNIGHT, MIDNIGHT + 86400) == pytest.approx(integrated, rel=1e-3)


def test_energy_over_days_scales(solar):
    one_day = solar.energy(MIDNIGHT, MIDNIGHT + 86400)
    assert solar.energy(MIDNIGHT, MIDNIGHT + 3 * 86400) == pytest.approx(3 * one_day)


def test_energy_is_additive_across_midnight(solar):
    start = MIDNIGHT + 14 * 3600
    split = MIDNIGHT + 86400
    end = MIDNIGHT + 86400 + 10 * 3600
    assert solar.energy(start, end) == pytest.approx(solar.energy(start, split) + solar.energy(split, end))


def test_energy_is_additive_within_day(solar):
    a, b, c = MIDNIGHT + 7 * 3600, MIDNIGHT + 12 * 3600, MIDNIGHT + 16 * 3600
    assert solar.energy(a, c) == pytest.approx(solar.energy(a, b) + solar.energy(b, c))