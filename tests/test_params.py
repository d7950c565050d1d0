import pytest

from springsim.params import ForceKind, SimParams
from springsim.util import mass_radius, screen_radius


def test_defaults():
    p = SimParams()
    assert p.cur_dt == 0.025
    assert p.center_id == -1
    assert not any(f.enabled for f in p.forces.values())
    g = p.force(ForceKind.GRAVITY)
    assert (g.value, g.misc) == (10.0, 0.0)
    w = p.force(ForceKind.WALL)
    assert (w.value, w.misc) == (10000.0, 1.0)
    assert p.walls.top and p.walls.left and p.walls.right and p.walls.bottom


def test_reset_in_place():
    p = SimParams()
    forces = p.forces
    p.enable(ForceKind.CENTER_MASS, value=1.0)
    p.viscosity = 4.0
    p.reset()
    assert p.viscosity == 0.0
    assert not p.force(ForceKind.CENTER_MASS).enabled
    assert p.force(ForceKind.CENTER_MASS).value == 5.0
    # the reset does not touch dictionaries handed out before
    assert forces[ForceKind.CENTER_MASS].enabled


def test_dict_round_trip():
    p = SimParams()
    p.enable(ForceKind.POINT_ATTRACT, value=3.0, misc=2.0)
    p.set_walls(top=False, left=True, right=False, bottom=True)
    p.precision = 0.01

    q = SimParams.from_dict(p.to_dict())

    assert q == p


def test_from_dict_rejects_unknown_force():
    with pytest.raises(ValueError):
        SimParams.from_dict({"forces": {"magnetism": {"enabled": True}}})


def test_mass_radius_clamped():
    """radius = int(2 ln(4m + 1)) within [1, 64]."""
    assert mass_radius(1.0) == 3
    assert mass_radius(0.01) == 1
    assert mass_radius(1e30) == 64


def test_screen_radius_has_floor():
    assert screen_radius(1) == 15
    assert screen_radius(3) == 15
    assert screen_radius(10) == 20
