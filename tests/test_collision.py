import numpy as np
import pytest

from springsim.collision.impact import oblique_impact, overlapping_pairs, resolve_impacts
from springsim.core.invariants import linear_momentum
from springsim.simulation import Simulation
from springsim.system import System


def _pair(v1, v2, p1=(100.0, 100.0), p2=(104.0, 100.0), elastic=1.0, fixed1=False):
    system = System()
    a = system.add_mass(*p1, mass=1.0, elastic=elastic, fixed=fixed1, velocity=v1)
    b = system.add_mass(*p2, mass=1.0, elastic=elastic, velocity=v2)
    return system, a, b


def test_equal_masses_head_on_swap_velocities():
    """
    Perfectly elastic head-on impact of equal masses exchanges velocities
    and conserves momentum.
    """
    system, a, b = _pair((10.0, 0.0), (-10.0, 0.0))
    p0 = linear_momentum(system)

    assert resolve_impacts(system) == 1

    np.testing.assert_allclose(system.masses[a].velocity, [-10.0, 0.0])
    np.testing.assert_allclose(system.masses[b].velocity, [10.0, 0.0])
    np.testing.assert_allclose(linear_momentum(system), p0)


def test_partially_elastic_impact_conserves_momentum():
    """Restitution 0.5: each mass gives up 0.75 of the relative velocity."""
    system, a, b = _pair((10.0, 0.0), (-10.0, 0.0), elastic=0.5)
    resolve_impacts(system)
    np.testing.assert_allclose(system.masses[a].velocity, [-5.0, 0.0])
    np.testing.assert_allclose(system.masses[b].velocity, [5.0, 0.0])
    np.testing.assert_allclose(linear_momentum(system), [0.0, 0.0], atol=1e-12)


def test_vertical_contact_axis():
    """dx == 0 is replaced by a tiny epsilon; the impact still swaps vy."""
    system, a, b = _pair((0.0, 10.0), (0.0, -10.0), p2=(100.0, 104.0))
    resolve_impacts(system)
    np.testing.assert_allclose(system.masses[a].velocity, [0.0, -10.0], atol=1e-6)
    np.testing.assert_allclose(system.masses[b].velocity, [0.0, 10.0], atol=1e-6)


def test_fixed_mass_reflects_and_is_not_moved():
    """A free mass hitting a nail rebounds with restitution 1 + e."""
    system, a, b = _pair((0.0, 0.0), (-10.0, 0.0), p2=(103.0, 100.0), fixed1=True)
    assert oblique_impact(system.masses[a], system.masses[b])
    np.testing.assert_array_equal(system.masses[a].velocity, [0.0, 0.0])
    np.testing.assert_allclose(system.masses[b].velocity, [10.0, 0.0])


def test_separating_pair_is_left_alone():
    system, a, b = _pair((-10.0, 0.0), (10.0, 0.0))
    assert resolve_impacts(system) == 0
    np.testing.assert_array_equal(system.masses[a].velocity, [-10.0, 0.0])


def test_overlapping_pairs_order_and_liveness():
    """Pairs come in (i, j), i < j order; dead masses and the fake mass are skipped."""
    system = System()
    a = system.add_mass(100.0, 100.0, mass=1.0)
    b = system.add_mass(103.0, 100.0, mass=1.0)
    c = system.add_mass(100.0, 103.0, mass=1.0)
    d = system.add_mass(300.0, 300.0, mass=1.0)
    assert overlapping_pairs(system) == [(a, b), (a, c), (b, c)]

    system.delete_mass(b)
    assert overlapping_pairs(system) == [(a, c)]
    assert d not in {i for pair in overlapping_pairs(system) for i in pair}


def test_collisions_only_when_enabled():
    system, a, b = _pair((10.0, 0.0), (-10.0, 0.0))
    sim = Simulation(system, 640.0, 480.0)
    sim.advance()
    assert system.masses[a].velocity[0] == pytest.approx(10.0)

    system.params.collide = True
    sim.advance()
    assert system.masses[a].velocity[0] == pytest.approx(-10.0)


def test_massless_partner_does_not_push_back():
    """
    A free mass hitting a zero-mass entity keeps its velocity; the massless
    one takes the full 1 + e rebound, e = (1 + 0) / 2.
    """
    system = System()
    a = system.add_mass(100.0, 100.0, mass=1.0, elastic=1.0, velocity=(10.0, 0.0))
    b = system.create_mass()
    system.masses[b].position = np.array([102.0, 100.0])

    assert oblique_impact(system.masses[a], system.masses[b])
    np.testing.assert_allclose(system.masses[a].velocity, [10.0, 0.0])
    np.testing.assert_allclose(system.masses[b].velocity, [15.0, 0.0])


def test_advance_with_massless_mass_in_contact():
    system = System()
    a = system.add_mass(100.0, 100.0, mass=1.0, elastic=1.0, velocity=(10.0, 0.0))
    b = system.create_mass()
    system.masses[b].position = np.array([102.0, 100.0])
    system.params.collide = True

    Simulation(system, 640.0, 480.0).advance()

    np.testing.assert_allclose(system.masses[a].velocity, [10.0, 0.0])
    assert system.masses[b].velocity[0] > 0.0
