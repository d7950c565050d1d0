import numpy as np
import pytest

from springsim import ForceKind, Profiler, Simulation, System
from springsim.constants import DEF_TSTEP


def _hanging(adaptive=False):
    """A unit mass hanging from a fixed mass on a damped spring."""
    system = System()
    top = system.add_mass(320.0, 400.0, fixed=True)
    bob = system.add_mass(320.0, 300.0, mass=1.0)
    system.add_spring(top, bob, ks=2.0, kd=0.5)
    system.params.enable(ForceKind.GRAVITY)
    system.params.adaptive_step = adaptive
    return system, bob


def test_advance_snapshots_pre_step_state():
    system, bob = _hanging()
    sim = Simulation(system, 640.0, 480.0)
    before = system.masses[bob].position.copy()
    sim.advance()
    np.testing.assert_array_equal(system.masses[bob].old_position, before)
    assert system.masses[bob].position[1] < before[1]
    assert sim.time == pytest.approx(system.params.cur_dt)


def test_adaptive_without_springs_uses_default_step():
    system = System()
    system.add_mass(320.0, 240.0)
    system.params.adaptive_step = True
    system.params.cur_dt = 0.2
    Simulation(system, 640.0, 480.0).advance()
    assert system.params.cur_dt == DEF_TSTEP


def test_adaptive_with_springs_adapts_step():
    system, _ = _hanging(adaptive=True)
    system.params.cur_dt = 0.01
    system.params.precision = 1.0
    sim = Simulation(system, 640.0, 480.0)
    sim.advance()
    assert system.params.cur_dt != 0.01


def test_hanging_mass_settles_at_static_stretch():
    """
    A damped spring comes to rest where ks * stretch = m g, i.e. 5 units
    below its rest length for ks = 2, g = 10.
    """
    system, bob = _hanging()
    sim = Simulation(system, 640.0, 480.0)
    sim.run(4000)
    y = system.masses[bob].position[1]
    assert y == pytest.approx(300.0 - 5.0, abs=1e-3)


def test_predict_does_not_commit():
    system, bob = _hanging()
    sim = Simulation(system, 640.0, 480.0)
    before = system.masses[bob].position.copy()
    sim.predict()
    np.testing.assert_array_equal(system.masses[bob].position, before)
    assert system.masses[bob].test_position[1] < before[1]

    sim.advance()
    np.testing.assert_allclose(system.masses[bob].position, system.masses[bob].test_position)


def test_fake_spring_drags_mass():
    """The preview spring pulls its mass towards the cursor (fake mass)."""
    system = System()
    a = system.add_mass(100.0, 100.0)
    system.attach_fake_spring(a)
    system.move_fake_mass(200.0, 100.0)
    Simulation(system, 640.0, 480.0).advance()
    assert system.masses[a].velocity[0] > 0.0
    assert not system.masses[system.fake_mass].alive


def test_profiler_sections():
    system, _ = _hanging()
    prof = Profiler()
    sim = Simulation(system, 640.0, 480.0, profiler=prof)
    sim.run(5)
    stats = prof.summary()
    assert stats["integrate"]["n"] == 5
    assert stats["contacts"]["n"] == 5
    assert prof.total("integrate") > 0.0


def test_params_replaced_between_steps_are_used():
    """advance() reads the System's parameters on every call."""
    system, bob = _hanging()
    sim = Simulation(system, 640.0, 480.0)
    saved = system.snapshot()
    sim.advance()
    system.restore(saved)
    system.params.disable(ForceKind.GRAVITY)
    system.masses[bob].velocity = np.zeros(2)
    # spring at rest length and gravity off: nothing moves
    sim.advance()
    np.testing.assert_allclose(system.masses[bob].position, [320.0, 300.0], atol=1e-9)
