from springsim.pacer import FramePacer
from springsim.params import ForceKind
from springsim.simulation import Simulation
from springsim.system import System


def test_due_after_frame_time():
    """0.03 + 0.03 exceeds the 0.05 frame budget; the excess carries over."""
    pacer = FramePacer()
    assert not pacer.tick(0.03)
    assert pacer.tick(0.03)
    assert abs(pacer.elapsed - 0.01) < 1e-12
    assert pacer.num_since == 0


def test_due_after_too_many_skipped_steps():
    """Tiny steps still produce a frame on every 9th call."""
    pacer = FramePacer()
    due = [pacer.tick(0.001) for _ in range(18)]
    assert due == ([False] * 8 + [True]) * 2


def test_reset():
    pacer = FramePacer(elapsed=0.04, num_since=5)
    pacer.reset()
    assert pacer.elapsed == 0.0 and pacer.num_since == 0


def test_advance_reports_frames():
    """With a 0.03 step the second advance() is due, then every other one."""
    system = System()
    system.add_mass(320.0, 240.0)
    system.params.enable(ForceKind.GRAVITY)
    system.params.cur_dt = 0.03
    sim = Simulation(system, 640.0, 480.0)
    assert [sim.advance() for _ in range(4)] == [False, True, False, True]
