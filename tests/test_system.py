import numpy as np
import pytest

from springsim.system import System
from springsim.types import Mass, Spring, Status


def _chain(system, n=3, spacing=50.0):
    """n masses on a horizontal line joined by n-1 springs."""
    masses = [system.add_mass(100.0 + i * spacing, 200.0, mass=1.0, elastic=1.0) for i in range(n)]
    springs = [system.add_spring(masses[i], masses[i + 1]) for i in range(n - 1)]
    return masses, springs


def test_new_system_reserves_fake_entities():
    """Index 0 of each arena is the editor preview: fixed, never alive."""
    system = System()
    assert system.mass_count() == 1
    assert system.spring_count() == 1
    assert system.is_fake_mass(0) and system.is_fake_spring(0)
    assert system.masses[0].fixed
    assert not system.masses[0].alive
    assert not system.springs[0].alive
    assert system.live_masses() == []
    assert not system.any_spring_alive()


def test_add_spring_registers_parents_and_rest_length():
    system = System()
    (a, b), (s,) = _chain(system, n=2, spacing=30.0)
    assert system.masses[a].parents == [s]
    assert system.masses[b].parents == [s]
    assert system.springs[s].restlen == pytest.approx(30.0)
    assert system.springs[s].ks == system.params.cur_ks


def test_add_mass_and_spring_reject_bad_input():
    system = System()
    a = system.add_mass(10, 10)
    with pytest.raises(ValueError):
        system.add_mass(0, 0, mass=0.0)
    with pytest.raises(ValueError):
        system.add_spring(a, a)
    b = system.add_mass(20, 10)
    system.delete_mass(b)
    with pytest.raises(ValueError):
        system.add_spring(a, b)


def test_delete_mass_cascades_and_keeps_indices():
    """
    Deleting the middle mass of a chain kills both springs; the outer masses
    lose them from their parent lists and no index moves.
    """
    system = System()
    (a, b, c), (s1, s2) = _chain(system)
    count = system.mass_count()

    system.delete_mass(b)

    assert not system.masses[b].alive
    assert not system.springs[s1].alive
    assert not system.springs[s2].alive
    assert system.masses[a].parents == []
    assert system.masses[c].parents == []
    assert system.mass_count() == count
    assert system.live_masses() == [a, c]


def test_delete_mass_clears_center():
    system = System()
    a = system.add_mass(10, 10)
    system.params.center_id = a
    system.delete_mass(a)
    assert system.params.center_id == -1


def test_delete_spring_is_idempotent():
    system = System()
    (a, b), (s,) = _chain(system, n=2)
    system.delete_spring(s)
    system.delete_spring(s)
    assert not system.springs[s].alive
    assert system.masses[a].parents == []
    assert system.masses[b].parents == []


def test_delete_selected_masses_then_springs():
    system = System()
    (a, b, c), (s1, s2) = _chain(system)
    system.select_object(a, True)
    system.select_object(s2, False)
    system.delete_selected()
    assert system.live_masses() == [b, c]
    assert system.live_springs() == []


def test_duplicate_selected_remaps_springs():
    """Copying two masses and their spring yields an independent pair."""
    system = System()
    (a, b), (s,) = _chain(system, n=2)
    system.select_all()

    new = system.duplicate_selected()

    assert len(new) == 2
    a2, b2 = new
    dup = system.springs[-1]
    assert dup.alive and not dup.selected
    assert (dup.m1, dup.m2) == (a2, b2)
    assert system.masses[a2].parents == [len(system.springs) - 1]
    assert not system.masses[a2].selected
    np.testing.assert_allclose(system.masses[a2].position, system.masses[a].position)
    # originals untouched
    assert system.masses[a].parents == [s]
    assert system.springs[s].m1 == a


def test_duplicate_bridge_spring_keeps_uncopied_end():
    system = System()
    (a, b), (s,) = _chain(system, n=2)
    system.select_object(a, True)
    system.select_object(s, False)

    (a2,) = system.duplicate_selected()

    bridge = len(system.springs) - 1
    assert (system.springs[bridge].m1, system.springs[bridge].m2) == (a2, b)
    assert bridge in system.masses[b].parents
    assert system.masses[a2].parents == [bridge]


def test_duplicate_spring_without_copied_ends_is_dropped():
    system = System()
    (a, b), (s,) = _chain(system, n=2)
    system.select_object(s, False)
    assert system.duplicate_selected() == []
    assert not system.springs[-1].alive
    assert system.live_springs() == [s]


def test_reconnect_masses_rebuilds_parents():
    system = System()
    (a, b, c), (s1, s2) = _chain(system)
    for m in system.masses:
        m.parents.clear()
    system.reconnect_masses()
    assert system.masses[a].parents == [s1]
    assert system.masses[b].parents == [s1, s2]
    assert system.masses[c].parents == [s2]


def test_reconnect_masses_drops_dangling_springs():
    system = System()
    (a, b), (s,) = _chain(system, n=2)
    system.springs[s].m2 = 99
    system.reconnect_masses()
    assert not system.springs[s].alive
    assert system.masses[a].parents == []


def test_nearest_object_prefers_masses_then_springs():
    system = System()
    (a, b), (s,) = _chain(system, n=2, spacing=100.0)

    assert system.nearest_object(105.0, 200.0) == (a, True)
    # midway along the spring, 4 units off its line, far from both masses
    assert system.nearest_object(150.0, 204.0) == (s, False)
    assert system.nearest_object(150.0, 260.0) == (-1, True)
    # the wider mass radius in masses-only mode reaches the line
    assert system.nearest_object(150.0, 204.0, masses_only=True) == (a, True)
    assert system.nearest_object(150.0, 240.0, masses_only=True) == (-1, True)


def test_select_objects_rectangle():
    """Masses inside the box are selected; springs only if both ends are."""
    system = System()
    (a, b, c), (s1, s2) = _chain(system, spacing=50.0)
    system.select_objects(90.0, 190.0, 160.0, 210.0)
    assert system.masses[a].selected and system.masses[b].selected
    assert not system.masses[c].selected
    assert system.springs[s1].selected
    assert not system.springs[s2].selected
    assert system.anything_selected()

    system.unselect_all()
    assert not system.anything_selected()


def test_select_object_toggle():
    system = System()
    a = system.add_mass(0, 0)
    system.select_object(a, True, toggle=True)
    assert system.masses[a].selected
    system.select_object(a, True, toggle=True)
    assert not system.masses[a].selected


def test_eval_selection_mirrors_common_values():
    system = System()
    a = system.add_mass(0, 0, mass=2.5, elastic=0.3)
    b = system.add_mass(50, 0, mass=2.5, elastic=0.7)
    system.add_spring(a, b, ks=4.0, kd=0.2)
    system.select_all()

    assert system.eval_selection()
    assert system.params.cur_mass == 2.5
    assert system.params.cur_rest == 1.0  # elasticities disagree
    assert system.params.cur_ks == 4.0
    assert system.params.cur_kd == 0.2
    assert not system.eval_selection()


def test_move_and_velocity_of_selection():
    system = System()
    a = system.add_mass(10, 10)
    b = system.add_mass(50, 50)
    system.select_object(a, True)
    system.move_selected_masses(5.0, -2.0)
    system.set_mass_velocity(1.0, 2.0)
    system.set_mass_velocity(1.0, 0.0, relative=True)
    np.testing.assert_allclose(system.masses[a].position, [15.0, 8.0])
    np.testing.assert_allclose(system.masses[a].velocity, [2.0, 2.0])
    np.testing.assert_allclose(system.masses[b].position, [50.0, 50.0])


def test_temp_fixed_round_trip():
    """Temporarily pinned masses are released; permanently fixed ones are not."""
    system = System()
    a = system.add_mass(10, 10)
    b = system.add_mass(20, 10, fixed=True)
    system.select_all()

    system.set_temp_fixed(True)
    assert system.masses[a].fixed and system.masses[a].temp_fixed
    assert system.masses[b].fixed and not system.masses[b].temp_fixed

    system.set_temp_fixed(False)
    assert not system.masses[a].fixed and not system.masses[a].temp_fixed
    assert system.masses[b].fixed


def test_set_rest_length():
    system = System()
    (a, b), (s,) = _chain(system, n=2, spacing=40.0)
    system.masses[b].position = np.array([100.0, 260.0])
    system.select_object(s, False)
    system.set_rest_length()
    assert system.springs[s].restlen == pytest.approx(60.0)


def test_set_center():
    system = System()
    a = system.add_mass(0, 0)
    b = system.add_mass(10, 0)
    system.select_object(a, True)
    system.set_center()
    assert system.params.center_id == a

    system.select_object(b, True)
    system.set_center()
    assert system.params.center_id == a  # two selected: unchanged

    system.unselect_all()
    system.set_center()
    assert system.params.center_id == -1


def test_fake_spring_preview():
    system = System()
    a = system.add_mass(100, 100)
    system.attach_fake_spring(a)
    system.move_fake_mass(130, 140)
    fake = system.springs[system.fake_spring]
    assert fake.alive
    assert (fake.m1, fake.m2) == (system.fake_mass, a)
    np.testing.assert_allclose(system.masses[system.fake_mass].position, [130.0, 140.0])
    assert not system.masses[system.fake_mass].alive

    system.kill_fake_spring()
    assert not fake.alive


def test_snapshot_restore_is_deep():
    system = System()
    (a, b), (s,) = _chain(system, n=2)
    saved = system.snapshot()

    system.masses[a].position[0] = -1.0
    system.delete_spring(s)
    system.params.viscosity = 3.0

    system.restore(saved)
    assert system.masses[a].position[0] == 100.0
    assert system.springs[s].alive
    assert system.params.viscosity == 0.0
    # restoring does not alias the snapshot
    system.masses[a].position[0] = 7.0
    assert saved.masses[a].position[0] == 100.0


def test_reset_restores_defaults():
    system = System()
    _chain(system)
    system.params.viscosity = 2.0
    system.params.center_id = 1
    system.reset()
    assert system.mass_count() == 1
    assert system.spring_count() == 1
    assert system.params.viscosity == 0.0
    assert system.params.center_id == -1


def test_delete_all_empties_arenas():
    system = System()
    _chain(system)
    system.delete_all()
    assert system.mass_count() == 0
    assert system.spring_count() == 0


def test_import_entities_remaps_and_drops_unconnected():
    system = System()
    existing = system.add_mass(0, 0)
    masses = [
        (5, Mass(position=(10, 10), mass=1.0, radius=3)),
        (7, Mass(position=(20, 10), mass=1.0, radius=3)),
    ]
    springs = [
        Spring(ks=1.0, kd=0.0, restlen=10.0, m1=5, m2=7),
        Spring(ks=1.0, kd=0.0, restlen=10.0, m1=5, m2=42),
    ]

    mapping = system.import_entities(masses, springs, select_new=True)

    assert mapping == {5: existing + 1, 7: existing + 2}
    good, bad = system.springs[-2], system.springs[-1]
    assert (good.m1, good.m2) == (existing + 1, existing + 2)
    assert good.alive and good.selected
    assert bad.status == Status.NONE
    assert system.masses[existing + 1].parents == [len(system.springs) - 2]
    assert not system.masses[existing].selected


def test_fake_spring_reattach_keeps_single_parent_link():
    system = System()
    a = system.add_mass(100.0, 100.0)
    b = system.add_mass(200.0, 100.0)
    for target in (a, b, a):
        system.attach_fake_spring(target)
        system.kill_fake_spring()
    assert system.masses[system.fake_mass].parents == [system.fake_spring]
