# MIT License (see LICENSE)
"""
The entity store.

System owns every mass and spring, the simulation parameters, and the
spring <-> mass connectivity. Entities are addressed by stable integer
index: deleting one only clears its ALIVE flag, nothing is ever compacted
until a full reset(). Index 0 of each arena is reserved for the fake mass
and fake spring used by the editor to preview a spring being dragged.

Structure:
    - Creation: create_mass/create_spring (raw), add_mass/add_spring (with
      the current defaults and parent bookkeeping).
    - Deletion: delete_mass (cascades to attached springs), delete_spring,
      delete_selected, delete_all.
    - Selection and editing helpers used by the editor.
    - Whole-state operations: reset, snapshot/restore, import_entities.
"""
from __future__ import annotations
import copy
import math
from collections.abc import Iterable

import numpy as np

from .constants import MPROXIMITY, SPROXIMITY
from .logger import get_logger
from .params import SimParams
from .types import Mass, Spring, Status
from .util import distance, mass_radius, screen_radius

log = get_logger(__name__)


class System:
    """
    Arena of masses and springs plus the shared SimParams.

    Attributes:
        params: Simulation parameters (mutated by the editor and integrator).
        masses: All masses, dead ones included; index 0 is the fake mass.
        springs: All springs, dead ones included; index 0 is the fake spring.
    """

    def __init__(self, params: SimParams | None = None) -> None:
        self.params = params if params is not None else SimParams()
        self.masses: list[Mass] = []
        self.springs: list[Spring] = []
        self._init_objects()

    def _init_objects(self) -> None:
        self.fake_mass = self.create_mass()
        self.masses[self.fake_mass].status = Status.FIXED
        self.fake_spring = self.create_spring()
        self.springs[self.fake_spring].status = Status.NONE
        self.add_mass_parent(self.fake_mass, self.fake_spring)
        self.springs[self.fake_spring].m1 = self.fake_mass

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def mass_count(self) -> int:
        return len(self.masses)

    def spring_count(self) -> int:
        return len(self.springs)

    def get_mass(self, i: int) -> Mass:
        return self.masses[i]

    def get_spring(self, i: int) -> Spring:
        return self.springs[i]

    def is_fake_mass(self, i: int) -> bool:
        return i == self.fake_mass

    def is_fake_spring(self, i: int) -> bool:
        return i == self.fake_spring

    def live_masses(self) -> list[int]:
        """Indices of all ALIVE masses."""
        return [i for i, m in enumerate(self.masses) if m.alive]

    def live_springs(self) -> list[int]:
        """Indices of all ALIVE springs."""
        return [i for i, s in enumerate(self.springs) if s.alive]

    def any_spring_alive(self) -> bool:
        return any(s.alive for s in self.springs)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_mass(self) -> int:
        """Append a default ALIVE mass and return its index."""
        self.masses.append(Mass())
        return len(self.masses) - 1

    def create_spring(self) -> int:
        """Append a default ALIVE spring and return its index."""
        self.springs.append(Spring())
        return len(self.springs) - 1

    def add_mass(
        self,
        x: float,
        y: float,
        mass: float | None = None,
        elastic: float | None = None,
        fixed: bool | None = None,
        velocity: tuple[float, float] = (0.0, 0.0),
    ) -> int:
        """
        Create a mass the way the editor places one.

        Unspecified mass, elasticity and fixed flag come from the current
        parameters; the display radius is derived from the mass.

        Returns:
            Index of the new mass.
        """
        p = self.params
        mass = float(p.cur_mass if mass is None else mass)
        if mass <= 0:
            raise ValueError(f"Mass must be positive, got {mass}")
        i = self.create_mass()
        m = self.masses[i]
        m.position = np.array([x, y], dtype=np.float64)
        m.velocity = np.array(velocity, dtype=np.float64)
        m.mass = mass
        m.radius = mass_radius(m.mass)
        m.elastic = float(p.cur_rest if elastic is None else elastic)
        if p.fix_mass if fixed is None else fixed:
            m.fixed = True
        return i

    def add_spring(
        self,
        m1: int,
        m2: int,
        ks: float | None = None,
        kd: float | None = None,
        restlen: float | None = None,
    ) -> int:
        """
        Connect masses ``m1`` and ``m2`` with a new spring.

        Stiffness and damping default to the current parameters, the rest
        length to the current distance between the masses.

        Returns:
            Index of the new spring.
        """
        if m1 == m2:
            raise ValueError("A spring needs two distinct masses")
        for idx in (m1, m2):
            if not self.masses[idx].alive:
                raise ValueError(f"Mass {idx} is not alive")
        i = self.create_spring()
        s = self.springs[i]
        s.m1, s.m2 = m1, m2
        s.ks = float(self.params.cur_ks if ks is None else ks)
        s.kd = float(self.params.cur_kd if kd is None else kd)
        if restlen is None:
            restlen = distance(self.masses[m1].position, self.masses[m2].position)
        s.restlen = float(restlen)
        self.add_mass_parent(m1, i)
        self.add_mass_parent(m2, i)
        return i

    def add_mass_parent(self, which: int, parent: int) -> None:
        self.masses[which].parents.append(parent)

    def delete_mass_parent(self, which: int, parent: int) -> None:
        mass = self.masses[which]
        if mass.alive and parent in mass.parents:
            mass.parents.remove(parent)

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def delete_spring(self, which: int) -> None:
        """Kill a spring and detach it from both endpoints. No-op if dead."""
        spring = self.springs[which]
        if spring.alive:
            spring.status = Status.NONE
            self.delete_mass_parent(spring.m1, which)
            self.delete_mass_parent(spring.m2, which)

    def delete_mass(self, which: int) -> None:
        """Kill a mass and every spring attached to it."""
        mass = self.masses[which]
        if mass.alive:
            mass.status = Status.NONE
            # the dead mass keeps its parent list; delete_mass_parent skips it
            for par in mass.parents:
                self.delete_spring(par)
        if which == self.params.center_id:
            self.params.center_id = -1

    def delete_selected(self) -> None:
        """Delete all selected masses (with their springs), then selected springs."""
        for i, m in enumerate(self.masses):
            if m.selected:
                self.delete_mass(i)
        for i, s in enumerate(self.springs):
            if s.selected:
                self.delete_spring(i)

    def delete_all(self) -> None:
        """Empty both arenas, fake entities included."""
        self.masses.clear()
        self.springs.clear()
        self.params.center_id = -1

    def reconnect_masses(self) -> None:
        """
        Rebuild every mass's parent list from the live springs.

        Springs whose endpoints do not exist are deleted.
        """
        for m in self.masses:
            m.parents.clear()
        n = len(self.masses)
        for i, s in enumerate(self.springs):
            if not s.alive:
                continue
            if not (0 <= s.m1 < n and 0 <= s.m2 < n):
                log.warning("Spring %d references missing mass (%d, %d); deleting it", i, s.m1, s.m2)
                s.status = Status.NONE
                continue
            self.add_mass_parent(s.m1, i)
            self.add_mass_parent(s.m2, i)

    # ------------------------------------------------------------------
    # Picking and selection
    # ------------------------------------------------------------------

    def nearest_object(self, x: float, y: float, masses_only: bool = False) -> tuple[int, bool]:
        """
        Find the mass or spring nearest to (x, y).

        Masses win over springs. A mass qualifies when its squared centre
        distance minus its squared screen radius is below MPROXIMITY² (36
        times that in ``masses_only`` mode); among qualifying masses the
        smallest centre distance wins. Otherwise the spring whose line lies
        within SPROXIMITY of the point (inside the endpoints' padded bounding
        box) is chosen.

        Returns:
            (index, is_mass); index is -1 if nothing is close.
        """
        closest = -1
        min_dist = MPROXIMITY * MPROXIMITY
        min_rating = math.inf
        if masses_only:
            min_dist *= 36

        for i, m in enumerate(self.masses):
            if not m.alive:
                continue
            radius = screen_radius(m.radius)
            rating = (m.position[0] - x) ** 2 + (m.position[1] - y) ** 2
            dist = rating - radius * radius
            if dist < min_dist and rating < min_rating:
                min_dist = dist
                min_rating = rating
                closest = i

        if closest != -1 or masses_only:
            return closest, True

        min_dist = SPROXIMITY
        for i, s in enumerate(self.springs):
            if not s.alive:
                continue
            x1, y1 = self.masses[s.m1].position
            x2, y2 = self.masses[s.m2].position
            if (min(x1, x2) - SPROXIMITY < x < max(x1, x2) + SPROXIMITY
                    and min(y1, y2) - SPROXIMITY < y < max(y1, y2) + SPROXIMITY):
                a1 = y2 - y1
                b1 = x1 - x2
                c1 = y1 * x2 - y2 * x1
                d_ab = math.hypot(a1, b1)
                if d_ab == 0:
                    continue
                dist = abs((x * a1 + y * b1 + c1) / d_ab)
                if dist < min_dist:
                    min_dist = dist
                    closest = i
        if closest != -1:
            return closest, False
        return -1, True

    def select_object(self, index: int, is_mass: bool, toggle: bool = False) -> None:
        """Select one entity, or flip its selection when ``toggle`` is set."""
        obj = self.masses[index] if is_mass else self.springs[index]
        if toggle:
            obj.toggle_selected()
        else:
            obj.selected = True

    def select_objects(self, ulx: float, uly: float, lrx: float, lry: float) -> None:
        """Select masses inside the rectangle and springs with both ends inside."""
        def inside(p: np.ndarray) -> bool:
            return ulx <= p[0] <= lrx and uly <= p[1] <= lry

        for i, m in enumerate(self.masses):
            if m.alive and inside(m.position):
                self.select_object(i, True)
        for i, s in enumerate(self.springs):
            if s.alive and inside(self.masses[s.m1].position) and inside(self.masses[s.m2].position):
                self.select_object(i, False)

    def unselect_all(self) -> None:
        for obj in (*self.masses, *self.springs):
            obj.selected = False

    def select_all(self) -> None:
        for obj in (*self.masses, *self.springs):
            if obj.alive:
                obj.selected = True

    def anything_selected(self) -> bool:
        return any(m.selected for m in self.masses) or any(s.selected for s in self.springs)

    def eval_selection(self) -> bool:
        """
        Mirror values shared by the whole selection into the parameters.

        If every selected mass has the same mass, elasticity or fixed flag,
        that value becomes the default for new masses; likewise ks and kd for
        selected springs.

        Returns:
            True if any parameter changed.
        """
        p = self.params
        changed = False

        sel_masses = [m for m in self.masses if m.selected]
        if sel_masses:
            first = sel_masses[0]
            if all(m.mass == first.mass for m in sel_masses) and first.mass != p.cur_mass:
                p.cur_mass = first.mass
                changed = True
            if all(m.elastic == first.elastic for m in sel_masses) and first.elastic != p.cur_rest:
                p.cur_rest = first.elastic
                changed = True
            if all(m.fixed == first.fixed for m in sel_masses) and first.fixed != p.fix_mass:
                p.fix_mass = first.fixed
                changed = True

        sel_springs = [s for s in self.springs if s.selected]
        if sel_springs:
            first = sel_springs[0]
            if all(s.ks == first.ks for s in sel_springs) and first.ks != p.cur_ks:
                p.cur_ks = first.ks
                changed = True
            if all(s.kd == first.kd for s in sel_springs) and first.kd != p.cur_kd:
                p.cur_kd = first.kd
                changed = True

        return changed

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def duplicate_selected(self) -> list[int]:
        """
        Copy the selected masses and springs.

        Each copied spring is re-pointed at the copies of its endpoints; an
        endpoint that was not copied is kept, and a copy with neither endpoint
        copied is deleted.

        Returns:
            Indices of the new masses.
        """
        spring_start = len(self.springs)
        mapping: dict[int, int] = {}

        for i in range(len(self.masses)):
            if self.masses[i].selected:
                which = self.create_mass()
                dup = self.masses[i].copy()
                dup.selected = False
                dup.parents.clear()
                self.masses[which] = dup
                mapping[i] = which

        for i in range(spring_start):
            if not self.springs[i].selected:
                continue
            which = self.create_spring()
            dup = self.springs[i].copy()
            dup.selected = False
            self.springs[which] = dup

            m1done = dup.m1 in mapping
            m2done = dup.m2 in mapping
            if not m1done and not m2done:
                log.info("Duplicated spring %d is not connected to a copied mass; deleting it", which)
                dup.status = Status.NONE
                continue
            # a bridge to an uncopied mass stays registered with that mass
            dup.m1 = mapping.get(dup.m1, dup.m1)
            dup.m2 = mapping.get(dup.m2, dup.m2)
            self.add_mass_parent(dup.m1, which)
            self.add_mass_parent(dup.m2, which)

        return list(mapping.values())

    def move_selected_masses(self, dx: float, dy: float) -> None:
        for m in self.masses:
            if m.selected:
                m.position = m.position + (dx, dy)

    def set_mass_velocity(self, vx: float, vy: float, relative: bool = False) -> None:
        """Set (or add to, if ``relative``) the velocity of selected masses."""
        for m in self.masses:
            if m.selected:
                if relative:
                    m.velocity = m.velocity + (vx, vy)
                else:
                    m.velocity = np.array([vx, vy], dtype=np.float64)

    def set_temp_fixed(self, store: bool) -> None:
        """
        Pin (``store=True``) or release the selected masses.

        Pinning only marks masses that were not already fixed, so releasing
        leaves permanently fixed masses alone.
        """
        for m in self.masses:
            if not m.selected:
                continue
            if store:
                m.temp_fixed = False
                if not m.fixed:
                    m.temp_fixed = True
                    m.fixed = True
            elif m.temp_fixed:
                m.fixed = False
                m.temp_fixed = False

    def set_rest_length(self) -> None:
        """Set each selected spring's rest length to its current length."""
        for s in self.springs:
            if s.selected:
                s.restlen = distance(self.masses[s.m1].position, self.masses[s.m2].position)

    def set_center(self) -> None:
        """Make the single selected mass the centre (none selected clears it)."""
        cent = -1
        for i, m in enumerate(self.masses):
            if m.selected:
                if cent != -1:
                    return
                cent = i
        self.params.center_id = cent

    # ------------------------------------------------------------------
    # Fake spring preview
    # ------------------------------------------------------------------

    def attach_fake_spring(self, to_mass: int) -> None:
        """Make the fake spring connect the fake mass (cursor) to ``to_mass``."""
        fake = self.springs[self.fake_spring]
        if self.fake_spring not in self.masses[self.fake_mass].parents:
            self.add_mass_parent(self.fake_mass, self.fake_spring)
        fake.m1 = self.fake_mass
        fake.m2 = to_mass
        fake.alive = True
        fake.ks = self.params.cur_ks
        fake.kd = self.params.cur_kd

    def kill_fake_spring(self) -> None:
        self.springs[self.fake_spring].alive = False

    def move_fake_mass(self, x: float, y: float) -> None:
        self.masses[self.fake_mass].position = np.array([x, y], dtype=np.float64)

    # ------------------------------------------------------------------
    # Whole-state operations
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Delete everything, recreate the fake entities and reset parameters."""
        self.delete_all()
        self._init_objects()
        self.params.reset()

    def snapshot(self) -> "System":
        """Deep value copy of the whole system (entities and parameters)."""
        return copy.deepcopy(self)

    def restore(self, saved: "System") -> None:
        """Replace this system's contents with a deep copy of ``saved``."""
        state = copy.deepcopy(saved)
        self.__dict__.clear()
        self.__dict__.update(state.__dict__)

    def import_entities(
        self,
        masses: Iterable[tuple[int, Mass]],
        springs: Iterable[Spring],
        select_new: bool = False,
    ) -> dict[int, int]:
        """
        Merge externally numbered entities into the arenas.

        Args:
            masses: (external id, mass) pairs.
            springs: Springs whose m1/m2 are external ids.
            select_new: Select every imported entity.

        Returns:
            Mapping from external id to new mass index.

        Springs with an endpoint that does not map to an imported mass are
        deleted. Parent lists are rebuilt afterwards.
        """
        mapping: dict[int, int] = {}
        for ext_id, mass in masses:
            which = self.create_mass()
            self.masses[which] = mass
            mass.parents = []
            mass.selected = select_new
            mapping[int(ext_id)] = which

        for spring in springs:
            which = self.create_spring()
            self.springs[which] = spring
            spring.selected = select_new
            if spring.m1 in mapping and spring.m2 in mapping:
                spring.m1 = mapping[spring.m1]
                spring.m2 = mapping[spring.m2]
            else:
                log.warning("Spring %d not connected to existing mass", which)
                spring.status = Status.NONE

        self.reconnect_masses()
        return mapping
