# MIT License (see LICENSE)
"""
Reader and writer for the XSpringies text format (.xsp).

The file starts with a line beginning with the magic "#1.0". Every following
line is one command followed by whitespace-separated arguments:

    cmas <mass>                     default mass for new masses
    elas <elastic>                  default elasticity
    kspr <ks>                       default spring stiffness
    kdmp <kd>                       default spring damping
    fixm <0|1>                      new masses are fixed
    shws <0|1>                      show spring preview
    cent <id>                       centre mass (file numbering), -1 for none
    frce <k> <on> <value> <misc>    force slot k in 0..3
    frce 4 <on> 0 0                 collisions on/off
    visc <viscosity>
    stck <stickiness>
    step <dt>
    prec <precision>
    adpt <0|1>                      adaptive step
    gsnp <size> <0|1>               grid snap
    wall <top> <left> <right> <bottom>
    mass <id> <x> <y> <vx> <vy> <mass> <elastic>
    spng <id> <m1> <m2> <ks> <kd> <restlen>

A negative mass marks a fixed mass; a zero mass is read as 1. Spring
endpoints refer to the ids in the "mass" lines, not to arena indices.

Loading replaces the system (reset first). Inserting keeps the current
system, ignores every settings command and, when nothing is selected,
selects the inserted entities.
"""
from __future__ import annotations
from collections.abc import Iterable

from ..logger import get_logger
from ..params import ForceKind
from ..system import System
from ..types import Mass, Spring, Status
from ..util import mass_radius

log = get_logger(__name__)

MAGIC = "#1.0"
FILE_EXT = ".xsp"
COLLIDE_SLOT = len(ForceKind)


def extend_file(path: str) -> str:
    """Append the .xsp extension if the path does not have it."""
    return path if path.endswith(FILE_EXT) else path + FILE_EXT


def _num(x: float) -> str:
    return f"{float(x):.12g}"


def _flag(b: bool) -> str:
    return "1" if b else "0"


def _apply_setting(system: System, cmd: str, args: list[str]) -> bool:
    """Apply one settings command. Returns False if ``cmd`` is unknown."""
    p = system.params
    if cmd == "cmas":
        p.cur_mass = float(args[0])
    elif cmd == "elas":
        p.cur_rest = float(args[0])
    elif cmd == "kspr":
        p.cur_ks = float(args[0])
    elif cmd == "kdmp":
        p.cur_kd = float(args[0])
    elif cmd == "fixm":
        p.fix_mass = int(args[0]) != 0
    elif cmd == "shws":
        p.show_spring = int(args[0]) != 0
    elif cmd == "cent":
        p.center_id = int(args[0])
    elif cmd == "frce":
        which = int(args[0])
        if 0 <= which < COLLIDE_SLOT:
            f = p.force(ForceKind(which))
            f.enabled = int(args[1]) != 0
            f.value = float(args[2])
            f.misc = float(args[3])
        elif which == COLLIDE_SLOT:
            p.collide = int(args[1]) != 0
        else:
            log.warning("Ignoring force slot %d", which)
    elif cmd == "visc":
        p.viscosity = float(args[0])
    elif cmd == "stck":
        p.stickiness = float(args[0])
    elif cmd == "step":
        p.cur_dt = float(args[0])
    elif cmd == "prec":
        p.precision = float(args[0])
    elif cmd == "adpt":
        p.adaptive_step = int(args[0]) != 0
    elif cmd == "gsnp":
        p.grid_snap_size = float(args[0])
        p.grid_snap = int(args[1]) != 0
    elif cmd == "wall":
        t, l, r, b = (int(a) != 0 for a in args[:4])
        p.set_walls(top=t, left=l, right=r, bottom=b)
    else:
        return False
    return True


def _parse_mass(args: list[str]) -> tuple[int, Mass]:
    ext_id = int(args[0])
    x, y, vx, vy, mass, elastic = (float(a) for a in args[1:7])
    status = Status.ALIVE
    if mass < 0:
        mass = -mass
        status |= Status.FIXED
    if mass == 0:
        mass = 1.0
    return ext_id, Mass(
        position=(x, y),
        velocity=(vx, vy),
        mass=mass,
        elastic=elastic,
        radius=mass_radius(mass),
        status=status,
    )


def _parse_spring(args: list[str]) -> Spring:
    m1, m2 = int(args[1]), int(args[2])
    ks, kd, restlen = (float(a) for a in args[3:6])
    return Spring(ks=ks, kd=kd, restlen=restlen, m1=m1, m2=m2)


def read_xsp(lines: Iterable[str], system: System, insert: bool = False) -> dict[int, int]:
    """
    Load XSpringies data into ``system``.

    Args:
        lines: The file content, line by line (header included).
        system: Target system.
        insert: Merge into the current system instead of replacing it.

    Returns:
        Mapping from file mass id to arena index.

    Raises:
        ValueError: Missing magic header or a malformed command.
    """
    it = iter(lines)
    header = next(it, None)
    if header is None or not header.startswith(MAGIC):
        raise ValueError(f"Not an XSpringies file (expected '{MAGIC}' header)")

    select_new = False
    if not insert:
        system.reset()
    elif not system.anything_selected():
        select_new = True

    masses: list[tuple[int, Mass]] = []
    springs: list[Spring] = []
    for lineno, line in enumerate(it, start=2):
        tokens = line.split()
        if not tokens:
            continue
        cmd, args = tokens[0], tokens[1:]
        try:
            if cmd == "mass":
                masses.append(_parse_mass(args))
            elif cmd == "spng":
                springs.append(_parse_spring(args))
            elif insert:
                continue
            elif not _apply_setting(system, cmd, args):
                log.warning("Unknown command: %s (line %d)", cmd, lineno)
        except (IndexError, ValueError) as e:
            raise ValueError(f"Malformed '{cmd}' command on line {lineno}: {line.strip()}") from e

    mapping = system.import_entities(masses, springs, select_new=select_new)

    if not insert and system.params.center_id >= 0:
        system.params.center_id = mapping.get(system.params.center_id, -1)

    log.info("Loaded %d masses and %d springs", len(masses), len(springs))
    return mapping


def write_xsp(system: System) -> list[str]:
    """
    Serialize settings and every live mass and spring, one line each.

    The cursor mass and the preview spring are never written.
    """
    p = system.params
    out = [
        f"{MAGIC} *** XSpringies data file",
        f"cmas {_num(p.cur_mass)}",
        f"elas {_num(p.cur_rest)}",
        f"kspr {_num(p.cur_ks)}",
        f"kdmp {_num(p.cur_kd)}",
        f"fixm {_flag(p.fix_mass)}",
        f"shws {_flag(p.show_spring)}",
        f"cent {p.center_id}",
    ]
    for kind in ForceKind:
        f = p.force(kind)
        out.append(f"frce {int(kind)} {_flag(f.enabled)} {_num(f.value)} {_num(f.misc)}")
    out.append(f"frce {COLLIDE_SLOT} {_flag(p.collide)} 0 0")
    out += [
        f"visc {_num(p.viscosity)}",
        f"stck {_num(p.stickiness)}",
        f"step {_num(p.cur_dt)}",
        f"prec {_num(p.precision)}",
        f"adpt {_flag(p.adaptive_step)}",
        f"gsnp {_num(p.grid_snap_size)} {_flag(p.grid_snap)}",
        f"wall {_flag(p.walls.top)} {_flag(p.walls.left)} {_flag(p.walls.right)} {_flag(p.walls.bottom)}",
    ]

    for i, m in enumerate(system.masses):
        if not m.alive or system.is_fake_mass(i):
            continue
        mass = -m.mass if m.fixed else m.mass
        x, y = m.position
        vx, vy = m.velocity
        out.append(f"mass {i} {_num(x)} {_num(y)} {_num(vx)} {_num(vy)} {_num(mass)} {_num(m.elastic)}")
    for i, s in enumerate(system.springs):
        if not s.alive or system.is_fake_spring(i):
            continue
        out.append(f"spng {i} {s.m1} {s.m2} {_num(s.ks)} {_num(s.kd)} {_num(s.restlen)}")
    return out


def load_xsp(path: str, system: System, insert: bool = False) -> dict[int, int]:
    """
    Load (or insert) an .xsp file; the extension is added if missing.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not in XSpringies format.
    """
    with open(extend_file(path), "r", encoding="utf-8") as f:
        return read_xsp(f, system, insert=insert)


def save_xsp(system: System, path: str) -> str:
    """
    Save ``system`` to an .xsp file; the extension is added if missing.

    Returns:
        The path actually written.
    """
    path = extend_file(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(write_xsp(system)) + "\n")
    return path
