"""
Microbenchmark: time per step vs number of masses in a spring lattice.
Run:
  python benchmarks/bench_steps.py
"""
import time
import numpy as np
from springsim import ForceKind, Profiler, Simulation, System


def run(n: int, steps: int = 300, adaptive: bool = False):
    prof = Profiler()
    system = System()
    p = system.params
    p.enable(ForceKind.GRAVITY, value=10.0)
    p.viscosity = 0.1
    p.collide = True
    p.adaptive_step = adaptive
    p.precision = 0.1

    rng = np.random.default_rng(12345)  # determinism (no randomness elsewhere)

    # masses in a square lattice with small random jitter, joined to right and upper neighbours
    side = int(np.ceil(np.sqrt(n)))
    grid = {}
    k = 0
    for iy in range(side):
        for ix in range(side):
            if k >= n:
                break
            x = 100.0 + 20.0 * ix + 0.5 * float(rng.normal())
            y = 100.0 + 20.0 * iy + 0.5 * float(rng.normal())
            grid[ix, iy] = system.add_mass(x, y, mass=1.0, elastic=0.9)
            k += 1
    for (ix, iy), i in grid.items():
        for nb in ((ix + 1, iy), (ix, iy + 1)):
            if nb in grid:
                system.add_spring(i, grid[nb], ks=50.0, kd=0.5)

    sim = Simulation(system, width=100.0 + 20.0 * side + 200.0, height=100.0 + 20.0 * side + 200.0, profiler=prof)

    # warmup
    sim.run(30)
    prof.clear()

    t0 = time.perf_counter()
    sim.run(steps)
    t1 = time.perf_counter()

    total = t1 - t0
    per_step = total / steps
    return per_step, prof.summary()


if __name__ == "__main__":
    for adaptive in (False, True):
        print("adaptive" if adaptive else "fixed RK4")
        for n in [10, 50, 100, 250, 500]:
            per_step, summary = run(n, adaptive=adaptive)
            print(f"N={n:4d}  step={1e3*per_step:8.3f} ms  steps/s={1/per_step:8.1f}")
            for k in ["integrate", "contacts"]:
                if k in summary:
                    print(" ", k, summary[k])
        print()
