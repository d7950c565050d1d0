# examples/load_and_run.py
"""
Load an XSpringies file, run it for a while and save the result.
Run:
  python examples/load_and_run.py web.xsp out.xsp
"""
import sys

from springsim import System, Simulation
from springsim.io import load_xsp, save_xsp

src, dst = sys.argv[1], sys.argv[2]

system = System()
load_xsp(src, system)
print("masses:", len(system.live_masses()), "springs:", len(system.live_springs()))

sim = Simulation(system, width=640, height=480)
frames = sim.run(2000)
print("frames:", frames, "t:", sim.time)

print("saved to", save_xsp(system, dst))
