# examples/spring_pendulum.py
from springsim import System, Simulation, ForceKind
from springsim.core import total_energy
import numpy as np

system = System()
system.params.enable(ForceKind.GRAVITY, value=10.0)
system.params.adaptive_step = True
system.params.precision = 0.01

anchor = system.add_mass(320.0, 440.0, fixed=True)
bob = system.add_mass(420.0, 440.0, mass=1.0)
system.add_spring(anchor, bob, ks=20.0, kd=0.0, restlen=100.0)

sim = Simulation(system, width=640, height=480)
frames = 0
while sim.time < 5.0:
    if sim.advance():
        frames += 1

p = system.masses[bob].position - system.masses[anchor].position
print("frames:", frames, "final dt:", system.params.cur_dt)
print("bob position:", system.masses[bob].position, "length:", float(np.linalg.norm(p)))
print("energy (no gravity potential):", total_energy(system))
