# examples/minimal_freefall.py
from springsim import System, Simulation, ForceKind

system = System()
system.params.enable(ForceKind.GRAVITY, value=10.0)
system.params.stickiness = 0.0

ball = system.add_mass(320.0, 400.0, mass=1.0, elastic=0.8)

sim = Simulation(system, width=640, height=480)
while sim.time < 10.0:
    sim.advance()

print("t:", sim.time)
print("pos:", system.masses[ball].position)
print("vel:", system.masses[ball].velocity)
