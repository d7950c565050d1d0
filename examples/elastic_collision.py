# examples/elastic_collision.py
from springsim import System, Simulation
from springsim.core import kinetic_energy, linear_momentum

system = System()
system.params.collide = True

a = system.add_mass(200.0, 240.0, mass=1.0, elastic=1.0, velocity=(+30.0, 0.0))
b = system.add_mass(400.0, 240.0, mass=1.0, elastic=1.0, velocity=(-30.0, 0.0))

p0 = linear_momentum(system)
ke0 = kinetic_energy(system)

sim = Simulation(system, width=640, height=480)
sim.run(200)

p1 = linear_momentum(system)
ke1 = kinetic_energy(system)

print("p0", p0, "p1", p1, "dp", p1 - p0)
print("ke0", ke0, "ke1", ke1, "dke", ke1 - ke0)
print("v_final a,b:", system.masses[a].velocity, system.masses[b].velocity)
