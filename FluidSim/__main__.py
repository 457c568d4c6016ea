# -- FluidSim Module Entry -- #

from FluidSim.runner import main

main()
