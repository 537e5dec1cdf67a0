"""Two coaxial specular gray disks: sequential vs parallel estimator timing."""
import time

import numpy as np

from graytrace import Scene, Surface, TraceParams

scene = Scene(TraceParams(verbose=True))

# +x face, small disk facing -x
scene.add_surface(Surface.disk([0.5, 0.0, 0.0], 1.0, [-1.0, 0.0, 0.0]).gray_body(0.2).specular())
# -x face, large disk facing +x
scene.add_surface(Surface.disk([-0.5, 0.0, 0.0], 3.0, [1.0, 0.0, 0.0]).gray_body(0.2).specular())

N = 1_000_000

t0 = time.time()
vf = scene.view_factors_for_surface(0, N, rng=0)
print("sequential:", np.round(vf, 4), f"{time.time() - t0:0.2f}s")

t0 = time.time()
vf_par = scene.view_factors_for_surface_parallel(0, N, seed=0)
print("parallel:  ", np.round(vf_par, 4), f"{time.time() - t0:0.2f}s")

# A few paths for inspection
for rec in scene.trace_rays_from_surface(0, 3, rng=1):
    print(len(rec), "bounces, absorbed", round(rec.total_absorbed, 4),
          "terminated early" if rec.terminated_early else "escaped")
