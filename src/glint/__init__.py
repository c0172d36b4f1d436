"""Taichi-based Monte Carlo path tracer for scenes of analytic spheres.

This package renders spheres with physically-inspired materials into an 8-bit
RGB framebuffer, with support for:
- Recursive-style path tracing with a sky gradient background
- Lambertian, rough metal and refractive dielectric materials
- A thin-lens camera with depth of field
- Progressive supersampling with explicitly seeded random streams

Subpackages:
    core: Ray and vector utilities, sampling, integrator, frame driver
    geometry: Sphere primitive and ray-sphere intersection
    materials: Scattering models
    scene: Scene storage, scene manager, presets and file loading
    camera: Thin-lens camera
    preview: PNG export and Matplotlib preview
"""

__version__ = "0.1.0"
