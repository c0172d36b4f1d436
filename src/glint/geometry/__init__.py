"""Geometry module for shape primitives.

This module provides the sphere primitive and its intersection routine:

Components:
    sphere: Sphere primitive, hit records and ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) so the scene can test
every primitive from inside a rendering kernel. Probing follows the pattern:
    record = probe_sphere(ray, sphere, t_min, t_max)
"""

from .sphere import HitRecord, Sphere, is_front_face, make_sphere, probe_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "is_front_face",
    "probe_sphere",
    "make_sphere",
]
