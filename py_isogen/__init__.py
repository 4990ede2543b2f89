"""
Procedural noise fields and isosurface meshes.
"""

__version__ = "0.1.0"
