"""
Core field synthesis and isosurface extraction functionality.
"""

from .errors import IsogenError, InvalidDimensions, InvalidParameter, InvalidCaseTable, OutOfBoundsSample
from .field_grid import FieldGrid, heightmap_to_volume
from .noise_parameters import (
    NoiseParameters, NormalizeMode, RandomNoiseParameters, PerlinNoiseParameters,
    TurbulenceNoiseParameters, CellularNoiseParameters, BlueNoiseParameters,
    WaveletNoiseParameters, SimplexNoiseParameters, PinkNoiseParameters, parse_noise_parameters,
)
from .noise_generator import generate
from .mesh import Mesh
from .marching import IsosurfaceExtractor, extract
from .parallel import ParallelExecutionCoordinator
from .chunks import Chunk, ChunkDescriptor, ChunkGenerator, ChunkLayout, partition
from .pipeline import SurfacePipeline, SurfaceResult
from .texture import texture_from_height_map, texture_from_colour_map

__all__ = ['IsogenError', 'InvalidDimensions', 'InvalidParameter', 'InvalidCaseTable',
           'OutOfBoundsSample', 'FieldGrid', 'heightmap_to_volume', 'NoiseParameters',
           'NormalizeMode', 'RandomNoiseParameters', 'PerlinNoiseParameters',
           'TurbulenceNoiseParameters', 'CellularNoiseParameters', 'BlueNoiseParameters',
           'WaveletNoiseParameters', 'SimplexNoiseParameters', 'PinkNoiseParameters',
           'parse_noise_parameters', 'generate', 'Mesh',
           'IsosurfaceExtractor', 'extract', 'ParallelExecutionCoordinator', 'Chunk',
           'ChunkDescriptor', 'ChunkGenerator', 'ChunkLayout', 'partition',
           'SurfacePipeline', 'SurfaceResult', 'texture_from_height_map',
           'texture_from_colour_map']
