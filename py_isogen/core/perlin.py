"""
Gradient noise primitives.

Vectorised implementations of Ken Perlin's improved noise and of simplex
noise over numpy arrays. Both share the fixed reference permutation table, so
the primitives carry no random state; seeding happens through the per-octave
sample offsets drawn by ``octave_offsets``.
"""

from typing import Sequence

import numpy as np

from ..utils.random import create_rng

# Ken Perlin's reference permutation
_PERMUTATION = np.array(
    [
        151, 160, 137, 91, 90, 15, 131, 13, 201, 95, 96, 53, 194, 233, 7, 225,
        140, 36, 103, 30, 69, 142, 8, 99, 37, 240, 21, 10, 23, 190, 6, 148,
        247, 120, 234, 75, 0, 26, 197, 62, 94, 252, 219, 203, 117, 35, 11, 32,
        57, 177, 33, 88, 237, 149, 56, 87, 174, 20, 125, 136, 171, 168, 68, 175,
        74, 165, 71, 134, 139, 48, 27, 166, 77, 146, 158, 231, 83, 111, 229, 122,
        60, 211, 133, 230, 220, 105, 92, 41, 55, 46, 245, 40, 244, 102, 143, 54,
        65, 25, 63, 161, 1, 216, 80, 73, 209, 76, 132, 187, 208, 89, 18, 169,
        200, 196, 135, 130, 116, 188, 159, 86, 164, 100, 109, 198, 173, 186, 3, 64,
        52, 217, 226, 250, 124, 123, 5, 202, 38, 147, 118, 126, 255, 82, 85, 212,
        207, 206, 59, 227, 47, 16, 58, 17, 182, 189, 28, 42, 223, 183, 170, 213,
        119, 248, 152, 2, 44, 154, 163, 70, 221, 153, 101, 155, 167, 43, 172, 9,
        129, 22, 39, 253, 19, 98, 108, 110, 79, 113, 224, 232, 178, 185, 112, 104,
        218, 246, 97, 228, 251, 34, 242, 193, 238, 210, 144, 12, 191, 179, 162, 241,
        81, 51, 145, 235, 249, 14, 239, 107, 49, 192, 214, 31, 181, 199, 106, 157,
        184, 84, 204, 176, 115, 121, 50, 45, 127, 4, 150, 254, 138, 236, 205, 93,
        222, 114, 67, 29, 24, 72, 243, 141, 128, 195, 78, 66, 215, 61, 156, 180,
    ],
    dtype=np.int64,
)
_P = np.concatenate([_PERMUTATION, _PERMUTATION])

# 2D gradient set selected by hash & 7
_GRAD2 = np.array(
    [[1, 1], [-1, 1], [1, -1], [-1, -1], [1, 0], [-1, 0], [0, 1], [0, -1]],
    dtype=np.float64,
)

# 3D simplex gradients: cube edge midpoints, selected by hash % 12
_GRAD3 = np.array(
    [
        [1, 1, 0], [-1, 1, 0], [1, -1, 0], [-1, -1, 0],
        [1, 0, 1], [-1, 0, 1], [1, 0, -1], [-1, 0, -1],
        [0, 1, 1], [0, -1, 1], [0, 1, -1], [0, -1, -1],
    ],
    dtype=np.float64,
)

_SIMPLEX_F2 = 0.5 * (np.sqrt(3.0) - 1.0)
_SIMPLEX_G2 = (3.0 - np.sqrt(3.0)) / 6.0
_SIMPLEX_F3 = 1.0 / 3.0
_SIMPLEX_G3 = 1.0 / 6.0

OFFSET_RANGE = 100000


def _fade(t):
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(t, a, b):
    return a + t * (b - a)


def _grad2(h, x, y):
    g = _GRAD2[h & 7]
    return g[..., 0] * x + g[..., 1] * y


def _grad3(h, x, y, z):
    h = h & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, z))
    return np.where((h & 1) == 0, u, -u) + np.where((h & 2) == 0, v, -v)


def perlin2(x, y) -> np.ndarray:
    """
    Signed 2D gradient noise, approximately in [-1, 1].

    Args:
        x: Sample x coordinates (array-like, any shape)
        y: Sample y coordinates, broadcastable against ``x``

    Returns:
        float64 array of noise values; zero at integer lattice points
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    x0 = np.floor(x)
    y0 = np.floor(y)
    xi = x0.astype(np.int64) & 255
    yi = y0.astype(np.int64) & 255
    xf = x - x0
    yf = y - y0
    u = _fade(xf)
    v = _fade(yf)

    a = _P[xi] + yi
    b = _P[xi + 1] + yi
    aa, ab = _P[a], _P[a + 1]
    ba, bb = _P[b], _P[b + 1]

    x1 = _lerp(u, _grad2(aa, xf, yf), _grad2(ba, xf - 1.0, yf))
    x2 = _lerp(u, _grad2(ab, xf, yf - 1.0), _grad2(bb, xf - 1.0, yf - 1.0))
    return _lerp(v, x1, x2)


def perlin3(x, y, z) -> np.ndarray:
    """Signed 3D improved noise, approximately in [-1, 1]."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    x0, y0, z0 = np.floor(x), np.floor(y), np.floor(z)
    xi = x0.astype(np.int64) & 255
    yi = y0.astype(np.int64) & 255
    zi = z0.astype(np.int64) & 255
    xf, yf, zf = x - x0, y - y0, z - z0
    u, v, w = _fade(xf), _fade(yf), _fade(zf)

    a = _P[xi] + yi
    aa = _P[a] + zi
    ab = _P[a + 1] + zi
    b = _P[xi + 1] + yi
    ba = _P[b] + zi
    bb = _P[b + 1] + zi

    return _lerp(
        w,
        _lerp(
            v,
            _lerp(u, _grad3(_P[aa], xf, yf, zf), _grad3(_P[ba], xf - 1, yf, zf)),
            _lerp(u, _grad3(_P[ab], xf, yf - 1, zf), _grad3(_P[bb], xf - 1, yf - 1, zf)),
        ),
        _lerp(
            v,
            _lerp(u, _grad3(_P[aa + 1], xf, yf, zf - 1), _grad3(_P[ba + 1], xf - 1, yf, zf - 1)),
            _lerp(
                u,
                _grad3(_P[ab + 1], xf, yf - 1, zf - 1),
                _grad3(_P[bb + 1], xf - 1, yf - 1, zf - 1),
            ),
        ),
    )


def perlin(coords: Sequence[np.ndarray]) -> np.ndarray:
    """Dispatch to ``perlin2`` or ``perlin3`` by the number of coordinate arrays."""
    if len(coords) == 2:
        return perlin2(*coords)
    return perlin3(*coords)


def perlin_unit(coords: Sequence[np.ndarray]) -> np.ndarray:
    """Gradient noise remapped to [0, 1]."""
    return np.clip((perlin(coords) + 1.0) * 0.5, 0.0, 1.0)


def _simplex_corner(radius, gradient, offsets):
    t = radius - sum(d * d for d in offsets)
    dot = sum(gradient[..., axis] * d for axis, d in enumerate(offsets))
    return np.where(t > 0.0, t ** 4 * dot, 0.0)


def simplex2(x, y) -> np.ndarray:
    """
    Signed 2D simplex noise, approximately in [-1, 1].

    Each sample sums the radially attenuated gradient contributions of the
    three corners of the skewed triangle containing it.
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    s = (x + y) * _SIMPLEX_F2
    i = np.floor(x + s)
    j = np.floor(y + s)
    t = (i + j) * _SIMPLEX_G2
    x0 = x - (i - t)
    y0 = y - (j - t)

    # Lower triangle when x0 > y0, upper otherwise
    i1 = (x0 > y0).astype(np.int64)
    j1 = 1 - i1

    ii = i.astype(np.int64) & 255
    jj = j.astype(np.int64) & 255
    g0 = _GRAD2[_P[ii + _P[jj]] % 8]
    g1 = _GRAD2[_P[ii + i1 + _P[jj + j1]] % 8]
    g2 = _GRAD2[_P[ii + 1 + _P[jj + 1]] % 8]

    n0 = _simplex_corner(0.5, g0, (x0, y0))
    n1 = _simplex_corner(0.5, g1, (x0 - i1 + _SIMPLEX_G2, y0 - j1 + _SIMPLEX_G2))
    n2 = _simplex_corner(
        0.5, g2, (x0 - 1.0 + 2.0 * _SIMPLEX_G2, y0 - 1.0 + 2.0 * _SIMPLEX_G2)
    )
    return 70.0 * (n0 + n1 + n2)


def simplex3(x, y, z) -> np.ndarray:
    """Signed 3D simplex noise, approximately in [-1, 1]."""
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    z = np.asarray(z, dtype=np.float64)
    s = (x + y + z) * _SIMPLEX_F3
    i, j, k = np.floor(x + s), np.floor(y + s), np.floor(z + s)
    t = (i + j + k) * _SIMPLEX_G3
    x0, y0, z0 = x - (i - t), y - (j - t), z - (k - t)

    # Second and third corners of the tetrahedron, from the coordinate ranking
    x_ge_y = x0 >= y0
    y_ge_z = y0 >= z0
    x_ge_z = x0 >= z0
    i1 = (x_ge_y & x_ge_z).astype(np.int64)
    j1 = (~x_ge_y & y_ge_z).astype(np.int64)
    k1 = (~x_ge_z & ~y_ge_z).astype(np.int64)
    i2 = (x_ge_y | x_ge_z).astype(np.int64)
    j2 = (~x_ge_y | y_ge_z).astype(np.int64)
    k2 = (~(x_ge_z & y_ge_z)).astype(np.int64)

    ii = i.astype(np.int64) & 255
    jj = j.astype(np.int64) & 255
    kk = k.astype(np.int64) & 255

    def gradient(di, dj, dk):
        return _GRAD3[_P[ii + di + _P[jj + dj + _P[kk + dk]]] % 12]

    corners = [
        (gradient(0, 0, 0), (x0, y0, z0)),
        (
            gradient(i1, j1, k1),
            (x0 - i1 + _SIMPLEX_G3, y0 - j1 + _SIMPLEX_G3, z0 - k1 + _SIMPLEX_G3),
        ),
        (
            gradient(i2, j2, k2),
            (
                x0 - i2 + 2.0 * _SIMPLEX_G3,
                y0 - j2 + 2.0 * _SIMPLEX_G3,
                z0 - k2 + 2.0 * _SIMPLEX_G3,
            ),
        ),
        (gradient(1, 1, 1), (x0 - 0.5, y0 - 0.5, z0 - 0.5)),
    ]
    return 32.0 * sum(_simplex_corner(0.6, g, d) for g, d in corners)


def simplex(coords: Sequence[np.ndarray]) -> np.ndarray:
    """Dispatch to ``simplex2`` or ``simplex3`` by the number of coordinate arrays."""
    if len(coords) == 2:
        return simplex2(*coords)
    return simplex3(*coords)


def octave_offsets(
    seed: int, octaves: int, ndim: int, offset: Sequence[float], stream: int = 0
) -> np.ndarray:
    """
    Draw one sample-space offset per octave.

    Each octave gets an integer offset in ``[-100000, 100000)`` per axis plus
    the caller's ``offset``. Offsets are drawn once per generation, never per
    sample, from the RNG sub-stream ``stream`` of ``seed``.

    Returns:
        ``(octaves, ndim)`` float64 array
    """
    rng = create_rng(seed, stream)
    draws = rng.integers(-OFFSET_RANGE, OFFSET_RANGE, size=(octaves, ndim))
    return draws.astype(np.float64) + np.asarray(offset[:ndim], dtype=np.float64)
