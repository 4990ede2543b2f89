#!/usr/bin/env python3
"""
Render every noise kind and a marching squares outline with matplotlib.
"""

import matplotlib.pyplot as plt
from py_isogen.core import extract, generate, parse_noise_parameters, texture_from_height_map


KINDS = [
    {"kind": "random", "seed": 42},
    {"kind": "perlin", "seed": 42, "octaves": 5, "scale": 30.0},
    {"kind": "turbulence", "seed": 42, "octaves": 5, "scale": 30.0},
    {"kind": "simplex", "seed": 42, "octaves": 5, "scale": 30.0},
    {"kind": "pink", "seed": 42, "octaves": 5, "scale": 30.0},
    {"kind": "cellular", "seed": 42, "cell_count_x": 8, "cell_count_y": 8},
    {"kind": "blue_noise", "seed": 42, "min_distance": 5.0},
    {"kind": "wavelet", "seed": 42, "octaves": 4, "scale": 12.0},
]


def main():
    """Show each noise kind as a grayscale texture."""
    size = 128
    fig, axes = plt.subplots(3, 3, figsize=(12, 12))
    axes = axes.ravel()

    for ax, entry in zip(axes, KINDS):
        grid = generate(parse_noise_parameters(entry), size, size)
        ax.imshow(texture_from_height_map(grid), origin="lower")
        ax.set_title(entry["kind"])
        ax.axis("off")

    # Above-threshold region of the Perlin field
    grid = generate(parse_noise_parameters(KINDS[1]), size, size)
    mesh = extract(grid, 0.5, fill_interior=True)
    ax = axes[len(KINDS)]
    ax.triplot(mesh.vertices[:, 0], mesh.vertices[:, 1], mesh.triangles, linewidth=0.2)
    ax.set_aspect("equal")
    ax.set_title(f"marching squares ({mesh.triangle_count} triangles)")

    plt.tight_layout()
    plt.savefig("noise_kinds.png", dpi=120)
    print("Saved noise_kinds.png")


if __name__ == "__main__":
    main()
