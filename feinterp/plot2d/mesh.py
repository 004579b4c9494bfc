# -*- coding: utf-8 -*-

"""
Tools for visualizing 2-dimensional meshes
"""

import itertools as it
import matplotlib.pyplot as plt
import numpy as np

from ..mapping import as_mapping


class PlottingError(Exception):
    pass


def new_mpl_fig():
    fig = plt.figure()
    ax = fig.gca()
    return ax


def cell_outline(cell_map, n_per_edge=8):
    """Points tracing the boundary of a 2D cell counter-clockwise, as an
    (n, 2) array."""
    s = np.linspace(-1., 1., n_per_edge + 1)[:-1]
    ones = np.ones_like(s)
    # bottom, right, top and left edges in the reference cell
    x_ref = np.concatenate([np.stack([s, -ones], axis=-1),
                            np.stack([ones, s], axis=-1),
                            np.stack([-s, ones], axis=-1),
                            np.stack([-ones, -s], axis=-1)])
    return cell_map(x_ref)


def draw_cells(mesh, mapping=1, draw_nums=False, n_per_edge=8, ax=None):
    """Plots the cells of a mesh, with curved edges drawn through the given
    mapping.
    """

    if mesh.ndim != 2:
        raise PlottingError("A 2D mesh is required")

    if ax is None:
        ax = new_mpl_fig()

    mapping = as_mapping(mapping)
    for cell in mesh.cells:
        cell_map = mapping.build(cell)
        ax.add_patch(plt.Polygon(cell_outline(cell_map, n_per_edge),
                                 fill=False))
        if draw_nums:
            x_lbl, y_lbl = cell_map(np.zeros(2))
            ax.text(x_lbl, y_lbl, str(cell.index), ha='center',
                    va='center')

    ax.axis('scaled')
    return ax


def draw_vertices(mesh, marker='.', show_indices=False, ax=None):
    """Plots the vertices of a mesh.
    """

    if mesh.ndim != 2:
        raise PlottingError("A 2D mesh is required")

    if ax is None:
        ax = new_mpl_fig()

    x, y = mesh.vertices
    ax.plot(x, y, marker)
    # Label the vertices by their index
    if show_indices:
        for i in range(mesh.n_vertices):
            ax.text(x[i], y[i], str(i))

    ax.axis('scaled')
    return ax


def sample_points(mesh, mapping, n_per_axis):
    """Physical points on an equispaced grid of reference points in each
    cell, (n_cells * n_per_axis**2, 2), with the cell of each point."""
    s = np.linspace(-1., 1., n_per_axis)
    x_ref = np.array(list(it.product(s, s)))
    points = []
    cells = []
    for cell in mesh.cells:
        points.append(mapping.build(cell)(x_ref))
        cells.append(np.full(len(x_ref), cell.index))
    return np.concatenate(points), np.concatenate(cells)
