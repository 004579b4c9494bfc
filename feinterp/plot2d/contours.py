#!/usr/bin/env python
# -*- coding: utf-8 -*-

import numpy as np
from . import mesh as meshplt2d


def sample_field(field, n_per_axis=5):
    """Values of a `FieldEvaluator` on a grid of points in every cell.  Each
    point is reconstructed from the cell it was generated in."""
    mesh = field.dof_handler.mesh
    if mesh.ndim != 2:
        raise meshplt2d.PlottingError("A 2D mesh is required")
    points, cells = meshplt2d.sample_points(mesh, field.mapping, n_per_axis)
    values = np.array([field.value_in_cell(p, c)
                       for p, c in zip(points, cells)])
    return points, values


def tricontourf(field, component=0, n_per_axis=5, ax=None, **kwargs):
    if ax is None:
        ax = meshplt2d.new_mpl_fig()
    points, values = sample_field(field, n_per_axis)
    # points on cell boundaries are sampled once per cell
    _, unique = np.unique(np.round(points, 12), axis=0, return_index=True)
    points = points[unique]
    values = values[unique]
    x, y = points.T
    return ax.tricontourf(x, y, values[:, component], **kwargs)


def quiver(field, n_per_axis=3, ax=None, **kwargs):
    if ax is None:
        ax = meshplt2d.new_mpl_fig()
    if field.n_components != 2:
        raise meshplt2d.PlottingError("A 2-component field is required")
    points, values = sample_field(field, n_per_axis)
    x, y = points.T
    u, v = values.T
    return ax.quiver(x, y, u, v, **kwargs)
