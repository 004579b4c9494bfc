# -*- coding: utf-8 -*-

"""
Interpolation of functions onto the finite element space of a DOF handler.
"""

import logging
import numpy as np

from . import settings as settings_mod
from .mapping import as_mapping

logger = logging.getLogger(__name__)


class ComponentMismatch(ValueError):
    """The number of components of a function does not match the element."""
    pass


class InconsistentSharedDof(Exception):
    """Cells sharing a DOF computed different values for it."""
    pass


def _sample(function, points, n_components):
    values = np.asarray(function.values(points), dtype=float)
    if values.shape != (len(points), n_components):
        raise ComponentMismatch(
            "Function returned values of shape {} at {} points; {} "
            "components were expected.".format(values.shape, len(points),
                                               n_components))
    return values


def local_values(mapping, dof_handler, function):
    """Signed local DOF values of `function` on every cell, shaped
    (n_cells, n_local_dofs)."""
    element = dof_handler.element
    mesh = dof_handler.mesh
    points = element.support_points
    local = np.empty((mesh.n_cells, element.n_local_dofs))
    for cell in mesh.cells:
        cell_map = mapping.build(cell)
        values = _sample(function, cell_map(points), element.n_components)
        local[cell.index] = element.dof_values_from_samples(
            element.pull_back(cell_map, points, values))
    return local * dof_handler.signs


def check_shared_dofs(dof_handler, local, rtol):
    """Raise `InconsistentSharedDof` if cells disagree on a shared DOF by
    more than `rtol` relative to the largest DOF value (or one)."""
    idx = dof_handler.dof_indices.ravel()
    vals = local.ravel()
    hi = np.full(dof_handler.n_dofs, -np.inf)
    lo = np.full(dof_handler.n_dofs, np.inf)
    np.maximum.at(hi, idx, vals)
    np.minimum.at(lo, idx, vals)
    spread = hi - lo
    scale = max(1., np.abs(vals).max()) if vals.size else 1.
    bad = np.flatnonzero(spread > rtol * scale)
    if bad.size:
        raise InconsistentSharedDof(
            "{} shared DOFs disagree between cells; DOF {} by {:g}."
            .format(bad.size, bad[0], spread[bad[0]]))


def interpolate(mapping, dof_handler, function, check_consistency=False,
                **settings):
    """Interpolate a function onto the space of the DOF handler's element.

    Every local DOF functional of every cell is applied to `function`, pulled
    back to the reference cell by the cell's mapping, corrected by the
    orientation sign and written to its global DOF.  All cells touching a
    shared DOF produce the same value, so the order of writing is
    immaterial.

    Parameters
    ----------
    mapping : MappingQ or int
        The geometric mapping, or its order.
    dof_handler : DOFHandler
        Handler on which an element has been distributed.
    function : Function
        Function with as many components as the element.
    check_consistency : bool, optional
        Compare the values all cells compute for each shared DOF.
    **settings
        Overrides of `feinterp.settings.defaults`.

    Returns
    -------
    numpy.ndarray
        Coefficients of the interpolant, one per global DOF.

    Raises
    ------
    ComponentMismatch
        If the components of `function` do not fit the element.  Nothing is
        computed in that case.
    InconsistentSharedDof
        With `check_consistency`, if cells disagree on a shared DOF.
    """
    cfg = settings_mod.resolve(**settings)
    mapping = as_mapping(mapping, **settings)
    element = dof_handler.element
    if element is None:
        raise ValueError("No element has been distributed on the DOF "
                         "handler.")
    n_comp = getattr(function, 'n_components', None)
    if n_comp != element.n_components:
        raise ComponentMismatch(
            "{} has {} components but {} has {}.".format(
                function, n_comp, element.name, element.n_components))

    # all local values are computed before anything is written
    local = local_values(mapping, dof_handler, function)
    if check_consistency:
        check_shared_dofs(dof_handler, local, cfg['shared_dof_rtol'])

    coeffs = np.zeros(dof_handler.n_dofs)
    coeffs[dof_handler.dof_indices] = local
    logger.debug("Interpolated %s onto %d DOFs of %s", function,
                 dof_handler.n_dofs, element.name)
    return coeffs
