# -*- coding: utf-8 -*-

"""
Checks that interpolation is a projection: interpolating the field obtained
by a first interpolation reproduces the coefficients of that field.
"""

from collections import namedtuple
import logging
import numpy as np

from . import discrete
from .fe_field import FieldEvaluator
from .functions import PolynomialField
from .interpolation import interpolate
from .mapping import as_mapping

logger = logging.getLogger(__name__)


class ProjectionReport(namedtuple('ProjectionReport',
                                  ['element_name', 'ndim', 'residual'])):

    def summary(self):
        return ("dim {} {}\nCheck projection property: {:.6g}"
                .format(self.ndim, self.element_name, self.residual))


def check_projection(mapping, dof_handler, function, **settings):
    """Interpolate `function`, interpolate the resulting field once more and
    return the maximum difference between the two coefficient arrays."""
    mapping = as_mapping(mapping, **settings)
    c1 = interpolate(mapping, dof_handler, function, **settings)
    field = FieldEvaluator(dof_handler, c1, mapping, **settings)
    c2 = interpolate(mapping, dof_handler, field, **settings)
    return float(np.abs(c2 - c1).max())


def run_projection_case(ndim, element, function, mapping_order,
                        distort_mesh=False, refinements=None, seed=0,
                        **settings):
    """Check the projection property on a refined cube.

    The mesh is the cube ``[-0.3, 0.7]**ndim`` refined twice in 2D and once
    in 3D (unless `refinements` says otherwise), with vertices optionally
    moved at random by 3% of the local edge length.

    Parameters
    ----------
    ndim : int
    element : FiniteElement
    function : Function or int
        The function to interpolate, or the degree `q` of a
        `PolynomialField` with the element's number of components.
    mapping_order : int
    distort_mesh : bool, optional
    refinements : int, optional
    seed : int, optional
        Seed of the random distortion.

    Returns
    -------
    ProjectionReport
    """
    if isinstance(function, (int, np.integer)):
        function = PolynomialField(ndim, function, element.n_components)
    if refinements is None:
        refinements = 2 if ndim == 2 else 1

    mesh = discrete.build_hypercube(ndim, -0.3, 0.7)
    mesh.refine_global(refinements)
    if distort_mesh:
        mesh.distort_random(0.03, seed=seed)
    dof_handler = discrete.distribute(mesh, element)

    residual = check_projection(mapping_order, dof_handler, function,
                                **settings)
    report = ProjectionReport(element.name, ndim, residual)
    logger.info("%s", report.summary())
    return report
