# -*- coding: utf-8 -*-

"""
Evaluation of a finite element field at arbitrary physical points.
"""

import logging
import numpy as np
from scipy import linalg

from . import settings as settings_mod
from .functions import Function
from .mapping import as_mapping, InverseMapDidNotConverge, OutsideDomain

logger = logging.getLogger(__name__)


class PointOutsideDomain(OutsideDomain):
    """Exception to be raised if a given physical point is outside the domain
    of a finite element mesh.
    """
    pass


class FieldEvaluator(Function):
    """A finite element field, given by its coefficients, that can be
    evaluated at any point of the mesh.

    A point is located by trying the cell of the previous hit first and then
    the cells whose (enlarged) bounding boxes hold the point, nearest centroid
    first.  The point is mapped back to the reference cell of the first cell
    that accepts it and the field is reconstructed there from the cell's
    signed local coefficients.
    """

    @property
    def dof_handler(self):
        return self._dof_handler

    @property
    def coefficients(self):
        return self._coeffs

    @property
    def mapping(self):
        return self._mapping

    def __init__(self, dof_handler, coefficients, mapping, **settings):
        """
        Parameters
        ----------
        dof_handler : DOFHandler
            Handler on which an element has been distributed.
        coefficients : array-like
            One coefficient per global DOF.
        mapping : MappingQ or int
            The geometric mapping, or its order.
        **settings
            Overrides of `feinterp.settings.defaults`.
        """
        element = dof_handler.element
        if element is None:
            raise ValueError("No element has been distributed on the DOF "
                             "handler.")
        coefficients = np.asarray(coefficients, dtype=float)
        if coefficients.shape != (dof_handler.n_dofs,):
            raise ValueError("Expected {} coefficients, got an array of "
                             "shape {}.".format(dof_handler.n_dofs,
                                                coefficients.shape))
        Function.__init__(self, element.n_components)
        self._dof_handler = dof_handler
        self._element = element
        self._coeffs = coefficients
        self._settings = settings_mod.resolve(**settings)
        self._mapping = as_mapping(mapping, **settings)
        self._hint = None
        self._init_search()

    def _init_search(self):
        mesh = self._dof_handler.mesh
        inflation = self._settings['bbox_inflation']
        n_cells = mesh.n_cells
        self._centroids = np.empty((n_cells, mesh.ndim))
        self._lo = np.empty((n_cells, mesh.ndim))
        self._hi = np.empty((n_cells, mesh.ndim))
        for cell in mesh.cells:
            cell_map = self._mapping.build(cell)
            lo, hi = cell_map.bounding_box()
            pad = inflation * linalg.norm(hi - lo)
            self._lo[cell.index] = lo - pad
            self._hi[cell.index] = hi + pad
            self._centroids[cell.index] = cell_map(np.zeros(mesh.ndim))
        self._global_lo = self._lo.min(axis=0)
        self._global_hi = self._hi.max(axis=0)

    def _candidates(self, point):
        in_box = np.flatnonzero(np.all((self._lo <= point) &
                                       (point <= self._hi), axis=1))
        dist = linalg.norm(self._centroids[in_box] - point, axis=1)
        order = [int(c) for c in in_box[np.argsort(dist, kind='stable')]]
        if self._hint is not None and self._hint in order:
            order.remove(self._hint)
            order.insert(0, self._hint)
        return order

    def find_cell(self, point):
        """Find the cell containing the physical point.

        Returns
        -------
        cell : int
        x_ref : ndarray
            Reference coordinates of the point within the cell.

        Raises
        ------
        PointOutsideDomain
            If no cell contains the point.
        InverseMapDidNotConverge
            If no cell was found and Newton iteration failed on a cell whose
            bounding box holds the point.
        """
        point = np.asarray(point, dtype=float).reshape(-1)
        if (np.any(point < self._global_lo) or
                np.any(point > self._global_hi)):
            raise PointOutsideDomain("Point {} is outside the bounding box "
                                     "of the mesh.".format(point))
        mesh = self._dof_handler.mesh
        tol = self._settings['location_tol']
        failure = None
        for c in self._candidates(point):
            cell_map = self._mapping.build(mesh.get_cell(c))
            try:
                x_ref = cell_map.inverse_transform(point)
            except InverseMapDidNotConverge as err:
                failure = err
                continue
            if cell_map.contains(x_ref, tol):
                self._hint = c
                return c, x_ref
        if failure is not None:
            raise failure
        raise PointOutsideDomain("Point {} appears outside the domain of the "
                                 "mesh.".format(point))

    def _local_coeffs(self, c):
        dof_handler = self._dof_handler
        return self._coeffs[dof_handler.cell_dofs(c)] * \
            dof_handler.cell_signs(c)

    def _reconstruct(self, c, cell_map, x_ref):
        return self._element.evaluate(cell_map, x_ref[None, :],
                                      self._local_coeffs(c))[0]

    def value(self, point):
        """Value of the field at a physical point."""
        c, x_ref = self.find_cell(point)
        cell_map = self._mapping.build(self._dof_handler.mesh.get_cell(c))
        return self._reconstruct(c, cell_map, x_ref)

    evaluate = value

    def values(self, points):
        points = np.asarray(points, dtype=float)
        out = np.empty((len(points), self.n_components))
        for i, point in enumerate(points):
            out[i] = self.value(point)
        return out

    def value_in_cell(self, point, cell):
        """Value of the field at `point` reconstructed from the coefficients
        of `cell`, whether or not the cell contains the point."""
        c = getattr(cell, 'index', cell)
        cell_map = self._mapping.build(self._dof_handler.mesh.get_cell(c))
        x_ref = cell_map.inverse_transform(point)
        return self._reconstruct(c, cell_map, x_ref)

    def normal_flux_jump(self, face, x_face):
        """Jump of the normal component of the field across an interior face.

        Parameters
        ----------
        face : int
            Global face index.
        x_face : array-like
            Point on the face in reference coordinates of the owner's face
            (``ndim - 1`` values).

        Returns
        -------
        float
            Normal flux seen from the owner minus that seen from the
            neighbour, with the owner's outward normal.
        """
        mesh = self._dof_handler.mesh
        owner, neighbor = mesh.face_cells[face]
        if neighbor < 0:
            raise ValueError("Face {} is on the boundary.".format(face))
        local_face = mesh.face_local_index(owner, face)
        cell_map = self._mapping.build(mesh.get_cell(owner))
        x_ref = mesh.reference_cell.face_to_cell(local_face, x_face)[0]
        point = cell_map(x_ref)
        normal = cell_map.normal(local_face, x_ref)
        jump = (self._reconstruct(owner, cell_map, x_ref) -
                self.value_in_cell(point, neighbor))
        return float(np.dot(jump, normal))

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__, self._element.name)
