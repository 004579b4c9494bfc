#! /usr/bin/env python

'''
Classes mapping concrete cells to the reference cell [-1, 1]^ndim.
'''

import logging
import numpy as np

from . import basis_functions
from . import geometry
from . import quadratures
from . import settings as settings_mod
from .discrete import DegenerateGeometry
from .linalg import det_inv
from .rootfind import newton, SolverFailure

logger = logging.getLogger(__name__)


class OutsideDomain(Exception):
    """Exception to be raised if a given physical point is outside the domain
    of a finite element mapping object.
    """
    pass


class InverseMapDidNotConverge(SolverFailure):
    """Raised when Newton iteration fails to recover the reference
    coordinates of a physical point."""
    pass


class MappingQ(object):
    """Isoparametric polynomial mapping of a given order.

    The support points of the mapping of a cell are the tensor grid of
    Gauss-Lobatto points of the reference cell, placed in physical space by
    the multilinear map through the cell's vertices followed by the warp of
    the mesh (if any).  With a warp, mappings of order two or more describe
    curved cells.
    """

    @property
    def order(self):
        return self._order

    @property
    def key(self):
        """Hashable identity of the mapping, used for caching."""
        return ('MappingQ', self._order,
                tuple(sorted(self._settings.items())))

    def __init__(self, order=1, **settings):
        """
        Parameters
        ----------
        order : int
            Polynomial order of the mapping (>= 1).
        **settings
            Overrides of `feinterp.settings.defaults`.
        """
        if order < 1:
            raise ValueError("Mapping order must be 1 or greater.")
        self._order = order
        self._settings = settings_mod.resolve(**settings)
        self._bases = {}

    def basis(self, ndim):
        """Tensor-product Lagrange basis of the mapping in `ndim`
        dimensions."""
        try:
            return self._bases[ndim]
        except KeyError:
            basis1d = basis_functions.LagrangeGaussLobatto(self._order)
            basis = basis_functions.NodalTensorProduct(*(basis1d,)*ndim)
            self._bases[ndim] = basis
            return basis

    def support_points(self, cell):
        """Physical support points of the mapping of `cell`,
        (n_support, ndim)."""
        ndim = cell.ndim
        vertex_basis = basis_functions.NodalTensorProduct(
            *(basis_functions.LagrangeGaussLobatto(1),)*ndim)
        x_ref = self.basis(ndim).node_points()
        flat_pts = np.dot(vertex_basis(x_ref), cell.flat_vertices)
        return cell.mesh.apply_warp(flat_pts)

    def build(self, cell):
        """Return the (cached) `CellMapping` of `cell`."""
        mesh = cell.mesh
        return mesh.cached_mapping(
            (self.key, cell.index),
            lambda: CellMapping(self.basis(cell.ndim),
                                self.support_points(cell),
                                cell_index=cell.index, **self._settings))

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__, self._order)


def as_mapping(mapping, **settings):
    """Accept either a mapping object or a mapping order."""
    if isinstance(mapping, (int, np.integer)):
        return MappingQ(int(mapping), **settings)
    return mapping


class CellMapping(object):
    """Maps the reference coordinates of one cell to (and from) the physical
    coordinates.

    Represents the mapping :math:`\\Phi: [-1, 1]^n \\to R^n` from reference
    space to physical space of a cell, interpolated through physical support
    points with a Lagrange basis.
    """

    @property
    def ndim(self):
        return self._basis.ndim

    @property
    def x_phys(self):
        """Physical support points, (n_support, ndim)."""
        return self._x_phys

    @property
    def cell_index(self):
        return self._cell_index

    def __init__(self, basis, x_phys, cell_index=None, **settings):
        self._basis = basis
        self._x_phys = np.asarray(x_phys, dtype=float)
        self._cell_index = cell_index
        self._settings = settings_mod.resolve(**settings)
        self._check_jacobian()
        # initial guess of the inverse map from the linearization about the
        # centre of the cell
        centre = np.zeros(self.ndim)
        self._centre = self(centre)
        self._inv_jac_centre = self.inverse_jacobian(centre)

    def _check_jacobian(self):
        x_ref = [self._basis.node_points(),
                 quadratures.gauss_tensor(self._basis.coeff_shape[0],
                                          self.ndim)[0]]
        det = self.det_jacobian(np.concatenate(x_ref))
        scale = np.abs(det).mean()
        if not np.all(det > self._settings['det_rtol'] * scale):
            raise DegenerateGeometry(
                "Jacobian determinant of cell {} ranges from {:g} to {:g}."
                .format(self._cell_index, det.min(), det.max()))

    def __call__(self, x_ref):
        """Map reference coordinates (..., ndim) to physical coordinates."""
        return np.dot(self._basis(x_ref), self._x_phys)

    def jacobian(self, x_ref):
        """Jacobian matrices, ``J[..., i, j] = d x_i / d xhat_j``."""
        grad = self._basis.gradient(x_ref)
        return np.einsum('...jk,ki->...ij', grad, self._x_phys)

    def det_jacobian(self, x_ref):
        return det_inv(self.jacobian(x_ref))[0]

    def inverse_jacobian(self, x_ref):
        return det_inv(self.jacobian(x_ref))[1]

    def det_inv_jacobian(self, x_ref):
        """Jacobian matrices together with their determinants and
        inverses."""
        jac = self.jacobian(x_ref)
        det, inv = det_inv(jac)
        return jac, det, inv

    def contains(self, x_ref, tol=0.):
        """Whether reference coordinates lie in the reference cell."""
        return bool(np.all(np.abs(x_ref) <= 1. + tol))

    def inverse_transform(self, x_phys, x_ref_guess=None):
        """Map a physical point to reference coordinates, which may lie
        outside the reference cell.

        Raises
        ------
        InverseMapDidNotConverge
        """
        x_phys = np.asarray(x_phys, dtype=float).reshape(self.ndim)
        if x_ref_guess is None:
            x_ref_guess = np.dot(self._inv_jac_centre, x_phys - self._centre)

        def delta_x_phys(x_ref):
            return self(x_ref) - x_phys

        try:
            x_ref, _ = newton(delta_x_phys, x_ref_guess, self.jacobian,
                              it_max=self._settings['newton_it_max'],
                              tol=self._settings['newton_tol'])
        except SolverFailure as err:
            logger.debug("Inverse map of cell %s failed at %s",
                         self._cell_index, x_phys)
            raise InverseMapDidNotConverge(
                "Could not invert the mapping of cell {} at {}: {}"
                .format(self._cell_index, x_phys, err))
        return x_ref

    def inv(self, x_phys, x_ref_guess=None):
        """Map physical coordinates to reference coordinates.

        Parameters
        ----------
        x_phys : array_like
            Physical coordinates
        x_ref_guess : array_like
            Guess for local elemental computational coordinate.

        Raises
        ------
        OutsideDomain
            If the point is not in the cell.
        """
        x_ref = self.inverse_transform(x_phys, x_ref_guess)
        # Make sure the point is within the element
        if self.contains(x_ref, self._settings['location_tol']):
            return x_ref
        raise OutsideDomain("Given physical point is not in the reference "
                            "domain of the cell.")

    def normal(self, face, x_ref):
        """Physical outward unit normal on local face `face` at reference
        points `x_ref` (..., ndim) lying on that face."""
        inv = self.inverse_jacobian(x_ref)
        ref_normal = geometry.ncube(self.ndim).face_normal(face)
        # covariant transformation of the reference normal, J^-T n
        normal = np.einsum('...ji,j->...i', inv, ref_normal)
        return normal / np.linalg.norm(normal, axis=-1)[..., None]

    def bounding_box(self):
        return self._x_phys.min(axis=0), self._x_phys.max(axis=0)

    def __repr__(self):
        return "{}(cell={})".format(self.__class__.__name__,
                                    self._cell_index)
