# -*- coding: utf-8 -*-

"""Finite element descriptors on the reference cell [-1, 1]^ndim.

The element families form a closed set (see `Family`); every family supplies
the same tables to `FiniteElement`:

* a raw polynomial basis spanning the element space,
* generalized support points together with the linear functionals that turn
  samples of a (pulled back) function at those points into local DOF values,
* a description of the mesh entity every local DOF lives on.

The shape functions are the basis dual to the DOF functionals.
"""

from collections import namedtuple
import enum
import numpy as np
from scipy import linalg

from . import basis_functions
from . import geometry
from . import quadratures


class Family(enum.Enum):
    LAGRANGE = 'lagrange'
    RAVIART_THOMAS = 'raviart_thomas'


# The mesh entity a local DOF lives on: its dimension, its number among the
# sub-geometries of that dimension, the multi-index of the DOF on the grid of
# DOFs of the entity, the number of grid points per axis, the vector
# component and whether the DOF changes sign with the orientation of its face.
DofTopology = namedtuple('DofTopology',
                         ['dim', 'entity', 'index', 'n', 'component',
                          'oriented'])


_ElementTables = namedtuple('_ElementTables',
                            ['name', 'n_components', 'raw_basis',
                             'support_points', 'functionals', 'topology',
                             'piola'])


def _lagrange_tables(order, ndim, n_components):
    if order < 1:
        raise ValueError("Lagrange elements need an order of 1 or greater.")
    if n_components is None:
        n_components = 1
    basis1d = basis_functions.LagrangeGaussLobatto(order)
    basis = basis_functions.NodalTensorProduct(*(basis1d,)*ndim)
    points = basis.node_points()
    n_nodes = basis.n_coeffs
    n_local = n_components * n_nodes

    functionals = np.zeros((n_local, n_nodes, n_components))
    for c in range(n_components):
        functionals[c*n_nodes:(c+1)*n_nodes, :, c] = np.eye(n_nodes)

    def raw_basis(x_ref):
        values = basis(x_ref)
        out = np.zeros(values.shape[:-1] + (n_local, n_components))
        for c in range(n_components):
            out[..., c*n_nodes:(c+1)*n_nodes, c] = values
        return out

    # attach each node of the GLL grid to the vertex, edge, face or cell
    # interior it belongs to
    geo = geometry.ncube(ndim, order + 1)
    node_entity = [None] * n_nodes
    for dim in range(ndim + 1):
        for entity, sub_geo in enumerate(geo.sub_geometries(dim)):
            for node, sub_ix in geo.interior_nodes(sub_geo):
                node_entity[node] = (dim, entity, sub_ix)
    topology = [DofTopology(dim, entity, sub_ix, order - 1, c, False)
                for c in range(n_components)
                for dim, entity, sub_ix in node_entity]

    name = "Lagrange<{}>({})".format(ndim, order)
    if n_components > 1:
        name += "^{}".format(n_components)
    return _ElementTables(name, n_components, raw_basis, points, functionals,
                          topology, False)


def _raviart_thomas_tables(order, ndim, n_components):
    if order < 0:
        raise ValueError("Raviart-Thomas elements need an order of 0 or "
                         "greater.")
    if ndim < 2:
        raise ValueError("Raviart-Thomas elements need 2 or 3 dimensions.")
    if n_components not in (None, ndim):
        raise ValueError("Raviart-Thomas elements have {} components."
                         .format(ndim))
    k = order
    ref = geometry.ncube(ndim)

    # component d spans Q_{k+1} in x_d and Q_k in the other directions
    comp_bases = [basis_functions.TensorProduct(
        *(basis_functions.Legendre(k + 1 if e == d else k)
          for e in range(ndim))) for d in range(ndim)]
    n_raw = sum(b.n_coeffs for b in comp_bases)

    def raw_basis(x_ref):
        x_ref = np.asarray(x_ref, dtype=float)
        out = np.zeros(x_ref.shape[:-1] + (n_raw, ndim))
        i0 = 0
        for d, basis in enumerate(comp_bases):
            out[..., i0:i0 + basis.n_coeffs, d] = basis(x_ref)
            i0 += basis.n_coeffs
        return out

    # quadrature exact for the products of element functions and test
    # polynomials
    face_q, face_w = quadratures.gauss_tensor(k + 2, ndim - 1)
    cell_q, cell_w = quadratures.gauss_tensor(k + 2, ndim)
    points = np.concatenate(
        [ref.face_to_cell(face, face_q) for face in range(ref.n_faces)] +
        [cell_q])
    n_pts = len(points)

    face_test = basis_functions.TensorProduct(
        *(basis_functions.LagrangeGauss(k),)*(ndim - 1))
    face_test_vals = face_test(face_q)
    face_shape = face_test.coeff_shape

    rows = []
    topology = []
    for face in range(ref.n_faces):
        axis, side = face // 2, face % 2
        p0 = face * len(face_q)
        for j in range(face_test.n_coeffs):
            row = np.zeros((n_pts, ndim))
            row[p0:p0 + len(face_q), axis] = \
                (2.*side - 1.) * face_w * face_test_vals[:, j]
            rows.append(row)
            topology.append(DofTopology(
                ndim - 1, face, tuple(int(i) for i in
                                      np.unravel_index(j, face_shape)),
                k + 1, 0, True))

    if k > 0:
        p0 = ref.n_faces * len(face_q)
        for d in range(ndim):
            test = basis_functions.TensorProduct(
                *(basis_functions.Legendre(k - 1 if e == d else k)
                  for e in range(ndim)))
            test_vals = test(cell_q)
            for m in range(test.n_coeffs):
                row = np.zeros((n_pts, ndim))
                row[p0:, d] = cell_w * test_vals[:, m]
                rows.append(row)
                topology.append(DofTopology(ndim, 0, (d, m), 0, 0, False))

    functionals = np.array(rows)
    assert len(functionals) == n_raw == ndim * (k + 2) * (k + 1)**(ndim - 1)
    name = "RaviartThomas<{}>({})".format(ndim, k)
    return _ElementTables(name, ndim, raw_basis, points, functionals,
                          topology, True)


_TABLE_BUILDERS = {
    Family.LAGRANGE: _lagrange_tables,
    Family.RAVIART_THOMAS: _raviart_thomas_tables,
}


class FiniteElement(object):
    """A finite element of one of the families in `Family`.

    Local DOFs of Raviart-Thomas elements are numbered face by face (faces
    ``2*axis + side``), each lexicographically over the free axes of the
    face, followed by the interior DOFs.  Lagrange DOFs follow the nodes of
    the Gauss-Lobatto grid in C order, one component after the other.
    """

    @property
    def family(self):
        return self._family

    @property
    def order(self):
        return self._order

    @property
    def ndim(self):
        return self._ndim

    @property
    def n_components(self):
        return self._tables.n_components

    @property
    def n_local_dofs(self):
        return len(self._tables.topology)

    @property
    def name(self):
        return self._tables.name

    @property
    def dof_topology(self):
        """`DofTopology` of each local DOF."""
        return self._tables.topology

    @property
    def support_points(self):
        """Generalized support points on the reference cell,
        (n_points, ndim)."""
        return self._tables.support_points

    @property
    def generalized_support_points(self):
        """The support points and the functionals acting on samples there.

        Returns
        -------
        points : ndarray, shape (n_points, ndim)
        functionals : ndarray, shape (n_local_dofs, n_points, n_components)
            Local DOF ``i`` of a reference field with samples ``f`` is
            ``sum(functionals[i] * f)``.
        """
        return self._tables.support_points, self._tables.functionals

    def __init__(self, family, order, ndim, n_components=None):
        """
        Parameters
        ----------
        family : Family or str
            Element family, 'lagrange' or 'raviart_thomas'.
        order : int
            Polynomial order.
        ndim : int
            Number of dimensions of the reference cell.
        n_components : int, optional
            Number of vector components of a Lagrange element (one by
            default).  Raviart-Thomas elements always have `ndim`.
        """
        try:
            family = Family(family)
        except ValueError:
            raise ValueError("Unknown element family {!r}.".format(family))
        self._family = family
        self._order = order
        self._ndim = ndim
        self._tables = _TABLE_BUILDERS[family](order, ndim, n_components)

        # dual basis: shape function j is sum_i raw_i C[i, j]
        points, functionals = self.generalized_support_points
        node_matrix = np.einsum('ipc,pjc->ij', functionals,
                                self._tables.raw_basis(points))
        self._coeffs = linalg.inv(node_matrix)

    def basis_values(self, x_ref):
        """Shape functions on the reference cell at `x_ref` (..., ndim),
        shaped (..., n_local_dofs, n_components)."""
        raw = self._tables.raw_basis(x_ref)
        return np.einsum('...jc,ji->...ic', raw, self._coeffs)

    def basis_value(self, i, x_ref):
        """Shape function `i` on the reference cell."""
        return self.basis_values(x_ref)[..., i, :]

    def pull_back(self, cell_mapping, x_ref, values):
        """Transform physical values of a field at the images of `x_ref` to
        the reference cell."""
        values = np.asarray(values, dtype=float)
        if not self._tables.piola:
            return values
        # contravariant Piola transform, det(J) J^-1 v
        jac, det, inv = cell_mapping.det_inv_jacobian(x_ref)
        return det[..., None] * np.einsum('...ij,...j->...i', inv, values)

    def push_forward(self, cell_mapping, x_ref, ref_values):
        """Transform reference values of a field at `x_ref` to physical
        values."""
        if not self._tables.piola:
            return ref_values
        jac, det, inv = cell_mapping.det_inv_jacobian(x_ref)
        return np.einsum('...ij,...j->...i', jac, ref_values) / det[..., None]

    def dof_values_from_samples(self, ref_values):
        """Local DOF values of a reference field sampled at the support
        points, (n_points, n_components)."""
        return np.einsum('ipc,pc->i', self._tables.functionals, ref_values)

    def local_dof_values(self, function, cell_mapping):
        """Apply every local DOF functional to `function` on one cell."""
        points = self.support_points
        values = function.values(cell_mapping(points))
        return self.dof_values_from_samples(
            self.pull_back(cell_mapping, points, values))

    def local_functional(self, i, function, cell_mapping):
        """Local DOF `i` of `function` on the cell of `cell_mapping`."""
        return self.local_dof_values(function, cell_mapping)[i]

    def evaluate(self, cell_mapping, x_ref, local_coeffs):
        """Physical values of the field with local coefficients
        `local_coeffs` at reference points `x_ref` (..., ndim)."""
        ref_values = np.einsum('...ic,i->...c', self.basis_values(x_ref),
                               local_coeffs)
        return self.push_forward(cell_mapping, x_ref, ref_values)

    def __repr__(self):
        return self.name


def FE_Q(ndim, order, n_components=1):
    """Lagrange element of `order` through the Gauss-Lobatto points."""
    return FiniteElement(Family.LAGRANGE, order, ndim, n_components)


def FE_RaviartThomas(ndim, order):
    """Raviart-Thomas element of `order`."""
    return FiniteElement(Family.RAVIART_THOMAS, order, ndim)
