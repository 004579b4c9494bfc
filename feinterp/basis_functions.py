# -*- coding: utf-8 -*-

"""Polynomial bases on the reference interval [-1, 1] and their tensor
products on the reference cell [-1, 1]^ndim.

The nodal bases are the shape functions of the Lagrange elements and of the
cell mappings; the Legendre basis is the raw (modal) basis from which the
Raviart-Thomas shape functions are built.
"""


import numpy as np
from numpy.polynomial import legendre as npleg
import h5py

from . import quadratures


class _Basis(object):
    """Behaviour shared by every basis: evaluation of an expansion."""

    def interpolate(self, coeffs, x):
        """Evaluate the expansion with coefficients `coeffs` at `x`.

        Parameters
        ----------
        coeffs : numpy.ndarray
            Expansion coefficients, one per basis function along the last
            axis.  Leading axes (vector components, say) are kept.
        x : numpy.ndarray
            Evaluation points.

        Returns
        -------
        numpy.ndarray
            Shaped ``coeffs.shape[:-1]`` followed by the shape of the points.
        """
        if coeffs.shape[-1] != self.n_coeffs:
            raise ValueError("{} needs {} coefficients, got {}."
                             .format(self, self.n_coeffs, coeffs.shape[-1]))
        values = self(x)
        n_lead = values.ndim - 1
        return np.moveaxis(np.tensordot(values, coeffs, axes=(-1, -1)),
                           list(range(n_lead)), list(range(-n_lead, 0)))


class _Nodal(object):
    """Mixin of bases whose functions are interpolatory at `nodes`."""

    @property
    def nodes(self):
        return self._nodes

    @property
    def n_nodes(self):
        return self._nodes.size

    @property
    def n_coeffs(self):
        return self._nodes.size


class _QuadSupported(object):
    """Mixin of nodal bases whose nodes carry the weights of a quadrature
    rule."""

    @property
    def quad_rule(self):
        return self._quad_rule

    def __init__(self, quad_wts):
        self._quad_rule = quadratures.Quadrature1D(self._nodes, quad_wts)

    def integrate(self, coeffs):
        """Integral over [-1, 1] of the expansion with nodal values
        `coeffs`."""
        return self._quad_rule.integrate(coeffs)


class _Basis1D(_Basis):
    """Base of the bases on the interval."""

    @property
    def ndim(self):
        return 1

    @property
    def coeff_shape(self):
        return (self.n_coeffs,)

    def deriv_values(self, x):
        """Derivatives of each basis function at the points `x`."""
        raise NotImplementedError()


class BarycentricLagrange(_Basis1D, _Nodal):
    """Lagrange polynomials through arbitrary distinct nodes, evaluated with
    the second (true) barycentric formula.
    """

    @property
    def deg(self):
        return self._nodes.size - 1

    @property
    def bary_wts(self):
        return self._bary_wts

    @property
    def D1(self):
        r"""Differentiation matrix, :math:`D^{(1)}_{ij} = p'_j(x_i)`.

        Nodal values :math:`c` of a polynomial map to nodal values
        :math:`D^{(1)} c` of its derivative.
        """
        return self._D1

    def __init__(self, nodes, bary_wts=None):
        """
        Parameters
        ----------
        nodes : ndarray
            Distinct nodes on [-1, 1].
        bary_wts : ndarray, optional
            Barycentric weights of the nodes, if known more accurately than
            they can be computed here.
        """
        nodes = np.asarray(nodes, dtype=float)
        if bary_wts is None:
            bary_wts = self._compute_bary_wts(nodes)
        self._nodes = nodes
        self._bary_wts = np.asarray(bary_wts, dtype=float)

        # off-diagonal entries w_j / (w_i (x_i - x_j)); each row sums to zero
        with np.errstate(divide='ignore', invalid='ignore'):
            D1 = (self._bary_wts[None, :] / self._bary_wts[:, None] /
                  (nodes[:, None] - nodes[None, :]))
        np.fill_diagonal(D1, 0.)
        np.fill_diagonal(D1, -D1.sum(axis=1))
        self._D1 = D1

    @staticmethod
    def _compute_bary_wts(nodes):
        diff = nodes[:, None] - nodes[None, :]
        np.fill_diagonal(diff, 1.)
        wts = 1. / np.prod(diff, axis=1)
        return wts / np.abs(wts).max()

    def __call__(self, x):
        """
        Values of the Lagrange polynomials at `x`.

        Returns
        -------
        numpy.ndarray
            Shaped ``x.shape + (n_nodes,)``, with ``B[..., j] = p_j(x)``.
        """
        x = np.asarray(x, dtype=float)
        with np.errstate(divide='ignore', invalid='ignore'):
            kern = self._bary_wts / (x[..., None] - self._nodes)
            result = kern / kern.sum(axis=-1)[..., None]

        # the formula breaks down exactly at the nodes
        on_node = np.isinf(kern)
        hit = on_node.any(axis=-1)
        if hit.any():
            result[hit] = on_node[hit]
        return result

    def deriv_values(self, x):
        """Derivatives of the Lagrange polynomials at `x`, shaped like the
        values."""
        return np.dot(self(x), self._D1)

    def __repr__(self):
        return "{}(deg={})".format(self.__class__.__name__, self.deg)


class LagrangeGaussLobatto(BarycentricLagrange, _QuadSupported):
    """Lagrange polynomials through the Gauss-Legendre-Lobatto points, which
    include both end points of the interval.
    """

    def __init__(self, order, data_file=None):
        """
        Parameters
        ----------
        order : int
            Polynomial order (>= 1).
        data_file : str, optional
            HDF5 tables written by `feinterp.basis_data.write_data`.  Without
            one, nodes and weights are computed in double precision.
        """
        if order < 1:
            raise ValueError("Gauss-Lobatto bases need an order of 1 or "
                             "greater.")
        if data_file is None:
            rule = quadratures.GaussLobatto(order + 1)
            nodes, bary_wts, quad_wts = rule.abscissa, None, rule.weights
        else:
            nodes, bary_wts, quad_wts = self._load(data_file, order)
        BarycentricLagrange.__init__(self, nodes, bary_wts)
        _QuadSupported.__init__(self, quad_wts)

    @staticmethod
    def _load(data_file, order):
        with h5py.File(data_file, 'r') as dataf:
            group = dataf["GaussLegendreLobatto"]
            max_order = group.attrs["max_order"]
            if order > max_order:
                raise NotImplementedError(
                    "{} holds tables up to order {} only."
                    .format(data_file, max_order))
            half_nodes, half_bary, half_quad = group[str(order)][:]

        # the tables hold the non-negative nodes; mirror them, leaving out
        # the node at zero of even orders
        n_mirror = order // 2 + order % 2
        parity = -1. if order % 2 else 1.
        nodes = np.concatenate([-half_nodes[::-1][:n_mirror], half_nodes])
        bary_wts = np.concatenate([parity * half_bary[::-1][:n_mirror],
                                   half_bary])
        quad_wts = np.concatenate([half_quad[::-1][:n_mirror], half_quad])
        return nodes, bary_wts, quad_wts


class LagrangeGauss(BarycentricLagrange, _QuadSupported):
    """Lagrange polynomials through the Gauss-Legendre points (all interior
    to the interval).  These are the test functions of the face moments of
    Raviart-Thomas elements.
    """

    def __init__(self, order):
        if order < 0:
            raise ValueError("Gauss bases need an order of 0 or greater.")
        rule = quadratures.GaussLegendre(order + 1)
        BarycentricLagrange.__init__(self, rule.abscissa)
        _QuadSupported.__init__(self, rule.weights)


class Legendre(_Basis1D):
    """The Legendre polynomials :math:`P_0, \\dots, P_{deg}`."""

    @property
    def deg(self):
        return self._deg

    @property
    def n_coeffs(self):
        return self._deg + 1

    def __init__(self, deg):
        if deg < 0:
            raise ValueError("Legendre bases need a degree of 0 or greater.")
        self._deg = deg
        # column j holds the Legendre coefficients of P_j'
        dmat = np.zeros((deg + 1, deg + 1))
        for j in range(1, deg + 1):
            dcoef = npleg.legder(np.eye(deg + 1)[j])
            dmat[:dcoef.size, j] = dcoef
        self._dmat = dmat

    def __call__(self, x):
        return npleg.legvander(np.asarray(x, dtype=float), self._deg)

    def deriv_values(self, x):
        return np.dot(self(x), self._dmat)

    def __repr__(self):
        return "{}(deg={})".format(self.__class__.__name__, self.deg)


class TensorProduct(_Basis):
    """Products of one basis function from each of `ndim` interval bases.

    Basis functions are numbered in C order of their one-dimensional indices
    (the first dimension varies slowest).
    """

    @property
    def ndim(self):
        return len(self._subbases)

    @property
    def coeff_shape(self):
        return tuple(basis.n_coeffs for basis in self._subbases)

    @property
    def n_coeffs(self):
        return int(np.prod(self.coeff_shape))

    @property
    def subbases(self):
        return self._subbases

    def __init__(self, *subbases):
        """
        Parameters
        ----------
        subbases : _Basis1D
            One basis on the interval per dimension.
        """
        if not subbases:
            raise ValueError("A tensor product needs at least one factor.")
        if not all(isinstance(basis, _Basis1D) for basis in subbases):
            raise ValueError("Tensor products are formed from bases on the "
                             "interval only.")
        self._subbases = subbases

    def _check_points(self, x):
        x = np.asarray(x, dtype=float)
        if x.shape[-1] != self.ndim:
            raise ValueError("{}D basis evaluated at {}D points."
                             .format(self.ndim, x.shape[-1]))
        return x

    @staticmethod
    def _outer(factors):
        out = factors[0]
        for fac in factors[1:]:
            out = (out[..., :, None] * fac[..., None, :]).reshape(
                out.shape[:-1] + (-1,))
        return out

    def __call__(self, x):
        """
        Values of the basis at points `x` (coordinates on the last axis),
        shaped ``x.shape[:-1] + (n_coeffs,)``.
        """
        x = self._check_points(x)
        return self._outer([basis(x[..., d])
                            for d, basis in enumerate(self._subbases)])

    def gradient(self, x):
        """Gradient of each basis function at points `x`, shaped
        ``x.shape[:-1] + (ndim, n_coeffs)``."""
        x = self._check_points(x)
        values = [basis(x[..., d]) for d, basis in enumerate(self._subbases)]
        derivs = [basis.deriv_values(x[..., d])
                  for d, basis in enumerate(self._subbases)]
        grad = np.empty(x.shape[:-1] + (self.ndim, self.n_coeffs))
        for e in range(self.ndim):
            grad[..., e, :] = self._outer(
                [derivs[d] if d == e else values[d]
                 for d in range(self.ndim)])
        return grad

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__,
                               ", ".join(repr(b) for b in self._subbases))

    def __str__(self):
        return ("<{}D Basis> with basis functions:\n".format(self.ndim) +
                "\n".join("[dim {}]: {!s}".format(i, basis)
                          for i, basis in enumerate(self._subbases)))


class NodalTensorProduct(TensorProduct):
    """Tensor product of nodal interval bases, interpolatory at the tensor
    grid of their nodes."""

    @property
    def nodes(self):
        return tuple(sb.nodes for sb in self._subbases)

    def __init__(self, *subbases):
        if not all(isinstance(sb, _Nodal) for sb in subbases):
            raise ValueError("Nodal tensor products need nodal factors.")
        TensorProduct.__init__(self, *subbases)

    def node_points(self):
        """Nodes of the basis as an (n_coeffs, ndim) array in basis order."""
        grid = np.meshgrid(*self.nodes, indexing='ij')
        return np.stack([g.ravel() for g in grid], axis=-1)
