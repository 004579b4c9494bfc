# -*- coding: utf-8 -*-
"""
Numerical quadrature on [-1, 1] and on tensor products of that interval.

The Raviart-Thomas moments and the Jacobian checks of the cell mappings are
all evaluated with the rules defined here.
"""


import itertools as it
import numpy as np
from numpy.polynomial.legendre import Legendre, leggauss


def _check_n_points(n, n_min):
    int_n = int(n)
    if int_n != n or int_n < n_min:
        raise ValueError("A rule of {} points needs an integer of {} or "
                         "more.".format(n, n_min))
    return int_n


class Quadrature1D(object):
    """A quadrature rule on [-1, 1] given by its points and weights.

    Calling the rule integrates either a callable of one variable or the
    values of a function at `abscissa`.
    """

    @property
    def ndim(self):
        return 1

    @property
    def n_points(self):
        return len(self._abscissa)

    @property
    def abscissa(self):
        return self._abscissa

    @property
    def weights(self):
        return self._weights

    def __init__(self, abscissa, weights):
        self._abscissa = np.asarray(abscissa, dtype=float)
        self._weights = np.asarray(weights, dtype=float)

    def __call__(self, f):
        if callable(f):
            f = f(self._abscissa)
        return self.integrate(np.asarray(f, dtype=float))

    def integrate(self, values):
        """Integrate values sampled at the quadrature points.  The first axis
        of `values` runs over the points; any further axes are kept."""
        if values.shape[0] != self.n_points:
            raise ValueError("Expected values at {} points, got {}."
                             .format(self.n_points, values.shape[0]))
        return np.tensordot(self._weights, values, axes=(0, 0))

    def __repr__(self):
        return "{}(n={})".format(self.__class__.__name__, self.n_points)


class GaussLegendre(Quadrature1D):
    """`n`-point Gauss-Legendre rule, exact up to degree ``2n - 1``.  All
    points are interior to the interval."""

    @property
    def deg(self):
        return 2*self.n_points - 1

    def __init__(self, n):
        x, wt = leggauss(_check_n_points(n, 1))
        Quadrature1D.__init__(self, x, wt)


class GaussLobatto(Quadrature1D):
    r"""`n`-point Gauss-Lobatto rule, exact up to degree ``2n - 3``.

    Both end points are abscissa; the ``n - 2`` interior ones are the roots of
    :math:`L'_{n-1}`, with weights

    .. math::
        w_i = \frac{2}{n(n-1)} \frac{1}{L_{n-1}(\xi_i)^2}.

    The nodes of these rules are the support points of the Lagrange elements
    and of the cell mappings.
    """

    @property
    def deg(self):
        return 2*self.n_points - 3

    def __init__(self, n):
        n = _check_n_points(n, 2)
        leg = Legendre.basis(n - 1)
        dleg = leg.deriv()

        x = np.empty(n)
        x[0], x[-1] = -1., 1.
        if n > 2:
            # companion matrix roots, polished by one Newton step
            roots = np.sort(dleg.roots().real)
            x[1:-1] = roots - dleg(roots) / dleg.deriv()(roots)

        wt = np.ones(n)
        wt[1:-1] /= leg(x[1:-1])**2

        # enforce the symmetry about zero that rounding may have broken
        x = (x - x[::-1]) / 2.
        wt = (wt + wt[::-1]) / 2.
        wt *= 2. / wt.sum()

        Quadrature1D.__init__(self, x, wt)


class TensorQuadratureRule(object):
    """Tensor product of one-dimensional quadrature rules on [-1, 1]^ndim.

    Points are ordered lexicographically with the first dimension varying
    slowest (C order).
    """

    @property
    def ndim(self):
        return len(self._rules)

    @property
    def n_points(self):
        return len(self._weights)

    @property
    def shape(self):
        return tuple(rule.n_points for rule in self._rules)

    @property
    def points(self):
        """Quadrature points as an (n_points, ndim) array."""
        return self._points

    @property
    def weights(self):
        return self._weights

    def __init__(self, *quad_rules):
        if len(quad_rules) < 1:
            raise ValueError("At least one quadrature rule is required.")
        self._rules = quad_rules
        self._points = np.array(
            list(it.product(*(rule.abscissa for rule in quad_rules))),
            dtype=float).reshape(-1, len(quad_rules))
        self._weights = np.array(
            [np.prod(w) for w in it.product(*(rule.weights
                                              for rule in quad_rules))])

    def integrate(self, f_vals):
        """Integrate values given at the quadrature points (first axis)."""
        return np.tensordot(self._weights, f_vals, axes=(0, 0))

    def __repr__(self):
        return "{}({})".format(self.__class__.__name__,
                               ", ".join(repr(rule) for rule in self._rules))


def gauss_tensor(n, ndim):
    """`n`-point Gauss-Legendre tensor rule on [-1, 1]^ndim, as its points
    and weights.  For ``ndim`` of zero a single point with unit weight is
    returned."""
    if ndim == 0:
        return np.zeros((1, 0)), np.ones(1)
    rule = TensorQuadratureRule(*(GaussLegendre(n),)*ndim)
    return rule.points, rule.weights
