# -*- coding: utf-8 -*-

"""
Vector-valued functions of physical coordinates that can be interpolated onto
a finite element space.
"""

import numpy as np


class Function(object):
    """Base class of functions with `n_components` components.

    Subclasses override `values` (vectorized over points) or `value` (one
    point at a time).
    """

    def __init__(self, n_components=1):
        self.n_components = n_components

    def value(self, point):
        """Value at a single point, shape (n_components,)."""
        point = np.asarray(point, dtype=float)
        return self.values(point[None, :])[0]

    def values(self, points):
        """Values at the points (n, ndim), shape (n, n_components)."""
        points = np.asarray(points, dtype=float)
        return np.array([self.value(p) for p in points]).reshape(
            len(points), self.n_components)

    def __call__(self, points):
        return self.values(points)


class PolynomialField(Function):
    r"""The field

    .. math::
        f(x) = \sum_{d} \sum_{i=0}^{q} (d+1)(i+1) x_d^i

    in every one of its components.
    """

    def __init__(self, ndim, q, n_components=None):
        if n_components is None:
            n_components = ndim
        Function.__init__(self, n_components)
        self.ndim = ndim
        self.q = q

    def values(self, points):
        points = np.asarray(points, dtype=float)
        v = np.zeros(len(points))
        for d in range(self.ndim):
            for i in range(self.q + 1):
                v += (d + 1) * (i + 1) * points[:, d]**i
        return np.repeat(v[:, None], self.n_components, axis=1)

    def __repr__(self):
        return "{}(ndim={}, q={})".format(self.__class__.__name__,
                                          self.ndim, self.q)


class ConstantFunction(Function):

    def __init__(self, value):
        self._value = np.atleast_1d(np.asarray(value, dtype=float))
        Function.__init__(self, self._value.size)

    def values(self, points):
        return np.tile(self._value, (len(points), 1))


class VectorFunction(Function):
    """Wraps a callable mapping points (n, ndim) to values
    (n, n_components)."""

    def __init__(self, func, n_components):
        Function.__init__(self, n_components)
        self._func = func

    def values(self, points):
        return np.asarray(self._func(np.asarray(points, dtype=float)),
                          dtype=float)


def as_function(func, n_components=None):
    """Wrap a plain callable as a `Function`; `Function` instances are
    returned unchanged."""
    if isinstance(func, Function):
        return func
    if n_components is None:
        raise ValueError("The number of components of a plain callable must "
                         "be given.")
    return VectorFunction(func, n_components)
