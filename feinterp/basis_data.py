#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Extended precision tables for the Gauss-Legendre-Lobatto (GLL) points.

The GLL points are the support points of the Lagrange elements and of the
isoparametric cell mappings.  For high orders, nodes and weights computed in
double precision lose a few digits; the tables written here are computed with
sympy/mpmath and can be handed to
`feinterp.basis_functions.LagrangeGaussLobatto` through its `data_file`
argument.

Only the non-negative half of each node set is stored.  The layout of a
table of order ``p`` (group ``GaussLegendreLobatto``, dataset ``str(p)``) is
a 3-by-``(p//2 + 1)`` array of nodes, barycentric weights and quadrature
weights.
"""

import sympy as sym
from sympy import pi, cos, Rational as Rat, Eq
from mpmath import mp
import numpy as np
import h5py


def _positive_interior_roots(deg, dps):
    """Positive roots of P'_deg in ascending order, starting from Chebyshev
    extrema as initial guesses."""
    x = sym.symbols('x', real=True)
    dlegp_expr = sym.legendre_poly(deg, x).diff(x)
    roots = []
    for k in range(1 - deg % 2, deg // 2):
        guess = cos(pi * Rat(deg//2 - k, deg)).n(dps)
        roots.append(mp.mpf(sym.nsolve(Eq(dlegp_expr, 0), x, guess,
                                       solver='newton', prec=dps)))
    return roots


def gauss_legendre_lobatto(n, dps=30):
    r"""
    GLL nodes with their barycentric and quadrature weights.

    Parameters
    ----------
    n : int
        Number of GLL points (at least two).
    dps : int
        Decimal digits carried through the computation.

    Returns
    -------
    nodes, bary_wts, quad_wts : list of mpmath.mpf
        The non-negative nodes in ascending order (zero for odd `n`, one
        always) and the weights that go with them.

    Notes
    -----
    With :math:`P_{n-1}` the Legendre polynomial of degree ``n - 1``, the
    barycentric weights are :math:`1/P_{n-1}(x_i)` and the quadrature weights
    are proportional to their squares, scaled so that the full rule sums to
    two.  Mirroring a node flips the sign of its barycentric weight when `n`
    is even.
    """

    if n < 2:
        raise ValueError("At least two quadrature points are required")
    deg = n - 1

    x = sym.symbols('x', real=True)
    legp = sym.lambdify(x, sym.legendre_poly(deg, x), modules='mpmath',
                        dummify=False)

    with mp.workdps(dps):
        nodes = _positive_interior_roots(deg, dps) + [mp.mpf(1)]
        if deg % 2 == 0:
            nodes.insert(0, mp.mpf(0))

        bary_wts = [1 / legp(node) for node in nodes]
        squares = [wt**2 for wt in bary_wts]
        # the node at zero (odd n) is not mirrored
        total = 2 * mp.fsum(squares)
        if deg % 2 == 0:
            total -= squares[0]
        quad_wts = [sq * 2 / total for sq in squares]

    return nodes, bary_wts, quad_wts


def write_data(fpath, max_order=10):
    """
    Store GLL tables of orders 1 to `max_order` in the HDF5 file `fpath`.
    """
    with h5py.File(fpath, 'w') as f:
        grp = f.require_group('GaussLegendreLobatto')
        grp.attrs['max_order'] = max_order
        for order in range(1, max_order + 1):
            table = np.array([[float(v) for v in column] for column in
                              gauss_legendre_lobatto(order + 1)])
            grp.create_dataset(str(order), data=table)
