#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Routines for root finding.
"""

import logging
import numpy as np
import scipy.linalg as la

logger = logging.getLogger(__name__)


class SolverFailure(Exception):
    """Base exception to raise upon the failure of a non-linear solver to find
    a 'good' solution.
    """
    pass


def newton(f, x0, jac, it_max, tol):
    """Use Netwon-Raphson iteration to find the roots of a vector-valued
    function.

    Parameters
    ----------
    f : callable
        A vector-valued function whose roots to compute
    x0 : ndarray
        Initial guess
    jac : callable
        Accepts the same arguments as `f` and returns the Jacobian
        matrix of `f`.
    it_max : int
        Maximum number of iterations to perform
    tol : float
        Tolerance on the norm of the Newton update for termination

    Returns
    -------
    x : ndarray
        The root.
    n_it : int
        Number of iterations taken.

    Raises
    ------
    SolverFailure
        If the iteration produces non-finite values, hits a singular Jacobian
        or does not meet the tolerance within `it_max` iterations.
    """
    x = np.array(x0, dtype=float)

    for itn in range(it_max):
        f_x = f(x)
        jac_x = jac(x)
        try:
            dx = la.solve(jac_x, -f_x)
        except (la.LinAlgError, ValueError) as err:
            raise SolverFailure("Newton iteration hit a singular "
                                "Jacobian: {}".format(err))
        x += dx
        if not np.all(np.isfinite(x)):
            raise SolverFailure("Newton iteration diverged.")
        if la.norm(dx) <= tol:
            logger.debug("Newton converged after %d iterations", itn + 1)
            return x, itn + 1
    raise SolverFailure("Maximum number of iterations ({}) exceeded before "
                        "tolerance could be met.".format(it_max))
