#!/usr/bin/env python
# -*- coding: utf-8 -*-

import numpy as np


def det_inv_2x2(mat):
    """Compute the determinant and inverse of a 2x2 matrix (or matricies).
    The matrix indices are the leading two axes of `mat`."""
    # Compute the determinant and inverse using the closed-form expression.
    det = mat[0, 0]*mat[1, 1] - mat[0, 1]*mat[1, 0]
    inv = np.empty_like(mat)
    inv[0, 0] = mat[1, 1]
    inv[0, 1] = -mat[0, 1]
    inv[1, 0] = -mat[1, 0]
    inv[1, 1] = mat[0, 0]
    inv *= 1/det
    return det, inv


def det_inv_3x3(mat):
    """Compute the determinant and inverse of a 3x3 matrix (or matricies).
    The matrix indices are the leading two axes of `mat`."""
    # cofactor expansion
    cof = np.empty_like(mat)
    for i in range(3):
        for j in range(3):
            i1, i2 = (i + 1) % 3, (i + 2) % 3
            j1, j2 = (j + 1) % 3, (j + 2) % 3
            cof[i, j] = mat[i1, j1]*mat[i2, j2] - mat[i1, j2]*mat[i2, j1]
    det = mat[0, 0]*cof[0, 0] + mat[0, 1]*cof[0, 1] + mat[0, 2]*cof[0, 2]
    inv = cof.swapaxes(0, 1) / det
    return det, inv


def det_inv(mat):
    """Determinant and inverse of a stack of small square matrices.

    Parameters
    ----------
    mat : ndarray, shape (..., n, n)
        Matrices with the matrix indices on the *trailing* axes.

    Returns
    -------
    det : ndarray, shape (...)
    inv : ndarray, shape (..., n, n)
    """
    mat = np.asarray(mat, dtype=float)
    n = mat.shape[-1]
    lead = np.moveaxis(mat, (-2, -1), (0, 1))
    if n == 1:
        det = lead[0, 0].copy()
        inv = 1. / lead
    elif n == 2:
        det, inv = det_inv_2x2(lead)
    elif n == 3:
        det, inv = det_inv_3x3(lead)
    else:
        return np.linalg.det(mat), np.linalg.inv(mat)
    return det, np.moveaxis(inv, (0, 1), (-2, -1))
