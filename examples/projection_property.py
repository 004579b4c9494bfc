#!/usr/bin/env python
# -*- coding: utf-8 -*-

r"""
Check that interpolation onto Raviart-Thomas spaces is a projection on a
refined cube, for the lowest two element orders in two and three dimensions.

The interpolated field is

..math:: f(x) = \sum_d \sum_{i \le q} (d+1)(i+1) x_d^i

in every component.

Example
-------
>>> python projection_property.py
dim 2 RaviartThomas<2>(0)
Check projection property: 1.11022e-16
...
"""

import logging

from feinterp import FE_RaviartThomas, PolynomialField
from feinterp.projection import run_projection_case


# (dim, element order, degree q of the test field, mapping order)
CASES = [
    (2, 0, 1, 1),
    (2, 1, 0, 2),
    (2, 1, 2, 2),
    (3, 0, 0, 1),
    (3, 1, 0, 2),
    (3, 1, 2, 2),
]


def main(distort_mesh=False):
    for ndim, order, q, mapping_order in CASES:
        element = FE_RaviartThomas(ndim, order)
        run_projection_case(ndim, element, PolynomialField(ndim, q),
                            mapping_order, distort_mesh=distort_mesh)


if __name__ == '__main__':
    logging.basicConfig(level=logging.INFO, format='%(message)s')
    main()
