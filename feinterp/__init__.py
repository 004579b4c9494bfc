# -*- coding: utf-8 -*-

"""
Interpolation of functions onto conforming finite element spaces on
hypercube meshes, and evaluation of the resulting fields at arbitrary points.
"""

from .discrete import (Mesh, Cell, DOFHandler, DegenerateGeometry,
                       build_hypercube, distribute)
from .elements import Family, FiniteElement, FE_Q, FE_RaviartThomas
from .fe_field import FieldEvaluator, PointOutsideDomain
from .functions import (Function, PolynomialField, ConstantFunction,
                        VectorFunction, as_function)
from .interpolation import interpolate, ComponentMismatch, \
    InconsistentSharedDof
from .mapping import (MappingQ, CellMapping, OutsideDomain,
                      InverseMapDidNotConverge)
from .projection import (check_projection, run_projection_case,
                         ProjectionReport)
from .rootfind import SolverFailure
