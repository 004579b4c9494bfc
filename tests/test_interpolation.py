#!/usr/bin/env python
# -*- coding: utf-8 -*-

import numpy as np
import unittest
from feinterp.discrete import DOFHandler, build_hypercube, distribute
from feinterp.elements import FE_Q, FE_RaviartThomas
from feinterp.fe_field import FieldEvaluator
from feinterp.functions import (ConstantFunction, PolynomialField,
                                VectorFunction)
from feinterp.interpolation import (interpolate, ComponentMismatch,
                                    InconsistentSharedDof)
from feinterp.mapping import MappingQ


def square_mesh(refinements=2, distort=None):
    mesh = build_hypercube(2, -0.3, 0.7)
    mesh.refine_global(refinements)
    if distort is not None:
        mesh.distort_random(distort, seed=11)
    return mesh


def sample_points(n=20, seed=3):
    # stay clear of the boundary of [-0.3, 0.7]^2
    return np.random.RandomState(seed).uniform(-0.25, 0.65, (n, 2))


class FlippedSigns(DOFHandler):
    """DOF handler whose first cell disagrees with its neighbours on the
    orientation of every face."""

    @property
    def signs(self):
        signs = np.array(self._signs)
        signs[0] *= -1
        return signs


class TestExactness(unittest.TestCase):
    """Fields in the span of the element are reproduced."""

    def check_reproduced(self, mesh, element, function, mapping=1):
        dof_handler = distribute(mesh, element)
        coeffs = interpolate(mapping, dof_handler, function)
        field = FieldEvaluator(dof_handler, coeffs, mapping)
        points = sample_points()
        np.testing.assert_allclose(field.values(points),
                                   function.values(points), atol=1e-12)

    def test_raviart_thomas_constant(self):
        self.check_reproduced(square_mesh(), FE_RaviartThomas(2, 0),
                              ConstantFunction([1., -2.]))

    def test_raviart_thomas_linear(self):
        self.check_reproduced(square_mesh(), FE_RaviartThomas(2, 1),
                              PolynomialField(2, 1))

    def test_bilinear_on_distorted_mesh(self):
        self.check_reproduced(square_mesh(distort=0.1), FE_Q(2, 1),
                              VectorFunction(lambda x: (0.5 + x[:, 0] -
                                                        3*x[:, 1])[:, None],
                                             1))

    def test_quadratic_lagrange(self):
        self.check_reproduced(square_mesh(1), FE_Q(2, 2),
                              PolynomialField(2, 2, 1))

    def test_vertex_values(self):
        mesh = square_mesh(1)
        dof_handler = distribute(mesh, FE_Q(2, 1))
        function = PolynomialField(2, 1, 1)
        coeffs = interpolate(1, dof_handler, function)
        for cell in mesh.cells:
            np.testing.assert_allclose(
                coeffs[dof_handler.cell_dofs(cell)],
                function.values(cell.vertices)[:, 0])


class TestConsistency(unittest.TestCase):

    def test_shared_dofs_agree_on_distorted_mesh(self):
        dof_handler = distribute(square_mesh(distort=0.2),
                                 FE_RaviartThomas(2, 1))
        coeffs = interpolate(1, dof_handler, PolynomialField(2, 3),
                             check_consistency=True)
        self.assertEqual(coeffs.shape, (dof_handler.n_dofs,))

    def test_shared_dofs_agree_on_warped_mesh(self):
        mesh = square_mesh(1)
        mesh.warp(lambda x: x + 0.03*np.sin(np.pi*x[:, ::-1]))
        dof_handler = distribute(mesh, FE_RaviartThomas(2, 2))
        interpolate(2, dof_handler, PolynomialField(2, 3),
                    check_consistency=True)

    def test_disagreement_is_reported(self):
        mesh = square_mesh(1)
        dof_handler = FlippedSigns(mesh)
        dof_handler.distribute_dofs(FE_RaviartThomas(2, 0))
        function = ConstantFunction([1., 1.])
        # without the check the last writer wins
        interpolate(1, dof_handler, function)
        self.assertRaises(InconsistentSharedDof, interpolate, 1,
                          dof_handler, function, check_consistency=True)


class TestArguments(unittest.TestCase):

    def setUp(self):
        self.dof_handler = distribute(square_mesh(1), FE_RaviartThomas(2, 0))

    def test_wrong_number_of_components(self):
        with self.assertRaises(ComponentMismatch):
            interpolate(1, self.dof_handler, PolynomialField(2, 1, 1))
        self.assertTrue(issubclass(ComponentMismatch, ValueError))

    def test_wrong_shape_of_values(self):
        function = VectorFunction(lambda x: np.ones((len(x), 3)), 2)
        self.assertRaises(ComponentMismatch, interpolate, 1,
                          self.dof_handler, function)

    def test_mapping_order_or_instance(self):
        function = PolynomialField(2, 1)
        np.testing.assert_array_equal(
            interpolate(1, self.dof_handler, function),
            interpolate(MappingQ(1), self.dof_handler, function))

    def test_undistributed_handler(self):
        self.assertRaises(ValueError, interpolate, 1,
                          DOFHandler(square_mesh(1)), PolynomialField(2, 1))

    def test_unknown_setting(self):
        self.assertRaises(ValueError, interpolate, 1, self.dof_handler,
                          PolynomialField(2, 1), newton_tolerance=1e-8)


if __name__ == '__main__':
    unittest.main()
