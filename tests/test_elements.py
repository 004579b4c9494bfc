#!/usr/bin/env python
# -*- coding: utf-8 -*-

import numpy as np
import unittest
from feinterp.discrete import build_hypercube
from feinterp.elements import Family, FiniteElement, FE_Q, FE_RaviartThomas
from feinterp.mapping import MappingQ


def functional_matrix(element):
    """Every local DOF functional applied to every shape function."""
    points, functionals = element.generalized_support_points
    return np.einsum('ipc,pjc->ij', functionals,
                     element.basis_values(points))


class TestRaviartThomas(unittest.TestCase):

    def test_sizes_and_names(self):
        for ndim, order, n in [(2, 0, 4), (2, 1, 12), (2, 2, 24),
                               (3, 0, 6), (3, 1, 36)]:
            element = FE_RaviartThomas(ndim, order)
            self.assertEqual(element.n_local_dofs, n)
            self.assertEqual(element.n_components, ndim)
            self.assertEqual(element.family, Family.RAVIART_THOMAS)
        self.assertEqual(FE_RaviartThomas(2, 1).name, "RaviartThomas<2>(1)")
        self.assertEqual(str(FE_RaviartThomas(3, 0)), "RaviartThomas<3>(0)")

    def test_dual_basis(self):
        for ndim, order in [(2, 0), (2, 1), (2, 2), (3, 1)]:
            element = FE_RaviartThomas(ndim, order)
            np.testing.assert_allclose(functional_matrix(element),
                                       np.eye(element.n_local_dofs),
                                       atol=1e-12)

    def test_lowest_order_shape_functions(self):
        element = FE_RaviartThomas(2, 0)
        x = np.array([[0.3, -0.2], [-1., 0.5]])
        values = element.basis_values(x)
        self.assertEqual(values.shape, (2, 4, 2))
        # shape function of face 1 is (1 + x) / 4 e_0
        np.testing.assert_allclose(values[:, 1, 0], (1 + x[:, 0]) / 4,
                                   atol=1e-14)
        np.testing.assert_allclose(values[:, 1, 1], 0., atol=1e-14)
        np.testing.assert_allclose(element.basis_value(1, x), values[:, 1])

    def test_normal_traces_vanish_on_other_faces(self):
        element = FE_RaviartThomas(3, 1)
        s = np.linspace(-1, 1, 4)
        face_pts = np.array([[a, b] for a in s for b in s])
        for face in range(6):
            axis = face // 2
            x = np.insert(face_pts, axis, 2.*(face % 2) - 1., axis=1)
            normal = element.basis_values(x)[..., axis]
            for i, dof in enumerate(element.dof_topology):
                if not (dof.dim == 2 and dof.entity == face):
                    np.testing.assert_allclose(normal[:, i], 0., atol=1e-12)

    def test_topology(self):
        element = FE_RaviartThomas(2, 1)
        topology = element.dof_topology
        self.assertEqual([d.entity for d in topology[:8]],
                         [0, 0, 1, 1, 2, 2, 3, 3])
        self.assertTrue(all(d.oriented for d in topology[:8]))
        self.assertTrue(all(d.dim == 2 and not d.oriented
                            for d in topology[8:]))

    def test_bad_arguments(self):
        self.assertRaises(ValueError, FE_RaviartThomas, 2, -1)
        self.assertRaises(ValueError, FE_RaviartThomas, 1, 0)
        self.assertRaises(ValueError, FiniteElement, 'raviart_thomas', 0, 2,
                          1)
        self.assertRaises(ValueError, FiniteElement, 'nedelec', 0, 2)


class TestLagrange(unittest.TestCase):

    def test_sizes_and_names(self):
        self.assertEqual(FE_Q(2, 2).n_local_dofs, 9)
        self.assertEqual(FE_Q(3, 1, 3).n_local_dofs, 24)
        self.assertEqual(FE_Q(2, 2).name, "Lagrange<2>(2)")
        self.assertEqual(FE_Q(3, 2, 3).name, "Lagrange<3>(2)^3")
        element = FiniteElement('lagrange', 1, 2)
        self.assertEqual(element.family, Family.LAGRANGE)
        self.assertEqual(element.n_components, 1)

    def test_kronecker_delta_property(self):
        element = FE_Q(2, 3, 2)
        values = element.basis_values(element.support_points)
        n = len(element.support_points)
        np.testing.assert_allclose(values[:, :n, 0], np.eye(n), atol=1e-13)
        np.testing.assert_allclose(values[:, n:, 1], np.eye(n), atol=1e-13)
        np.testing.assert_allclose(values[:, :n, 1], 0.)
        np.testing.assert_allclose(functional_matrix(element),
                                   np.eye(element.n_local_dofs), atol=1e-13)

    def test_topology(self):
        element = FE_Q(2, 2)
        topology = element.dof_topology
        self.assertEqual([(topology[i].dim, topology[i].entity)
                          for i in (0, 2, 6, 8)],
                         [(0, 0), (0, 1), (0, 2), (0, 3)])
        self.assertEqual(topology[4].dim, 2)
        # mid-edge nodes lie on faces 0..3
        self.assertEqual([(topology[i].dim, topology[i].entity)
                          for i in (1, 7, 3, 5)],
                         [(1, 0), (1, 1), (1, 2), (1, 3)])
        self.assertFalse(any(d.oriented for d in topology))

    def test_bad_order(self):
        self.assertRaises(ValueError, FE_Q, 2, 0)


class TestTransforms(unittest.TestCase):

    def setUp(self):
        mesh = build_hypercube(2)
        mesh.refine_global(1)
        mesh.distort_random(0.2, seed=5)
        self.cell_map = MappingQ(1).build(mesh.get_cell(0))
        self.x_ref = np.array([[0.1, 0.2], [-0.7, 0.4], [0.9, -0.9]])

    def test_piola_round_trip(self):
        element = FE_RaviartThomas(2, 0)
        values = np.array([[1., 2.], [-3., 0.5], [0., 1.]])
        ref = element.pull_back(self.cell_map, self.x_ref, values)
        self.assertFalse(np.allclose(ref, values))
        np.testing.assert_allclose(
            element.push_forward(self.cell_map, self.x_ref, ref), values)

    def test_lagrange_is_not_transformed(self):
        element = FE_Q(2, 1, 2)
        values = np.array([[1., 2.], [-3., 0.5], [0., 1.]])
        np.testing.assert_array_equal(
            element.pull_back(self.cell_map, self.x_ref, values), values)

    def test_local_functional(self):
        element = FE_Q(2, 1)

        class Linear(object):
            n_components = 1

            def values(self, points):
                return (points[:, 0] + 2*points[:, 1])[:, None]

        vertices = self.cell_map.x_phys
        local = [element.local_functional(i, Linear(), self.cell_map)
                 for i in range(4)]
        np.testing.assert_allclose(local,
                                   vertices[:, 0] + 2*vertices[:, 1])


if __name__ == '__main__':
    unittest.main()
