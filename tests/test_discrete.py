#!/usr/bin/env python
# -*- coding: utf-8 -*-

import itertools as itt
import numpy as np
import unittest
from feinterp import basis_functions
from feinterp.discrete import (Mesh, DOFHandler, DegenerateGeometry,
                               build_hypercube, distribute)
from feinterp.elements import FE_Q, FE_RaviartThomas


def mesh_from_cells(cells):
    """Build a mesh from the vertex coordinates of each cell, merging
    coincident vertices."""
    index = {}
    verts = []
    conn = []
    for coords in cells:
        row = []
        for p in np.asarray(coords, dtype=float):
            key = tuple(np.round(p, 12))
            if key not in index:
                index[key] = len(verts)
                verts.append(p)
            row.append(index[key])
        conn.append(row)
    return Mesh(np.array(verts).T, conn)


def rotated_pair(ndim):
    """Two unit cells side by side along x, the second one with a local frame
    rotated relative to the first."""
    bits = list(itt.product((0, 1), repeat=ndim))
    first = [b for b in bits]
    if ndim == 2:
        second = [(2 - b1, b0) for b0, b1 in bits]
    else:
        second = [(1 + b1, b0, 1 - b2) for b0, b1, b2 in bits]
    return mesh_from_cells([first, second])


def lagrange_dof_points(mesh, element):
    """Physical position of every local DOF of a Lagrange element."""
    ndim = mesh.ndim
    vertex_basis = basis_functions.NodalTensorProduct(
        *(basis_functions.LagrangeGaussLobatto(1),)*ndim)
    support = element.support_points
    n_nodes = len(support)
    weights = vertex_basis(support)
    return [np.dot(weights, cell.vertices)[np.arange(element.n_local_dofs) %
                                           n_nodes]
            for cell in mesh.cells]


class TestMesh(unittest.TestCase):

    def test_hyper_cube(self):
        mesh = build_hypercube(2, -0.3, 0.7)
        self.assertEqual(mesh.n_cells, 1)
        self.assertEqual(mesh.n_vertices, 4)
        self.assertEqual(mesh.n_faces, 4)
        np.testing.assert_allclose(mesh.vertices[:, 1], [-0.3, 0.7])
        lo, hi = mesh.bounding_box()
        np.testing.assert_allclose(lo, [-0.3, -0.3])
        np.testing.assert_allclose(hi, [0.7, 0.7])
        np.testing.assert_array_equal(mesh.face_orientation, [[1, 1, 1, 1]])

    def test_refine_2d(self):
        mesh = build_hypercube(2)
        mesh.refine_global(2)
        self.assertEqual(mesh.n_cells, 16)
        self.assertEqual(mesh.n_vertices, 25)
        self.assertEqual(mesh.n_faces, 40)
        self.assertEqual(mesh.boundary_faces().size, 16)
        self.assertEqual(mesh.boundary_vertices().size, 16)
        np.testing.assert_array_equal(mesh.levels, 2)

    def test_refine_3d(self):
        mesh = build_hypercube(3)
        mesh.refine_global(1)
        self.assertEqual(mesh.n_cells, 8)
        self.assertEqual(mesh.n_vertices, 27)
        self.assertEqual(mesh.n_faces, 36)
        self.assertEqual(mesh.boundary_faces().size, 24)

    def test_children_in_c_order(self):
        mesh = build_hypercube(2)
        mesh.refine_global(1)
        centroids = np.array([cell.centroid for cell in mesh.cells])
        np.testing.assert_allclose(centroids, [[0.25, 0.25], [0.25, 0.75],
                                               [0.75, 0.25], [0.75, 0.75]])
        cell = mesh.get_cell(0)
        self.assertEqual(cell.neighbor(0), None)
        self.assertEqual(cell.neighbor(1), 2)
        self.assertEqual(cell.neighbor(3), 1)
        self.assertTrue(cell.at_boundary())
        self.assertAlmostEqual(cell.diameter, np.sqrt(0.5))

    def test_face_adjacency(self):
        mesh = build_hypercube(3)
        mesh.refine_global(1)
        for face, (owner, other) in enumerate(mesh.face_cells):
            local = mesh.face_local_index(owner, face)
            self.assertEqual(mesh.face_orientation[owner, local], 1)
            if other >= 0:
                self.assertLess(owner, other)
                local = mesh.face_local_index(other, face)
                self.assertEqual(mesh.face_orientation[other, local], -1)
                # the two cells see the face from opposite sides
                self.assertEqual(local, mesh.face_local_index(owner, face) ^ 1)

    def test_refinement_is_deterministic(self):
        meshes = [build_hypercube(3) for _ in range(2)]
        for mesh in meshes:
            mesh.refine_global(1)
        np.testing.assert_array_equal(meshes[0].cell_vertices,
                                      meshes[1].cell_vertices)
        np.testing.assert_array_equal(meshes[0].vertices, meshes[1].vertices)

    def test_get_cell(self):
        mesh = build_hypercube(2)
        self.assertRaises(IndexError, mesh.get_cell, 1)
        self.assertEqual(mesh.get_cell(-1).index, 0)

    def test_bad_cells(self):
        self.assertRaises(ValueError, Mesh, [[0., 1.], [0., 1.]], [[0, 1]])


class TestDistortAndWarp(unittest.TestCase):

    def setUp(self):
        self.mesh = build_hypercube(2)
        self.mesh.refine_global(2)

    def test_distort_random(self):
        mesh = self.mesh
        before = mesh.vertices.copy()
        rev = mesh.revision
        mesh.distort_random(0.03, seed=1)
        self.assertGreater(mesh.revision, rev)
        moved = np.linalg.norm(mesh.vertices - before, axis=0)
        boundary = mesh.boundary_vertices()
        interior = np.setdiff1d(np.arange(mesh.n_vertices), boundary)
        np.testing.assert_array_equal(moved[boundary], 0.)
        np.testing.assert_allclose(moved[interior], 0.03 * 0.25)

    def test_distort_boundary(self):
        before = self.mesh.vertices.copy()
        self.mesh.distort_random(0.03, seed=1, keep_boundary=False)
        moved = np.linalg.norm(self.mesh.vertices - before, axis=0)
        self.assertTrue(np.all(moved > 0))

    def test_same_seed_same_mesh(self):
        other = build_hypercube(2)
        other.refine_global(2)
        self.mesh.distort_random(0.1, seed=7)
        other.distort_random(0.1, seed=7)
        np.testing.assert_array_equal(self.mesh.vertices, other.vertices)

    def test_inverting_distortion_is_rejected(self):
        mesh = build_hypercube(2)
        mesh.refine_global(1)
        before = mesh.vertices.copy()
        rev = mesh.revision
        # the centre vertex is moved by 0.75, beyond any convex position
        self.assertRaises(DegenerateGeometry, mesh.distort_random, 1.5,
                          seed=0)
        np.testing.assert_array_equal(mesh.vertices, before)
        self.assertEqual(mesh.revision, rev)

    def test_warp(self):
        mesh = self.mesh
        flat = mesh.flat_vertices.copy()
        mesh.warp(lambda p: 2. * p)
        mesh.warp(lambda p: p + 1.)
        np.testing.assert_allclose(mesh.vertices, 2. * flat + 1.)
        np.testing.assert_array_equal(mesh.flat_vertices, flat)

    def test_cache_is_cleared(self):
        mesh = self.mesh
        value = mesh.cached_mapping('key', lambda: object())
        self.assertIs(mesh.cached_mapping('key', lambda: object()), value)
        mesh.warp(lambda p: p)
        self.assertIsNot(mesh.cached_mapping('key', lambda: object()), value)


class TestDOFHandler(unittest.TestCase):

    def setUp(self):
        self.mesh = build_hypercube(2, -0.3, 0.7)
        self.mesh.refine_global(2)
        self.mesh3d = build_hypercube(3, -0.3, 0.7)
        self.mesh3d.refine_global(1)

    def test_lagrange_counts(self):
        self.assertEqual(distribute(self.mesh, FE_Q(2, 1)).n_dofs, 25)
        self.assertEqual(distribute(self.mesh, FE_Q(2, 2)).n_dofs, 81)
        self.assertEqual(distribute(self.mesh, FE_Q(2, 3)).n_dofs, 169)
        self.assertEqual(distribute(self.mesh, FE_Q(2, 2, 2)).n_dofs, 162)
        self.assertEqual(distribute(self.mesh3d, FE_Q(3, 2)).n_dofs, 125)

    def test_raviart_thomas_counts(self):
        self.assertEqual(distribute(self.mesh, FE_RaviartThomas(2, 0)).n_dofs,
                         40)
        self.assertEqual(distribute(self.mesh, FE_RaviartThomas(2, 1)).n_dofs,
                         144)
        self.assertEqual(
            distribute(self.mesh3d, FE_RaviartThomas(3, 0)).n_dofs, 36)
        self.assertEqual(
            distribute(self.mesh3d, FE_RaviartThomas(3, 1)).n_dofs, 240)

    def test_determinism(self):
        element = FE_RaviartThomas(2, 1)
        handler = DOFHandler(self.mesh)
        n1, signs1 = handler.distribute_dofs(element)
        dofs1 = handler.dof_indices.copy()
        n2, signs2 = DOFHandler(self.mesh).distribute_dofs(element)
        n3, signs3 = handler.distribute_dofs(element)
        self.assertEqual(n1, n2)
        self.assertEqual(n1, n3)
        np.testing.assert_array_equal(signs1, signs2)
        np.testing.assert_array_equal(signs1, signs3)
        np.testing.assert_array_equal(dofs1, handler.dof_indices)

    def test_signs(self):
        element = FE_RaviartThomas(2, 1)
        handler = distribute(self.mesh, element)
        for i, dof in enumerate(element.dof_topology):
            if dof.oriented:
                np.testing.assert_array_equal(
                    handler.signs[:, i],
                    self.mesh.face_orientation[:, dof.entity])
            else:
                np.testing.assert_array_equal(handler.signs[:, i], 1)
        handler = distribute(self.mesh, FE_Q(2, 2, 2))
        np.testing.assert_array_equal(handler.signs, 1)

    def test_shared_face_dofs(self):
        element = FE_RaviartThomas(2, 1)
        handler = distribute(self.mesh, element)
        mesh = self.mesh
        for face, (owner, other) in enumerate(mesh.face_cells):
            if other < 0:
                continue
            dofs = []
            for c in (owner, other):
                local = mesh.face_local_index(c, face)
                dofs.append(set(
                    handler.cell_dofs(c)[i]
                    for i, dof in enumerate(element.dof_topology)
                    if dof.dim == 1 and dof.entity == local))
            self.assertEqual(len(dofs[0]), 2)
            self.assertEqual(dofs[0], dofs[1])

    def test_read_only(self):
        handler = distribute(self.mesh, FE_Q(2, 1))
        with self.assertRaises(ValueError):
            handler.dof_indices[0, 0] = 5
        with self.assertRaises(ValueError):
            handler.signs[0, 0] = -1

    def test_dimension_mismatch(self):
        self.assertRaises(ValueError, distribute, self.mesh, FE_Q(3, 1))


class TestSharedDofsOnRotatedCells(unittest.TestCase):
    """Cells whose local frames differ must still agree on the physical
    position of every shared DOF."""

    def check_lagrange(self, mesh, element):
        handler = distribute(mesh, element)
        points = lagrange_dof_points(mesh, element)
        position = {}
        for c in range(mesh.n_cells):
            for i, g in enumerate(handler.cell_dofs(c)):
                if g in position:
                    np.testing.assert_allclose(points[c][i], position[g],
                                               atol=1e-13)
                else:
                    position[g] = points[c][i]
        return handler

    def test_lagrange_2d(self):
        mesh = rotated_pair(2)
        self.assertEqual(mesh.n_vertices, 6)
        handler = self.check_lagrange(mesh, FE_Q(2, 3))
        self.assertEqual(handler.n_dofs, 4*7)

    def test_lagrange_3d(self):
        mesh = rotated_pair(3)
        self.assertEqual(mesh.n_vertices, 12)
        handler = self.check_lagrange(mesh, FE_Q(3, 3, 2))
        self.assertEqual(handler.n_dofs, 2 * 4*4*7)

    def test_raviart_thomas_3d(self):
        mesh = rotated_pair(3)
        element = FE_RaviartThomas(3, 1)
        handler = distribute(mesh, element)
        gauss = basis_functions.LagrangeGauss(1).nodes
        ref = mesh.reference_cell
        position = {}
        for c, cell in enumerate(mesh.cells):
            vertex_basis = basis_functions.NodalTensorProduct(
                *(basis_functions.LagrangeGaussLobatto(1),)*3)
            for i, dof in enumerate(element.dof_topology):
                if dof.dim != 2:
                    continue
                x_ref = ref.face_to_cell(dof.entity,
                                         [[gauss[k] for k in dof.index]])
                point = np.dot(vertex_basis(x_ref), cell.vertices)[0]
                g = handler.cell_dofs(c)[i]
                if g in position:
                    np.testing.assert_allclose(point, position[g],
                                               atol=1e-13)
                else:
                    position[g] = point
        # one shared face of four DOFs
        self.assertEqual(handler.n_dofs, 2 * 36 - 4)


if __name__ == '__main__':
    unittest.main()
