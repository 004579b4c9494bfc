#!/usr/bin/env python
# encoding: utf-8

"""
A module which handles hypercube meshes and the degrees of freedom assigned to
them.

Cells, faces and vertices are referred to by their integer index into flat
arrays held by `Mesh`; `Cell` is only a lightweight view onto those arrays.
"""

import logging
import itertools as itt
import numpy as np
from scipy import linalg

from . import geometry
from .geometry import canonical_index

logger = logging.getLogger(__name__)


class DegenerateGeometry(Exception):
    """Exception to be raised if a cell would be inverted or (nearly)
    collapsed, i.e. if its Jacobian determinant is not bounded away from zero.
    """
    pass


def _corner_jacobian_dets(cell_coords):
    """Jacobian determinants of the multilinear map of each cell evaluated at
    each of its vertices.

    Parameters
    ----------
    cell_coords : ndarray, shape (n_cells, 2**ndim, ndim)

    Returns
    -------
    ndarray, shape (n_cells, 2**ndim)
    """
    n_cells, n_verts, ndim = cell_coords.shape
    coords = cell_coords.reshape((n_cells,) + (2,)*ndim + (ndim,))
    dets = np.empty((n_cells, n_verts))
    for v, bits in enumerate(itt.product((0, 1), repeat=ndim)):
        jac = np.empty((n_cells, ndim, ndim))
        for e in range(ndim):
            hi = list(bits)
            lo = list(bits)
            hi[e] = 1
            lo[e] = 0
            jac[:, :, e] = 0.5 * (coords[(slice(None),) + tuple(hi)] -
                                  coords[(slice(None),) + tuple(lo)])
        dets[:, v] = np.linalg.det(jac)
    return dets


class Cell(object):
    """A view of one cell of a `Mesh`."""

    def __init__(self, mesh, index):
        self._mesh = mesh
        self._index = index

    @property
    def mesh(self):
        return self._mesh

    @property
    def index(self):
        return self._index

    @property
    def ndim(self):
        return self._mesh.ndim

    @property
    def level(self):
        return int(self._mesh.levels[self._index])

    @property
    def vertex_ind(self):
        """Global indices of the cell's vertices in local vertex order."""
        return self._mesh.cell_vertices[self._index]

    @property
    def vertices(self):
        """Physical (warped) vertex coordinates, shape (2**ndim, ndim)."""
        return self._mesh.vertices[:, self.vertex_ind].T

    @property
    def flat_vertices(self):
        """Vertex coordinates before the mesh warp is applied."""
        return self._mesh.flat_vertices[:, self.vertex_ind].T

    @property
    def face_ind(self):
        return self._mesh.cell_faces[self._index]

    @property
    def face_orientation(self):
        return self._mesh.face_orientation[self._index]

    @property
    def centroid(self):
        return self.vertices.mean(axis=0)

    @property
    def diameter(self):
        verts = self.vertices
        return max(linalg.norm(a - b) for a, b in
                   itt.combinations(verts, 2))

    def neighbor(self, face):
        """Index of the cell across local face `face`, or None on the
        boundary."""
        owner, other = self._mesh.face_cells[self.face_ind[face]]
        nbr = other if owner == self._index else owner
        if nbr < 0:
            return None
        return int(nbr)

    def at_boundary(self):
        return any(self.neighbor(f) is None
                   for f in range(self._mesh.reference_cell.n_faces))

    def __repr__(self):
        return "Cell({})".format(self._index)


class Mesh(object):
    """
    Class representing a conforming mesh of hypercube cells.

    Attributes
    ----------
    ndim : int
        Number of dimensions in the mesh.
    n_vertices : int
        Number of vertices on the mesh
    n_cells : int
        Number of cells on the mesh
    revision : int
        Counter bumped by every change of the mesh.
    """

    @property
    def ndim(self):
        """Number of spacial dimensions spanned by the mesh."""
        return self._ndim

    @property
    def n_vertices(self):
        return self._flat_vertices.shape[1]

    @property
    def n_cells(self):
        return self._cell_vertices.shape[0]

    @property
    def n_faces(self):
        return self._faces.shape[0]

    @property
    def revision(self):
        return self._revision

    @property
    def reference_cell(self):
        return self._ref

    @property
    def flat_vertices(self):
        """Vertex coordinates (`ndim`-by-N) before any warp is applied."""
        return self._flat_vertices

    @property
    def vertices(self):
        """Physical vertex coordinates (`ndim`-by-N)."""
        if self._warp is None:
            return self._flat_vertices
        return self.apply_warp(self._flat_vertices.T).T

    @property
    def cell_vertices(self):
        """Global vertex indices of each cell, (n_cells, 2**ndim)."""
        return self._cell_vertices

    @property
    def levels(self):
        return self._levels

    @property
    def faces(self):
        """Global vertex indices of each face in the local order of the face's
        owner, (n_faces, 2**(ndim-1))."""
        return self._faces

    @property
    def face_cells(self):
        """Owner and neighbour (-1 on the boundary) of each face."""
        return self._face_cells

    @property
    def cell_faces(self):
        return self._cell_faces

    @property
    def face_orientation(self):
        """+1 where a cell owns its face and -1 otherwise,
        (n_cells, 2*ndim)."""
        return self._face_orientation

    def __init__(self, vertices, cell_vertices, levels=None):
        """
        Create a mesh from vertex coordinates and cell connectivity.

        Parameters
        ----------
        vertices : array-like, `ndim`-by-N
            The (global) set of vertices on the mesh.
        cell_vertices : array-like, (n_cells, 2**ndim)
            Global vertex indices of each cell in local vertex order.
        levels : array-like, optional
            Refinement level of each cell (zero by default).
        """
        vertices = np.array(vertices, dtype=float, ndmin=2)
        ndim = vertices.shape[0]
        if ndim not in (1, 2, 3):
            raise ValueError("Only 1, 2 and 3 dimensional meshes are "
                             "supported.")
        cell_vertices = np.array(cell_vertices, dtype=int, ndmin=2)
        if cell_vertices.shape[1] != 2**ndim:
            raise ValueError("Cells of a {}D mesh need {} vertices."
                             .format(ndim, 2**ndim))
        self._ndim = ndim
        self._ref = geometry.ncube(ndim)
        self._flat_vertices = vertices
        self._cell_vertices = cell_vertices
        if levels is None:
            levels = np.zeros(len(cell_vertices), dtype=int)
        self._levels = np.asarray(levels, dtype=int)
        self._warp = None
        self._revision = 0
        self._mapping_cache = {}
        self._build_faces()

    @classmethod
    def hyper_cube(cls, ndim, low=0., high=1.):
        """A mesh of a single cell spanning ``[low, high]**ndim``."""
        ref = geometry.ncube(ndim)
        verts = low + (high - low) * (ref.vertex_points().T + 1.) / 2.
        return cls(verts, [np.arange(ref.n_vertices)])

    def get_cell(self, i):
        if not -self.n_cells <= i < self.n_cells:
            raise IndexError("Cell {} does not exist on a mesh of {} cells."
                             .format(i, self.n_cells))
        return Cell(self, i % self.n_cells)

    @property
    def cells(self):
        """Iterator through all cells on the mesh
        """
        for i in range(self.n_cells):
            yield self.get_cell(i)

    def face_local_index(self, cell, face):
        """Local face number of global face `face` on cell `cell`."""
        local = np.flatnonzero(self._cell_faces[cell] == face)
        if local.size == 0:
            raise ValueError("Face {} is not on cell {}.".format(face, cell))
        return int(local[0])

    def boundary_faces(self):
        return np.flatnonzero(self._face_cells[:, 1] < 0)

    def boundary_vertices(self):
        return np.unique(self._faces[self.boundary_faces()])

    def bounding_box(self):
        """Lower and upper corners of the box holding all vertices."""
        verts = self.vertices
        return verts.min(axis=1), verts.max(axis=1)

    def apply_warp(self, points):
        """Map points (n, ndim) by the mesh warp (identity if none)."""
        points = np.asarray(points, dtype=float)
        if self._warp is None:
            return points
        return np.asarray(self._warp(points), dtype=float)

    def cached_mapping(self, key, build):
        """Fetch the mapping data stored under `key`, calling `build` to
        create it when missing.  The cache is emptied on every change of the
        mesh."""
        try:
            return self._mapping_cache[key]
        except KeyError:
            logger.debug("Building mapping data for %s", key)
            value = self._mapping_cache[key] = build()
            return value

    def _touch(self):
        self._revision += 1
        self._mapping_cache.clear()

    def _build_faces(self):
        """Derive the faces and face adjacency from the cells.  A face is
        owned by the first cell (in cell order) that touches it."""
        ref = self._ref
        face_geos = ref.sub_geometries(self._ndim - 1)
        face_verts = [ref.vertex_ind(sg) for sg in face_geos]
        n_faces_cell = len(face_geos)

        lookup = {}
        faces = []
        face_cells = []
        cell_faces = np.empty((self.n_cells, n_faces_cell), dtype=int)
        orientation = np.empty((self.n_cells, n_faces_cell), dtype=int)
        for c, verts in enumerate(self._cell_vertices):
            for f, loc in enumerate(face_verts):
                ids = verts[loc]
                key = tuple(sorted(ids))
                i = lookup.get(key)
                if i is None:
                    i = lookup[key] = len(faces)
                    faces.append(ids)
                    face_cells.append([c, -1])
                    orientation[c, f] = 1
                elif face_cells[i][1] < 0:
                    face_cells[i][1] = c
                    orientation[c, f] = -1
                else:
                    raise ValueError("Face {} is shared by more than two "
                                     "cells.".format(key))
                cell_faces[c, f] = i

        self._faces = np.array(faces, dtype=int).reshape(
            len(faces), len(face_verts[0]))
        self._face_cells = np.array(face_cells, dtype=int).reshape(-1, 2)
        self._cell_faces = cell_faces
        self._face_orientation = orientation
        logger.debug("Mesh has %d cells, %d faces (%d on the boundary)",
                     self.n_cells, self.n_faces, self.boundary_faces().size)

    def refine_global(self, levels=1):
        """Split every cell into 2**ndim children, `levels` times over.

        Children are numbered in C order of their position within the parent.
        New vertices are placed at the centre of the parent entity (edge,
        face or cell) they are created on and are shared between the cells
        that touch that entity.
        """
        for _ in range(levels):
            self._refine_once()
        self._touch()

    def _refine_once(self):
        ndim = self._ndim
        ref = self._ref
        flat = [v for v in self._flat_vertices.T]
        entity_vertex = {}

        def vertex_on(parent, grid_ix):
            # grid_ix indexes the 3**ndim grid of parent vertices, edge,
            # face and cell midpoints.
            free = [d for d in range(ndim) if grid_ix[d] == 1]
            bits = [i // 2 for i in grid_ix]
            if not free:
                return parent[np.ravel_multi_index(bits, (2,)*ndim)]
            corners = []
            for free_bits in itt.product((0, 1), repeat=len(free)):
                for d, b in zip(free, free_bits):
                    bits[d] = b
                corners.append(parent[np.ravel_multi_index(bits,
                                                           (2,)*ndim)])
            key = tuple(sorted(corners))
            i = entity_vertex.get(key)
            if i is None:
                i = entity_vertex[key] = len(flat)
                flat.append(np.mean([flat[k] for k in corners], axis=0))
            return i

        children = []
        levels = []
        for parent, level in zip(self._cell_vertices, self._levels):
            for child_bits in itt.product((0, 1), repeat=ndim):
                child = [vertex_on(parent, [c + v for c, v in
                                            zip(child_bits, vert_bits)])
                         for vert_bits in itt.product((0, 1), repeat=ndim)]
                children.append(child)
                levels.append(level + 1)

        logger.debug("Refined %d cells into %d", self.n_cells, len(children))
        assert len(children[0]) == ref.n_vertices
        self._flat_vertices = np.array(flat).T.reshape(ndim, -1)
        self._cell_vertices = np.array(children, dtype=int)
        self._levels = np.array(levels, dtype=int)
        self._build_faces()

    def _shortest_adjacent_edges(self):
        ref = self._ref
        lengths = np.full(self.n_vertices, np.inf)
        for sg in ref.sub_geometries(1):
            a, b = ref.vertex_ind(sg)
            ia = self._cell_vertices[:, a]
            ib = self._cell_vertices[:, b]
            edge_len = linalg.norm(self._flat_vertices[:, ia] -
                                   self._flat_vertices[:, ib], axis=0)
            np.minimum.at(lengths, ia, edge_len)
            np.minimum.at(lengths, ib, edge_len)
        return lengths

    def distort_random(self, factor, seed=None, keep_boundary=True):
        """Move vertices by random offsets.

        Every vertex is moved in a random direction by `factor` times the
        length of the shortest edge adjacent to it.  The moved vertices are
        checked before they replace the current ones.

        Parameters
        ----------
        factor : float
            Size of the offsets relative to the local edge length.
        seed : int, optional
            Seed for the random number generator.
        keep_boundary : bool, optional
            Leave the vertices on the boundary of the mesh in place.

        Raises
        ------
        DegenerateGeometry
            If a cell would have a non-positive Jacobian determinant at one
            of its vertices.  The mesh is left untouched.
        """
        rng = np.random.RandomState(seed)
        ndim = self._ndim
        directions = rng.normal(size=(ndim, self.n_vertices))
        directions /= linalg.norm(directions, axis=0)
        shifts = factor * self._shortest_adjacent_edges() * directions
        if keep_boundary:
            shifts[:, self.boundary_vertices()] = 0.
        new_flat = self._flat_vertices + shifts

        cell_coords = new_flat[:, self._cell_vertices].transpose(1, 2, 0)
        dets = _corner_jacobian_dets(cell_coords)
        if not np.all(dets > 0):
            bad = np.unique(np.nonzero(dets <= 0)[0])
            raise DegenerateGeometry(
                "Random distortion by {} would invert cells {}."
                .format(factor, bad.tolist()))

        self._flat_vertices = new_flat
        self._touch()
        logger.debug("Distorted %d vertices by factor %g",
                     np.count_nonzero(np.any(shifts != 0, axis=0)), factor)

    def warp(self, func):
        """Deform the mesh by a smooth map.

        Parameters
        ----------
        func : callable
            Maps points shaped (n, ndim) to points of the same shape.  It is
            applied after any warp installed earlier.
        """
        previous = self._warp
        if previous is None:
            self._warp = func
        else:
            self._warp = lambda points: func(previous(points))
        self._touch()


def build_hypercube(ndim, low=0., high=1.):
    """Construct a mesh of one cell spanning ``[low, high]**ndim``."""
    return Mesh.hyper_cube(ndim, low, high)


class DOFHandler(object):
    """Assigns global degrees of freedom to the local basis functions of the
    cells of a mesh.

    DOFs on vertices, edges and faces are shared by every cell touching that
    entity; DOFs interior to a cell belong to that cell alone.  Global indices
    are handed out in cell order and then in local DOF order, so the numbering
    depends only on the mesh topology.
    """

    @property
    def mesh(self):
        return self._mesh

    @property
    def element(self):
        return self._element

    @property
    def n_dofs(self):
        return self._n_dofs

    @property
    def dof_indices(self):
        """Global DOF index of each local DOF, (n_cells, n_local_dofs)."""
        return self._dof_indices

    @property
    def signs(self):
        """Orientation sign (+1 or -1) of each local DOF,
        (n_cells, n_local_dofs)."""
        return self._signs

    def __init__(self, mesh):
        self._mesh = mesh
        self._element = None
        self._n_dofs = 0
        self._dof_indices = None
        self._signs = None

    def distribute_dofs(self, element):
        """Number the degrees of freedom of `element` on every cell.

        Returns
        -------
        n_dofs : int
            Number of global DOFs.
        signs : ndarray
            Sign table, (n_cells, n_local_dofs).
        """
        mesh = self._mesh
        if element.ndim != mesh.ndim:
            raise ValueError("A {}D element cannot be used on a {}D mesh."
                             .format(element.ndim, mesh.ndim))
        ref = mesh.reference_cell
        sub_geos = [ref.sub_geometries(d) for d in range(mesh.ndim + 1)]
        entity_verts = [[ref.vertex_ind(sg) for sg in geos]
                        for geos in sub_geos]
        topology = element.dof_topology

        lookup = {}
        dof_indices = np.empty((mesh.n_cells, element.n_local_dofs),
                               dtype=int)
        signs = np.ones((mesh.n_cells, element.n_local_dofs), dtype=int)
        for c in range(mesh.n_cells):
            verts = mesh.cell_vertices[c]
            for i, dof in enumerate(topology):
                if dof.dim == mesh.ndim:
                    key = ('cell', c, dof.index, dof.component)
                else:
                    corners = verts[entity_verts[dof.dim][dof.entity]]
                    key = (tuple(sorted(corners)),
                           canonical_index(corners, dof.index, dof.n),
                           dof.component)
                dof_indices[c, i] = lookup.setdefault(key, len(lookup))
                if dof.oriented:
                    signs[c, i] = mesh.face_orientation[c, dof.entity]

        dof_indices.flags.writeable = False
        signs.flags.writeable = False
        self._element = element
        self._n_dofs = len(lookup)
        self._dof_indices = dof_indices
        self._signs = signs
        logger.debug("Distributed %d DOFs of %s on %d cells",
                     self._n_dofs, element.name, mesh.n_cells)
        return self._n_dofs, signs

    def cell_dofs(self, cell):
        return self._dof_indices[getattr(cell, 'index', cell)]

    def cell_signs(self, cell):
        return self._signs[getattr(cell, 'index', cell)]


def distribute(mesh, element):
    """Create a `DOFHandler` on `mesh` and distribute `element` on it."""
    handler = DOFHandler(mesh)
    handler.distribute_dofs(element)
    return handler
