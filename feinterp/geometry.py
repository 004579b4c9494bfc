#!/usr/bin/env python
# encoding: utf-8

"""
Classes describing the reference geometry of hypercube cells, [-1, 1]^ndim,
and the grids of nodes placed on them.
"""

from collections import namedtuple
import itertools as itt
import numpy as np
import scipy.special as sf


# A vertex, edge, face (or the interior) of a hypercube.  `fixed_axes` are the
# axes along which the sub-geometry is pinned to one end of the cube,
# `fixed_sides` says which end (0 for -1, 1 for +1) and `free_axes` are the
# remaining axes, in increasing order, that span the sub-geometry.
SubGeometry = namedtuple('SubGeometry',
                         ['fixed_axes', 'fixed_sides', 'free_axes'])


class NCube(object):
    """
    Describes geometrical properties of an orthotope-shaped element (e.g.
    line-segments, rectangles, hexahedra) carrying a tensor grid of nodes.

    The nodes are numbered lexicographically with the first axis varying
    slowest, and ``shape[d]`` nodes lie along axis ``d``.  With two nodes per
    axis the nodes are the vertices: vertex ``v`` sits at ``2*b - 1`` where
    ``b = np.unravel_index(v, (2,)*ndim)``.

    Faces are numbered ``face = 2*axis + side``, with side 0 on the plane
    ``x[axis] = -1`` and side 1 on ``x[axis] = +1``.
    """

    @property
    def ndim(self):
        return len(self._shape)

    @property
    def shape(self):
        return self._shape

    @property
    def n_nodes(self):
        return self._n_nodes

    @property
    def n_interior_nodes(self):
        return self._n_interior_nodes

    @property
    def n_vertices(self):
        return 2**self.ndim

    @property
    def n_faces(self):
        return 2*self.ndim

    def __init__(self, *shape):
        assert all(isinstance(i, (int, np.integer)) for i in shape)
        assert all(i > 1 for i in shape)
        self._shape = tuple(int(i) for i in shape)
        self._n_nodes = int(np.prod(self._shape))
        self._n_interior_nodes = int(np.prod([s - 2 for s in self._shape]))

    def n_sub_geometries(self, dim=-1):
        """
        Compute the number of `dim`-dimensional sub-geometries on the
        boundaries of a geometry object.

        Parameters
        ----------
        dim : int
            Number of dimensions of the sub-geometry.
        """
        if dim < 0:
            dim = self.ndim + dim
        if dim > self.ndim:
            raise ValueError("No {}D sub-geometry in a {}D parent geometry"
                             .format(dim, self.ndim))
        elif dim < 0:
            raise ValueError("Dimension of sub-elements must be > 0")

        n = self.ndim
        return 2**(n-dim) * sf.comb(n, dim, exact=True)

    def sub_geometries(self, dim=None):
        """
        Enumerate the `dim`-dimensional sub-geometries (vertices, edges,
        faces, ...) of the cube.  For ``dim = ndim - 1`` the position in the
        returned list is the face number.

        Returns
        -------
        list of SubGeometry
        """
        if dim is None:
            dim = self.ndim - 1
        if dim > self.ndim:
            raise ValueError("No {}D sub-geometry on a {}D parent geometry"
                             .format(dim, self.ndim))
        elif dim < 0:
            raise ValueError("Dimension of sub-elements must be > 0")

        sub_geos = []
        n_fixed_axes = self.ndim - dim
        for fixed_axes in itt.combinations(range(self.ndim), n_fixed_axes):
            free_axes = tuple(d for d in range(self.ndim)
                              if d not in fixed_axes)
            for sides in itt.product((0, 1), repeat=n_fixed_axes):
                sub_geos.append(SubGeometry(fixed_axes, sides, free_axes))
        return sub_geos

    def vertex_ind(self, sub_geo):
        """Local numbers of the vertices of a sub-geometry, ordered
        lexicographically over its free axes."""
        ind = []
        for free_bits in itt.product((0, 1), repeat=len(sub_geo.free_axes)):
            bits = [0] * self.ndim
            for ax, side in zip(sub_geo.fixed_axes, sub_geo.fixed_sides):
                bits[ax] = side
            for ax, bit in zip(sub_geo.free_axes, free_bits):
                bits[ax] = bit
            ind.append(int(np.ravel_multi_index(bits, (2,)*self.ndim)))
        return ind

    def interior_nodes(self, sub_geo):
        """Nodes strictly inside a sub-geometry.

        Returns
        -------
        list of (int, tuple)
            For every node the local node number and its multi-index on the
            grid of interior nodes of the sub-geometry (one entry per free
            axis), ordered lexicographically.
        """
        free_shape = [self._shape[ax] - 2 for ax in sub_geo.free_axes]
        nodes = []
        for sub_ix in itt.product(*(range(s) for s in free_shape)):
            ix = [0] * self.ndim
            for ax, side in zip(sub_geo.fixed_axes, sub_geo.fixed_sides):
                ix[ax] = side * (self._shape[ax] - 1)
            for ax, i in zip(sub_geo.free_axes, sub_ix):
                ix[ax] = i + 1
            nodes.append((int(np.ravel_multi_index(ix, self._shape)),
                          sub_ix))
        return nodes

    def vertex_points(self):
        """Coordinates of the vertices as a (2**ndim, ndim) array."""
        bits = np.array(list(itt.product((0, 1), repeat=self.ndim)))
        return 2.*bits - 1.

    @staticmethod
    def face_axis(face):
        return face // 2

    @staticmethod
    def face_side(face):
        return face % 2

    def face_normal(self, face):
        """Outward unit normal of a face of the reference cube."""
        normal = np.zeros(self.ndim)
        normal[self.face_axis(face)] = 2.*self.face_side(face) - 1.
        return normal

    def face_tangent_axes(self, face):
        return tuple(d for d in range(self.ndim) if d != self.face_axis(face))

    def face_to_cell(self, face, s):
        """Embed points given in the coordinates of a face, (n, ndim-1),
        into the coordinates of the cube, (n, ndim)."""
        s = np.asarray(s, dtype=float).reshape(-1, self.ndim - 1)
        x = np.empty((s.shape[0], self.ndim))
        x[:, self.face_axis(face)] = 2.*self.face_side(face) - 1.
        x[:, list(self.face_tangent_axes(face))] = s
        return x

    def __repr__(self):
        return "{}{}".format(self.__class__.__name__, self._shape)


class Line(NCube):
    # Enumeration of sub-geometries
    # +-->u0  (0)--*--(1)

    def __init__(self, shape_u=2):
        NCube.__init__(self, shape_u)


class Quadrilateral(NCube):

    # Enumeration of vertex and face (edge) sub-geometries
    #        1--(3)--3
    #        |       |
    # u1    (0)  *  (1)
    # |      |       |
    # +--u0  0--(2)--2
    #
    # The first axis varies slowest, hence vertex 1 lies at (-1, +1).

    def __init__(self, shape_u=2, shape_v=2):
        NCube.__init__(self, shape_u, shape_v)


class Hexahedron(NCube):

    # Faces 0/1 are normal to u0, 2/3 to u1 and 4/5 to u2; vertex v sits at
    # the bits of v read as (b0 b1 b2), e.g. vertex 6 = (1, 1, 0).

    def __init__(self, shape_u=2, shape_v=2, shape_w=2):
        NCube.__init__(self, shape_u, shape_v, shape_w)


_CUBE_CLASSES = {1: Line, 2: Quadrilateral, 3: Hexahedron}


def ncube(ndim, n_per_axis=2):
    """Construct the reference cube of `ndim` dimensions with `n_per_axis`
    nodes along every axis."""
    try:
        cls = _CUBE_CLASSES[ndim]
    except KeyError:
        raise ValueError("Only 1, 2 and 3 dimensional cells are supported, "
                         "not {}.".format(ndim))
    return cls(*(n_per_axis,)*ndim)


def canonical_index(corner_ids, local_ix, n):
    """Map the index of a node interior to a shared entity (edge or face) from
    the local frame of one cell to a frame that depends only on the global
    vertex numbers of the entity.

    The canonical frame has its origin at the vertex with the smallest global
    number; its axes are ordered by the global number of the vertex adjacent
    to the origin along each axis.  Every cell sharing the entity thus finds
    the same canonical index for the same physical node.

    Parameters
    ----------
    corner_ids : sequence of int
        Global vertex numbers of the entity corners, ordered lexicographically
        over the entity's local axes (2**m entries for an m-dimensional
        entity).
    local_ix : tuple of int
        Multi-index of the node on the entity's grid in the local frame.
    n : int
        Number of nodes along each axis of the entity's grid.

    Returns
    -------
    tuple of int
    """
    m = len(local_ix)
    if m == 0:
        return ()
    corners = np.asarray(corner_ids).reshape((2,)*m)
    origin = np.unravel_index(np.argmin(corners), corners.shape)
    neighbor_ids = []
    for t in range(m):
        adjacent = list(origin)
        adjacent[t] = 1 - adjacent[t]
        neighbor_ids.append(corners[tuple(adjacent)])
    ix = [i if o == 0 else n - 1 - i for i, o in zip(local_ix, origin)]
    return tuple(ix[t] for t in np.argsort(neighbor_ids, kind='stable'))
