# -*- coding: utf-8 -*-

"""
Numerical settings shared by the mapping, interpolation and evaluation code.

Settings are passed as keyword arguments wherever they are needed; anything
not given falls back to the values in `defaults`.
"""

defaults = {
    # Newton iteration used to invert cell mappings
    'newton_it_max': 20,
    'newton_tol': 1e-12,
    # tolerance (in reference coordinates) for accepting a point in a cell
    'location_tol': 1e-10,
    # smallest admissible Jacobian determinant relative to its cell average
    'det_rtol': 1e-10,
    # relative disagreement allowed between cells sharing a DOF
    'shared_dof_rtol': 1e-10,
    # bounding boxes of cells are grown by this fraction of the cell diameter
    'bbox_inflation': 0.25,
}


def resolve(**overrides):
    """Merge keyword overrides into a copy of the default settings.

    Raises
    ------
    ValueError
        If any of the given names is not a known setting.
    """
    bad_keys = set(overrides) - set(defaults)
    if bad_keys:
        raise ValueError('Unrecognized settings {}.'.format(sorted(bad_keys)))
    settings = dict(defaults)
    settings.update(overrides)
    return settings
