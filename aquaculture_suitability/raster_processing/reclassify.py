"""
Suitability Classification
==========================

Turn continuous layers into binary suitability masks and combine them.

A suitability mask holds 1.0 for suitable cells and NaN for everything
else. Combining masks by multiplication then behaves as a logical AND:
NaN × anything = NaN. A 0 would not propagate that way, so 0 is rejected
as a mask value.

Functions accept either a raster layer dict (the result is a layer on the
same grid) or a bare 2D array (the result is an array).
"""

from functools import reduce

import numpy as np

from .grid import GridMismatchError, check_same_grid, with_values


def _is_layer(data):
    return isinstance(data, dict) and 'values' in data


def _values(data):
    return data['values'] if _is_layer(data) else np.asarray(data, dtype=np.float64)


def reclass_table(min_value, max_value):
    """
    Build the three-bin reclassification table for a suitable range.

    Bounds may be given in either order; they are sorted so a depth range
    written as (70, 0) or an elevation range written as (0, -70) still
    yields a valid table.

    Returns:
        List of (lower, upper, value) rows:
            (-inf, lo, NaN)   below range,  lower bound open
            (lo,   hi, 1.0)   in range,     both bounds closed
            (hi,  inf, NaN)   above range,  upper bound open
    """
    lo, hi = sorted((float(min_value), float(max_value)))
    if np.isnan(lo) or np.isnan(hi):
        raise ValueError(f"Threshold bounds must be numbers, got ({min_value}, {max_value})")
    return [
        (-np.inf, lo, np.nan),
        (lo, hi, 1.0),
        (hi, np.inf, np.nan),
    ]


def classify_range(data, min_value, max_value):
    """
    Binary mask of cells within the closed range [min_value, max_value].

    Cells inside the range (bounds included) → 1.0; cells outside it or
    NaN → NaN.

    Args:
        data: Raster layer dict or 2D array of values
        min_value: Lower bound of the suitable range
        max_value: Upper bound of the suitable range

    Returns:
        Mask of the same kind as ``data``

    Example:
        >>> classify_range(np.array([[10, 15], [31, 20]]), 11, 30)
        array([[nan,  1.],
               [nan,  1.]])
    """
    table = reclass_table(min_value, max_value)
    lo, hi, _ = table[1]

    values = _values(data)
    mask = np.full(values.shape, np.nan, dtype=np.float64)
    with np.errstate(invalid="ignore"):
        mask[(values >= lo) & (values <= hi)] = 1.0

    if _is_layer(data):
        return with_values(data, mask)
    return mask


def _check_mask_values(values, index):
    valid = values[~np.isnan(values)]
    if valid.size and not np.all(valid == 1.0):
        bad = np.unique(valid[valid != 1.0])[:5]
        raise ValueError(
            f"Mask {index} holds values other than 1 and NaN (e.g. {bad.tolist()}).\n"
            "Unsuitable cells must be NaN, not 0, for the AND combination to hold."
        )


def combine_masks(*masks, name="suitability"):
    """
    Combine two or more suitability masks with logical AND.

    A cell is suitable (1.0) only where every input mask is 1.0; everywhere
    else it is NaN. Implemented as an elementwise product.

    Args:
        *masks: Raster layer dicts or 2D arrays on one grid
        name: Name of the output layer (layers only)

    Returns:
        Combined mask of the same kind as the inputs

    Raises:
        ValueError: If fewer than two masks are given or a mask holds
            values other than 1/NaN
        GridMismatchError: If the masks are on different grids
    """
    if len(masks) < 2:
        raise ValueError(f"combine_masks needs at least two masks, got {len(masks)}")

    layer_flags = [_is_layer(m) for m in masks]
    if any(layer_flags) and not all(layer_flags):
        raise TypeError("Cannot mix raster layers and bare arrays in combine_masks")

    if all(layer_flags):
        check_same_grid(masks)
    else:
        shapes = {np.shape(m) for m in masks}
        if len(shapes) > 1:
            raise GridMismatchError(f"Masks have different shapes: {sorted(shapes)}")

    arrays = [_values(m) for m in masks]
    for i, values in enumerate(arrays):
        _check_mask_values(values, i)

    combined = reduce(np.multiply, arrays)

    if all(layer_flags):
        return with_values(masks[0], combined, name=name)
    return combined
