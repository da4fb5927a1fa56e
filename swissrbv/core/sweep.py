"""Cartesian parameter sweep over named input axes.

Each axis is ``{"min": ..., "max": ..., "step": ...}``.  Axis values are
generated by index (``min + i * step``) rather than by repeated addition so a
long float axis does not drift past its end point.  Results come back in
enumeration order with the first axis varying slowest.
"""

from __future__ import annotations

import itertools
from typing import Any, Dict, List, Mapping

import numpy as np

from .engine import calculate
from .params import BOOLEAN_FIELDS, DEFAULT_PARAMS, INTEGER_FIELDS, ValidationError

# Float noise below this many decimals is discarded from axis values.
_AXIS_DECIMALS = 10


def sweep_axis_values(name: str, axis: Mapping[str, Any]) -> List[Any]:
    """Enumerate one axis, coerced to the parameter's type.

    Boolean parameters are swept as ``{"min": 0, "max": 1, "step": 1}`` and come
    back as ``False``/``True``.  An inverted range yields no values.

    Raises:
        ValidationError: for an unknown parameter name or a non-positive step.
    """
    if name not in DEFAULT_PARAMS:
        raise ValidationError(name, "unknown_parameter")
    try:
        lo = float(axis["min"])
        hi = float(axis["max"])
        step = float(axis["step"])
    except (KeyError, TypeError, ValueError):
        raise ValidationError(name, "not_a_number", repr(axis)) from None
    if step <= 0.0:
        raise ValidationError(name, "non_positive_step", f"{step:g}")
    if hi < lo:
        return []

    count = int(np.floor((hi - lo) / step + 1e-9)) + 1
    values = np.round(lo + step * np.arange(count, dtype=np.float64), _AXIS_DECIMALS)

    if name in BOOLEAN_FIELDS:
        return [bool(v) for v in values]
    if name in INTEGER_FIELDS:
        return [int(round(v)) for v in values]
    return [float(v) for v in values]


def parameter_sweep(
    base_params: Mapping[str, Any],
    sweep_ranges: Mapping[str, Mapping[str, Any]],
) -> List[Dict[str, Any]]:
    """Run ``calculate`` for every combination of the swept axes.

    Each record is the combination's input record (base overlaid with the axis
    values) merged with the full result bundle.  An empty ``sweep_ranges``
    returns an empty list.
    """
    if not sweep_ranges:
        return []

    names = list(sweep_ranges.keys())
    axes = [sweep_axis_values(name, sweep_ranges[name]) for name in names]

    records: List[Dict[str, Any]] = []
    for combo in itertools.product(*axes):
        trial = dict(base_params)
        trial.update(zip(names, combo))
        result = calculate(trial)
        records.append({**trial, **result})
    return records
