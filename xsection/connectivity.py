# region Imports
from typing import List, Optional, Sequence, Tuple
import numpy as np
from .config import GAP_FACTOR
from .models import LatitudeRun
# endregion

# region Gap Splitting
def split_at_gaps(
    xs: Sequence[float],
    margin: float,
    gap_factor: float = GAP_FACTOR,
) -> List[Tuple[int, int]]:
    """
    Split sorted values into gap-free runs, returned as (start, stop) index
    slices. A new run starts wherever consecutive values are more than
    gap_factor * margin apart.
    """
    xs = np.asarray(xs, dtype=np.float64)
    if xs.size == 0:
        return []

    cuts = np.nonzero(np.diff(xs) > margin * gap_factor)[0] + 1
    bounds = [0, *cuts.tolist(), int(xs.size)]
    return list(zip(bounds[:-1], bounds[1:]))
# endregion

# region Continuous Latitude Run
def extract_latitude_run(
    latitudes: Sequence[float],
    target: float,
    margin: float,
    gap_factor: float = GAP_FACTOR,
) -> Optional[LatitudeRun]:
    """
    Find the gap-free run of latitudes whose [first - margin, last + margin)
    interval contains target. latitudes must be distinct and sorted.
    None means the target has no usable coverage.
    """
    if len(latitudes) == 0:
        return None

    for start, stop in split_at_gaps(latitudes, margin, gap_factor):
        run = LatitudeRun(tuple(float(x) for x in latitudes[start:stop]))
        if run.covers(target, margin):
            return run
    return None
# endregion
