# region Imports
from typing import Optional, Tuple
import numpy as np
import matplotlib
import matplotlib.pyplot as plt
from .models import CrossSection
# endregion

# region Dense Array
def section_to_array(section: CrossSection) -> Tuple[np.ndarray, Tuple[float, float, float, float]]:
    """
    Lay the section out as a (radius, distance) array, NaN where there is no
    coverage. Row 0 is the lowest radius. Returns (array, extent) with
    extent = (dmin, dmax, rmin, rmax) for imshow.
    """
    rows = list(section.rows())
    if not rows:
        return np.full((1, 1), np.nan), (0.0, max(section.distance, 1e-9), 0.0, 1.0)

    ds = np.unique([r[0] for r in rows])
    rs = np.unique([r[3] for r in rows])
    d_idx = {d: i for i, d in enumerate(ds)}
    r_idx = {r: i for i, r in enumerate(rs)}

    arr = np.full((rs.size, ds.size), np.nan)
    for d, _, _, r, v in rows:
        arr[r_idx[r], d_idx[d]] = v

    return arr, (float(ds[0]), float(ds[-1]), float(rs[0]), float(rs[-1]))
# endregion

# region Visualization Function
def plot_cross_section(
    section: CrossSection,
    scale: float,
    out_path: Optional[str] = None,
    title: str = "Cross section",
    zero_point_radius: float = 0.0,
    flip: bool = False,
):
    """
    Quick-look rendering of a cross section with a symmetric color range of
    +-scale. Saves to out_path when given, otherwise shows the figure.
    """
    arr, (d0, d1, r0, r1) = section_to_array(section)

    if out_path is not None:
        matplotlib.use("Agg")

    # region Vertical Axis
    z0, z1 = r0 - zero_point_radius, r1 - zero_point_radius
    if flip:
        z0, z1 = -z0, -z1
    # endregion

    fig, ax = plt.subplots(figsize=(10, 4))
    im = ax.imshow(arr, origin="lower", aspect="auto",
                   cmap="RdBu", vmin=-scale, vmax=scale,
                   extent=(d0, d1, z0, z1), interpolation="nearest")
    cbar = fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)
    cbar.set_label("value")

    ax.set_xlabel("distance along arc (deg)")
    ax.set_ylabel("depth (km)" if flip else "height (km)")
    ax.set_title(title)
    plt.tight_layout()

    if out_path is not None:
        fig.savefig(out_path, dpi=100)
        plt.close(fig)
        return out_path
    plt.show()
    return None
# endregion
