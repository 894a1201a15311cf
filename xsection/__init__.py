from .models import CrossSection, FullPosition, HorizontalPosition, LatitudeRun, SectionParams, Trace
from .section import build_geometry, compute_cross_section
from .listfile import read_scalar_list, write_section

__version__ = "0.1.0"
