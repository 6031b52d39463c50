"""
torch_sqat: PyTorch Sound Quality Analysis Toolbox utilities
=============================================================

PyTorch implementations of the shared building blocks of the Sound Quality
Analysis Toolbox (SQAT) psychoacoustic models, starting with the a0 outer-ear
transmission compensation used by the roughness, fluctuation strength and
loudness models.

**Key Features:**
    - Tabulated a0 curves (Fastl 2007 free/diffuse field, Osses 2016, SQAT v1)
    - FIR design of the a0 compensation filter, device and dtype aware
    - Differentiable Bark-domain curve module for gradient-based models
    - Explicit diagnostic plots and a command-line entry point

**Quick Start:**

    >>> import torch_sqat
    >>>
    >>> # FIR filter, frequency grid and gains of the free-field a0 curve
    >>> B, freqs, a0 = torch_sqat.calculate_a0(fs=44100, N=4096)
    >>>
    >>> # Simplified curve of the fluctuation strength model
    >>> B_fs, _, a0_fs = torch_sqat.calculate_a0(44100, 4096, 'fluctuationstrength_osses2016')
    >>>
    >>> # Compare target and filter
    >>> from torch_sqat.common.plotting import plot_a0_fir
    >>> fig = plot_a0_fir(freqs, a0, B, fs=44100)

**Package Structure:**

    torch_sqat/
    ├── cli.py              # torch-sqat-a0 command-line entry point
    └── common/             # Reusable building blocks
        ├── scales.py               - dB and Bark scale conversions
        ├── filters.py              - Interpolation and FIR design utilities
        ├── ears.py                 - a0 outer ear transmission curves
        └── plotting.py             - Diagnostic plots (import explicitly)

**Author:**
    Stefano Giacomelli - Ph.D. candidate @ DISIM dpt. - University of L'Aquila

**License:**
    GNU General Public License v3.0 or later (GPLv3+)

**References:**
    - H. Fastl and E. Zwicker, Psychoacoustics: Facts and Models, 3rd ed., Springer, 2007.
    - SQAT: https://github.com/ggrecow/SQAT

**Version History:**
    - 0.1.0 (2026-10): Initial release (a0 transmission compensation)
"""

# ============================================================================
# Package Metadata
# ============================================================================

__version__ = "0.1.0"
__author__ = "Stefano Giacomelli"
__email__ = "stefano.giacomelli@graduate.univaq.it"
__license__ = "GPL-3.0-or-later"
__description__ = "PyTorch Sound Quality Analysis Toolbox - a0 outer ear transmission compensation"

# ============================================================================
# Public API - Common Building Blocks
# ============================================================================

# --- Level & Critical-Band Scales ---
from torch_sqat.common.scales import (
    from_db,                            # dB to linear amplitude
    to_db,                              # Linear amplitude to dB
    hz2bark,                            # Frequency to critical-band rate
    bark2hz,                            # Critical-band rate to frequency
)

# --- Interpolation & FIR Design ---
from torch_sqat.common.filters import (
    torch_interp1,                      # Linear interpolation (NaN outside range)
    torch_firwin2,                      # FIR design by frequency sampling
    create_a0_fir,                      # FIR filter from an a0 curve
)

# --- Outer Ear Transmission (a0) ---
from torch_sqat.common.ears import (
    A0_TABLES,                          # Tabulated a0 curves
    A0TransmissionCurve,                # Bark-domain a0 curve module
    a0_frequency_grid,                  # 20 Hz - 20 kHz FFT bins
    a0_gain_vector,                     # Full-length N-bin a0 gains
    calculate_a0,                       # a0 gains and FIR filter
    get_a0_table,                       # Table lookup by name
    interpolate_a0,                     # Bark-domain interpolation
)

# ============================================================================
# Package-Level Exports
# ============================================================================

__all__ = [
    # Scales
    "from_db",
    "to_db",
    "hz2bark",
    "bark2hz",

    # Interpolation & FIR design
    "torch_interp1",
    "torch_firwin2",
    "create_a0_fir",

    # a0 transmission
    "A0_TABLES",
    "A0TransmissionCurve",
    "a0_frequency_grid",
    "a0_gain_vector",
    "calculate_a0",
    "get_a0_table",
    "interpolate_a0",
]
