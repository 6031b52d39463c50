"""
Level & Critical-Band Scales
============================

Author:
    Stefano Giacomelli - Ph.D. candidate @ DISIM dpt. - University of L'Aquila

License:
    GNU General Public License v3.0 or later (GPLv3+)

Conversions between decibel and linear amplitude, and between linear frequency
and the Bark (critical-band rate) scale of Zwicker.

The Bark mapping is the tabulated one used by the Sound Quality Analysis Toolbox
(SQAT) roughness and fluctuation strength models: band edges and centre frequencies
of the 24 critical bands, linearly interpolated in between.

References
----------
.. [1] E. Zwicker, "Subdivision of the audible frequency range into critical
       bands (Frequenzgruppen)," *J. Acoust. Soc. Am.*, vol. 33, no. 2, p. 248, 1961.

.. [2] H. Fastl and E. Zwicker, *Psychoacoustics: Facts and Models*, 3rd ed.
       Berlin-Heidelberg, Germany: Springer, 2007, doi: 10.1007/978-3-540-68888-4.

.. [3] G. F. Greco, R. Merino-Martinez, A. Osses, and S. C. Langer, "SQAT: a
       MATLAB-based toolbox for quantitative sound quality analysis," in *Proc.
       INTER-NOISE 2023*, Chiba, Japan, 2023.
"""

import torch

from torch_sqat.common.filters import torch_interp1

# -------------------------------------------------- Data ----------------------------------------------------

# Zwicker critical bands: lower edge and centre frequency of each band
# Format: (band, lower edge (Hz), centre (Hz), band + 0.5)
_ZWICKER_BANDS = (
    (0,     0,      50,     0.5),
    (1,     100,    150,    1.5),
    (2,     200,    250,    2.5),
    (3,     300,    350,    3.5),
    (4,     400,    450,    4.5),
    (5,     510,    570,    5.5),
    (6,     630,    700,    6.5),
    (7,     770,    840,    7.5),
    (8,     920,    1000,   8.5),
    (9,     1080,   1170,   9.5),
    (10,    1270,   1370,   10.5),
    (11,    1480,   1600,   11.5),
    (12,    1720,   1850,   12.5),
    (13,    2000,   2150,   13.5),
    (14,    2320,   2500,   14.5),
    (15,    2700,   2900,   15.5),
    (16,    3150,   3400,   16.5),
    (17,    3700,   4000,   17.5),
    (18,    4400,   4800,   18.5),
    (19,    5300,   5800,   19.5),
    (20,    6400,   7000,   20.5),
    (21,    7700,   8500,   21.5),
    (22,    9500,   10500,  22.5),
    (23,    12000,  13500,  23.5),
    (24,    15500,  20000,  24.5),
)

# Format: ((frequency (Hz), critical-band rate (Bark)), ...), 0.5 Bark steps
ZWICKER_BARK_TABLE = tuple(zip(sorted([float(b[1]) for b in _ZWICKER_BANDS] + [float(b[2]) for b in _ZWICKER_BANDS]),
                               sorted([float(b[0]) for b in _ZWICKER_BANDS] + [float(b[3]) for b in _ZWICKER_BANDS])))

# ------------------------------------------------- Utilities ------------------------------------------------

def from_db(x: torch.Tensor) -> torch.Tensor:
    r"""
    Convert decibels to linear amplitude.

    .. math::
       A = 10^{x/20}

    Parameters
    ----------
    x : torch.Tensor
        Values in dB. Can be scalar or any tensor shape.

    Returns
    -------
    torch.Tensor
        Linear amplitudes. Same shape as input. NaN inputs give NaN.

    Examples
    --------
    >>> import torch
    >>> from_db(torch.tensor([0.0, 20.0, -6.0]))
    tensor([ 1.0000, 10.0000,  0.5012])
    """
    return torch.pow(10.0, torch.as_tensor(x) / 20.0)


def to_db(x: torch.Tensor) -> torch.Tensor:
    r"""
    Convert linear amplitude to decibels (:math:`20 \log_{10} |x|`).

    Zero amplitude maps to ``-inf``.
    """
    return 20.0 * torch.log10(torch.abs(torch.as_tensor(x)))


def _bark_table(dtype: torch.dtype, device) -> torch.Tensor:
    return torch.tensor(ZWICKER_BARK_TABLE, dtype=dtype, device=device)


def hz2bark(f: torch.Tensor) -> torch.Tensor:
    r"""
    Convert frequency in Hz to critical-band rate in Bark.

    Piecewise-linear interpolation of Zwicker's critical-band table
    (:data:`ZWICKER_BARK_TABLE`, 0 Hz → 0 Bark, 20 kHz → 24.5 Bark). Outside the
    tabulated range the first/last segment is extended linearly, so the mapping is
    finite for every frequency of an analysis grid, including bins rounded slightly
    above 20 kHz.

    Parameters
    ----------
    f : torch.Tensor
        Frequencies in Hz. Can be scalar or any tensor shape. Integer tensors are
        converted to the default floating point dtype.

    Returns
    -------
    torch.Tensor
        Critical-band rate in Bark. Same shape as input.

    Examples
    --------
    >>> import torch
    >>> hz2bark(torch.tensor([1000.0, 3400.0, 20000.0]))
    tensor([ 8.5000, 16.5000, 24.5000])

    See Also
    --------
    bark2hz : Inverse transformation (Bark to Hz).
    """
    f = torch.as_tensor(f)
    if not torch.is_floating_point(f):
        f = f.to(torch.get_default_dtype())
    table = _bark_table(f.dtype, f.device)
    return torch_interp1(table[:, 0], table[:, 1], f, extrapolate=True)


def bark2hz(z: torch.Tensor) -> torch.Tensor:
    """
    Convert critical-band rate in Bark to frequency in Hz.

    Inverse of :func:`hz2bark` over the same table (linear extrapolation outside
    0-24.5 Bark).
    """
    z = torch.as_tensor(z)
    if not torch.is_floating_point(z):
        z = z.to(torch.get_default_dtype())
    table = _bark_table(z.dtype, z.device)
    return torch_interp1(table[:, 1], table[:, 0], z, extrapolate=True)
