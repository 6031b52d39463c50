"""
Outer Ear Transmission (a0) Compensation
========================================

Author:
    Stefano Giacomelli - Ph.D. candidate @ DISIM dpt. - University of L'Aquila

License:
    GNU General Public License v3.0 or later (GPLv3+)

This module implements the a0 transmission factor used by Zwicker-type
psychoacoustic models (roughness, fluctuation strength, loudness) to account for
the transmission from a free or diffuse sound field through the outer ear.
The a0 curve is tabulated on the Bark scale and turned into a linear gain over
an FFT frequency grid, and then into an FIR filter for time-domain processing.

Four tabulated curves are provided (see :data:`A0_TABLES`):

1. **fastl2007ff**: Free-field a0 from Fastl & Zwicker (2007), Fig. 8.18 (default)
2. **fastl2007df**: Diffuse-field a0 from Fastl & Zwicker (2007), Fig. 8.18
3. **fluctuationstrength_osses2016**: Simplified a0 without the ear canal
   resonance, approximately a low-pass characteristic (Osses et al. 2016)
4. **sqat1**: Curve of the first SQAT fluctuation strength release, including an
   approximation of the middle ear attenuation (backwards compatibility)

Although not explicitly stated, comparison with other literature sources (Moore,
Glasberg & Baer, 1997) shows that the Fastl (2007) a0 curves do not include the
band-pass filtering of the middle ear, with its strong low-frequency attenuation.
Only the ``'sqat1'`` curve approximates it.

The implementation follows the ``calculate_a0`` utility of the Sound Quality
Analysis Toolbox (SQAT) for MATLAB.

References
----------
.. [1] H. Fastl and E. Zwicker, *Psychoacoustics: Facts and Models*, 3rd ed.
       Berlin-Heidelberg, Germany: Springer, 2007, Fig. 8.18, p. 226,
       doi: 10.1007/978-3-540-68888-4.

.. [2] A. Osses, R. García, and A. Kohlrausch, "Modelling the sensation of
       fluctuation strength," *Proc. Mtgs. Acoust.*, vol. 28, 050005, 2016,
       doi: 10.1121/2.0000410.

.. [3] B. C. J. Moore, B. R. Glasberg, and T. Baer, "A model for the prediction
       of thresholds, loudness, and partial loudness," *J. Audio Eng. Soc.*,
       vol. 45, no. 4, pp. 224-240, 1997.

.. [4] G. F. Greco, R. Merino-Martinez, A. Osses, and S. C. Langer, "SQAT: a
       MATLAB-based toolbox for quantitative sound quality analysis," in *Proc.
       INTER-NOISE 2023*, Chiba, Japan, 2023.
"""

import logging
import math
from types import MappingProxyType
from typing import Literal, Optional, Tuple, Union

import torch
import torch.nn as nn

from torch_sqat.common.filters import create_a0_fir, torch_interp1
from torch_sqat.common.scales import from_db, hz2bark

logger = logging.getLogger(__name__)

# -------------------------------------------------- Data ----------------------------------------------------

A0Type = Literal['fastl2007ff', 'fastl2007df', 'fluctuationstrength_osses2016', 'sqat1']

DEFAULT_A0_TYPE = 'fastl2007ff'

# Audible band covered by the analysis grid (Hz)
A0_FLOW = 20.0
A0_FHIGH = 20000.0

# Data from Fastl & Zwicker (2007), Fig. 8.18, p. 226 - free field
# Same curve as used by the Daniel & Weber (1997) roughness model
# Format: (critical-band rate (Bark), gain (dB))
FASTL2007_FF_DATA = (
    (0.0,    0.0),
    (10.0,   0.0),
    (11.0,   0.25),
    (12.0,   1.18),
    (13.0,   2.27),
    (14.0,   3.70),
    (15.0,   5.21),
    (16.0,   6.30),
    (16.5,   6.55),
    (17.0,   6.47),
    (18.0,   4.87),
    (18.5,   3.53),
    (19.0,   1.85),
    (19.5,   -0.08),
    (20.0,   -1.76),
    (20.5,   -3.28),
    (21.0,   -4.20),
    (21.5,   -5.13),
    (22.0,   -7.06),
    (22.5,   -10.08),
    (23.0,   -14.03),
    (23.5,   -19.83),
    (24.0,   -33.0),
    (25.0,   -70.0),
    (26.0,   -999.0),
)

# Data from Fastl & Zwicker (2007), Fig. 8.18, p. 226 - diffuse field
# Format: (critical-band rate (Bark), gain (dB))
FASTL2007_DF_DATA = (
    (0.0,    0.0),
    (5.0,    0.0),
    (6.0,    0.59),
    (7.0,    1.51),
    (8.0,    2.35),
    (9.0,    2.52),
    (10.0,   2.18),
    (11.0,   1.43),
    (12.0,   0.92),
    (13.0,   1.01),
    (14.0,   1.85),
    (15.0,   3.03),
    (16.0,   4.54),
    (17.0,   5.71),
    (18.0,   4.87),
    (19.0,   3.19),
    (19.5,   2.18),
    (20.0,   1.43),
    (20.5,   0.76),
    (21.0,   0.17),
    (21.5,   -1.18),
    (22.0,   -3.28),
    (22.5,   -6.55),
    (23.0,   -10.76),
    (23.5,   -18.24),
    (24.0,   -33.0),
    (25.0,   -70.0),
    (26.0,   -999.0),
)

# Simplified a0 of Osses et al. (2016): ear canal resonance removed
# Format: (critical-band rate (Bark), gain (dB))
OSSES2016_DATA = (
    (0.0,    0.0),
    (10.0,   0.0),
    (19.0,   0.0),
    (20.0,   -1.43),
    (21.0,   -2.59),
    (21.5,   -3.57),
    (22.0,   -5.19),
    (22.5,   -7.41),
    (23.0,   -11.3),
    (23.5,   -20.0),
    (24.0,   -40.0),
    (25.0,   -130.0),
    (26.0,   -999.0),    # minus infinity
)

# a0 of the original SQAT fluctuation strength code (il_calculate_a0), which
# includes an approximation of the middle ear attenuation
# Format: (critical-band rate (Bark), gain (dB))
SQAT1_DATA = (
    (0.0,    -999.0),
    (0.5,    -34.7),
    (1.0,    -23.0),
    (1.5,    -17.0),
    (2.0,    -12.8),
    (2.5,    -10.1),
    (3.0,    -8.0),
    (3.5,    -6.4),
    (4.0,    -5.1),
    (4.5,    -4.2),
    (5.0,    -3.5),
    (5.5,    -2.9),
    (6.0,    -2.4),
    (6.5,    -1.9),
    (7.0,    -1.5),
    (7.5,    -1.1),      # 850 Hz
    (8.0,    -0.8),
    (8.5,    0.0),
    (10.0,   0.0),       # 1.2 kHz
    (12.0,   1.15),
    (13.0,   2.31),
    (14.0,   3.85),
    (15.0,   5.62),
    (16.0,   6.92),
    (16.5,   7.38),
    (17.0,   6.92),      # 3.5 kHz
    (18.0,   4.23),
    (18.5,   2.31),
    (19.0,   0.0),       # 5.4 kHz
    (20.0,   -1.43),
    (21.0,   -2.59),
    (21.5,   -3.57),
    (22.0,   -5.19),
    (22.5,   -7.41),
    (23.0,   -11.3),
    (23.5,   -20.0),
    (24.0,   -40.0),
    (25.0,   -130.0),
    (26.0,   -999.0),
)

A0_TABLES = MappingProxyType({
    'fastl2007ff': FASTL2007_FF_DATA,
    'fastl2007df': FASTL2007_DF_DATA,
    'fluctuationstrength_osses2016': OSSES2016_DATA,
    'sqat1': SQAT1_DATA,
})

# ------------------------------------------------ Curve Tables ----------------------------------------------

def _normalize_a0_type(a0_type: Optional[str]) -> str:
    if a0_type is None:
        return DEFAULT_A0_TYPE
    if not isinstance(a0_type, str) or a0_type.lower() not in A0_TABLES:
        raise ValueError(f"Unknown a0_type '{a0_type}'. Choose from: {', '.join(repr(k) for k in A0_TABLES)}")
    return a0_type.lower()


def get_a0_table(a0_type: Optional[str] = DEFAULT_A0_TYPE,
                 dtype: torch.dtype = torch.float64,
                 device: Optional[Union[str, torch.device]] = None) -> torch.Tensor:
    """
    Get the tabulated a0 curve of a given type.

    Parameters
    ----------
    a0_type : str, optional
        Curve name, case-insensitive: ``'fastl2007ff'``, ``'fastl2007df'``,
        ``'fluctuationstrength_osses2016'`` or ``'sqat1'``. ``None`` selects the
        default ``'fastl2007ff'``.

    dtype : torch.dtype, optional
        Data type of the returned table. Default: ``torch.float64``.

    device : str or torch.device, optional
        Device of the returned table. Default: current default device.

    Returns
    -------
    torch.Tensor
        Fresh tensor of shape ``[K, 2]``: column 0 holds critical-band rates (Bark),
        strictly increasing, column 1 the gains in dB.

    Raises
    ------
    ValueError
        If ``a0_type`` is not one of the known curves.

    Examples
    --------
    >>> from torch_sqat.common.ears import get_a0_table
    >>> table = get_a0_table('FastL2007DF')
    >>> table.shape
    torch.Size([28, 2])
    """
    key = _normalize_a0_type(a0_type)
    return torch.tensor(A0_TABLES[key], dtype=dtype, device=device)

# ------------------------------------------------ Grid & Gains ----------------------------------------------

def _validate_fs_N(fs, N) -> Tuple[float, int]:
    if isinstance(fs, bool) or not 0 < fs < math.inf:
        raise ValueError(f"fs must be a positive sampling rate in Hz, got {fs}")
    if isinstance(N, bool) or not 0 < N < math.inf or int(N) != N:
        raise ValueError(f"N must be a positive integer, got {N}")
    return float(fs), int(N)


def _round_half_away(x: float) -> int:
    # MATLAB round (Python's round() is half-to-even)
    return int(math.floor(abs(x) + 0.5)) * (1 if x >= 0 else -1)


def a0_frequency_grid(fs: float,
                      N: int,
                      flow: float = A0_FLOW,
                      fhigh: float = A0_FHIGH,
                      dtype: torch.dtype = torch.float64,
                      device: Optional[Union[str, torch.device]] = None) -> Tuple[torch.Tensor, torch.Tensor]:
    r"""
    FFT bins covering the audible band.

    With the frequency resolution :math:`\Delta f = f_s / N`:

    .. math::
        N_0 = \text{round}(f_{\text{low}}/\Delta f) + 1, \qquad
        N_{\text{top}} = \text{round}(f_{\text{high}}/\Delta f) + 1

    and the grid is the 1-based bins :math:`q_b = N_0, \dots, N_{\text{top}}` at
    frequencies :math:`(q_b - 1)\Delta f`.

    Parameters
    ----------
    fs : float
        Sampling rate in Hz.

    N : int
        Transform length, defines the resolution ``fs/N``.

    flow, fhigh : float, optional
        Band limits in Hz. Default: 20 Hz and 20 kHz.

    dtype : torch.dtype, optional
        Data type of the frequency vector. Default: ``torch.float64``.

    device : str or torch.device, optional
        Device of the returned tensors.

    Returns
    -------
    qb : torch.Tensor
        1-based bin indices (``int64``), shape ``[N_top - N_0 + 1]`` (empty if
        ``N_0 > N_top``).

    freqs : torch.Tensor
        Bin frequencies in Hz, strictly increasing, same shape as ``qb``.

    Notes
    -----
    Rounding is half away from zero. The last frequency can therefore exceed
    ``fhigh`` by up to half a bin (e.g. 20004.4 Hz for ``fs=44100``, ``N=4096``).
    """
    fs, N = _validate_fs_N(fs, N)
    df = fs / N
    N0 = _round_half_away(flow / df) + 1
    Ntop = _round_half_away(fhigh / df) + 1

    qb = torch.arange(N0, max(Ntop, N0 - 1) + 1, dtype=torch.int64, device=device)
    freqs = (qb - 1).to(dtype) * df
    return qb, freqs


def interpolate_a0(bark: torch.Tensor, table: torch.Tensor) -> torch.Tensor:
    """
    Linear a0 gain at given critical-band rates.

    The dB curve ``table`` is linearly interpolated at ``bark`` and converted to a
    linear gain. Rates outside the tabulated range (or NaN rates) get a gain of
    exactly 0.

    Parameters
    ----------
    bark : torch.Tensor
        Critical-band rates in Bark, any shape.

    table : torch.Tensor
        Curve of shape ``[K, 2]`` as returned by :func:`get_a0_table`.

    Returns
    -------
    torch.Tensor
        Linear gains, same shape as ``bark``.
    """
    gains_db = torch_interp1(table[:, 0], table[:, 1], bark)
    a0 = from_db(gains_db)
    return torch.where(torch.isnan(a0), torch.zeros_like(a0), a0)


def a0_gain_vector(fs: float,
                   N: int,
                   a0_type: Optional[str] = DEFAULT_A0_TYPE,
                   dtype: torch.dtype = torch.float64,
                   device: Optional[Union[str, torch.device]] = None) -> torch.Tensor:
    """
    Full-length a0 gain vector over the ``N`` bins of a transform.

    Holds the linear a0 gain at the bins of :func:`a0_frequency_grid` and zero at
    every other bin, ready to weight an ``N``-point spectrum.

    Parameters
    ----------
    fs : float
        Sampling rate in Hz.

    N : int
        Transform length.

    a0_type : str, optional
        Curve name (case-insensitive). Default: ``'fastl2007ff'``.

    dtype : torch.dtype, optional
        Default: ``torch.float64``.

    device : str or torch.device, optional
        Device of the result.

    Returns
    -------
    torch.Tensor
        Gains of shape ``[N]``; entry ``k`` (0-based) belongs to bin ``k + 1``.

    Notes
    -----
    When ``fs`` is low enough for the 20 kHz limit to fall at or above ``fs``,
    the grid bins beyond ``N`` do not exist in an ``N``-point spectrum and are
    left out.
    """
    fs, N = _validate_fs_N(fs, N)
    table = get_a0_table(a0_type, dtype=dtype, device=device)
    qb, freqs = a0_frequency_grid(fs, N, dtype=dtype, device=device)

    a0 = torch.zeros(N, dtype=dtype, device=device)
    inside = qb <= N
    a0[qb[inside] - 1] = interpolate_a0(hz2bark(freqs[inside]), table)
    return a0


def calculate_a0(fs: float,
                 N: int,
                 a0_type: Optional[A0Type] = DEFAULT_A0_TYPE,
                 *,
                 dtype: torch.dtype = torch.float64,
                 device: Optional[Union[str, torch.device]] = None) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
    r"""
    Compensation of the outer ear transmission (a0 factor) and its FIR filter.

    Computes the a0 transmission factor from a free field (``'fastl2007ff'``,
    default) or a diffuse field (``'fastl2007df'``) to the ear, as defined in Fastl
    & Zwicker (2007), Fig. 8.18, page 226, on the FFT grid ``fs/N`` restricted to
    20 Hz - 20 kHz, and the FIR filter realising it.

    The Fastl (2007) a0 curves do not include the filtering effect of the middle
    ear, a band-pass characteristic with strong low-frequency attenuation.

    A simplified a0 compensation is obtained with
    ``a0_type='fluctuationstrength_osses2016'``, where the ear canal resonance of
    Fastl's curve is removed, i.e. a0 is roughly approximated as a low-pass filter.
    Although not explicitly stated by Osses et al. (2016), it leads to very similar
    results in the validation of their fluctuation strength algorithm.
    ``a0_type='sqat1'`` reproduces the curve of the first SQAT fluctuation strength
    code, which includes an approximation of the middle ear attenuation.

    Algorithm Overview
    ------------------
    1. **Grid**: bins :math:`q_b = N_0 \dots N_{\text{top}}` covering 20 Hz - 20 kHz
       with :math:`\Delta f = f_s/N` (see :func:`a0_frequency_grid`)
    2. **Bark mapping**: :math:`z = \text{hz2bark}(f)` (Zwicker critical bands)
    3. **Curve**: linear interpolation of the tabulated dB curve at :math:`z`
    4. **Linear gain**: :math:`a_0 = 10^{L/20}`, NaN (outside table) set to 0
    5. **FIR design**: order-``N`` linear-phase filter (see :func:`create_a0_fir`)

    Parameters
    ----------
    fs : float
        Sampling rate in Hz, positive.

    N : int
        Transform length, positive. Defines the frequency resolution ``fs/N`` and
        the FIR order.

    a0_type : {'fastl2007ff', 'fastl2007df', 'fluctuationstrength_osses2016', 'sqat1'}, optional
        a0 curve, case-insensitive. ``None`` selects the default. Default: ``'fastl2007ff'``.

    dtype : torch.dtype, optional
        Data type of all outputs. Default: ``torch.float64``.

    device : str or torch.device, optional
        Device of all outputs. Default: current default device.

    Returns
    -------
    B : torch.Tensor
        FIR filter coefficients, shape ``[N+1]`` (``[N+2]`` for odd ``N`` with a non-zero
        gain at Nyquist).

    freqs : torch.Tensor
        Analysis frequencies in Hz, strictly increasing.

    a0 : torch.Tensor
        Linear a0 gain at ``freqs`` (same length and order).

    Raises
    ------
    ValueError
        If ``fs <= 0``, ``N`` is not a positive integer, or ``a0_type`` is unknown.

    Notes
    -----
    The result depends only on ``(fs, N, a0_type)``: two calls with the same
    arguments return identical tensors.

    See Also
    --------
    a0_gain_vector : Full-length ``N``-bin version of the gain.
    torch_sqat.common.plotting.plot_a0_fir : Diagnostic plot of the filter.

    Examples
    --------
    >>> from torch_sqat import calculate_a0
    >>> N = 4096     # defines the frequency resolution: delta_f = fs/N
    >>> fs = 44100   # sampling frequency in Hz
    >>> B, freqs, a0 = calculate_a0(fs, N)
    >>> freqs.shape, a0.shape, B.shape
    (torch.Size([1857]), torch.Size([1857]), torch.Size([4097]))
    >>> B_fs, _, a0_fs = calculate_a0(fs, N, 'FluctuationStrength_Osses2016')
    """
    fs, N = _validate_fs_N(fs, N)
    key = _normalize_a0_type(a0_type)

    qb, freqs = a0_frequency_grid(fs, N, dtype=dtype, device=device)
    bark = hz2bark(freqs)
    table = get_a0_table(key, dtype=dtype, device=device)

    a0 = interpolate_a0(bark, table)
    logger.debug("a0 '%s': fs=%g Hz, N=%d, %d bins (%s)", key, fs, N, qb.numel(),
                 f"{freqs[0].item():.1f}-{freqs[-1].item():.1f} Hz" if qb.numel() else "empty")

    B = create_a0_fir(freqs, a0, N, fs)
    return B, freqs, a0

# ------------------------------------------------ Curve Module ----------------------------------------------

class A0TransmissionCurve(nn.Module):
    r"""
    Tabulated a0 transmission curve on the Bark scale.

    Maps critical-band rates to the linear a0 gain of one of the curves in
    :data:`A0_TABLES`, to weight Bark-domain representations (specific loudness,
    excitation patterns) inside a model.

    Parameters
    ----------
    a0_type : {'fastl2007ff', 'fastl2007df', 'fluctuationstrength_osses2016', 'sqat1'}, optional
        Curve name, case-insensitive. Default: ``'fastl2007ff'``.

    learnable : bool, optional
        If True, the tabulated dB gains become a trainable ``nn.Parameter``. The
        Bark sampling points remain fixed. Default: ``False``.

    dtype : torch.dtype, optional
        Data type of the curve. Default: ``torch.float32``.

    Attributes
    ----------
    bark_points : torch.Tensor
        Tabulated critical-band rates, shape ``[K]``.

    gains_db : torch.Tensor or nn.Parameter
        Tabulated gains in dB, shape ``[K]``.

    Shape
    -----
    - Input: any shape, critical-band rates in Bark
    - Output: same shape, linear gains (0 outside the tabulated 0-26 Bark range)

    Examples
    --------
    >>> import torch
    >>> from torch_sqat.common.ears import A0TransmissionCurve
    >>> curve = A0TransmissionCurve('fastl2007ff')
    >>> curve
    A0TransmissionCurve(a0_type=fastl2007ff, num_points=25, learnable=False)
    >>> curve(torch.tensor([5.0, 16.5, 30.0]))
    tensor([1.0000, 2.1257, 0.0000])
    """

    def __init__(self,
                 a0_type: A0Type = DEFAULT_A0_TYPE,
                 learnable: bool = False,
                 dtype: torch.dtype = torch.float32):
        super().__init__()

        self.a0_type = _normalize_a0_type(a0_type)
        self.learnable = learnable
        self.dtype = dtype

        table = get_a0_table(self.a0_type, dtype=dtype)
        self.register_buffer('bark_points', table[:, 0].clone())

        if learnable:
            self.gains_db = nn.Parameter(table[:, 1].clone())
        else:
            self.register_buffer('gains_db', table[:, 1].clone())

    def get_table(self) -> torch.Tensor:
        """
        Current curve as a ``[K, 2]`` tensor (Bark, dB), as in :func:`get_a0_table`.
        """
        return torch.stack([self.bark_points, self.gains_db], dim=1)

    def forward(self, bark: torch.Tensor) -> torch.Tensor:
        """
        Linear a0 gain at the critical-band rates ``bark``.

        Parameters
        ----------
        bark : torch.Tensor
            Critical-band rates in Bark, any shape.

        Returns
        -------
        torch.Tensor
            Linear gains, same shape as ``bark``.
        """
        return interpolate_a0(bark.to(self.gains_db.dtype), self.get_table())

    def get_parameters(self) -> dict:
        """
        Get current curve parameters.

        Returns
        -------
        dict
            Dictionary containing ``'a0_type'``, ``'learnable'``, ``'num_points'``
            and ``'bark_range'`` ([min, max] in Bark).
        """
        return {'a0_type': self.a0_type,
                'learnable': self.learnable,
                'num_points': self.bark_points.shape[0],
                'bark_range': [self.bark_points[0].item(), self.bark_points[-1].item()]}

    def extra_repr(self) -> str:
        return f'a0_type={self.a0_type}, num_points={self.bark_points.shape[0]}, learnable={self.learnable}'
