"""
Interpolation and FIR Design Utilities
======================================

PyTorch-native implementations of the interpolation and filter design operations
needed to turn tabulated transfer curves into FIR filters, with device placement
and gradient flow support.

Author:
    Stefano Giacomelli - Ph.D. candidate @ DISIM dpt. - University of L'Aquila

License:
    GNU General Public License v3.0 or later (GPLv3+)

Contents
--------

**Interpolation:**
    - `torch_interp1`: Piecewise-linear interpolation (MATLAB ``interp1`` semantics)

**FIR Design:**
    - `torch_firwin2`: FIR filter design via frequency sampling
    - `create_a0_fir`: FIR filter matching an a0 transmission curve on a frequency grid

Design Philosophy
-----------------
- **GPU-Friendly**: All operations use PyTorch tensors for CUDA/MPS acceleration
- **Gradient-Safe**: Gains flow through interpolation and design without ``.detach()``
- **Reference-Compatible**: ``torch_firwin2`` follows ``scipy.signal.firwin2`` step by
  step, ``torch_interp1`` follows MATLAB ``interp1`` (NaN outside the data range)

See Also
--------
- `torch_sqat.common.ears`: a0 transmission curves built on these utilities
- `torch_sqat.common.plotting`: Diagnostic plots of the designed filters
"""

import logging
import math
from typing import Union

import torch

logger = logging.getLogger(__name__)

# ------------------------------------------------ Interpolation ---------------------------------------------

def torch_interp1(x: torch.Tensor,
                  y: torch.Tensor,
                  xi: torch.Tensor,
                  extrapolate: bool = False) -> torch.Tensor:
    r"""
    Piecewise-linear interpolation (PyTorch native).

    Equivalent to MATLAB/Octave ``interp1(x, y, xi)`` with the default ``'linear'``
    method: query points outside ``[x[0], x[-1]]`` return NaN instead of being
    clamped (as ``numpy.interp`` would do).

    Parameters
    ----------
    x : torch.Tensor
        Sample points, shape (K,), strictly increasing, K >= 2.

    y : torch.Tensor
        Sample values, shape (K,).

    xi : torch.Tensor
        Query points, any shape.

    extrapolate : bool, optional
        If True, values outside the data range are linearly extrapolated from the
        first/last segment (``interp1(..., 'extrap')``). Default: ``False``.

    Returns
    -------
    torch.Tensor
        Interpolated values, same shape as ``xi``.

    Notes
    -----
    For a query point :math:`x_k \le \xi < x_{k+1}`:

    .. math::
        y(\xi) = y_k + \frac{\xi - x_k}{x_{k+1} - x_k} (y_{k+1} - y_k)

    Queries falling exactly on a sample point return that sample value exactly,
    NaN queries propagate as NaN. Gradients flow with respect to ``y`` and ``xi``.
    The result has the dtype of ``xi``; integer queries are first promoted to the
    dtype of ``y``.
    """
    xi = torch.as_tensor(xi)
    y = torch.as_tensor(y)
    # Integer queries must not truncate the sample table
    if not torch.is_floating_point(xi):
        xi = xi.to(y.dtype if torch.is_floating_point(y) else torch.get_default_dtype())
    x = torch.as_tensor(x).to(device=xi.device, dtype=xi.dtype).contiguous()
    y = y.to(device=xi.device, dtype=xi.dtype)
    n = x.shape[0]
    if n < 2:
        raise ValueError(f"torch_interp1 requires at least 2 sample points, got {n}")

    # Segment index k such that x[k] <= xi < x[k+1]
    idx = torch.searchsorted(x, xi.contiguous(), right=True) - 1
    idx = idx.clamp(0, n - 2)

    x0, x1 = x[idx], x[idx + 1]
    y0, y1 = y[idx], y[idx + 1]
    t = (xi - x0) / (x1 - x0)
    yi = y0 + t * (y1 - y0)

    # Last sample point is reached with t == 1, return it exactly
    yi = torch.where(xi == x[-1], y[-1], yi)

    if not extrapolate:
        outside = (xi < x[0]) | (xi > x[-1])
        yi = torch.where(outside, torch.full_like(yi, float('nan')), yi)

    return yi

# ------------------------------------------------- FIR Design -----------------------------------------------

def torch_firwin2(numtaps: int,
                  freq: torch.Tensor,
                  gain: torch.Tensor,
                  fs: float = 2.0) -> torch.Tensor:
    """
    FIR filter design using frequency sampling method (PyTorch native).

    Equivalent to ``scipy.signal.firwin2(numtaps, freq, gain, fs=fs)`` with the
    default Hamming window, but uses PyTorch operations.

    Parameters
    ----------
    numtaps : int
        Number of filter coefficients (filter order + 1).

    freq : torch.Tensor
        Frequency points in Hz, shape (M,), strictly increasing, starting at 0 and
        ending at ``fs/2``.

    gain : torch.Tensor
        Desired gain at each frequency point, shape (M,).

    fs : float
        Sampling frequency in Hz. Default: 2.0 (normalized).

    Returns
    -------
    torch.Tensor
        Linear-phase FIR filter coefficients, shape (numtaps,).

    Raises
    ------
    ValueError
        If the frequency points are malformed, or if ``numtaps`` is even while the
        gain at Nyquist is non-zero (a type II filter is zero at Nyquist).

    Notes
    -----
    Follows scipy.signal.firwin2 algorithm:
    1. Interpolate gain to a uniform grid of ``1 + 2**ceil(log2(numtaps))`` points
    2. Apply a linear phase shift of ``(numtaps - 1) / 2`` samples
    3. Inverse real FFT and keep the first ``numtaps`` coefficients
    4. Apply (symmetric) Hamming window
    """
    freq = torch.as_tensor(freq)
    gain = torch.as_tensor(gain, dtype=freq.dtype, device=freq.device)
    device = freq.device
    dtype = freq.dtype
    nyq = 0.5 * fs

    if numtaps < 1:
        raise ValueError(f"numtaps must be positive, got {numtaps}")
    if freq.ndim != 1 or freq.shape != gain.shape:
        raise ValueError(f"freq and gain must be 1D with the same length, "
                         f"got {tuple(freq.shape)} and {tuple(gain.shape)}")
    if freq.shape[0] < 2:
        raise ValueError("freq must contain at least 0 and fs/2")
    if freq[0] != 0 or freq[-1] != nyq:
        raise ValueError(f"freq must start with 0 and end with fs/2 = {nyq}")
    if torch.any(torch.diff(freq) <= 0):
        raise ValueError("freq must be strictly increasing")
    if numtaps % 2 == 0 and gain[-1] != 0:
        raise ValueError("A filter with an even number of coefficients must have zero gain at the Nyquist frequency.")

    nfreqs = 1 + 2 ** int(math.ceil(math.log2(numtaps)))

    # Desired response on a uniform mesh
    x = torch.linspace(0.0, nyq, nfreqs, device=device, dtype=dtype)
    fx = torch_interp1(freq, gain, x.clamp(0.0, nyq))

    # Delay by (numtaps - 1)/2 so the first numtaps samples of the IFFT are the filter.
    # Phase is reduced modulo 2*pi on integers first, float32 cannot hold the raw angle.
    k = torch.arange(nfreqs, dtype=torch.int64)
    m = torch.remainder((numtaps - 1) * k, 4 * (nfreqs - 1))
    phase = (-math.pi / (2 * (nfreqs - 1)) * m.to(torch.float64)).to(device=device, dtype=dtype)
    shift = torch.polar(torch.ones_like(x), phase)
    out_full = torch.fft.irfft(fx * shift)

    window = torch.hamming_window(numtaps, periodic=False, device=device, dtype=dtype)
    return out_full[:numtaps] * window


def create_a0_fir(freqs: torch.Tensor,
                  a0: torch.Tensor,
                  N: int,
                  fs: Union[int, float]) -> torch.Tensor:
    """
    Design the FIR filter realising an a0 transmission curve.

    The gains ``a0`` (linear scale) sampled at ``freqs`` are extended to 0 Hz and to
    the Nyquist frequency by repeating the first and the last gain, and the resulting
    response is approximated with a linear-phase FIR filter of order ``N``.

    Parameters
    ----------
    freqs : torch.Tensor
        Frequencies in Hz at which ``a0`` is specified, shape (M,), increasing.

    a0 : torch.Tensor
        Linear gains, shape (M,).

    N : int
        Filter order (``N + 1`` taps), normally the transform length that defined
        the frequency grid.

    fs : float
        Sampling frequency in Hz.

    Returns
    -------
    torch.Tensor
        FIR coefficients of shape ``(N + 1,)``, or ``(N + 2,)`` when ``N`` is odd and
        the Nyquist gain is non-zero (the order is raised to the next even value, as
        MATLAB ``fir2`` does).

    Notes
    -----
    - Only points strictly inside ``(0, fs/2)`` are used: frequencies at or above
      Nyquist cannot be realised by a filter running at ``fs``.
    - If no point is left the target response is identically zero and an all-zero
      filter is returned.
    - This function has no plotting side effect, see
      :func:`torch_sqat.common.plotting.plot_a0_fir` for the diagnostic figure.

    Examples
    --------
    >>> import torch
    >>> from torch_sqat.common.filters import create_a0_fir
    >>> freqs = torch.linspace(20, 20000, 100, dtype=torch.float64)
    >>> B = create_a0_fir(freqs, torch.ones_like(freqs), N=512, fs=44100)
    >>> B.shape
    torch.Size([513])
    """
    freqs = torch.as_tensor(freqs)
    a0 = torch.as_tensor(a0, device=freqs.device)
    if freqs.dtype != a0.dtype:
        a0 = a0.to(freqs.dtype)

    if not fs > 0:
        raise ValueError(f"fs must be positive, got {fs}")
    if int(N) != N or N <= 0:
        raise ValueError(f"N must be a positive integer, got {N}")
    if freqs.shape != a0.shape:
        raise ValueError(f"freqs and a0 must have the same shape, got {tuple(freqs.shape)} and {tuple(a0.shape)}")

    fs = float(fs)
    order = int(N)
    nyq = fs / 2
    device = freqs.device
    dtype = freqs.dtype

    # Clip to the realisable band
    keep = (freqs > 0) & (freqs < nyq)
    f_keep = freqs[keep]
    g_keep = a0[keep]

    if f_keep.numel() == 0:
        logger.debug("No a0 design point below Nyquist (fs=%g Hz), returning a zero filter", fs)
        return torch.zeros(order + 1, device=device, dtype=dtype)

    frequencies = torch.cat([torch.zeros(1, device=device, dtype=dtype),
                             f_keep,
                             torch.full((1,), nyq, device=device, dtype=dtype)])
    amplitudes = torch.cat([g_keep[:1], g_keep, g_keep[-1:]])

    if order % 2 == 1 and amplitudes[-1] != 0:
        order += 1

    logger.debug("Designing a0 FIR: %d design points, order %d, fs=%g Hz", frequencies.numel(), order, fs)
    return torch_firwin2(order + 1, frequencies, amplitudes, fs=fs)
