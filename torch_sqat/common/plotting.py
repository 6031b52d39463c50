"""
Diagnostic Plots
================

Author:
    Stefano Giacomelli - Ph.D. candidate @ DISIM dpt. - University of L'Aquila

License:
    GNU General Public License v3.0 or later (GPLv3+)

Explicit visualisation of a0 curves and of the FIR filters designed from them.
Nothing in the computational path draws figures: call these functions when a
comparison plot is wanted.
"""

from typing import Iterable, Optional, Tuple, Union

import matplotlib.pyplot as plt
import numpy as np
import torch
from scipy import signal as scipy_signal

from torch_sqat.common.ears import A0_TABLES, calculate_a0


def _as_numpy(x: Union[torch.Tensor, np.ndarray]) -> np.ndarray:
    if isinstance(x, torch.Tensor):
        return x.detach().cpu().numpy()
    return np.asarray(x)


def fir_frequency_response(B: Union[torch.Tensor, np.ndarray],
                           fs: float,
                           nfft: int = 8192) -> Tuple[np.ndarray, np.ndarray]:
    """
    Frequency response of an FIR filter.

    Parameters
    ----------
    B : torch.Tensor or np.ndarray
        FIR coefficients, shape ``[numtaps]``.

    fs : float
        Sampling rate in Hz.

    nfft : int, optional
        The response is evaluated at ``nfft // 2`` frequencies from 0 Hz to just
        below Nyquist. Default: 8192.

    Returns
    -------
    freqs : np.ndarray
        Frequencies in Hz, shape ``[nfft // 2]``.

    H : np.ndarray
        Complex frequency response, shape ``[nfft // 2]``.
    """
    freqs, H = scipy_signal.freqz(_as_numpy(B), 1, worN=nfft // 2, fs=fs)
    return freqs, H


def plot_a0_fir(freqs: Union[torch.Tensor, np.ndarray],
                a0: Union[torch.Tensor, np.ndarray],
                B: Union[torch.Tensor, np.ndarray],
                fs: float,
                ax: Optional[plt.Axes] = None) -> plt.Figure:
    """
    Compare a target a0 curve with the magnitude response of its FIR filter.

    Parameters
    ----------
    freqs, a0 : torch.Tensor or np.ndarray
        Target frequencies (Hz) and linear gains, as returned by
        :func:`~torch_sqat.common.ears.calculate_a0`.

    B : torch.Tensor or np.ndarray
        FIR coefficients designed for the target.

    fs : float
        Sampling rate in Hz.

    ax : matplotlib.axes.Axes, optional
        Axes to draw into. A new figure is created if omitted.

    Returns
    -------
    matplotlib.figure.Figure
        The figure holding the plot.

    Examples
    --------
    >>> from torch_sqat import calculate_a0
    >>> from torch_sqat.common.plotting import plot_a0_fir
    >>> B, freqs, a0 = calculate_a0(44100, 4096)
    >>> fig = plot_a0_fir(freqs, a0, B, fs=44100)
    >>> fig.savefig('a0_fir.png')
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    B_np = _as_numpy(B)
    f_resp, H = fir_frequency_response(B_np, fs, nfft=max(8192, 2 * len(B_np)))

    ax.plot(_as_numpy(freqs), 20 * np.log10(np.abs(_as_numpy(a0)) + 1e-10), 'r--', linewidth=2, label='Target a0')
    ax.plot(f_resp, 20 * np.log10(np.abs(H) + 1e-10), 'b-', linewidth=1, label=f'FIR ({len(B_np)} taps)')
    ax.set_xlabel('Frequency (Hz)')
    ax.set_ylabel('Gain (dB)')
    ax.set_title('a0 transmission: target vs FIR magnitude response')
    ax.set_xlim([0, fs / 2])
    ax.set_ylim([-93, 13])
    ax.grid(True, alpha=0.3)
    ax.legend()

    return fig


def plot_a0_curves(fs: float = 44100,
                   N: int = 4096,
                   a0_types: Optional[Iterable[str]] = None,
                   ax: Optional[plt.Axes] = None) -> plt.Figure:
    """
    Compare a0 curves on the same frequency grid.

    Parameters
    ----------
    fs : float, optional
        Sampling rate in Hz. Default: 44100.

    N : int, optional
        Transform length. Default: 4096.

    a0_types : iterable of str, optional
        Curves to draw. Default: all of :data:`~torch_sqat.common.ears.A0_TABLES`.

    ax : matplotlib.axes.Axes, optional
        Axes to draw into. A new figure is created if omitted.

    Returns
    -------
    matplotlib.figure.Figure
        The figure holding the plot.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(10, 5))
    else:
        fig = ax.figure

    styles = ['b-', 'r--', 'g-.', 'k:']
    for i, a0_type in enumerate(a0_types if a0_types is not None else A0_TABLES):
        _, freqs, a0 = calculate_a0(fs, N, a0_type)
        a0_db = 20 * np.log10(np.abs(a0.numpy()) + 1e-10)
        ax.semilogx(freqs.numpy(), a0_db, styles[i % len(styles)], linewidth=1.5, label=a0_type)

    ax.set_xlabel('Linear frequency (Hz)')
    ax.set_ylabel('Gain factor due to the a0 transmission curve (dB)')
    ax.set_xlim([20, 20000])
    ax.set_ylim([-93, 13])
    ax.grid(True, which='both', alpha=0.3)
    ax.legend()

    return fig
