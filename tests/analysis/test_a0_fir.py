"""
a0 FIR Filter - Test Suite

Contents:
1. test_a0_fir_analysis: Impulse and magnitude response of the a0 FIR filter
2. test_torch_firwin2_matches_scipy: torch_firwin2 against scipy.signal.firwin2

Structure:
- Filter length and linear-phase symmetry
- Magnitude response vs target a0 in the 200 Hz - 12 kHz band
- Diagnostic figure through plot_a0_fir
- Coefficient-level comparison with SciPy for odd and even tap counts

Figures generated:
- a0_fir_analysis_<a0_type>.png: 2-panel plot, impulse response and target vs FIR magnitude
"""

import matplotlib.pyplot as plt
import numpy as np
import pytest
import torch
from pathlib import Path
from scipy import signal as scipy_signal

from torch_sqat.common.ears import A0_TABLES, calculate_a0
from torch_sqat.common.filters import torch_firwin2
from torch_sqat.common.plotting import fir_frequency_response, plot_a0_fir


@pytest.mark.parametrize("a0_type", list(A0_TABLES))
def test_a0_fir_analysis(a0_type):
    """FIR magnitude response follows the a0 target."""

    TEST_FIGURES_DIR = Path(__file__).parent.parent.parent / 'test_figures'
    TEST_FIGURES_DIR.mkdir(exist_ok=True)

    fs = 44100
    N = 4096
    B, freqs, a0 = calculate_a0(fs, N, a0_type)

    print("=" * 80)
    print(f"a0 FIR FILTER TEST ({a0_type})")
    print("=" * 80)
    print(f"  Taps: {len(B)}")

    # Linear phase, order N
    assert B.shape == (N + 1,)
    assert torch.allclose(B, B.flip(0), atol=1e-12)

    # Magnitude at the grid frequencies
    _, H = scipy_signal.freqz(B.numpy(), 1, worN=freqs.numpy(), fs=fs)
    H_db = 20 * np.log10(np.abs(H) + 1e-12)
    a0_db = 20 * np.log10(a0.numpy() + 1e-12)

    band = (freqs.numpy() >= 200) & (freqs.numpy() <= 12000)
    max_err = np.max(np.abs(H_db[band] - a0_db[band]))
    print(f"  Max deviation 200 Hz - 12 kHz: {max_err:.3f} dB")
    assert max_err < 1.0

    fig, axes = plt.subplots(2, 1, figsize=(12, 8))
    axes[0].plot(np.arange(len(B)) / fs * 1000, B.numpy(), 'b-', linewidth=0.8)
    axes[0].set_xlabel('Time (ms)')
    axes[0].set_ylabel('Amplitude')
    axes[0].set_title(f'a0 FIR impulse response ({a0_type})')
    axes[0].grid(True, alpha=0.3)
    plot_a0_fir(freqs, a0, B, fs=fs, ax=axes[1])

    plt.tight_layout()
    plt.savefig(TEST_FIGURES_DIR / f'a0_fir_analysis_{a0_type}.png', dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"\n✓ Saved: a0_fir_analysis_{a0_type}.png")


@pytest.mark.parametrize("numtaps, gain_nyq", [(101, 0.5), (257, 0.0), (64, 0.0), (4097, 0.01)])
def test_torch_firwin2_matches_scipy(numtaps, gain_nyq):
    """Same coefficients as scipy.signal.firwin2 (Hamming window)."""
    fs = 16000.0
    freq = [0.0, 500.0, 1000.0, 3000.0, 6000.0, fs / 2]
    gain = [1.0, 1.0, 2.0, 0.5, 0.1, gain_nyq]

    h_ref = scipy_signal.firwin2(numtaps, freq, gain, fs=fs)
    h = torch_firwin2(numtaps,
                      torch.tensor(freq, dtype=torch.float64),
                      torch.tensor(gain, dtype=torch.float64),
                      fs=fs)

    assert h.shape == (numtaps,)
    np.testing.assert_allclose(h.numpy(), h_ref, rtol=1e-7, atol=1e-10)


def test_fir_frequency_response_grid():
    """Diagnostic response spans 0 Hz up to Nyquist."""
    B, _, _ = calculate_a0(44100, 1024)
    f, H = fir_frequency_response(B, fs=44100, nfft=2048)

    assert f.shape == H.shape == (1024,)
    assert f[0] == 0.0
    assert f[-1] < 22050.0
    assert np.iscomplexobj(H)


if __name__ == '__main__':
    for a0_type in A0_TABLES:
        test_a0_fir_analysis(a0_type)
