"""Functional Test Suite for filters.py

Contents:
- torch_interp1: knots, NaN outside the data range, extrapolation, gradients
- torch_firwin2: argument validation
- create_a0_fir: band clipping, edge padding, order handling

Usage:
    pytest test_filters.py -v
"""

import warnings

import pytest
import torch

from torch_sqat.common.filters import create_a0_fir, torch_firwin2, torch_interp1


# ================================================================================================
# torch_interp1
# ================================================================================================

def test_interp1_linear():
    x = torch.tensor([0.0, 1.0, 3.0], dtype=torch.float64)
    y = torch.tensor([0.0, 2.0, -2.0], dtype=torch.float64)
    xi = torch.tensor([0.0, 0.5, 1.0, 2.0, 3.0], dtype=torch.float64)
    assert torch_interp1(x, y, xi).tolist() == [0.0, 1.0, 2.0, 0.0, -2.0]


def test_interp1_outside_range():
    x = torch.tensor([0.0, 1.0, 3.0], dtype=torch.float64)
    y = torch.tensor([0.0, 2.0, -2.0], dtype=torch.float64)
    xi = torch.tensor([-1.0, 4.0, float('nan')], dtype=torch.float64)

    assert torch.all(torch.isnan(torch_interp1(x, y, xi)))

    yi = torch_interp1(x, y, xi, extrapolate=True)
    assert yi[:2].tolist() == [-2.0, -4.0]
    assert torch.isnan(yi[2])


def test_interp1_keeps_query_shape_and_dtype():
    x = torch.tensor([0.0, 1.0], dtype=torch.float64)
    y = torch.tensor([1.0, 3.0], dtype=torch.float64)
    xi = torch.full((2, 3), 0.25, dtype=torch.float32)
    yi = torch_interp1(x, y, xi)
    assert yi.shape == (2, 3)
    assert yi.dtype == torch.float32
    assert torch.allclose(yi, torch.full((2, 3), 1.5))


def test_interp1_integer_queries():
    """Integer query points take the dtype of the samples, the table is not truncated."""
    x = torch.tensor([0.0, 1.0, 3.0], dtype=torch.float64)
    y = torch.tensor([0.5, 2.25, -2.0], dtype=torch.float64)
    yi = torch_interp1(x, y, torch.tensor([0, 1, 2, 3]))
    assert yi.dtype == torch.float64
    assert yi.tolist() == [0.5, 2.25, 0.125, -2.0]


def test_interp1_strided_samples_no_warning():
    """Column views of a [K, 2] table are valid sample vectors."""
    table = torch.tensor([[0.0, 1.0], [1.0, 3.0], [2.0, 2.0]], dtype=torch.float64)
    assert not table[:, 0].is_contiguous()
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        yi = torch_interp1(table[:, 0], table[:, 1], torch.tensor([0.5, 1.5], dtype=torch.float64))
    assert yi.tolist() == [2.0, 2.5]


def test_interp1_gradient():
    x = torch.tensor([0.0, 1.0, 2.0], dtype=torch.float64)
    y = torch.tensor([0.0, 1.0, 0.0], dtype=torch.float64, requires_grad=True)
    torch_interp1(x, y, torch.tensor([0.25], dtype=torch.float64)).sum().backward()
    assert y.grad.tolist() == [0.75, 0.25, 0.0]


def test_interp1_too_few_points():
    with pytest.raises(ValueError, match="at least 2"):
        torch_interp1(torch.tensor([0.0]), torch.tensor([1.0]), torch.tensor([0.0]))


# ================================================================================================
# torch_firwin2
# ================================================================================================

@pytest.mark.parametrize("freq, gain, numtaps", [
    ([0.0, 1.0], [1.0, 1.0], 10),          # even length, non-zero Nyquist gain
    ([0.1, 1.0], [1.0, 1.0], 11),          # does not start at 0
    ([0.0, 0.9], [1.0, 1.0], 11),          # does not end at Nyquist
    ([0.0, 0.5, 0.5, 1.0], [1, 1, 0, 0], 11),  # not strictly increasing
    ([0.0, 1.0], [1.0, 1.0, 1.0], 11),     # length mismatch
    ([0.0, 1.0], [1.0, 1.0], 0),
])
def test_firwin2_invalid(freq, gain, numtaps):
    with pytest.raises(ValueError):
        torch_firwin2(numtaps,
                      torch.tensor(freq, dtype=torch.float64),
                      torch.tensor(gain, dtype=torch.float64))


def test_firwin2_allpass_dc_gain():
    h = torch_firwin2(129, torch.tensor([0.0, 1.0], dtype=torch.float64),
                      torch.tensor([1.0, 1.0], dtype=torch.float64))
    assert h.shape == (129,)
    assert h.argmax().item() == 64
    assert torch.allclose(h, h.flip(0))


# ================================================================================================
# create_a0_fir
# ================================================================================================

def test_create_a0_fir_flat_response():
    fs = 16000.0
    freqs = torch.linspace(50, 7000, 50, dtype=torch.float64)
    B = create_a0_fir(freqs, torch.ones_like(freqs), N=256, fs=fs)
    assert B.shape == (257,)
    # Edges padded with the first/last gain: unit gain everywhere, DC included
    assert B.sum().item() == pytest.approx(1.0, abs=1e-3)


def test_create_a0_fir_ignores_points_above_nyquist():
    fs = 16000.0
    freqs = torch.tensor([100.0, 4000.0, 8000.0, 12000.0], dtype=torch.float64)
    a0 = torch.tensor([1.0, 1.0, 5.0, 5.0], dtype=torch.float64)
    B = create_a0_fir(freqs, a0, N=128, fs=fs)
    B_ref = create_a0_fir(freqs[:2], a0[:2], N=128, fs=fs)
    assert torch.equal(B, B_ref)


def test_create_a0_fir_odd_order():
    freqs = torch.tensor([100.0, 1000.0], dtype=torch.float64)
    B = create_a0_fir(freqs, torch.tensor([1.0, 0.5], dtype=torch.float64), N=63, fs=8000)
    assert B.shape == (65,)

    # Zero gain at Nyquist: the odd order is kept
    B = create_a0_fir(freqs, torch.tensor([1.0, 0.0], dtype=torch.float64), N=63, fs=8000)
    assert B.shape == (64,)


def test_create_a0_fir_no_design_points():
    freqs = torch.tensor([5000.0, 6000.0], dtype=torch.float64)
    B = create_a0_fir(freqs, torch.ones(2, dtype=torch.float64), N=33, fs=8000)
    assert B.shape == (34,)
    assert torch.all(B == 0)


@pytest.mark.parametrize("N, fs", [(0, 8000), (-4, 8000), (10.5, 8000), (16, 0), (16, -1)])
def test_create_a0_fir_invalid(N, fs):
    freqs = torch.tensor([100.0, 1000.0], dtype=torch.float64)
    with pytest.raises(ValueError):
        create_a0_fir(freqs, torch.ones(2, dtype=torch.float64), N=N, fs=fs)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
