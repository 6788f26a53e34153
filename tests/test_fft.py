import numpy as np
import pytest

from crystalfft.fft import ComplexFFT3D, RealFFT3D


@pytest.fixture
def field():
    rng = np.random.default_rng(7)
    return rng.standard_normal((6, 5, 4))


def test_complex_shape_halves_first_axis():
    fft = RealFFT3D((6, 5, 4))
    assert fft.complex_shape == (4, 5, 4)
    assert RealFFT3D((7, 3, 2)).complex_shape == (4, 3, 2)


def test_forward_matches_full_spectrum(field):
    fft = RealFFT3D(field.shape)
    spectrum = fft.forward(field)
    assert spectrum.shape == fft.complex_shape
    full = np.fft.fftn(field)
    np.testing.assert_allclose(spectrum, full[: fft.complex_shape[0]], atol=1e-12)


def test_round_trip_scaled(field):
    fft = RealFFT3D(field.shape, scale=True)
    np.testing.assert_allclose(fft.backward(fft.forward(field)), field, atol=1e-12)


def test_round_trip_odd_first_axis():
    rng = np.random.default_rng(3)
    data = rng.standard_normal((5, 4, 3))
    fft = RealFFT3D(data.shape, scale=True)
    np.testing.assert_allclose(fft.backward(fft.forward(data)), data, atol=1e-12)


def test_unscaled_backward_multiplies_by_size(field):
    fft = RealFFT3D(field.shape, scale=False)
    result = fft.backward(fft.forward(field))
    np.testing.assert_allclose(result, field * fft.size, atol=1e-9)


def test_constant_field_has_only_mean_mode():
    data = np.full((4, 4, 2), 2.5)
    spectrum = RealFFT3D(data.shape).forward(data)
    assert spectrum[0, 0, 0] == pytest.approx(data.sum())
    rest = spectrum.copy()
    rest[0, 0, 0] = 0
    assert np.max(np.abs(rest)) < 1e-12


def test_wrong_real_shape_raises():
    fft = RealFFT3D((4, 4, 4))
    with pytest.raises(ValueError):
        fft.forward(np.zeros((4, 4, 3)))


def test_wrong_complex_shape_raises():
    fft = RealFFT3D((4, 4, 4))
    with pytest.raises(ValueError):
        fft.backward(np.zeros((4, 4, 4), dtype=complex))


@pytest.mark.parametrize("shape", [(4, 4), (0, 2, 2), (2, -1, 3)])
def test_invalid_grid_shape_raises(shape):
    with pytest.raises(ValueError):
        RealFFT3D(shape)


def test_complex_round_trip():
    rng = np.random.default_rng(11)
    data = rng.standard_normal((3, 4, 5)) + 1j * rng.standard_normal((3, 4, 5))
    fft = ComplexFFT3D(data.shape)
    np.testing.assert_allclose(fft.backward(fft.forward(data)), data, atol=1e-12)


def test_complex_forward_of_real_data(field):
    fft = ComplexFFT3D(field.shape)
    spectrum = fft.forward(field)
    np.testing.assert_allclose(spectrum, np.fft.fftn(field), atol=1e-12)
    back = fft.backward(spectrum)
    np.testing.assert_allclose(back.real, field, atol=1e-12)
    assert np.max(np.abs(back.imag)) < 1e-12


def test_complex_wrong_shape_raises():
    with pytest.raises(ValueError):
        ComplexFFT3D((2, 2, 2)).backward(np.zeros((2, 2, 3)))