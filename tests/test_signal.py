import pytest

from dxpaths.spots.signal import SignalBand, classify_snr


@pytest.mark.parametrize(
    "snr,band",
    [
        (None, SignalBand.UNKNOWN),
        (-30, SignalBand.VERY_WEAK),
        (-20.01, SignalBand.VERY_WEAK),
        (-20, SignalBand.WEAK),
        (-10.5, SignalBand.WEAK),
        (-10, SignalBand.MODERATE),
        (-0.1, SignalBand.MODERATE),
        (0, SignalBand.GOOD),
        (4.99, SignalBand.GOOD),
        (5, SignalBand.EXCELLENT),
        (30, SignalBand.EXCELLENT),
    ],
)
def test_classify_snr(snr, band):
    assert classify_snr(snr) is band


def test_weights_grow_with_strength():
    ordered = SignalBand.ordered()[1:]
    weights = [band.weight for band in ordered]
    assert weights == sorted(weights)
    assert len(set(weights)) == len(weights)


def test_every_band_has_a_color():
    colors = {band.color for band in SignalBand}
    assert len(colors) == len(SignalBand)
    assert SignalBand.EXCELLENT.label == "Excellent"
