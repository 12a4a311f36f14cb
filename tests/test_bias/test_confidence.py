"""Tests for the confidence grader and aligned-surprise counter."""

import pytest

from macro_bias.bias.confidence import (
    base_confidence,
    confidence_advanced,
    confidence_from,
    confidence_from_score,
    count_aligned_big_surprises,
)
from macro_bias.types import Confidence, Posture, UsdStrength

ALTA, MEDIA, BAJA = Confidence.ALTA, Confidence.MEDIA, Confidence.BAJA


class TestConfidenceFrom:
    def test_strong_distance_overrides_usd(self):
        assert confidence_from(0.55, usd_label=UsdStrength.NEUTRAL) == ALTA
        assert confidence_from(-0.50, usd_label=UsdStrength.NEUTRAL) == ALTA

    def test_mid_band_depends_on_usd(self):
        assert confidence_from(0.35, usd_label=UsdStrength.NEUTRAL) == MEDIA
        assert confidence_from(0.35, usd_label=UsdStrength.STRONG) == ALTA
        assert confidence_from(-0.30, usd_label=UsdStrength.WEAK) == ALTA

    def test_low_distance_is_baja(self):
        assert confidence_from(0.29, usd_label=UsdStrength.STRONG) == BAJA
        assert confidence_from(0.0) == BAJA


class TestConfidenceAdvanced:
    def test_baja_with_corr_and_two_surprises_is_alta(self):
        assert confidence_advanced(BAJA, 0.6, 2) == ALTA

    def test_points(self):
        assert confidence_advanced(BAJA, None, 0) == BAJA
        assert confidence_advanced(BAJA, 0.49, 0) == BAJA
        assert confidence_advanced(BAJA, -0.5, 0) == MEDIA
        assert confidence_advanced(BAJA, None, 1) == MEDIA
        assert confidence_advanced(MEDIA, 0.7, 1) == ALTA
        assert confidence_advanced(MEDIA, 0.1, 1) == MEDIA
        assert confidence_advanced(ALTA, None, 0) == MEDIA
        assert confidence_advanced(ALTA, 0.5, 0) == ALTA

    def test_more_than_two_surprises_capped(self):
        assert confidence_advanced(BAJA, None, 5) == MEDIA


class TestEntryPointsAgree:
    @pytest.mark.parametrize("score", [0.0, 0.2, 0.3, 0.45, 0.5, 0.8, -0.35, -0.9])
    @pytest.mark.parametrize("usd", list(UsdStrength))
    @pytest.mark.parametrize("corr", [None, 0.2, -0.7])
    @pytest.mark.parametrize("aligned", [0, 1, 3])
    def test_two_step_equals_single_call(self, score, usd, corr, aligned):
        strong = usd in (UsdStrength.STRONG, UsdStrength.WEAK)
        two_step = confidence_advanced(confidence_from(score, 0.3, usd), corr, aligned)
        assert confidence_from_score(score, strong, corr, aligned) == two_step

    def test_base_band(self):
        assert base_confidence(0.5, False) == ALTA
        assert base_confidence(0.3, False) == MEDIA
        assert base_confidence(0.3, True) == ALTA
        assert base_confidence(0.1, True) == BAJA


class TestAlignedBigSurprises:
    PRIORITY = ("cpi_yoy", "corecpi_yoy", "corepce_yoy", "payems_delta", "pmi_mfg")

    def _hawkish_set(self, make_indicator, z=None):
        return [
            make_indicator("CPIAUCSL", 3.5, z_score=z),
            make_indicator("CPILFESL", 3.4, z_score=z),
            make_indicator("PAYEMS", 120.0),  # Neutral
            make_indicator("UNRATE", 3.5),  # Hawkish but not a big indicator
        ]

    def test_neutral_usd_is_zero(self, make_indicator):
        items = self._hawkish_set(make_indicator)
        assert count_aligned_big_surprises(items, self.PRIORITY, UsdStrength.NEUTRAL) == 0

    def test_strong_usd_counts_hawkish(self, make_indicator):
        items = self._hawkish_set(make_indicator)
        assert count_aligned_big_surprises(items, self.PRIORITY, UsdStrength.STRONG) == 2

    def test_weak_usd_counts_dovish(self, make_indicator):
        items = self._hawkish_set(make_indicator)
        assert count_aligned_big_surprises(items, self.PRIORITY, UsdStrength.WEAK) == 0

    def test_only_priority_keys_scanned(self, make_indicator):
        items = self._hawkish_set(make_indicator)
        assert count_aligned_big_surprises(items, ("cpi_yoy",), UsdStrength.STRONG) == 1
        assert count_aligned_big_surprises(items, (), UsdStrength.STRONG) == 0

    def test_non_big_priority_key_ignored(self, make_indicator):
        items = self._hawkish_set(make_indicator)
        assert count_aligned_big_surprises(items, ("unrate",), UsdStrength.STRONG) == 0

    def test_canonical_priority_keys(self, make_indicator):
        items = self._hawkish_set(make_indicator)
        assert count_aligned_big_surprises(items, ("CPIAUCSL", "cpi_yoy"), UsdStrength.STRONG) == 1

    def test_z_sum_lifts_single_to_double(self, make_indicator):
        items = [make_indicator("CPIAUCSL", 3.5, z_score=3.2)]
        assert count_aligned_big_surprises(items, ("cpi_yoy",), UsdStrength.STRONG) == 2

    def test_small_z_ignored(self, make_indicator):
        items = [make_indicator("CPIAUCSL", 3.5, z_score=0.9)]
        assert count_aligned_big_surprises(items, ("cpi_yoy",), UsdStrength.STRONG) == 1

    def test_negative_z_counts_by_magnitude(self, make_indicator):
        items = [
            make_indicator("PCEPILFE", 2.0, z_score=-1.6),
            make_indicator("PAYEMS", 40.0, z_score=-1.5),
        ]
        keys = ("corepce_yoy", "payems_delta")
        assert count_aligned_big_surprises(items, keys, UsdStrength.WEAK) == 2

    def test_posture_override_respected(self, make_indicator):
        items = [make_indicator("USPMI", 55.0, posture=Posture.NEUTRAL)]
        assert count_aligned_big_surprises(items, ("pmi_mfg",), UsdStrength.STRONG) == 0
