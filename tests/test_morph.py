"""
Tests for the morph combinator, the operator registry and TransformEngine.
Run from project root: python -m pytest tests/test_morph.py -v
"""
import sys
import os
from concurrent.futures import ThreadPoolExecutor

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest
import torch
from transmute.core.errors import UnsupportedTransformationError
from transmute.core.types import PCMBuffer, TransformationType
from transmute.dsp.fft import FFTCache
from transmute.transforms import (
    TransformEngine,
    apply_amplitude_mapping,
    apply_dynamic_ring_modulation,
    apply_transformation_morph,
    get_operator,
    resolve_transformation,
)

SR = 8000


def _noise(seconds, channels=1, seed=0):
    g = torch.Generator().manual_seed(seed)
    return PCMBuffer(0.3 * torch.randn(channels, int(SR * seconds), generator=g), SR)


@pytest.fixture
def pair():
    return _noise(0.5, seed=1), _noise(0.5, channels=2, seed=2)


# -----------------------------------------------------------------------------
# Morph combinator
# -----------------------------------------------------------------------------

class TestMorph:
    def test_position_zero_is_a(self, pair):
        source, target = pair
        out = apply_transformation_morph(
            source, target, "amplitude_mapping", "dynamic_ring_modulation", {"morphPosition": 0.0}
        )
        torch.testing.assert_close(out.samples, apply_amplitude_mapping(source, target).samples)

    def test_position_one_is_b(self, pair):
        source, target = pair
        out = apply_transformation_morph(
            source, target, "amplitude_mapping", "dynamic_ring_modulation", {"morphPosition": 1.0}
        )
        torch.testing.assert_close(out.samples, apply_dynamic_ring_modulation(source, target).samples)

    def test_midpoint_averages(self, pair):
        source, target = pair
        a = apply_amplitude_mapping(source, target).samples
        b = apply_dynamic_ring_modulation(source, target).samples
        out = apply_transformation_morph(source, target, "amplitude_mapping", "dynamic_ring_modulation")
        torch.testing.assert_close(out.samples, 0.5 * a + 0.5 * b)

    def test_pads_to_longer_and_takes_min_channels(self, pair):
        source, target = pair
        out = apply_transformation_morph(
            source, target, "interference_echoes", "surface_translation", {"morphPosition": 0.5}
        )
        assert out.length == target.length + 4 * SR
        assert out.num_channels == 1
        assert out.sample_rate == target.sample_rate

    def test_sample_rate_comes_from_a(self):
        source = PCMBuffer(_noise(0.3).samples, 16000)
        target = _noise(0.3, seed=3)
        out = apply_transformation_morph(source, target, "surface_translation", "amplitude_mapping")
        assert out.sample_rate == 16000

    def test_uses_given_executor(self, pair):
        source, target = pair
        with ThreadPoolExecutor(max_workers=2) as pool:
            out = apply_transformation_morph(
                source, target, TransformationType.AMPLITUDE, TransformationType.RHYTHMIC,
                {"morphPosition": 0.25}, fft_cache=FFTCache(), executor=pool,
            )
        assert out.samples.shape == target.samples.shape

    @pytest.mark.parametrize("a,b", [
        ("transformation_morph", "amplitude_mapping"),
        ("amplitude_mapping", "Transformation Morph"),
        ("amplitude_mapping", "not_a_thing"),
    ])
    def test_rejects_morph_and_unknown_operands(self, pair, a, b):
        source, target = pair
        with pytest.raises(UnsupportedTransformationError):
            apply_transformation_morph(source, target, a, b)


# -----------------------------------------------------------------------------
# Registry
# -----------------------------------------------------------------------------

class TestRegistry:
    @pytest.mark.parametrize("name", [
        TransformationType.SPECTRAL,
        "spectral_shaping",
        "Spectral Shaping",
        "  spectral shaping ",
    ])
    def test_resolves_enum_slug_and_label(self, name):
        assert resolve_transformation(name) is TransformationType.SPECTRAL

    def test_every_single_operator_is_registered(self):
        for kind in TransformationType:
            if kind is TransformationType.TRANSFORMATION_MORPH:
                continue
            assert callable(get_operator(kind))

    @pytest.mark.parametrize("name", ["", "granular", None, 3])
    def test_unknown_names_raise(self, name):
        with pytest.raises(UnsupportedTransformationError):
            resolve_transformation(name)

    def test_unsupported_error_is_value_error(self):
        with pytest.raises(ValueError):
            get_operator("granular")


# -----------------------------------------------------------------------------
# Engine facade
# -----------------------------------------------------------------------------

class TestTransformEngine:
    def test_dispatches_by_label(self, pair):
        source, target = pair
        with TransformEngine() as engine:
            out = engine.transform("Amplitude Mapping", source, target)
        torch.testing.assert_close(out.samples, apply_amplitude_mapping(source, target).samples)

    def test_morph_through_engine(self, pair):
        source, target = pair
        with TransformEngine() as engine:
            out = engine.transform(
                TransformationType.TRANSFORMATION_MORPH, source, target, {"morphPosition": 0.0},
                transform_a="amplitude_mapping", transform_b="rhythmic_gating",
            )
        torch.testing.assert_close(out.samples, apply_amplitude_mapping(source, target).samples)

    def test_morph_without_operands_raises(self, pair):
        source, target = pair
        with TransformEngine() as engine:
            with pytest.raises(UnsupportedTransformationError):
                engine.transform("transformation_morph", source, target)

    def test_unknown_name_raises(self, pair):
        source, target = pair
        with TransformEngine() as engine:
            with pytest.raises(UnsupportedTransformationError):
                engine.transform("granular_synthesis", source, target)

    def test_fft_cache_is_shared_across_calls(self, pair):
        source, target = pair
        cache = FFTCache()
        engine = TransformEngine(fft_cache=cache)
        try:
            engine.transform("harmonic_imprinting", source, target)
            engine.transform("formant_shifting", source, target)
        finally:
            engine.close()
        assert engine.fft_cache is cache
        assert len(cache) == 1

    def test_logs_one_info_line(self, pair, caplog):
        source, target = pair
        with TransformEngine() as engine:
            with caplog.at_level("INFO", logger="transmute.transforms.engine"):
                engine.transform("rhythmic_gating", source, target)
        records = [r for r in caplog.records if r.name == "transmute.transforms.engine"]
        assert len(records) == 1
        assert "rhythmic_gating" in records[0].getMessage()
