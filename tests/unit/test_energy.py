"""
Unit tests for energy profile extraction.
"""

import pytest
import numpy as np

from beatsync.config.settings import Settings, AnalysisSettings
from beatsync.core.energy import EnergyProfileExtractor, combined_energies, window_starts
from beatsync.core.models import SampleBuffer
from beatsync.core.progress import CallbackProgressReporter, RecordingProgressReporter
from beatsync.utils.exceptions import InsufficientSamplesError, ValidationError


def make_extractor(window_size=8, hop_size=4, chunk_windows=256):
    return EnergyProfileExtractor(Settings(
        analysis=AnalysisSettings(window_size=window_size, hop_size=hop_size, chunk_windows=chunk_windows)
    ))


class TestWindowing:
    """Window placement."""

    def test_window_starts_cover_only_full_windows(self):
        assert list(window_starts(20, 8, 4)) == [0, 4, 8, 12]

    def test_window_fitting_exactly_is_included(self):
        assert list(window_starts(8, 8, 4)) == [0]

    def test_short_input_has_no_windows(self):
        assert len(window_starts(7, 8, 4)) == 0

    def test_times_are_start_over_sample_rate(self):
        buffer = SampleBuffer(np.ones(20), 4)
        profile = make_extractor().extract(buffer)

        assert [w.time for w in profile] == [0.0, 1.0, 2.0, 3.0]


class TestEnergy:
    """Energy formula."""

    def test_constant_window(self):
        # energy 1, upper-window term 5/6 (offsets 3..7 of 8)
        profile = make_extractor().extract(SampleBuffer(np.ones(8), 100))

        assert len(profile) == 1
        assert profile[0].energy == pytest.approx(1.0 + 0.3 * 5 / 6)

    def test_first_quarter_excluded_from_spectral_term(self):
        low = np.array([1, 1, 0, 0, 0, 0, 0, 0], dtype=float)
        high = low[::-1].copy()

        low_energy = make_extractor().extract(SampleBuffer(low, 100))[0].energy
        high_energy = make_extractor().extract(SampleBuffer(high, 100))[0].energy

        assert low_energy == pytest.approx(0.25)
        assert high_energy == pytest.approx(0.25 + 0.3 * 2 / 6)

    def test_spectral_weight_is_configurable(self):
        frames = np.ones((1, 8))
        assert combined_energies(frames, 0.0)[0] == pytest.approx(1.0)
        assert combined_energies(frames, 1.0)[0] == pytest.approx(1.0 + 5 / 6)

    def test_silence_has_zero_energy(self, silence_buffer):
        profile = EnergyProfileExtractor(Settings()).extract(silence_buffer)

        assert len(profile) > 0
        assert all(w.energy == 0.0 for w in profile)

    def test_identical_windows_have_identical_energy(self):
        samples = np.tile(np.array([0.5, -0.25, 0.125, 1.0]), 64)
        profile = make_extractor(window_size=16, hop_size=4).extract(SampleBuffer(samples, 100))

        assert len({w.energy for w in profile}) == 1

    def test_chunking_does_not_change_profile(self, noise_buffer):
        one = make_extractor(256, 64, chunk_windows=1).extract(noise_buffer)
        many = make_extractor(256, 64, chunk_windows=1000).extract(noise_buffer)

        assert [w.time for w in one] == [w.time for w in many]
        np.testing.assert_allclose([w.energy for w in one], [w.energy for w in many], rtol=1e-12)

    def test_times_strictly_increase(self, noise_buffer):
        profile = make_extractor(256, 64).extract(noise_buffer)
        times = [w.time for w in profile]

        assert all(b > a for a, b in zip(times, times[1:]))


class TestShortInput:
    """Inputs shorter than one window."""

    def test_returns_empty_profile(self):
        assert make_extractor().extract(SampleBuffer(np.ones(7), 100)) == []

    def test_strict_mode_raises(self):
        with pytest.raises(InsufficientSamplesError) as exc_info:
            make_extractor().extract(SampleBuffer(np.ones(7), 100), strict=True)

        assert exc_info.value.sample_count == 7
        assert exc_info.value.window_size == 8

    def test_invalid_parameters_raise(self):
        buffer = SampleBuffer(np.ones(64), 100)
        with pytest.raises(ValidationError):
            make_extractor().extract(buffer, hop_size=0)
        with pytest.raises(ValidationError):
            make_extractor().extract(buffer, window_size=-1)


class TestProgress:
    """Extraction progress reporting."""

    def test_progress_ends_at_fifty(self, noise_buffer):
        recorder = RecordingProgressReporter()
        make_extractor(256, 64, chunk_windows=8).extract(noise_buffer, reporter=recorder)

        assert recorder.last == 50
        assert all(0 <= v <= 50 for v in recorder.values)
        assert recorder.values == sorted(recorder.values)

    def test_exact_progress_sequence_per_window(self):
        # 31 samples: window starts 0..20, span 23
        recorder = RecordingProgressReporter()
        make_extractor(8, 4, chunk_windows=1).extract(SampleBuffer(np.ones(31), 100), reporter=recorder)

        assert recorder.values == [0, 8, 17, 26, 34, 43, 50]

    def test_last_window_reaching_fifty_is_not_repeated(self):
        # 28 samples: the last window ends exactly at the buffer end
        recorder = RecordingProgressReporter()
        make_extractor(8, 4, chunk_windows=1).extract(SampleBuffer(np.ones(28), 100), reporter=recorder)

        assert recorder.values == [0, 10, 20, 30, 40, 50]

    def test_single_window_reports_fifty(self):
        recorder = RecordingProgressReporter()
        make_extractor().extract(SampleBuffer(np.ones(8), 100), reporter=recorder)

        assert recorder.values == [50]

    def test_short_input_still_completes_extraction_phase(self):
        recorder = RecordingProgressReporter()
        make_extractor().extract(SampleBuffer(np.ones(3), 100), reporter=recorder)

        assert recorder.last == 50

    def test_failing_observer_does_not_abort(self, noise_buffer):
        def explode(progress):
            raise RuntimeError("observer down")

        profile = make_extractor(256, 64).extract(noise_buffer, reporter=CallbackProgressReporter(explode))

        assert len(profile) > 0
