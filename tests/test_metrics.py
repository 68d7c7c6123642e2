"""Tests for WPM and accuracy calculation."""

import pytest

from typing_sprint import FinishReason, accuracy_percent, compute, normalize_wpm


class TestNormalizeWPM:
    def test_one_minute(self):
        """250 chars (50 words) in 60 seconds = 50 WPM."""
        assert normalize_wpm(250, 60) == pytest.approx(50.0)

    def test_twelve_seconds(self):
        """At 12 seconds the WPM equals the char count."""
        assert normalize_wpm(7, 12) == pytest.approx(7.0)

    def test_zero_duration(self):
        assert normalize_wpm(100, 0) == 0.0


class TestAccuracy:
    def test_all_correct(self):
        assert accuracy_percent(10, 0, 0) == 100.0

    def test_extras_count_against_accuracy(self):
        assert accuracy_percent(3, 0, 1) == pytest.approx(75.0)

    def test_nothing_typed(self):
        assert accuracy_percent(0, 0, 0) == 0.0


class TestCompute:
    def test_net_and_raw_wpm(self):
        result = compute(correct_chars=20, incorrect_chars=5, extra_chars=5, words_completed=4, elapsed=60)
        assert result.wpm == pytest.approx(4.0)
        assert result.raw_wpm == pytest.approx(5.0)
        assert result.accuracy == pytest.approx(20 / 30 * 100)
        assert result.chars_typed == 30

    def test_zero_elapsed_and_no_input(self):
        result = compute(0, 0, 0, 0, 0.0)
        assert result.wpm == 0.0
        assert result.raw_wpm == 0.0
        assert result.accuracy == 0.0

    def test_zero_elapsed_with_input(self):
        result = compute(5, 1, 0, 1, 0.0)
        assert result.wpm == 0.0
        assert result.raw_wpm == 0.0

    def test_aborted_flag(self):
        assert compute(1, 0, 0, 0, 1.0, reason=FinishReason.QUIT).aborted
        assert not compute(1, 0, 0, 0, 1.0, reason=FinishReason.TIMEOUT).aborted
