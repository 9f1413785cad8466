"""Tests for file sampling strategies."""

from __future__ import annotations

import os
from collections import Counter

import pytest

from graphfs.scanner.sampling import Sampler, SamplingStrategy


def make_files(layout: dict[str, int]) -> list[str]:
    return [f"/repo/{d}/f{i}.go" for d, n in layout.items() for i in range(n)]


class TestSamplingStrategy:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("random", SamplingStrategy.RANDOM),
            ("Stratified", SamplingStrategy.STRATIFIED),
            ("recent", SamplingStrategy.RECENT),
            ("bogus", SamplingStrategy.RANDOM),
        ],
    )
    def test_parse(self, name, expected):
        assert SamplingStrategy.parse(name) is expected


class TestRandomSampling:
    def test_small_input_returned_unchanged(self):
        files = make_files({"a": 3})
        assert Sampler("random", size=10, seed=1).sample(files) == files

    def test_seeded_sample_is_reproducible(self):
        files = make_files({"a": 50, "b": 50})

        first = Sampler("random", size=10, seed=42).sample(files)
        second = Sampler("random", size=10, seed=42).sample(files)

        assert first == second
        assert len(first) == 10
        assert len(set(first)) == 10
        assert set(first) <= set(files)

    def test_zero_seed_is_time_seeded(self):
        sampler = Sampler(SamplingStrategy.RANDOM, size=5, seed=0)
        assert sampler.seed != 0


class TestStratifiedSampling:
    def test_every_directory_contributes(self):
        files = make_files({"big": 80, "mid": 15, "tiny": 5})

        sampled = Sampler("stratified", size=10, seed=7).sample(files)

        counts = Counter(os.path.basename(os.path.dirname(f)) for f in sampled)
        assert len(sampled) == 10
        assert set(counts) == {"big", "mid", "tiny"}

    def test_proportional_allocation_last_directory_absorbs_remainder(self):
        files = make_files({"a": 50, "b": 30, "c": 20})

        sampled = Sampler("stratified", size=10, seed=3).sample(files)

        counts = Counter(os.path.basename(os.path.dirname(f)) for f in sampled)
        assert counts == {"a": 5, "b": 3, "c": 2}

    def test_sample_with_stats(self):
        files = make_files({"a": 20, "b": 20})

        sampled, stats = Sampler("stratified", size=4, seed=1).sample_with_stats(files)

        assert stats.total_files == 40
        assert stats.sampled_files == len(sampled) == 4
        assert stats.strategy is SamplingStrategy.STRATIFIED
        assert stats.directory_counts == {"/repo/a": 2, "/repo/b": 2}


class TestRecentSampling:
    def test_most_recent_first(self, tmp_path):
        paths = []
        for i in range(5):
            path = tmp_path / f"f{i}.go"
            path.write_text("")
            os.utime(path, (1_000_000 + i, 1_000_000 + i))
            paths.append(str(path))
        missing = str(tmp_path / "missing.go")

        sampled = Sampler("recent", size=3).sample(paths + [missing])

        assert sampled == [paths[4], paths[3], paths[2]]
