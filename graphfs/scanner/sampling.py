"""Sampling strategies for oversized source trees.

Reduces a file list to a target size so huge codebases can be explored
without processing everything:

- random: seeded uniform sample (reproducible for a fixed seed)
- stratified: proportional allocation per directory, every directory gets
  at least one slot, the last directory (in sorted order) absorbs the rest
- recent: most recently modified first
"""

from __future__ import annotations

import logging
import os
import random
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)


class SamplingStrategy(str, Enum):
    RANDOM = "random"
    STRATIFIED = "stratified"
    RECENT = "recent"

    @classmethod
    def parse(cls, name: str) -> SamplingStrategy:
        """Parse a strategy name; unknown names fall back to random."""
        try:
            return cls(name.lower())
        except ValueError:
            return cls.RANDOM


@dataclass
class SampleStats:
    """Statistics about a sampling operation."""

    total_files: int
    sampled_files: int
    strategy: SamplingStrategy
    directory_counts: dict[str, int] = field(default_factory=dict)


class Sampler:
    """Samples file lists according to a strategy."""

    def __init__(
        self,
        strategy: SamplingStrategy | str = SamplingStrategy.RANDOM,
        size: int = 100,
        seed: int | None = None,
    ) -> None:
        if isinstance(strategy, str) and not isinstance(strategy, SamplingStrategy):
            strategy = SamplingStrategy.parse(strategy)
        self.strategy = strategy
        self.size = size
        self.seed = seed or time.time_ns()
        self._rng = random.Random(self.seed)

    def sample(self, files: list[str]) -> list[str]:
        if len(files) <= self.size:
            return list(files)
        if self.strategy is SamplingStrategy.STRATIFIED:
            return self._sample_stratified(files)
        if self.strategy is SamplingStrategy.RECENT:
            return self._sample_recent(files)
        return self._sample_random(files, self.size)

    def _sample_random(self, files: list[str], size: int) -> list[str]:
        if len(files) <= size:
            return list(files)
        return self._rng.sample(files, size)

    def _sample_stratified(self, files: list[str]) -> list[str]:
        by_dir: dict[str, list[str]] = defaultdict(list)
        for file in files:
            by_dir[os.path.dirname(file)].append(file)

        total = len(files)
        remaining = self.size
        sampled: list[str] = []
        dirs = sorted(by_dir)

        for i, directory in enumerate(dirs):
            dir_files = by_dir[directory]
            if i == len(dirs) - 1:
                count = remaining
            else:
                count = max(1, int(self.size * len(dir_files) / total))
            count = min(count, len(dir_files), remaining)

            if count > 0:
                sampled.extend(self._sample_random(dir_files, count))
                remaining -= count
            if remaining <= 0:
                break

        return sampled

    def _sample_recent(self, files: list[str]) -> list[str]:
        def mtime(path: str) -> float:
            try:
                return os.stat(path).st_mtime
            except OSError:
                # Unreadable files sort last
                return float("-inf")

        ranked = sorted(files, key=mtime, reverse=True)
        return ranked[: self.size]

    def sample_with_stats(self, files: list[str]) -> tuple[list[str], SampleStats]:
        sampled = self.sample(files)
        counts: dict[str, int] = defaultdict(int)
        for file in sampled:
            counts[os.path.dirname(file)] += 1
        stats = SampleStats(
            total_files=len(files),
            sampled_files=len(sampled),
            strategy=self.strategy,
            directory_counts=dict(counts),
        )
        logger.debug(
            "Sampled %d of %d files (%s)",
            stats.sampled_files,
            stats.total_files,
            stats.strategy.value,
        )
        return sampled, stats
