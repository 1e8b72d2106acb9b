from __future__ import annotations

import random


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_signed_unit(self) -> float:
        # [-1, 1); random() never returns 1.0
        return self._random.random() * 2.0 - 1.0
