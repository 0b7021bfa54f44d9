"""
Uniform Random Sampler
======================

피처 서브샘플링(비복원 추출)과 부트스트랩(복원 추출)에 사용하는
균등 샘플러.

Author: Forest From Scratch Project
"""

import numpy as np
from typing import List, Optional, Union

from .exceptions import InvalidConfigurationError

RandomStateLike = Optional[Union[int, np.random.SeedSequence, np.random.Generator]]


def check_random_state(seed: RandomStateLike) -> np.random.Generator:
    """seed를 numpy Generator로 변환 (Generator가 주어지면 그대로 사용)"""
    if isinstance(seed, np.random.Generator):
        return seed
    return np.random.default_rng(seed)


def spawn_seeds(seed: RandomStateLike, n: int) -> List[np.random.SeedSequence]:
    """
    서로 독립적인 자식 시드 n개 생성

    같은 seed에서는 항상 같은 자식 시드가 나오므로, 앙상블 멤버를
    어떤 순서나 병렬도로 학습하더라도 결과가 재현됩니다.
    """
    if isinstance(seed, np.random.SeedSequence):
        return seed.spawn(n)
    if isinstance(seed, np.random.Generator):
        seed = int(seed.integers(0, 2**63 - 1))
    return np.random.SeedSequence(seed).spawn(n)


def sample(
    population,
    count: int,
    with_replacement: bool = False,
    rng: RandomStateLike = None
) -> np.ndarray:
    """
    모집단에서 균등하게 count개 추출

    Parameters
    ----------
    population : array-like
        추출 대상
    count : int
        추출 개수
    with_replacement : bool, default=False
        복원 추출 여부
    rng : int, Generator or None
        난수 생성기 또는 시드

    Returns
    -------
    samples : ndarray of shape (count,)
        비복원 추출인 경우 추출된 순서 그대로 반환
    """
    population = np.asarray(population)
    n = len(population)

    if count < 0:
        raise InvalidConfigurationError(f"추출 개수는 0 이상이어야 합니다: {count}")
    if not with_replacement and count > n:
        raise InvalidConfigurationError(
            f"비복원 추출 개수가 모집단 크기를 초과합니다: {count} > {n}"
        )
    if count == 0:
        return population[:0]
    if n == 0:
        raise InvalidConfigurationError("빈 모집단에서는 복원 추출할 수 없습니다.")

    indices = check_random_state(rng).choice(n, count, replace=with_replacement)
    return population[indices]
