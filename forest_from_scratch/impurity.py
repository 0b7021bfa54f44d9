"""
Impurity Evaluator
==================

레이블 그룹의 불순도(impurity) 계산.

수학적 배경:
-----------
클래스 c의 경험적 빈도를 p_c라 할 때

Gini 불순도:
    Gini = 1 - Σ p_c² = Σ p_c (1 - p_c)

Shannon 엔트로피 (자연로그):
    H = -Σ p_c · ln(p_c)
    (관측된 클래스만 합산하므로 log(0)은 발생하지 않음)

여러 그룹의 가중 불순도:
    I_split = Σ_g I(g) · |g| / Σ|g|

단일 클래스 그룹은 두 기준 모두 정확히 0이 됩니다.

Author: Forest From Scratch Project
"""

import numpy as np
from typing import Callable, Dict, Sequence

from .exceptions import InvalidConfigurationError


def _class_frequencies(labels) -> np.ndarray:
    _, counts = np.unique(np.asarray(labels), return_counts=True)
    return counts / counts.sum()


def gini(labels) -> float:
    """Gini 불순도: Σ p_c (1 - p_c)"""
    if len(labels) == 0:
        return 0.0
    p = _class_frequencies(labels)
    return float(np.sum(p * (1 - p)))


def entropy(labels) -> float:
    """Shannon 엔트로피: -Σ p_c ln(p_c)"""
    if len(labels) == 0:
        return 0.0
    p = _class_frequencies(labels)
    return float(-np.sum(p * np.log(p)))


IMPURITY_FUNCTIONS: Dict[str, Callable] = {
    'gini': gini,
    'entropy': entropy,
}


def get_impurity_function(criterion: str) -> Callable:
    """criterion 이름으로 불순도 함수 조회"""
    try:
        return IMPURITY_FUNCTIONS[criterion]
    except (KeyError, TypeError):
        raise InvalidConfigurationError(
            f"지원하지 않는 criterion입니다: {criterion!r} "
            f"(가능한 값: {sorted(IMPURITY_FUNCTIONS)})"
        ) from None


def weighted_impurity(groups: Sequence, impurity_fn: Callable) -> float:
    """
    그룹 크기로 가중한 불순도

    Parameters
    ----------
    groups : sequence of array-like
        레이블 그룹들
    impurity_fn : callable
        단일 그룹의 불순도 함수 (gini 또는 entropy)

    Returns
    -------
    impurity : float
        Σ I(g) · |g| / Σ|g|
    """
    if len(groups) == 1:
        return impurity_fn(groups[0])

    sizes = np.array([len(group) for group in groups], dtype=float)
    n_total = sizes.sum()

    if n_total == 0:
        raise ValueError("모든 그룹이 비어 있어 가중 불순도를 계산할 수 없습니다.")

    impurities = np.array([impurity_fn(group) for group in groups])
    return float(np.sum(impurities * sizes / n_total))


def calculate_impurity(groups: Sequence, criterion: str = 'gini') -> float:
    """criterion에 따른 가중 불순도 계산"""
    return weighted_impurity(groups, get_impurity_function(criterion))
