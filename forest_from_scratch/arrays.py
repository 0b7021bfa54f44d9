"""
Array Utilities
===============

트리 학습에 필요한 배열/형상 헬퍼 함수 모음.

레이블은 숫자, 문자열 등 정렬 가능한 어떤 값이든 될 수 있으며,
`value_counts`는 항상 값의 오름차순으로 결과를 돌려줍니다.
따라서 다수결에서 동점이 나면 가장 작은 레이블이 선택됩니다.

Author: Forest From Scratch Project
"""

import numpy as np
from typing import Any, List, Tuple


def get_shape(matrix) -> Tuple[int, ...]:
    """행렬의 차원 반환"""
    return np.shape(matrix)


def transpose(matrix) -> np.ndarray:
    """2차원 행렬의 전치"""
    return np.asarray(matrix).T


def unique(values) -> np.ndarray:
    """정렬된 고유값 배열"""
    return np.unique(np.asarray(values))


def value_counts(values) -> List[Tuple[Any, int]]:
    """
    값별 출현 횟수

    Returns
    -------
    counts : list of (value, count)
        값의 오름차순으로 정렬된 (값, 횟수) 쌍
    """
    uniques, counts = np.unique(np.asarray(values), return_counts=True)
    return [(value, int(count)) for value, count in zip(uniques, counts)]


def majority_label(values) -> Any:
    """
    최빈 레이블 반환

    동점인 경우 value_counts 순서상 처음으로 최대 횟수에 도달한
    레이블, 즉 가장 작은 레이블을 반환합니다.
    """
    uniques, counts = np.unique(np.asarray(values), return_counts=True)
    if len(uniques) == 0:
        raise ValueError("빈 레이블 집합에서는 다수결을 계산할 수 없습니다.")
    return uniques[np.argmax(counts)]


def midpoints(sorted_values) -> np.ndarray:
    """인접한 값들의 중간점 (k개 값 -> k-1개 중간점)"""
    sorted_values = np.asarray(sorted_values, dtype=float)
    return (sorted_values[:-1] + sorted_values[1:]) / 2
