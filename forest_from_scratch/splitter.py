"""
Splitter - 최적 분할 탐색
=========================

주어진 노드의 샘플들을 (feature, threshold) 쌍으로 두 그룹으로 나누고,
불순도 감소(gain)가 최대인 분할을 찾습니다.

분할 규칙:
    x[feature] < threshold  →  왼쪽
    그 외                    →  오른쪽

임계값 후보:
    해당 피처의 정렬된 고유값 v_1 < v_2 < ... < v_k 에 대해
    (v_i + v_{i+1}) / 2, i = 1..k-1

정보 이득:
    Gain = I_parent - I_split(left, right)

동점 처리:
    피처는 무작위 추출 순서대로, 임계값은 오름차순으로 탐색하며
    이득이 "엄격히" 큰 경우에만 갱신합니다. 즉 먼저 찾은 분할이 유지됩니다.
    피처 순서가 시드에 따라 달라지므로, 서로 다른 시드가 동일한 이득의
    다른 분할을 고르는 것은 정상 동작입니다.

Author: Forest From Scratch Project
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import numpy as np

from .arrays import midpoints, transpose, unique
from .exceptions import InvalidConfigurationError
from .impurity import get_impurity_function, weighted_impurity
from .sampling import sample

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitGroups:
    """분할 결과 그룹 (각 필드는 (왼쪽, 오른쪽) 쌍)"""

    indices: Tuple[np.ndarray, np.ndarray]
    features: Tuple[np.ndarray, np.ndarray]
    labels: Tuple[np.ndarray, np.ndarray]

    @property
    def sizes(self) -> Tuple[int, int]:
        return len(self.labels[0]), len(self.labels[1])


@dataclass(frozen=True)
class SplitCandidate:
    """분할 탐색 결과 (노드 생성 후 폐기되는 임시 레코드)"""

    feature: int
    threshold: float
    gain: float
    groups: SplitGroups


def resolve_n_features(
    num_features: Optional[Union[int, float, str]],
    n_features: int
) -> int:
    """
    각 분할에서 고려할 피처 수 결정

    - None: 모든 피처
    - 'sqrt': floor(sqrt(n_features))
    - 'log2': floor(log2(n_features))
    - float: floor(num_features * n_features), 0 < num_features <= 1
    - int: 해당 개수

    결과는 항상 [1, n_features] 범위로 고정됩니다.
    """
    if n_features < 1:
        raise InvalidConfigurationError("피처가 하나 이상 있어야 합니다.")

    if num_features is None:
        n = n_features
    elif isinstance(num_features, str) and num_features == 'sqrt':
        n = int(math.floor(math.sqrt(n_features)))
    elif isinstance(num_features, str) and num_features == 'log2':
        n = int(math.floor(math.log2(n_features)))
    elif isinstance(num_features, (bool, str)):
        raise InvalidConfigurationError(
            f"지원하지 않는 num_features입니다: {num_features!r}"
        )
    elif isinstance(num_features, (int, np.integer)):
        n = int(num_features)
    elif isinstance(num_features, (float, np.floating)):
        n = int(math.floor(num_features * n_features))
    else:
        raise InvalidConfigurationError(
            f"지원하지 않는 num_features입니다: {num_features!r}"
        )

    return max(1, min(n_features, n))


def split_samples(
    X: np.ndarray,
    y: np.ndarray,
    feature: int,
    threshold: float
) -> SplitGroups:
    """
    피처 값이 threshold보다 작은 샘플은 왼쪽, 나머지는 오른쪽으로 분할

    Returns
    -------
    groups : SplitGroups
        두 그룹 각각의 (원래 인덱스, 피처 행, 레이블)
    """
    left_mask = X[:, feature] < threshold
    left_idx = np.flatnonzero(left_mask)
    right_idx = np.flatnonzero(~left_mask)

    return SplitGroups(
        indices=(left_idx, right_idx),
        features=(X[left_idx], X[right_idx]),
        labels=(y[left_idx], y[right_idx])
    )


def find_split(
    X: np.ndarray,
    y: np.ndarray,
    base_impurity: float,
    n_features_to_sample: int,
    criterion: str = 'gini',
    rng=None
) -> Optional[SplitCandidate]:
    """
    최적의 분할점 탐색

    1. 피처 인덱스 중 n_features_to_sample개를 비복원 무작위 추출
    2. 각 피처의 정렬된 고유값 사이 중간점을 임계값 후보로 사용
    3. 후보마다 분할 후 Gain = base_impurity - 가중 불순도 계산
    4. 어느 한쪽이 비는 분할은 제외, Gain 최대(먼저 찾은 것 우선) 선택

    Parameters
    ----------
    X : ndarray of shape (n_samples, n_features)
    y : ndarray of shape (n_samples,)
    base_impurity : float
        부모 노드의 불순도
    n_features_to_sample : int
        고려할 피처 수
    criterion : {'gini', 'entropy'}
    rng : Generator, int or None
        피처 추출용 난수 생성기

    Returns
    -------
    candidate : SplitCandidate or None
        유효한 분할이 없으면 None (호출자는 리프로 처리)
    """
    n_samples, n_features = X.shape
    if n_samples < 2:
        return None

    impurity_fn = get_impurity_function(criterion)

    best_gain = -np.inf
    best_feature = None
    best_threshold = None

    X_t = transpose(X)
    feature_indices = sample(np.arange(n_features), n_features_to_sample, False, rng)

    for feature in feature_indices:
        feature_values = X_t[feature]
        thresholds = midpoints(unique(feature_values))

        # 고유값이 하나뿐인 피처는 후보가 없음
        for threshold in thresholds:
            left_mask = feature_values < threshold
            n_left = int(np.count_nonzero(left_mask))

            if n_left == 0 or n_left == n_samples:
                continue

            gain = base_impurity - weighted_impurity(
                [y[left_mask], y[~left_mask]], impurity_fn
            )

            if gain > best_gain:
                best_gain = gain
                best_feature = int(feature)
                best_threshold = float(threshold)

    if best_feature is None:
        logger.debug("유효한 분할 없음 (n_samples=%d)", n_samples)
        return None

    logger.debug(
        "분할 선택: feature=%d, threshold=%.6g, gain=%.6g",
        best_feature, best_threshold, best_gain
    )

    return SplitCandidate(
        feature=best_feature,
        threshold=best_threshold,
        gain=float(best_gain),
        groups=split_samples(X, y, best_feature, best_threshold)
    )
