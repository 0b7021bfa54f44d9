"""
Evaluation Metrics
==================

분류 결과 평가 지표.

- accuracy: 정확히 맞춘 예측의 비율 (또는 개수)
- roc_curve / auroc: 이진 분류 점수의 ROC 곡선과 그 아래 면적

AUROC는 사다리꼴 규칙으로 계산합니다:
    AUROC = Σ (fpr_{i+1} - fpr_i) * (tpr_i + tpr_{i+1}) / 2

Author: Forest From Scratch Project
"""

import numpy as np
from typing import Tuple, Union

from .exceptions import DimensionMismatchError


def _check_lengths(y_true, y_pred) -> Tuple[np.ndarray, np.ndarray]:
    y_true = np.asarray(y_true).ravel()
    y_pred = np.asarray(y_pred).ravel()

    if len(y_true) != len(y_pred):
        raise DimensionMismatchError(
            f"실제 레이블과 예측 레이블의 수가 다릅니다: {len(y_true)} vs {len(y_pred)}"
        )
    return y_true, y_pred


def accuracy(y_true, y_pred, normalize: bool = True) -> Union[float, int]:
    """
    예측 정확도

    Parameters
    ----------
    y_true : array-like
        실제 레이블
    y_pred : array-like
        예측 레이블
    normalize : bool, default=True
        True면 0~1 비율, False면 맞춘 개수 반환
    """
    y_true, y_pred = _check_lengths(y_true, y_pred)

    n_correct = int(np.sum(y_true == y_pred))

    if normalize:
        if len(y_true) == 0:
            return 0.0
        return n_correct / len(y_true)
    return n_correct


def roc_curve(y_true, y_score) -> Tuple[np.ndarray, np.ndarray]:
    """
    ROC 곡선 (FPR, TPR)

    점수를 내림차순으로 정렬해 임계값을 하나씩 낮추며 계산합니다.
    같은 점수를 가진 샘플들은 하나의 점으로 합쳐집니다.

    Returns
    -------
    fpr, tpr : ndarray
        (0, 0)에서 시작해 (1, 1)로 끝나는 곡선 좌표
    """
    y_true, y_score = _check_lengths(y_true, y_score)

    classes = np.unique(y_true)
    if len(classes) != 2 or not set(classes.tolist()) <= {0, 1}:
        raise ValueError("실제 레이블은 정확히 두 클래스(0, 1)로 구성되어야 합니다.")

    y_score = y_score.astype(float)
    order = np.argsort(-y_score, kind='mergesort')
    y_sorted = y_true[order]
    score_sorted = y_score[order]

    tps = np.cumsum(y_sorted == 1)
    fps = np.cumsum(y_sorted == 0)

    # 점수가 바뀌는 지점(마지막 동점 샘플)만 남김
    distinct = np.r_[np.flatnonzero(np.diff(score_sorted)), len(score_sorted) - 1]

    tpr = np.r_[0.0, tps[distinct] / tps[-1]]
    fpr = np.r_[0.0, fps[distinct] / fps[-1]]

    return fpr, tpr


def auroc(y_true, y_score) -> float:
    """ROC 곡선 아래 면적 (사다리꼴 규칙)"""
    fpr, tpr = roc_curve(y_true, y_score)
    return float(np.sum(np.diff(fpr) * (tpr[:-1] + tpr[1:]) / 2))
