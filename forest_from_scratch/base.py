"""
Classifier 기본 계약
===================

모든 학습기는 `train(X, y)` / `predict(X)` 계약을 따르므로
조합 헬퍼(One-vs-All 등)에서 서로 교체해 사용할 수 있습니다.

Author: Forest From Scratch Project
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from .exceptions import DimensionMismatchError, UntrainedModelError
from .metrics import accuracy


def check_training_data(X, y) -> Tuple[np.ndarray, np.ndarray]:
    """
    학습 입력 검증

    Returns
    -------
    X : ndarray of shape (n_samples, n_features), dtype float
    y : ndarray of shape (n_samples,)
    """
    X = np.asarray(X, dtype=float)
    y = np.asarray(y).ravel()

    if X.ndim != 2:
        raise DimensionMismatchError(
            f"X는 2차원 행렬이어야 합니다: ndim={X.ndim}"
        )
    if X.shape[0] != len(y):
        raise DimensionMismatchError(
            f"X와 y의 샘플 수가 일치하지 않습니다: {X.shape[0]} vs {len(y)}"
        )
    if X.shape[0] == 0 or X.shape[1] == 0:
        raise DimensionMismatchError(
            f"샘플과 피처가 하나 이상 있어야 합니다: shape={X.shape}"
        )

    return X, y


def check_features(X, n_features: int) -> np.ndarray:
    """예측 입력 검증 (1차원이면 단일 샘플로 변환)"""
    X = np.asarray(X, dtype=float)

    if X.ndim == 1:
        X = X.reshape(1, -1)

    if X.ndim != 2 or X.shape[1] != n_features:
        raise DimensionMismatchError(
            f"피처 수가 학습 시와 다릅니다: {X.shape[-1]} vs {n_features}"
        )

    return X


class Classifier(ABC):
    """학습기 기본 클래스"""

    @abstractmethod
    def train(self, X, y) -> None:
        """X (n_samples, n_features)와 레이블 y로 학습"""

    @abstractmethod
    def predict(self, X) -> np.ndarray:
        """각 샘플의 레이블 예측"""

    def fit(self, X, y) -> 'Classifier':
        """train()을 호출하고 self 반환"""
        self.train(X, y)
        return self

    def score(self, X, y) -> float:
        """정확도 반환"""
        return accuracy(y, self.predict(X))


class OneVsAllClassifier(Classifier):
    """
    One-vs-All 조합 분류기

    클래스마다 "해당 클래스 vs 나머지" 이진 분류기를 하나씩 학습하고,
    양성 확률이 가장 높은 클래스를 예측합니다.
    하위 클래스는 `create_classifier`만 구현하면 됩니다.

    Attributes
    ----------
    classes_ : ndarray
        정렬된 클래스 레이블
    classifiers_ : list
        classes_와 같은 순서의 이진 분류기
    """

    def __init__(self):
        self.classes_: Optional[np.ndarray] = None
        self.classifiers_: List[Classifier] = []

    @abstractmethod
    def create_classifier(self, class_index: int) -> Classifier:
        """class_index번째 클래스용 이진 분류기 생성"""

    def create_classifiers(self, y) -> None:
        self.classes_ = np.unique(np.asarray(y))
        self.classifiers_ = [
            self.create_classifier(i) for i in range(len(self.classes_))
        ]

    def train_batch(self, X, y) -> None:
        """각 이진 분류기를 0/1 레이블로 학습"""
        y = np.asarray(y)
        for label, classifier in zip(self.classes_, self.classifiers_):
            classifier.train(X, (y == label).astype(int))

    def train(self, X, y) -> None:
        X, y = check_training_data(X, y)
        self.create_classifiers(y)
        self.train_batch(X, y)

    def predict_proba(self, X) -> np.ndarray:
        """
        클래스별 양성 확률

        Returns
        -------
        proba : ndarray of shape (n_samples, n_classes)
        """
        if not self.classifiers_:
            raise UntrainedModelError(type(self).__name__)

        return np.column_stack([
            classifier.predict_proba(X) for classifier in self.classifiers_
        ])

    def predict(self, X) -> np.ndarray:
        proba = self.predict_proba(X)
        return self.classes_[np.argmax(proba, axis=1)]
