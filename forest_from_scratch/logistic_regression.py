"""
Logistic Regression - From Scratch Implementation
=================================================

로그 우도에 대한 배치 경사 상승법으로 학습하는 로지스틱 회귀.
다중 클래스는 One-vs-All 조합으로 처리합니다.

수학적 배경:
-----------
편향을 포함한 확장 피처 x̃ = [1, x] 에 대해

    p(y=1 | x) = σ(w · x̃),  σ(z) = 1 / (1 + e^{-z})

로그 우도의 기울기:
    ∇ℓ(w) = (1/n) Σ (y_i - σ(w · x̃_i)) x̃_i

갱신:
    w ← w + η ∇ℓ(w)

수렴 판정:
    Σ |Δw| < tol 또는 max_epochs 도달

Author: Forest From Scratch Project
"""

import logging
import numpy as np
from typing import Optional

from .base import Classifier, OneVsAllClassifier, check_features, check_training_data
from .exceptions import InvalidConfigurationError, UntrainedModelError

logger = logging.getLogger(__name__)


def sigmoid(z):
    """로지스틱 함수"""
    return 1.0 / (1.0 + np.exp(-z))


def _augment(X: np.ndarray) -> np.ndarray:
    """편향 가중치에 대응하는 1 열을 앞에 추가"""
    return np.hstack([np.ones((X.shape[0], 1)), X])


class BinaryLogisticRegression(Classifier):
    """
    이진 로지스틱 회귀 (레이블 0/1)

    Parameters
    ----------
    learning_rate : float, default=0.5
        경사 상승 학습률
    max_epochs : int, default=100
        최대 반복 횟수
    tol : float, default=1e-4
        가중치 증분의 L1 노름이 이 값보다 작으면 종료

    Attributes
    ----------
    weights_ : ndarray of shape (1 + n_features,)
        첫 원소는 편향
    n_epochs_ : int
        실제 수행한 반복 횟수
    """

    def __init__(
        self,
        learning_rate: float = 0.5,
        max_epochs: int = 100,
        tol: float = 1e-4
    ):
        if learning_rate <= 0:
            raise InvalidConfigurationError(f"learning_rate는 양수여야 합니다: {learning_rate}")
        if max_epochs < 1:
            raise InvalidConfigurationError(f"max_epochs는 1 이상이어야 합니다: {max_epochs}")

        self.learning_rate = learning_rate
        self.max_epochs = max_epochs
        self.tol = tol

        self.weights_: Optional[np.ndarray] = None
        self.n_epochs_: int = 0

    def train(self, X, y) -> None:
        X, y = check_training_data(X, y)
        y = y.astype(float)
        X_aug = _augment(X)
        n_samples = X_aug.shape[0]

        self.weights_ = np.zeros(X_aug.shape[1])

        for epoch in range(1, self.max_epochs + 1):
            residual = y - sigmoid(X_aug @ self.weights_)
            increment = self.learning_rate * (X_aug.T @ residual) / n_samples
            self.weights_ += increment
            self.n_epochs_ = epoch

            if np.sum(np.abs(increment)) < self.tol:
                break

        logger.debug("로지스틱 회귀 학습 완료: epochs=%d", self.n_epochs_)

    def decision_function(self, X, output: str = 'raw') -> np.ndarray:
        """
        양성 클래스 점수

        Parameters
        ----------
        output : {'raw', 'normalized'}
            'raw'는 σ(w · x̃), 'normalized'는 단위 길이 가중치로 계산한 σ
        """
        if self.weights_ is None:
            raise UntrainedModelError(type(self).__name__)

        X_aug = _augment(check_features(X, len(self.weights_) - 1))
        z = X_aug @ self.weights_

        if output == 'normalized':
            norm = np.linalg.norm(self.weights_)
            if norm > 0:
                z = z / norm
        elif output != 'raw':
            raise InvalidConfigurationError(f"지원하지 않는 output입니다: {output!r}")

        return sigmoid(z)

    def predict_proba(self, X) -> np.ndarray:
        """양성 클래스 확률"""
        return self.decision_function(X, output='raw')

    def predict(self, X) -> np.ndarray:
        return (self.predict_proba(X) > 0.5).astype(int)


class LogisticRegression(OneVsAllClassifier):
    """
    다중 클래스 로지스틱 회귀 (One-vs-All)

    Examples
    --------
    >>> from forest_from_scratch import LogisticRegression
    >>> model = LogisticRegression()
    >>> model.train([[0, 0], [0, 1], [5, 5], [5, 6]], ['a', 'a', 'b', 'b'])
    >>> model.predict([[0, 0.5], [5, 5.5]])
    array(['a', 'b'], dtype='<U1')
    """

    def __init__(
        self,
        learning_rate: float = 0.5,
        max_epochs: int = 100,
        tol: float = 1e-4
    ):
        super().__init__()
        self.learning_rate = learning_rate
        self.max_epochs = max_epochs
        self.tol = tol

    def create_classifier(self, class_index: int) -> BinaryLogisticRegression:
        return BinaryLogisticRegression(
            learning_rate=self.learning_rate,
            max_epochs=self.max_epochs,
            tol=self.tol
        )
