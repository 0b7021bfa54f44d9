"""
Random Forest Classifier - From Scratch Implementation
======================================================

배깅(Bootstrap Aggregating) + 랜덤 피처 선택을 결합한 앙상블 분류기

수학적 배경:
-----------
1. 배깅 (Bootstrap Aggregating):
   - 원본 데이터에서 복원 추출로 n개의 부트스트랩 샘플 생성
   - 각 샘플로 독립적인 트리 학습
   - bootstrap=False면 모든 트리가 같은 데이터를 사용하며,
     트리 간 차이는 피처 서브샘플링에서만 발생

2. 랜덤 피처 선택:
   - 각 분할에서 num_features 만큼의 피처만 고려
   - 트리 간 상관관계 감소 → 앙상블 효과 증대

3. Out-of-Bag (OOB) 정확도:
   - 각 트리 학습에 사용되지 않은 샘플(~37%)로 정확도 추정

   P(샘플이 선택되지 않음) = (1 - 1/n)^n ≈ e^{-1} ≈ 0.368

4. 최종 예측 (다수결):
   ŷ = argmax_c Σ_m 1[h_m(x) = c]
   동점이면 가장 작은 레이블을 선택

Author: Forest From Scratch Project
"""

import logging
import warnings
import numpy as np
from typing import Optional, List, Dict, Tuple, Union, Any
from dataclasses import dataclass, field

from joblib import Parallel, delayed

from .arrays import majority_label
from .base import Classifier, check_features, check_training_data
from .decision_tree import DecisionTree, TreeConfig
from .exceptions import InvalidConfigurationError, UntrainedModelError
from .metrics import accuracy
from .sampling import RandomStateLike, sample, spawn_seeds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForestConfig:
    """
    랜덤 포레스트 설정

    Parameters
    ----------
    num_trees : int, default=10
        트리 개수 (1 이상)
    bootstrap : bool, default=True
        부트스트랩 샘플 사용 여부
    oob_score : bool, default=False
        Out-of-Bag 정확도 계산 여부 (bootstrap=True 필요)
    tree : TreeConfig
        모든 멤버 트리가 공유하는 설정
    """

    num_trees: int = 10
    bootstrap: bool = True
    oob_score: bool = False
    tree: TreeConfig = field(default_factory=TreeConfig)

    def __post_init__(self):
        if isinstance(self.num_trees, bool) or not isinstance(self.num_trees, (int, np.integer)):
            raise InvalidConfigurationError(
                f"num_trees는 정수여야 합니다: {self.num_trees!r}"
            )
        if self.num_trees < 1:
            raise InvalidConfigurationError(
                f"num_trees는 1 이상이어야 합니다: {self.num_trees}"
            )
        if self.oob_score and not self.bootstrap:
            raise InvalidConfigurationError(
                "oob_score는 bootstrap=True일 때만 사용할 수 있습니다."
            )


def _train_tree(
    tree_config: TreeConfig,
    X: np.ndarray,
    y: np.ndarray,
    seed: np.random.SeedSequence,
    bootstrap: bool
) -> Tuple[DecisionTree, np.ndarray]:
    """트리 하나 학습 (부트스트랩 추출과 피처 추출 모두 자신의 난수 생성기 사용)"""
    rng = np.random.default_rng(seed)
    n_samples = len(y)

    if bootstrap:
        sample_indices = sample(np.arange(n_samples), n_samples, True, rng)
    else:
        sample_indices = np.arange(n_samples)

    tree = DecisionTree.from_config(tree_config, random_state=rng)
    tree.train(X[sample_indices], y[sample_indices])

    return tree, sample_indices


class RandomForest(Classifier):
    """
    Random Forest 분류 모델 (From Scratch)

    Parameters
    ----------
    num_trees : int, default=10
        트리 개수

    criterion : {'gini', 'entropy'}, default='gini'
        분할 기준

    num_features : float, int, str or None, default=1.0
        각 분할에서 고려할 피처 수
        - float: 비율
        - int: 해당 수
        - 'sqrt': sqrt(n_features)
        - 'log2': log2(n_features)

    max_depth : int, default=-1
        각 트리의 최대 깊이. -1이면 완전히 확장

    bootstrap : bool, default=True
        부트스트랩 샘플 사용 여부

    oob_score : bool, default=False
        Out-of-Bag 정확도 계산 여부

    random_state : int, SeedSequence, Generator or None
        랜덤 시드

    n_jobs : int, default=1
        병렬 학습 작업 수 (joblib). -1이면 모든 코어 사용.
        트리마다 독립된 시드를 쓰므로 n_jobs와 무관하게 결과가 같습니다.

    verbose : int, default=0
        출력 수준

    Attributes
    ----------
    config : ForestConfig
        검증된 설정

    trees_ : list of DecisionTree
        학습된 트리들

    classes_ : ndarray
        정렬된 클래스 레이블

    feature_importances_ : ndarray of shape (n_features,)
        피처 중요도 (모든 트리의 평균)

    oob_score_ : float
        Out-of-Bag 정확도 (oob_score=True인 경우)

    oob_decision_function_ : ndarray of shape (n_samples, n_classes)
        각 샘플의 OOB 득표 비율 (OOB 예측을 받지 못한 샘플은 NaN)

    Examples
    --------
    >>> from forest_from_scratch import RandomForest
    >>> import numpy as np
    >>> rng = np.random.default_rng(0)
    >>> X = rng.normal(size=(100, 4))
    >>> y = (X[:, 0] + X[:, 1] > 0).astype(int)
    >>> forest = RandomForest(num_trees=25, num_features='sqrt', random_state=0)
    >>> forest.train(X, y)
    >>> predictions = forest.predict(X[:5])
    """

    def __init__(
        self,
        num_trees: int = 10,
        criterion: str = 'gini',
        num_features: Optional[Union[float, int, str]] = 1.0,
        max_depth: int = -1,
        bootstrap: bool = True,
        oob_score: bool = False,
        random_state: RandomStateLike = None,
        n_jobs: int = 1,
        verbose: int = 0
    ):
        self.config = ForestConfig(
            num_trees=num_trees,
            bootstrap=bootstrap,
            oob_score=oob_score,
            tree=TreeConfig(
                criterion=criterion,
                num_features=num_features,
                max_depth=max_depth
            )
        )
        self.random_state = random_state
        self.n_jobs = n_jobs
        self.verbose = verbose

        # 학습 후 설정되는 속성들
        self.trees_: List[DecisionTree] = []
        self.classes_: Optional[np.ndarray] = None
        self.feature_importances_: Optional[np.ndarray] = None
        self.oob_score_: Optional[float] = None
        self.oob_decision_function_: Optional[np.ndarray] = None
        self.n_features_: int = 0

        # 학습 과정 기록
        self.training_history_: List[Dict] = []

    def train(self, X, y) -> None:
        """
        Random Forest 모델 학습

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            학습 데이터
        y : array-like of shape (n_samples,)
            클래스 레이블

        Raises
        ------
        DimensionMismatchError
            X와 y의 샘플 수가 일치하지 않는 경우
        """
        X, y = check_training_data(X, y)
        n_samples, n_features = X.shape
        config = self.config

        self.n_features_ = n_features
        self.classes_ = np.unique(y)

        if self.verbose > 0:
            print(f"Random Forest 학습 시작: {config.num_trees}개 트리")

        seeds = spawn_seeds(self.random_state, config.num_trees)

        results = Parallel(n_jobs=self.n_jobs, verbose=self.verbose)(
            delayed(_train_tree)(config.tree, X, y, seed, config.bootstrap)
            for seed in seeds
        )

        self.trees_ = []
        self.training_history_ = []

        if config.oob_score:
            oob_votes = np.zeros((n_samples, len(self.classes_)))

        for m, (tree, sample_indices) in enumerate(results):
            self.trees_.append(tree)

            oob_indices = np.setdiff1d(np.arange(n_samples), sample_indices)

            if config.oob_score and len(oob_indices) > 0:
                oob_pred = tree.predict(X[oob_indices])
                class_idx = np.searchsorted(self.classes_, oob_pred)
                np.add.at(oob_votes, (oob_indices, class_idx), 1)

            self.training_history_.append({
                'tree_idx': m + 1,
                'train_accuracy': accuracy(y[sample_indices], tree.predict(X[sample_indices])),
                'tree_depth': tree.get_depth(),
                'tree_n_leaves': tree.get_n_leaves(),
                'n_oob_samples': len(oob_indices)
            })

        self.feature_importances_ = np.mean(
            [tree.feature_importances_ for tree in self.trees_], axis=0
        )

        if config.oob_score:
            self._compute_oob_score(y, oob_votes)

        logger.info(
            "랜덤 포레스트 학습 완료: trees=%d, samples=%d, classes=%d",
            len(self.trees_), n_samples, len(self.classes_)
        )

    def _compute_oob_score(self, y: np.ndarray, oob_votes: np.ndarray) -> None:
        n_votes = oob_votes.sum(axis=1)
        valid_oob = n_votes > 0

        if not np.any(valid_oob):
            warnings.warn(
                "OOB 예측을 받은 샘플이 없습니다. 트리 수를 늘려보세요.",
                UserWarning
            )
            self.oob_score_ = None
            self.oob_decision_function_ = None
            return

        decision = np.full(oob_votes.shape, np.nan)
        decision[valid_oob] = oob_votes[valid_oob] / n_votes[valid_oob, None]
        self.oob_decision_function_ = decision

        oob_pred = self.classes_[np.argmax(decision[valid_oob], axis=1)]
        self.oob_score_ = accuracy(y[valid_oob], oob_pred)

        if self.verbose > 0:
            print(f"OOB Accuracy: {self.oob_score_:.4f}")

    def _check_trained(self) -> None:
        if len(self.trees_) == 0:
            raise UntrainedModelError(type(self).__name__)

    def _collect_votes(self, X) -> np.ndarray:
        """트리별 예측 (shape: (n_trees, n_samples))"""
        self._check_trained()
        X = check_features(X, self.n_features_)
        return np.array([tree.predict(X) for tree in self.trees_])

    def predict_sample(self, features) -> Any:
        """단일 샘플의 다수결 예측"""
        self._check_trained()
        return majority_label([tree.predict_sample(features) for tree in self.trees_])

    def predict(self, X) -> np.ndarray:
        """
        예측 수행 (모든 트리 예측의 다수결)

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            예측할 데이터

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
            예측 레이블
        """
        votes = self._collect_votes(X)
        return np.array([majority_label(votes[:, i]) for i in range(votes.shape[1])])

    def predict_proba(self, X) -> np.ndarray:
        """
        클래스별 득표 비율

        Returns
        -------
        proba : ndarray of shape (n_samples, n_classes)
            열 순서는 classes_와 같음
        """
        votes = self._collect_votes(X)
        return np.stack(
            [(votes == label).mean(axis=0) for label in self.classes_],
            axis=1
        )

    def staged_predict(self, X) -> np.ndarray:
        """
        각 트리 추가 후의 예측 반환 (수렴 분석용)

        Returns
        -------
        predictions : ndarray of shape (n_trees, n_samples)
            처음 m개 트리의 다수결 예측
        """
        votes = self._collect_votes(X)
        n_trees, n_samples = votes.shape

        return np.array([
            [majority_label(votes[:m, i]) for i in range(n_samples)]
            for m in range(1, n_trees + 1)
        ])

    def get_oob_score(self) -> Optional[float]:
        """OOB 정확도 반환"""
        return self.oob_score_

    def __repr__(self) -> str:
        if len(self.trees_) == 0:
            return "RandomForest(not trained)"

        oob_str = f", oob_score={self.oob_score_:.4f}" if self.oob_score_ is not None else ""

        return (
            f"RandomForest("
            f"num_trees={len(self.trees_)}, "
            f"max_depth={self.config.tree.max_depth}"
            f"{oob_str})"
        )
