"""
Decision Tree Classifier - From Scratch Implementation
======================================================

탐욕적 재귀 분할 기반 분류 결정 트리 구현.

수학적 배경:
-----------
분할 기준: Gini 불순도 또는 Shannon 엔트로피 감소 최대화

분할 전 불순도:
    I_parent = I(y)

분할 후 가중 불순도:
    I_split = (n_left/n) * I_left + (n_right/n) * I_right

정보 이득 (Information Gain):
    Gain = I_parent - I_split

최적 분할: Gain이 최대인 (feature, threshold) 선택

종료 조건:
    1. I_parent == 0 (순수 노드) → 해당 레이블의 리프
    2. max_depth 도달             → 다수결 리프
    3. 유효한 분할 없음           → 다수결 리프

예측:
    x[feature] < threshold 이면 왼쪽, 아니면 오른쪽으로 내려가
    도달한 리프의 레이블 반환

Author: Forest From Scratch Project
"""

import logging
import numpy as np
from typing import Optional, Dict, List, Any, Tuple, Union
from dataclasses import dataclass

from .arrays import majority_label
from .base import Classifier, check_features, check_training_data
from .exceptions import InvalidConfigurationError, UntrainedModelError
from .impurity import IMPURITY_FUNCTIONS, calculate_impurity
from .sampling import RandomStateLike, check_random_state, spawn_seeds
from .splitter import SplitCandidate, find_split, resolve_n_features

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeafNode:
    """리프 노드: 예측 레이블과 도달한 샘플들의 불순도"""

    prediction: Any
    impurity: float
    n_samples: int = 0
    depth: int = 0

    def is_leaf(self) -> bool:
        return True


@dataclass(frozen=True)
class SplitNode:
    """내부 노드: x[feature] < threshold 이면 left, 아니면 right"""

    feature: int
    threshold: float
    impurity: float
    left: 'TreeNode'
    right: 'TreeNode'
    n_samples: int = 0
    depth: int = 0

    def is_leaf(self) -> bool:
        return False


TreeNode = Union[LeafNode, SplitNode]


@dataclass(frozen=True)
class TreeConfig:
    """
    결정 트리 설정 (생성 시 한 번 검증되며 이후 변경되지 않음)

    Parameters
    ----------
    criterion : {'gini', 'entropy'}, default='gini'
        분할 기준
    num_features : float, int, str or None, default=1.0
        각 분할에서 고려할 피처 수.
        - float: 전체 피처 대비 비율 (0 < x <= 1)
        - int: 해당 수의 피처 사용
        - 'sqrt': sqrt(n_features)
        - 'log2': log2(n_features)
        - None: 모든 피처 사용
    max_depth : int, default=-1
        트리의 최대 깊이. -1이면 제한 없음, 0이면 루트만 있는 리프.
    """

    criterion: str = 'gini'
    num_features: Optional[Union[float, int, str]] = 1.0
    max_depth: int = -1

    def __post_init__(self):
        if self.criterion not in IMPURITY_FUNCTIONS:
            raise InvalidConfigurationError(
                f"지원하지 않는 criterion입니다: {self.criterion!r}"
            )

        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, (int, np.integer)):
            raise InvalidConfigurationError(
                f"max_depth는 정수여야 합니다: {self.max_depth!r}"
            )
        if self.max_depth < -1:
            raise InvalidConfigurationError(
                f"max_depth는 -1(무제한) 또는 0 이상이어야 합니다: {self.max_depth}"
            )

        nf = self.num_features
        if nf is None or (isinstance(nf, str) and nf in ('sqrt', 'log2')):
            return
        if isinstance(nf, (bool, str)):
            raise InvalidConfigurationError(f"지원하지 않는 num_features입니다: {nf!r}")
        if isinstance(nf, (int, np.integer)):
            if nf < 1:
                raise InvalidConfigurationError(f"num_features는 1 이상이어야 합니다: {nf}")
        elif isinstance(nf, (float, np.floating)):
            if not 0.0 < nf <= 1.0:
                raise InvalidConfigurationError(
                    f"num_features 비율은 (0, 1] 범위여야 합니다: {nf}"
                )
        else:
            raise InvalidConfigurationError(f"지원하지 않는 num_features입니다: {nf!r}")


class DecisionTree(Classifier):
    """
    분류 결정 트리 (From Scratch)

    Parameters
    ----------
    criterion : {'gini', 'entropy'}, default='gini'
        분할 기준

    num_features : float, int, str or None, default=1.0
        각 분할에서 고려할 피처 수 (TreeConfig 참고)

    max_depth : int, default=-1
        트리의 최대 깊이. -1이면 제한 없음.

    random_state : int, SeedSequence, Generator or None
        랜덤 시드 (피처 서브샘플링용)

    Attributes
    ----------
    config : TreeConfig
        검증된 설정

    root_ : TreeNode
        학습된 트리의 루트 노드

    n_features_ : int
        학습에 사용된 피처 수

    n_features_to_sample_ : int
        분할마다 고려한 피처 수

    feature_importances_ : ndarray of shape (n_features,)
        피처 중요도 (불순도 감소 기반)

    tree_stats_ : dict
        트리 통계 (깊이, 노드 수, 리프 수 등)

    Examples
    --------
    >>> from forest_from_scratch import DecisionTree
    >>> X = [[0], [1], [2], [3]]
    >>> y = [0, 0, 1, 1]
    >>> tree = DecisionTree()
    >>> tree.train(X, y)
    >>> tree.predict([[0.5], [2.5]])
    array([0, 1])
    """

    def __init__(
        self,
        criterion: str = 'gini',
        num_features: Optional[Union[float, int, str]] = 1.0,
        max_depth: int = -1,
        random_state: RandomStateLike = None
    ):
        self.config = TreeConfig(
            criterion=criterion,
            num_features=num_features,
            max_depth=max_depth
        )
        self.random_state = random_state

        # 학습 후 설정되는 속성들
        self.root_: Optional[TreeNode] = None
        self.n_features_: int = 0
        self.n_features_to_sample_: int = 0
        self.classes_: Optional[np.ndarray] = None
        self.feature_importances_: Optional[np.ndarray] = None
        self.tree_stats_: Dict = {}
        self._rng: Optional[np.random.Generator] = None

        # 학습 과정 기록 (시각화용)
        self.training_history_: List[Dict] = []

    @classmethod
    def from_config(cls, config: TreeConfig, random_state: RandomStateLike = None) -> 'DecisionTree':
        """기존 설정값으로 트리 생성"""
        return cls(
            criterion=config.criterion,
            num_features=config.num_features,
            max_depth=config.max_depth,
            random_state=random_state
        )

    def _make_leaf(self, y: np.ndarray, impurity: float, depth: int, reason: str) -> LeafNode:
        if impurity == 0:
            prediction = y[0]
        else:
            prediction = majority_label(y)

        self.training_history_.append({
            'depth': depth,
            'n_samples': len(y),
            'impurity': impurity,
            'action': 'leaf',
            'reason': reason,
            'prediction': prediction
        })
        return LeafNode(
            prediction=prediction,
            impurity=impurity,
            n_samples=len(y),
            depth=depth
        )

    def _grow_node(
        self,
        X: np.ndarray,
        y: np.ndarray,
        depth: int
    ) -> Tuple[float, Union[LeafNode, SplitCandidate]]:
        """
        노드 하나를 평가하여 (불순도, 리프 또는 분할 후보) 반환

        종료 조건:
        1. 불순도가 정확히 0 (모든 레이블 동일)
        2. max_depth 도달
        3. 유효한 분할이 없음
        """
        impurity = calculate_impurity([y], self.config.criterion)

        if impurity == 0:
            return 0.0, self._make_leaf(y, 0.0, depth, 'pure')

        max_depth = self.config.max_depth
        if max_depth >= 0 and depth >= max_depth:
            return impurity, self._make_leaf(y, impurity, depth, 'max_depth')

        split = find_split(
            X, y, impurity,
            self.n_features_to_sample_,
            self.config.criterion,
            self._rng
        )

        if split is None:
            return impurity, self._make_leaf(y, impurity, depth, 'no_split')

        n_left, n_right = split.groups.sizes
        self.training_history_.append({
            'depth': depth,
            'n_samples': len(y),
            'impurity': impurity,
            'action': 'split',
            'feature': split.feature,
            'threshold': split.threshold,
            'gain': split.gain,
            'n_left': n_left,
            'n_right': n_right
        })
        return impurity, split

    def _build_tree(self, X: np.ndarray, y: np.ndarray) -> TreeNode:
        """
        명시적 스택으로 결정 트리 구축

        노드는 전위 순서(왼쪽 먼저)로 평가되고, 분할 노드는 자식이 모두
        만들어진 뒤 역순으로 생성됩니다. 깊이가 샘플 수에 비례하는
        트리도 재귀 한도에 걸리지 않습니다.
        """
        pending: List[Dict] = []
        root: Dict = {'node': None}

        # (X, y, depth, 부모 레코드, 부모에서의 위치)
        stack = [(X, y, 0, root, 'node')]

        while stack:
            X_node, y_node, depth, parent, side = stack.pop()
            impurity, grown = self._grow_node(X_node, y_node, depth)

            if isinstance(grown, LeafNode):
                parent[side] = grown
                continue

            record = {
                'feature': grown.feature,
                'threshold': grown.threshold,
                'impurity': impurity,
                'n_samples': len(y_node),
                'depth': depth,
                'parent': parent,
                'side': side,
                'left': None,
                'right': None
            }
            pending.append(record)

            groups = grown.groups
            stack.append((groups.features[1], groups.labels[1], depth + 1, record, 'right'))
            stack.append((groups.features[0], groups.labels[0], depth + 1, record, 'left'))

        # 자식은 항상 부모보다 나중에 기록되므로 역순이면 자식부터 완성됨
        for record in reversed(pending):
            record['parent'][record['side']] = SplitNode(
                feature=record['feature'],
                threshold=record['threshold'],
                impurity=record['impurity'],
                left=record['left'],
                right=record['right'],
                n_samples=record['n_samples'],
                depth=record['depth']
            )

        return root['node']

    def _calculate_feature_importances(self, node: TreeNode) -> np.ndarray:
        """
        피처 중요도 계산 (불순도 감소 기반)

        importance[i] = Σ (n_samples * impurity_decrease) for splits using feature i
        """
        importances = np.zeros(self.n_features_)
        stack = [node]

        while stack:
            node = stack.pop()
            if node.is_leaf():
                continue

            decrease = node.impurity - (
                (node.left.n_samples / node.n_samples) * node.left.impurity +
                (node.right.n_samples / node.n_samples) * node.right.impurity
            )
            importances[node.feature] += node.n_samples * decrease

            stack.append(node.right)
            stack.append(node.left)

        total = np.sum(importances)
        if total > 0:
            importances /= total

        return importances

    def _calculate_tree_stats(self, node: TreeNode) -> Dict:
        """트리 통계 계산"""
        stats = {
            'max_depth': 0,
            'n_nodes': 0,
            'n_leaves': 0,
            'n_internal': 0,
            'avg_leaf_depth': 0,
            'leaf_depths': []
        }
        stack = [(node, 0)]

        while stack:
            node, depth = stack.pop()
            stats['n_nodes'] += 1
            stats['max_depth'] = max(stats['max_depth'], depth)

            if node.is_leaf():
                stats['n_leaves'] += 1
                stats['leaf_depths'].append(depth)
            else:
                stats['n_internal'] += 1
                stack.append((node.right, depth + 1))
                stack.append((node.left, depth + 1))

        if stats['n_leaves'] > 0:
            stats['avg_leaf_depth'] = float(np.mean(stats['leaf_depths']))

        return stats

    def train(self, X, y) -> None:
        """
        결정 트리 학습 (재학습 시 루트를 교체)

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            학습 데이터
        y : array-like of shape (n_samples,)
            클래스 레이블

        Raises
        ------
        DimensionMismatchError
            X와 y의 샘플 수가 다르거나 X가 2차원이 아닌 경우
        """
        X, y = check_training_data(X, y)

        self.n_features_ = X.shape[1]
        self.n_features_to_sample_ = resolve_n_features(
            self.config.num_features, self.n_features_
        )
        self.classes_ = np.unique(y)
        if isinstance(self.random_state, np.random.Generator):
            self._rng = self.random_state
        else:
            # 트리 1개짜리 포레스트와 같은 자식 시드를 사용
            self._rng = check_random_state(spawn_seeds(self.random_state, 1)[0])
        self.training_history_ = []

        self.root_ = self._build_tree(X, y)

        self.feature_importances_ = self._calculate_feature_importances(self.root_)
        self.tree_stats_ = self._calculate_tree_stats(self.root_)

        logger.info(
            "결정 트리 학습 완료: samples=%d, depth=%d, leaves=%d",
            len(y), self.tree_stats_['max_depth'], self.tree_stats_['n_leaves']
        )

    def predict_sample(self, features) -> Any:
        """단일 샘플 예측"""
        if self.root_ is None:
            raise UntrainedModelError(type(self).__name__)

        node = self.root_

        while not node.is_leaf():
            if features[node.feature] < node.threshold:
                node = node.left
            else:
                node = node.right

        return node.prediction

    def predict(self, X) -> np.ndarray:
        """
        예측 수행

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            예측할 데이터 (1차원이면 단일 샘플로 간주)

        Returns
        -------
        y_pred : ndarray of shape (n_samples,)
            예측 레이블
        """
        if self.root_ is None:
            raise UntrainedModelError(type(self).__name__)

        X = check_features(X, self.n_features_)
        return np.array([self.predict_sample(x) for x in X])

    def get_depth(self) -> int:
        """트리의 최대 깊이 반환"""
        if self.root_ is None:
            return 0
        return self.tree_stats_.get('max_depth', 0)

    def get_n_leaves(self) -> int:
        """리프 노드 수 반환"""
        if self.root_ is None:
            return 0
        return self.tree_stats_.get('n_leaves', 0)
    def export_tree_structure(self) -> Dict:
        """
        트리 구조를 딕셔너리로 내보내기 (시각화용)
        """
        if self.root_ is None:
            return {}

        def _node_to_dict(node: TreeNode) -> Dict:
            result = {
                'impurity': node.impurity,
                'n_samples': node.n_samples,
                'depth': node.depth,
                'is_leaf': node.is_leaf()
            }
            if node.is_leaf():
                result['prediction'] = node.prediction
            else:
                result['feature'] = node.feature
                result['threshold'] = node.threshold
            return result

        structure = _node_to_dict(self.root_)
        stack = [(self.root_, structure)]

        while stack:
            node, result = stack.pop()
            if node.is_leaf():
                continue
            for side, child in (('left', node.left), ('right', node.right)):
                result[side] = _node_to_dict(child)
                stack.append((child, result[side]))

        return structure

    def __repr__(self) -> str:
        if self.root_ is None:
            return "DecisionTree(not trained)"

        return (
            f"DecisionTree("
            f"criterion={self.config.criterion!r}, "
            f"depth={self.get_depth()}, "
            f"n_leaves={self.get_n_leaves()}, "
            f"n_features={self.n_features_})"
        )
