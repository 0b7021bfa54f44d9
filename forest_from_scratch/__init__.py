"""
Forest From Scratch - 결정 트리와 랜덤 포레스트 직접 구현
=========================================================

이 모듈은 교육용 분류 알고리즘을 NumPy만으로 직접 구현합니다.
트리 유도 과정(불순도 계산, 분할 탐색, 재귀적 트리 구축)과
배깅 앙상블의 동작을 명확히 보여주는 것이 목적입니다.

구현된 알고리즘:
- DecisionTree: Gini/엔트로피 기반 분류 결정 트리
- RandomForest: 부트스트랩 + 피처 서브샘플링 기반 앙상블
- LogisticRegression: One-vs-All 로지스틱 회귀

Author: Forest From Scratch Project
"""

from .base import Classifier, OneVsAllClassifier
from .decision_tree import DecisionTree, LeafNode, SplitNode, TreeConfig
from .random_forest import ForestConfig, RandomForest
from .logistic_regression import BinaryLogisticRegression, LogisticRegression
from .exceptions import (
    DimensionMismatchError,
    ForestFromScratchError,
    InvalidConfigurationError,
    UntrainedModelError,
)
from .metrics import accuracy, auroc, roc_curve
from .visualizer import MLVisualizer

__all__ = [
    'Classifier',
    'OneVsAllClassifier',
    'DecisionTree',
    'LeafNode',
    'SplitNode',
    'TreeConfig',
    'RandomForest',
    'ForestConfig',
    'BinaryLogisticRegression',
    'LogisticRegression',
    'ForestFromScratchError',
    'DimensionMismatchError',
    'InvalidConfigurationError',
    'UntrainedModelError',
    'accuracy',
    'auroc',
    'roc_curve',
    'MLVisualizer'
]

__version__ = '1.0.0'
