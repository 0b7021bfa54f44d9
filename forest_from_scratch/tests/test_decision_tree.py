"""
Forest From Scratch - 결정 트리 검증 테스트
===========================================

테스트 항목:
1. 트리 구조의 정확성 (분할 임계값, 리프 레이블)
2. 종료 조건 (순수 노드, max_depth)
3. 에지 케이스 및 예외 처리
4. sklearn과의 일관성
"""

import inspect
import logging
import sys

import numpy as np
import pytest

from forest_from_scratch import (
    DecisionTree,
    DimensionMismatchError,
    InvalidConfigurationError,
    LeafNode,
    SplitNode,
    UntrainedModelError,
)


@pytest.mark.parametrize("criterion", ['gini', 'entropy'])
def test_simple_threshold_tree(criterion):
    """X=[[0],[1],[2],[3]], y=[0,0,1,1] → 1.5에서 분할된 두 순수 리프"""
    tree = DecisionTree(criterion=criterion, max_depth=-1)
    tree.train([[0], [1], [2], [3]], [0, 0, 1, 1])

    root = tree.root_
    assert isinstance(root, SplitNode)
    assert root.feature == 0
    assert root.threshold == 1.5
    assert isinstance(root.left, LeafNode) and root.left.prediction == 0
    assert isinstance(root.right, LeafNode) and root.right.prediction == 1
    assert root.left.impurity == 0 and root.right.impurity == 0

    np.testing.assert_array_equal(tree.predict([[0.5], [2.5]]), [0, 1])


@pytest.mark.parametrize("max_depth, num_features, criterion", [
    (-1, 1.0, 'gini'),
    (0, 1.0, 'entropy'),
    (3, 'sqrt', 'gini'),
    (1, 'log2', 'entropy'),
])
def test_single_label_gives_pure_root_leaf(max_depth, num_features, criterion):
    rng = np.random.default_rng(0)
    X = rng.normal(size=(20, 4))
    y = ['only'] * 20

    tree = DecisionTree(criterion=criterion, num_features=num_features, max_depth=max_depth)
    tree.train(X, y)

    assert isinstance(tree.root_, LeafNode)
    assert tree.root_.prediction == 'only'
    assert tree.root_.impurity == 0
    assert tree.get_depth() == 0


def test_zero_depth_predicts_majority_label():
    X = np.arange(6).reshape(-1, 1)
    y = [2, 1, 2, 3, 2, 1]

    tree = DecisionTree(max_depth=0)
    tree.train(X, y)

    assert isinstance(tree.root_, LeafNode)
    assert tree.root_.prediction == 2
    assert tree.root_.impurity > 0
    np.testing.assert_array_equal(tree.predict(X), [2] * 6)


def test_zero_depth_majority_tie_goes_to_smallest_label():
    tree = DecisionTree(max_depth=0)
    tree.train([[0], [1], [2], [3]], ['b', 'a', 'b', 'a'])

    assert tree.root_.prediction == 'a'


@pytest.mark.parametrize("num_features", [1.0, 'sqrt', 0.5])
def test_unbounded_tree_memorizes_training_data(num_features):
    """과적합 검증: 무제한 깊이에서 학습 샘플을 모두 맞춤"""
    rng = np.random.default_rng(1)
    X = rng.normal(size=(80, 4))
    y = rng.integers(0, 3, size=80)

    tree = DecisionTree(num_features=num_features, max_depth=-1, random_state=0)
    tree.train(X, y)

    np.testing.assert_array_equal(tree.predict(X), y)
    for x, label in zip(X, y):
        assert tree.predict_sample(x) == label


def test_max_depth_is_respected():
    rng = np.random.default_rng(2)
    X = rng.normal(size=(100, 3))
    y = rng.integers(0, 2, size=100)

    tree = DecisionTree(max_depth=2, random_state=0)
    tree.train(X, y)

    assert tree.get_depth() <= 2
    assert tree.get_n_leaves() <= 4


def test_string_labels(three_blobs):
    X, y = three_blobs

    tree = DecisionTree(random_state=0)
    tree.train(X, y)

    assert set(tree.predict(X)) == {'red', 'green', 'blue'}
    np.testing.assert_array_equal(tree.classes_, ['blue', 'green', 'red'])


def test_duplicate_points_with_conflicting_labels_become_majority_leaf():
    X = [[1.0], [1.0], [1.0], [5.0]]
    y = [0, 1, 1, 0]

    tree = DecisionTree()
    tree.train(X, y)

    np.testing.assert_array_equal(tree.predict([[1.0], [5.0]]), [1, 0])
    assert any(
        record['action'] == 'leaf' and record['reason'] == 'no_split'
        for record in tree.training_history_
    )


def test_feature_importances_favour_signal_feature():
    rng = np.random.default_rng(4)
    X = rng.normal(size=(200, 3))
    y = (X[:, 1] > 0).astype(int)

    tree = DecisionTree(max_depth=3, random_state=0)
    tree.train(X, y)

    assert tree.feature_importances_.sum() == pytest.approx(1.0)
    assert np.argmax(tree.feature_importances_) == 1


def test_retraining_replaces_root():
    tree = DecisionTree()
    tree.train([[0], [1]], [0, 1])
    first_root = tree.root_

    tree.train([[0], [1]], [5, 5])

    assert tree.root_ is not first_root
    assert isinstance(tree.root_, LeafNode) and tree.root_.prediction == 5


def test_same_random_state_is_reproducible():
    rng = np.random.default_rng(5)
    X = rng.integers(0, 4, size=(60, 6)).astype(float)
    y = rng.integers(0, 2, size=60)
    X_new = rng.integers(0, 4, size=(30, 6)).astype(float)

    tree1 = DecisionTree(num_features='sqrt', random_state=42)
    tree2 = DecisionTree(num_features='sqrt', random_state=42)
    tree1.train(X, y)
    tree2.train(X, y)

    np.testing.assert_array_equal(tree1.predict(X_new), tree2.predict(X_new))
    assert tree1.export_tree_structure() == tree2.export_tree_structure()


def test_export_tree_structure():
    tree = DecisionTree()
    assert tree.export_tree_structure() == {}

    tree.train([[0], [1], [2], [3]], [0, 0, 1, 1])
    structure = tree.export_tree_structure()

    assert structure['is_leaf'] is False
    assert structure['threshold'] == 1.5
    assert structure['n_samples'] == 4
    assert structure['left']['prediction'] == 0
    assert structure['right']['depth'] == 1


def test_predict_before_training_raises():
    tree = DecisionTree()

    with pytest.raises(UntrainedModelError):
        tree.predict([[1.0]])
    with pytest.raises(UntrainedModelError):
        tree.predict_sample([1.0])
    assert repr(tree) == "DecisionTree(not trained)"


@pytest.mark.parametrize("X, y", [
    ([[0], [1], [2]], [0, 1]),
    ([0, 1, 2], [0, 1, 2]),
    (np.empty((0, 2)), []),
])
def test_invalid_training_shapes_raise(X, y):
    with pytest.raises(DimensionMismatchError):
        DecisionTree().train(X, y)


def test_dimension_mismatch_is_a_value_error():
    with pytest.raises(ValueError):
        DecisionTree().train([[0], [1]], [0])


def test_predict_with_wrong_feature_count_raises():
    tree = DecisionTree()
    tree.train([[0, 0], [1, 1]], [0, 1])

    with pytest.raises(DimensionMismatchError):
        tree.predict([[0, 0, 0]])


@pytest.mark.parametrize("kwargs", [
    {'criterion': 'mse'},
    {'max_depth': -2},
    {'max_depth': 1.5},
    {'num_features': 0.0},
    {'num_features': 1.5},
    {'num_features': 0},
    {'num_features': 'cube'},
])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        DecisionTree(**kwargs)


def test_config_is_immutable():
    tree = DecisionTree(criterion='entropy')

    with pytest.raises(AttributeError):
        tree.config.criterion = 'gini'


def test_training_logs_summary(caplog):
    tree = DecisionTree()

    with caplog.at_level(logging.INFO, logger='forest_from_scratch'):
        tree.train([[0], [1], [2], [3]], [0, 0, 1, 1])

    assert "결정 트리 학습 완료" in caplog.text


def test_training_accuracy_matches_sklearn():
    """sklearn과의 일관성: 완전히 확장된 트리의 학습 정확도"""
    datasets = pytest.importorskip("sklearn.datasets")
    sk_tree = pytest.importorskip("sklearn.tree")

    X, y = datasets.load_iris(return_X_y=True)

    ours = DecisionTree(criterion='gini', max_depth=-1, random_state=0)
    ours.train(X, y)
    reference = sk_tree.DecisionTreeClassifier(random_state=0).fit(X, y)

    assert ours.score(X, y) == pytest.approx(reference.score(X, y))


@pytest.fixture
def shallow_recursion_limit():
    """현재 호출 깊이보다 150 프레임만 더 허용"""
    original = sys.getrecursionlimit()
    sys.setrecursionlimit(len(inspect.stack(0)) + 150)
    yield
    sys.setrecursionlimit(original)


def test_deep_chain_tree_builds_without_recursion(shallow_recursion_limit):
    """교대 레이블에서는 매 단계 샘플 하나씩 떨어져 나가 깊이 n-1의 사슬이 됨"""
    X = np.arange(300).reshape(-1, 1)
    y = np.arange(300) % 2

    tree = DecisionTree(max_depth=-1)
    tree.train(X, y)

    assert tree.get_depth() == 299
    assert tree.get_n_leaves() == 300
    np.testing.assert_array_equal(tree.predict(X), y)


def test_traversal_helpers_handle_deep_trees():
    n_levels = 2000
    node = LeafNode(prediction=0, impurity=0.0, n_samples=1, depth=n_levels)
    for depth in reversed(range(n_levels)):
        node = SplitNode(
            feature=1,
            threshold=depth + 0.5,
            impurity=0.5,
            left=LeafNode(prediction=1, impurity=0.0, n_samples=1, depth=depth + 1),
            right=node,
            n_samples=n_levels + 1 - depth,
            depth=depth
        )

    tree = DecisionTree()
    tree.n_features_ = 2
    tree.root_ = node

    stats = tree._calculate_tree_stats(node)
    assert stats['max_depth'] == n_levels
    assert stats['n_leaves'] == n_levels + 1

    importances = tree._calculate_feature_importances(node)
    np.testing.assert_allclose(importances, [0.0, 1.0])

    structure = tree.export_tree_structure()
    levels = 0
    while not structure['is_leaf']:
        structure = structure['right']
        levels += 1
    assert levels == n_levels
    assert structure['depth'] == n_levels
