"""
Forest From Scratch - 랜덤 포레스트 검증 테스트
===============================================

테스트 항목:
1. 단일 트리와의 일관성
2. 부트스트랩 / 다수결 / 득표 비율
3. 재현성 (random_state, n_jobs)
4. OOB 정확도와 예외 처리
"""

import numpy as np
import pytest

from forest_from_scratch import (
    DecisionTree,
    DimensionMismatchError,
    InvalidConfigurationError,
    RandomForest,
    UntrainedModelError,
)


def test_single_tree_without_bootstrap_matches_decision_tree(noisy_1d):
    X, y = noisy_1d
    X_grid = np.linspace(-1, 11, 50).reshape(-1, 1)

    forest = RandomForest(num_trees=1, bootstrap=False, criterion='entropy', max_depth=4, random_state=0)
    forest.train(X, y)
    tree = DecisionTree(criterion='entropy', max_depth=4, random_state=0)
    tree.train(X, y)

    np.testing.assert_array_equal(forest.predict(X_grid), tree.predict(X_grid))
    np.testing.assert_array_equal(forest.predict(X), tree.predict(X))


@pytest.mark.parametrize("seed", range(20))
def test_single_tree_matches_decision_tree_on_tied_features(seed):
    """두 피처의 Gain이 같을 때도 같은 시드면 같은 피처를 선택"""
    X = [[0, 5], [1, 5], [2, 9], [3, 9]]
    y = [0, 0, 1, 1]
    X_new = [[0, 9], [3, 5]]

    forest = RandomForest(num_trees=1, bootstrap=False, random_state=seed)
    forest.train(X, y)
    tree = DecisionTree(random_state=seed)
    tree.train(X, y)

    assert forest.trees_[0].root_.feature == tree.root_.feature
    np.testing.assert_array_equal(forest.predict(X_new), tree.predict(X_new))


def test_tied_features_are_chosen_by_seed():
    X = [[0, 5], [1, 5], [2, 9], [3, 9]]
    y = [0, 0, 1, 1]

    chosen = set()
    for seed in range(20):
        tree = DecisionTree(random_state=seed)
        tree.train(X, y)
        chosen.add(tree.root_.feature)

    assert chosen == {0, 1}


def test_forest_separates_blobs(blobs):
    X, y = blobs
    rng = np.random.default_rng(0)
    idx = rng.permutation(len(y))
    train, test = idx[:70], idx[70:]

    forest = RandomForest(num_trees=15, num_features='sqrt', random_state=0)
    forest.train(X[train], y[train])

    assert forest.score(X[test], y[test]) >= 0.9


def test_each_tree_sees_n_bootstrap_samples(blobs):
    X, y = blobs

    forest = RandomForest(num_trees=5, random_state=1)
    forest.train(X, y)

    assert len(forest.trees_) == 5
    for tree, record in zip(forest.trees_, forest.training_history_):
        assert tree.root_.n_samples == len(y)
        # 복원 추출이므로 대부분의 경우 일부 샘플이 빠짐
        assert 0 <= record['n_oob_samples'] < len(y)


def test_without_bootstrap_every_tree_uses_full_data(blobs):
    X, y = blobs

    forest = RandomForest(num_trees=3, bootstrap=False, random_state=2)
    forest.train(X, y)

    assert all(record['n_oob_samples'] == 0 for record in forest.training_history_)
    assert all(record['train_accuracy'] == 1.0 for record in forest.training_history_)


def test_vote_tie_goes_to_smallest_label():
    X = [[0.0], [1.0], [2.0], [3.0]]
    forest = RandomForest(num_trees=2, bootstrap=False, random_state=0)
    forest.train(X, ['a', 'b', 'a', 'b'])

    votes_b = DecisionTree()
    votes_b.train(X, ['b'] * 4)
    votes_a = DecisionTree()
    votes_a.train(X, ['a'] * 4)
    forest.trees_ = [votes_b, votes_a]

    np.testing.assert_array_equal(forest.predict([[0.5], [2.5]]), ['a', 'a'])
    assert forest.predict_sample([0.5]) == 'a'
    np.testing.assert_allclose(forest.predict_proba([[0.5]]), [[0.5, 0.5]])


def test_predict_proba_is_vote_fraction(three_blobs):
    X, y = three_blobs

    forest = RandomForest(num_trees=9, random_state=3)
    forest.train(X, y)
    proba = forest.predict_proba(X)

    assert proba.shape == (len(y), 3)
    np.testing.assert_allclose(proba.sum(axis=1), 1.0)
    np.testing.assert_allclose(proba * 9, np.round(proba * 9))
    np.testing.assert_array_equal(
        forest.classes_[np.argmax(proba, axis=1)], forest.predict(X)
    )


def test_staged_predict_ends_with_final_prediction(blobs):
    X, y = blobs

    forest = RandomForest(num_trees=6, random_state=4)
    forest.train(X, y)
    staged = forest.staged_predict(X)

    assert staged.shape == (6, len(y))
    np.testing.assert_array_equal(staged[0], forest.trees_[0].predict(X))
    np.testing.assert_array_equal(staged[-1], forest.predict(X))


def test_same_random_state_is_reproducible(noisy_1d):
    X, y = noisy_1d

    preds = []
    for _ in range(2):
        forest = RandomForest(num_trees=8, num_features=1.0, random_state=123)
        forest.train(X, y)
        preds.append(forest.predict_proba(X))

    np.testing.assert_array_equal(preds[0], preds[1])


def test_parallel_training_matches_sequential(blobs):
    X, y = blobs

    sequential = RandomForest(num_trees=6, num_features='sqrt', random_state=9, n_jobs=1)
    parallel = RandomForest(num_trees=6, num_features='sqrt', random_state=9, n_jobs=2)
    sequential.train(X, y)
    parallel.train(X, y)

    np.testing.assert_array_equal(sequential.predict_proba(X), parallel.predict_proba(X))


def test_oob_score(blobs):
    X, y = blobs

    forest = RandomForest(num_trees=25, oob_score=True, random_state=5)
    forest.train(X, y)

    assert 0.9 <= forest.get_oob_score() <= 1.0
    assert forest.oob_decision_function_.shape == (len(y), 2)
    assert "oob_score=" in repr(forest)


def test_feature_importances_average_over_trees():
    rng = np.random.default_rng(6)
    X = rng.normal(size=(150, 4))
    y = (X[:, 2] > 0).astype(int)

    forest = RandomForest(num_trees=10, max_depth=3, random_state=0)
    forest.train(X, y)

    assert forest.feature_importances_.sum() == pytest.approx(1.0)
    assert np.argmax(forest.feature_importances_) == 2


def test_predict_before_training_raises():
    forest = RandomForest()

    with pytest.raises(UntrainedModelError):
        forest.predict([[0.0]])
    with pytest.raises(UntrainedModelError):
        forest.predict_proba([[0.0]])
    with pytest.raises(UntrainedModelError):
        forest.predict_sample([0.0])
    assert repr(forest) == "RandomForest(not trained)"


def test_mismatched_lengths_raise():
    with pytest.raises(DimensionMismatchError):
        RandomForest().train([[0], [1], [2]], [0, 1])


@pytest.mark.parametrize("kwargs", [
    {'num_trees': 0},
    {'num_trees': -3},
    {'num_trees': 2.5},
    {'oob_score': True, 'bootstrap': False},
    {'criterion': 'variance'},
    {'max_depth': -5},
])
def test_invalid_configuration_is_rejected(kwargs):
    with pytest.raises(InvalidConfigurationError):
        RandomForest(**kwargs)


def test_verbose_prints_progress(blobs, capsys):
    X, y = blobs

    RandomForest(num_trees=2, random_state=0, verbose=1).train(X, y)

    assert "Random Forest 학습 시작: 2개 트리" in capsys.readouterr().out
