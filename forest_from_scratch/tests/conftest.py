"""공용 테스트 데이터"""

import matplotlib

matplotlib.use('Agg')

import numpy as np
import pytest


@pytest.fixture
def blobs():
    """두 개의 잘 분리된 2차원 가우시안 군집 (레이블 0/1)"""
    rng = np.random.default_rng(42)
    X = np.vstack([
        rng.normal(loc=(-2.0, -2.0), scale=0.6, size=(50, 2)),
        rng.normal(loc=(2.0, 2.0), scale=0.6, size=(50, 2)),
    ])
    y = np.array([0] * 50 + [1] * 50)
    return X, y


@pytest.fixture
def three_blobs():
    """세 개의 2차원 군집 (문자열 레이블)"""
    rng = np.random.default_rng(7)
    centers = [(-3.0, 0.0), (3.0, 0.0), (0.0, 4.0)]
    X = np.vstack([rng.normal(loc=c, scale=0.5, size=(40, 2)) for c in centers])
    y = np.array(['red'] * 40 + ['green'] * 40 + ['blue'] * 40)
    return X, y


@pytest.fixture
def noisy_1d():
    """단일 피처, 겹치는 구간이 있는 이진 분류 데이터"""
    rng = np.random.default_rng(3)
    X = rng.uniform(0, 10, size=(60, 1))
    y = (X[:, 0] + rng.normal(scale=1.5, size=60) > 5).astype(int)
    return X, y
