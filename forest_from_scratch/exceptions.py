"""
예외 계층
=========

학습/예측 진입 시점에서 감지되는 전제 조건 위반을 표현합니다.
내부에서 재시도하거나 복구하지 않으며, 호출자에게 그대로 전달됩니다.

Author: Forest From Scratch Project
"""


class ForestFromScratchError(Exception):
    """패키지 예외의 최상위 클래스"""


class DimensionMismatchError(ForestFromScratchError, ValueError):
    """피처 행렬과 레이블 벡터의 크기가 맞지 않을 때"""


class UntrainedModelError(ForestFromScratchError, RuntimeError):
    """학습되지 않은 모델로 예측을 시도할 때"""

    def __init__(self, model_name: str = "Model"):
        super().__init__(
            f"{model_name}이(가) 학습되지 않았습니다. train()을 먼저 호출하세요."
        )


class InvalidConfigurationError(ForestFromScratchError, ValueError):
    """지원하지 않는 설정값 (criterion, num_trees, max_depth 등)"""
