"""
ML Visualizer - 분류기 시각화 도구
==================================

학습된 트리/앙상블의 구조와 예측을 시각화합니다.

주요 기능:
- 결정 트리 구조 시각화
- 2차원 피처 공간의 결정 경계
- 앙상블 예측 수렴 과정 (트리 수 대비 정확도)
- 피처 중요도 비교
- ROC 곡선

Author: Forest From Scratch Project
"""

import warnings
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
from matplotlib.lines import Line2D
from typing import Optional, List, Dict, Tuple, Any

from .exceptions import DimensionMismatchError, UntrainedModelError
from .metrics import auroc, roc_curve


class MLVisualizer:
    """
    분류기 시각화 클래스

    Parameters
    ----------
    figsize : tuple, default=(12, 8)
        기본 Figure 크기

    style : str, optional
        Matplotlib 스타일

    dpi : int, default=100
        Figure DPI
    """

    def __init__(
        self,
        figsize: Tuple[int, int] = (12, 8),
        style: Optional[str] = None,
        dpi: int = 100
    ):
        self.figsize = figsize
        self.style = style
        self.dpi = dpi

        if self.style:
            try:
                plt.style.use(self.style)
            except OSError:
                warnings.warn(f"Matplotlib 스타일을 찾을 수 없습니다: {self.style}")

        # 색상 팔레트
        self.colors = {
            'primary': '#2E86AB',
            'secondary': '#A23B72',
            'accent': '#F18F01',
            'neutral': '#3B3B3B',
            'leaf': '#8FC79A',
        }
        self.class_colors = ['#2E86AB', '#F18F01', '#A23B72', '#C73E1D', '#3B8E3B', '#6C5B7B']

    def _class_cmap(self, n_classes: int) -> ListedColormap:
        colors = [self.class_colors[i % len(self.class_colors)] for i in range(n_classes)]
        return ListedColormap(colors)

    def plot_decision_tree(
        self,
        tree,
        feature_names: Optional[List[str]] = None,
        max_depth: int = 4,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Decision Tree Structure"
    ) -> plt.Figure:
        """
        결정 트리 구조 시각화

        Parameters
        ----------
        tree : DecisionTree
            시각화할 트리
        feature_names : list, optional
            피처 이름 리스트
        max_depth : int
            표시할 최대 깊이

        Returns
        -------
        fig : matplotlib.Figure
        """
        if tree.root_ is None:
            raise UntrainedModelError(type(tree).__name__)

        fig, ax = plt.subplots(figsize=figsize or (14, 10), dpi=self.dpi)

        tree_dict = tree.export_tree_structure()
        positions = self._calculate_tree_positions(tree_dict, max_depth)
        self._draw_tree_nodes(ax, tree_dict, positions, feature_names, max_depth)

        ax.set_xlim(-0.1, 1.1)
        ax.set_ylim(-0.1, 1.1)
        ax.axis('off')
        ax.set_title(title, fontsize=14, fontweight='bold', pad=20)

        plt.tight_layout()
        return fig

    def _calculate_tree_positions(
        self,
        node: Dict,
        max_depth: int,
        x: float = 0.5,
        y: float = 0.95,
        x_offset: float = 0.25,
        depth: int = 0,
        positions: Optional[Dict] = None
    ) -> Dict:
        """트리 노드 위치 계산"""
        if positions is None:
            positions = {}

        positions[id(node)] = (x, y)

        if depth >= max_depth or node['is_leaf']:
            return positions

        y_child = y - 0.15
        self._calculate_tree_positions(
            node['left'], max_depth, x - x_offset, y_child, x_offset / 2, depth + 1, positions
        )
        self._calculate_tree_positions(
            node['right'], max_depth, x + x_offset, y_child, x_offset / 2, depth + 1, positions
        )

        return positions

    def _draw_tree_nodes(
        self,
        ax: plt.Axes,
        node: Dict,
        positions: Dict,
        feature_names: Optional[List[str]],
        max_depth: int,
        depth: int = 0
    ):
        """트리 노드와 엣지 그리기"""
        if id(node) not in positions:
            return

        x, y = positions[id(node)]

        if node['is_leaf']:
            color = self.colors['leaf']
            text = (
                f"class: {node['prediction']}\n"
                f"impurity: {node['impurity']:.3f}\n"
                f"samples: {node['n_samples']}"
            )
        else:
            color = plt.cm.Blues(0.3 + 0.5 * (1 - depth / max(max_depth, 1)))
            feat = node['feature']
            feat_name = feature_names[feat] if feature_names else f"X{feat}"
            text = (
                f"{feat_name} < {node['threshold']:.3f}\n"
                f"impurity: {node['impurity']:.3f}\n"
                f"samples: {node['n_samples']}"
            )

        bbox = dict(boxstyle='round,pad=0.3', facecolor=color, edgecolor='gray', alpha=0.9)
        ax.text(x, y, text, ha='center', va='center', fontsize=8, bbox=bbox)

        if node['is_leaf']:
            return

        # 왼쪽은 조건 참(T), 오른쪽은 거짓(F)
        for child_key, label, label_color, dx in (
            ('left', 'T', 'green', -0.02),
            ('right', 'F', 'red', 0.02),
        ):
            child = node[child_key]
            if id(child) not in positions:
                continue
            x_child, y_child = positions[id(child)]
            ax.plot([x, x_child], [y - 0.03, y_child + 0.03], 'k-', linewidth=1, alpha=0.7)
            ax.text((x + x_child) / 2 + dx, (y + y_child) / 2, label, fontsize=7, color=label_color)
            self._draw_tree_nodes(ax, child, positions, feature_names, max_depth, depth + 1)

    def plot_decision_boundary(
        self,
        model,
        X: np.ndarray,
        y: np.ndarray,
        resolution: int = 200,
        padding: float = 0.5,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Decision Boundary"
    ) -> plt.Figure:
        """
        2차원 피처 공간의 결정 경계 시각화

        격자 위 모든 점의 예측 클래스를 색으로 칠하고 학습 샘플을 겹쳐 그립니다.

        Parameters
        ----------
        model : Classifier
            학습된 분류기 (2개 피처)
        X : ndarray of shape (n_samples, 2)
            표시할 샘플
        y : ndarray of shape (n_samples,)
            샘플 레이블
        resolution : int
            축당 격자 점 수
        padding : float
            데이터 범위 바깥 여백

        Returns
        -------
        fig : matplotlib.Figure
        """
        X = np.asarray(X, dtype=float)
        y = np.asarray(y)

        if X.ndim != 2 or X.shape[1] != 2:
            raise DimensionMismatchError("결정 경계는 2개 피처에서만 그릴 수 있습니다.")

        x_min, x_max = X[:, 0].min() - padding, X[:, 0].max() + padding
        y_min, y_max = X[:, 1].min() - padding, X[:, 1].max() + padding
        xx, yy = np.meshgrid(
            np.linspace(x_min, x_max, resolution),
            np.linspace(y_min, y_max, resolution)
        )

        grid_pred = model.predict(np.c_[xx.ravel(), yy.ravel()])

        classes = np.unique(np.concatenate([np.unique(y), np.unique(grid_pred)]))
        cmap = self._class_cmap(len(classes))
        grid_idx = np.searchsorted(classes, grid_pred).reshape(xx.shape)
        sample_idx = np.searchsorted(classes, y)

        fig, ax = plt.subplots(figsize=figsize or (8, 7), dpi=self.dpi)

        ax.contourf(
            xx, yy, grid_idx,
            levels=np.arange(len(classes) + 1) - 0.5,
            cmap=cmap, alpha=0.3
        )
        ax.scatter(
            X[:, 0], X[:, 1], c=sample_idx, cmap=cmap,
            vmin=-0.5, vmax=len(classes) - 0.5,
            edgecolor='white', linewidth=0.5, s=40
        )

        handles = [
            Line2D([0], [0], marker='o', color='w', markerfacecolor=cmap(i),
                   markersize=8, label=str(label))
            for i, label in enumerate(classes)
        ]
        ax.legend(handles=handles, title='Class', loc='upper right')

        ax.set_xlabel('Feature 0', fontsize=11)
        ax.set_ylabel('Feature 1', fontsize=11)
        ax.set_title(title, fontsize=14, fontweight='bold')

        plt.tight_layout()
        return fig

    def plot_feature_importance(
        self,
        models: Dict[str, Any],
        feature_names: Optional[List[str]] = None,
        top_k: int = 15,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Feature Importance Comparison"
    ) -> plt.Figure:
        """
        여러 모델의 피처 중요도 비교

        Parameters
        ----------
        models : dict
            {모델명: 모델객체} 딕셔너리
        feature_names : list, optional
            피처 이름 리스트
        top_k : int
            표시할 상위 피처 수

        Returns
        -------
        fig : matplotlib.Figure
        """
        n_models = len(models)
        fig, axes = plt.subplots(1, n_models, figsize=figsize or (5 * n_models, 6), dpi=self.dpi)

        if n_models == 1:
            axes = [axes]

        colors = plt.cm.Set2(np.linspace(0, 1, n_models))

        for ax, color, (name, model) in zip(axes, colors, models.items()):
            importances = getattr(model, 'feature_importances_', None)

            if importances is None:
                ax.text(0.5, 0.5, 'Not trained', ha='center', va='center')
                ax.set_title(name, fontsize=11, fontweight='bold')
                continue

            names = feature_names or [f'Feature {i}' for i in range(len(importances))]
            indices = np.argsort(importances)[::-1][:top_k]

            ax.barh(range(len(indices)), importances[indices], color=color, alpha=0.8)
            ax.set_yticks(range(len(indices)))
            ax.set_yticklabels([names[i] for i in indices])
            ax.invert_yaxis()
            ax.set_xlabel('Importance', fontsize=10)
            ax.set_title(name, fontsize=11, fontweight='bold')
            ax.grid(True, alpha=0.3, axis='x')

        fig.suptitle(title, fontsize=14, fontweight='bold', y=1.02)
        plt.tight_layout()
        return fig

    def plot_ensemble_convergence(
        self,
        model,
        X: np.ndarray,
        y: np.ndarray,
        X_test: Optional[np.ndarray] = None,
        y_test: Optional[np.ndarray] = None,
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "Ensemble Accuracy Convergence"
    ) -> plt.Figure:
        """
        트리 수에 따른 앙상블 정확도 변화

        Parameters
        ----------
        model : RandomForest
            staged_predict를 제공하는 학습된 앙상블
        X, y : ndarray
            학습(또는 평가) 데이터
        X_test, y_test : ndarray, optional
            추가로 표시할 검증 데이터

        Returns
        -------
        fig : matplotlib.Figure
        """
        if not hasattr(model, 'staged_predict'):
            raise ValueError("모델에 staged_predict 메서드가 없습니다.")

        fig, ax = plt.subplots(figsize=figsize or (10, 5), dpi=self.dpi)

        curves = [('Train', X, y, self.colors['primary'], '-')]
        if X_test is not None and y_test is not None:
            curves.append(('Test', X_test, y_test, self.colors['accent'], '--'))

        for label, X_eval, y_eval, color, linestyle in curves:
            staged = model.staged_predict(X_eval)
            y_eval = np.asarray(y_eval)
            acc = (staged == y_eval[None, :]).mean(axis=1)
            ax.plot(np.arange(1, len(acc) + 1), acc, label=label,
                    color=color, linewidth=2, linestyle=linestyle)

        ax.set_xlabel('Number of Trees', fontsize=11)
        ax.set_ylabel('Accuracy', fontsize=11)
        ax.set_ylim(0, 1.05)
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.legend(loc='lower right')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        return fig

    def plot_roc_curve(
        self,
        y_true: np.ndarray,
        scores: Dict[str, np.ndarray],
        figsize: Optional[Tuple[int, int]] = None,
        title: str = "ROC Curve"
    ) -> plt.Figure:
        """
        ROC 곡선 비교

        Parameters
        ----------
        y_true : ndarray
            0/1 실제 레이블
        scores : dict
            {모델명: 양성 클래스 점수} 딕셔너리

        Returns
        -------
        fig : matplotlib.Figure
        """
        fig, ax = plt.subplots(figsize=figsize or (7, 7), dpi=self.dpi)

        colors = plt.cm.tab10(np.linspace(0, 1, max(len(scores), 1)))
        for (name, score), color in zip(scores.items(), colors):
            fpr, tpr = roc_curve(y_true, score)
            ax.plot(fpr, tpr, color=color, linewidth=2,
                    label=f"{name} (AUROC={auroc(y_true, score):.3f})")

        ax.plot([0, 1], [0, 1], 'k--', linewidth=1, alpha=0.5)
        ax.set_xlabel('False Positive Rate', fontsize=11)
        ax.set_ylabel('True Positive Rate', fontsize=11)
        ax.set_title(title, fontsize=14, fontweight='bold')
        ax.legend(loc='lower right')
        ax.grid(True, alpha=0.3)

        plt.tight_layout()
        return fig

    def save_figure(
        self,
        fig: plt.Figure,
        filepath: str,
        dpi: Optional[int] = None
    ):
        """Figure 저장"""
        fig.savefig(filepath, dpi=dpi or self.dpi, bbox_inches='tight',
                    facecolor='white', edgecolor='none')
        print(f"Figure saved: {filepath}")
