"""
Catalog of the models covered in the notes with their tuning grids.
Each `ModelSpec` knows how to build a fresh scikit-learn estimator from one grid point,
which parameters make it more complex, and whether predictors must be centered and scaled first.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

import numpy as np
from sklearn.cross_decomposition import PLSRegression
from sklearn.decomposition import PCA
from sklearn.ensemble import (
    BaggingRegressor,
    GradientBoostingClassifier,
    GradientBoostingRegressor,
    RandomForestClassifier,
    RandomForestRegressor,
)
from sklearn.linear_model import ElasticNet, Lasso, LinearRegression, LogisticRegression, Ridge
from sklearn.neighbors import KNeighborsClassifier, KNeighborsRegressor
from sklearn.neural_network import MLPRegressor
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC, SVR
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from apm.resampling.tuning import expand_grid

TASKS = ("regression", "classification")


class FlatPLSRegression(PLSRegression):
    """PLS regression whose predictions are a flat vector like every other regressor."""

    def predict(self, X: Any, copy: bool = True) -> np.ndarray:
        return np.asarray(super().predict(X, copy=copy)).ravel()


@dataclass(frozen=True)
class ModelSpec:
    name: str
    task: str
    builder: Callable[[dict[str, Any], int | None], Any]
    grid: dict[str, list[Any]] = field(default_factory=dict)
    complexity_key: Callable[[dict[str, Any]], Any] | None = None
    needs_scaling: bool = False
    description: str = ""

    def build(self, params: dict[str, Any] | None = None, random_state: int | None = None) -> Any:
        estimator = self.builder(dict(params or {}), random_state)
        if self.needs_scaling:
            return Pipeline([("scale", StandardScaler()), ("model", estimator)])
        return estimator

    def factory(self, random_state: int | None = None) -> Callable[[dict[str, Any]], Any]:
        return lambda params: self.build(params, random_state)

    def default_grid(self, overrides: dict[str, list[Any]] | None = None) -> list[dict[str, Any]]:
        space = dict(self.grid)
        space.update(overrides or {})
        return expand_grid(space)


def _pcr(params: dict[str, Any], random_state: int | None) -> Any:
    return Pipeline(
        [
            ("scale", StandardScaler()),
            ("pca", PCA(n_components=int(params.get("n_components", 1)), random_state=random_state)),
            ("lm", LinearRegression()),
        ]
    )


def _bagged_tree(params: dict[str, Any], random_state: int | None) -> Any:
    return BaggingRegressor(
        estimator=DecisionTreeRegressor(random_state=random_state),
        n_estimators=int(params.get("n_estimators", 25)),
        random_state=random_state,
    )


def _nnet(params: dict[str, Any], random_state: int | None) -> Any:
    return MLPRegressor(
        hidden_layer_sizes=(int(params.get("size", 3)),),
        alpha=float(params.get("decay", 0.01)),
        max_iter=int(params.get("max_iter", 2000)),
        random_state=random_state,
    )


_REGRESSION: list[ModelSpec] = [
    ModelSpec(
        name="lm",
        task="regression",
        builder=lambda params, seed: LinearRegression(),
        description="Ordinary least squares",
    ),
    ModelSpec(
        name="ridge",
        task="regression",
        builder=lambda params, seed: Ridge(alpha=float(params["alpha"])),
        grid={"alpha": [0.0, 0.01, 0.1, 1.0, 10.0]},
        complexity_key=lambda params: -params["alpha"],
        needs_scaling=True,
        description="Ridge regression (L2 penalty)",
    ),
    ModelSpec(
        name="lasso",
        task="regression",
        builder=lambda params, seed: Lasso(alpha=float(params["alpha"]), max_iter=10000),
        grid={"alpha": [0.01, 0.05, 0.1, 0.5, 1.0]},
        complexity_key=lambda params: -params["alpha"],
        needs_scaling=True,
        description="Lasso (L1 penalty)",
    ),
    ModelSpec(
        name="enet",
        task="regression",
        builder=lambda params, seed: ElasticNet(
            alpha=float(params["alpha"]),
            l1_ratio=float(params["l1_ratio"]),
            max_iter=10000,
        ),
        grid={"alpha": [0.01, 0.1, 1.0], "l1_ratio": [0.2, 0.5, 0.8]},
        complexity_key=lambda params: (-params["alpha"], -params["l1_ratio"]),
        needs_scaling=True,
        description="Elastic net (L1 and L2 penalties)",
    ),
    ModelSpec(
        name="pls",
        task="regression",
        builder=lambda params, seed: FlatPLSRegression(n_components=int(params["n_components"]), scale=True),
        grid={"n_components": [1, 2, 3, 4, 5]},
        complexity_key=lambda params: params["n_components"],
        description="Partial least squares",
    ),
    ModelSpec(
        name="pcr",
        task="regression",
        builder=_pcr,
        grid={"n_components": [1, 2, 3, 4, 5]},
        complexity_key=lambda params: params["n_components"],
        description="Principal component regression",
    ),
    ModelSpec(
        name="knn",
        task="regression",
        builder=lambda params, seed: KNeighborsRegressor(n_neighbors=int(params["n_neighbors"])),
        grid={"n_neighbors": [1, 3, 5, 7, 9, 11, 15]},
        complexity_key=lambda params: -params["n_neighbors"],
        needs_scaling=True,
        description="K-nearest neighbors",
    ),
    ModelSpec(
        name="svm_radial",
        task="regression",
        builder=lambda params, seed: SVR(kernel="rbf", C=float(params["C"]), gamma="scale", epsilon=0.1),
        grid={"C": [0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0]},
        complexity_key=lambda params: params["C"],
        needs_scaling=True,
        description="Support vector machine, radial basis kernel",
    ),
    ModelSpec(
        name="nnet",
        task="regression",
        builder=_nnet,
        grid={"size": [1, 3, 5], "decay": [0.0, 0.01, 0.1]},
        complexity_key=lambda params: (params["size"], -params["decay"]),
        needs_scaling=True,
        description="Single hidden layer neural network with weight decay",
    ),
    ModelSpec(
        name="cart",
        task="regression",
        builder=lambda params, seed: DecisionTreeRegressor(max_depth=params["max_depth"], random_state=seed),
        grid={"max_depth": [1, 2, 3, 4, 5, 6]},
        complexity_key=lambda params: params["max_depth"],
        description="Single regression tree (CART)",
    ),
    ModelSpec(
        name="bagged_tree",
        task="regression",
        builder=_bagged_tree,
        grid={"n_estimators": [10, 25, 50]},
        complexity_key=lambda params: params["n_estimators"],
        description="Bagged regression trees",
    ),
    ModelSpec(
        name="rf",
        task="regression",
        builder=lambda params, seed: RandomForestRegressor(
            n_estimators=int(params.get("n_estimators", 200)),
            max_features=params["max_features"],
            random_state=seed,
        ),
        grid={"max_features": [0.33, 0.66, 1.0]},
        complexity_key=lambda params: params["max_features"],
        description="Random forest; max_features plays the role of mtry",
    ),
    ModelSpec(
        name="gbm",
        task="regression",
        builder=lambda params, seed: GradientBoostingRegressor(
            n_estimators=int(params["n_estimators"]),
            max_depth=int(params["max_depth"]),
            learning_rate=float(params.get("learning_rate", 0.1)),
            subsample=float(params.get("subsample", 0.5)),
            random_state=seed,
        ),
        grid={"n_estimators": [50, 100, 150], "max_depth": [1, 2, 3]},
        complexity_key=lambda params: (params["max_depth"], params["n_estimators"]),
        description="Stochastic gradient boosting",
    ),
]

_CLASSIFICATION: list[ModelSpec] = [
    ModelSpec(
        name="logistic",
        task="classification",
        builder=lambda params, seed: LogisticRegression(C=float(params["C"]), max_iter=1000),
        grid={"C": [0.01, 0.1, 1.0, 10.0]},
        complexity_key=lambda params: params["C"],
        needs_scaling=True,
        description="Penalized logistic regression",
    ),
    ModelSpec(
        name="knn",
        task="classification",
        builder=lambda params, seed: KNeighborsClassifier(n_neighbors=int(params["n_neighbors"])),
        grid={"n_neighbors": [1, 3, 5, 7, 9, 11, 15]},
        complexity_key=lambda params: -params["n_neighbors"],
        needs_scaling=True,
        description="K-nearest neighbors",
    ),
    ModelSpec(
        name="svm_radial",
        task="classification",
        builder=lambda params, seed: SVC(kernel="rbf", C=float(params["C"]), gamma="scale"),
        grid={"C": [0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0]},
        complexity_key=lambda params: params["C"],
        needs_scaling=True,
        description="Support vector machine, radial basis kernel",
    ),
    ModelSpec(
        name="cart",
        task="classification",
        builder=lambda params, seed: DecisionTreeClassifier(max_depth=params["max_depth"], random_state=seed),
        grid={"max_depth": [1, 2, 3, 4, 5, 6]},
        complexity_key=lambda params: params["max_depth"],
        description="Single classification tree (CART)",
    ),
    ModelSpec(
        name="rf",
        task="classification",
        builder=lambda params, seed: RandomForestClassifier(
            n_estimators=int(params.get("n_estimators", 200)),
            max_features=params["max_features"],
            random_state=seed,
        ),
        grid={"max_features": ["sqrt", 0.5, 1.0]},
        description="Random forest",
    ),
    ModelSpec(
        name="gbm",
        task="classification",
        builder=lambda params, seed: GradientBoostingClassifier(
            n_estimators=int(params["n_estimators"]),
            max_depth=int(params["max_depth"]),
            learning_rate=float(params.get("learning_rate", 0.1)),
            random_state=seed,
        ),
        grid={"n_estimators": [50, 100], "max_depth": [1, 2, 3]},
        complexity_key=lambda params: (params["max_depth"], params["n_estimators"]),
        description="Gradient boosting",
    ),
]

_CATALOG: dict[tuple[str, str], ModelSpec] = {(spec.task, spec.name): spec for spec in _REGRESSION + _CLASSIFICATION}


def list_models(task: str) -> list[str]:
    if task not in TASKS:
        raise ValueError(f"unknown task: {task!r}; expected one of {list(TASKS)}")
    return [name for (spec_task, name) in _CATALOG if spec_task == task]


def get_model_spec(name: str, task: str = "regression") -> ModelSpec:
    try:
        return _CATALOG[(task, name)]
    except KeyError as exc:
        raise KeyError(f"no {task} model named {name!r}; available: {list_models(task)}") from exc
