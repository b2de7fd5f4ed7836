"""Model catalog plus linear, nonlinear and tree-based model helpers."""
