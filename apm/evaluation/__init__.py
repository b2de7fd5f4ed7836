"""Performance measures for regression and classification models."""
