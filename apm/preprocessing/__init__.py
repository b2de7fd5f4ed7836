"""
Data pre-processing worked examples.
Transformations of individual predictors, filters that remove predictors, and feature extraction.
"""
