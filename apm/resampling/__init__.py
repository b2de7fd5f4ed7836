"""Data splitting, resampling and model tuning."""
