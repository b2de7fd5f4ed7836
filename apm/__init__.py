"""
Package marker for the applied predictive modeling notes under `apm`.
It groups the worked examples under a stable import path and keeps chapter boundaries explicit.
Most functionality lives in the sibling subpackages; this file intentionally stays lightweight.
"""
