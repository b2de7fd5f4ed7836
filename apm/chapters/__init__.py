"""
Runnable chapters of the notes.
Each chapter composes the worked examples into a markdown report with tables and plots under `reports/<run_id>/`.
"""
