"""
Enforcement evals -- deterministic, code-based checks of the enforcement core.

Run all: pytest evals/ -v
"""
