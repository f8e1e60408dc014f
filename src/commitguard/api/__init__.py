"""HTTP surface for the enforcement engine."""
