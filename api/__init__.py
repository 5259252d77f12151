"""HTTP layer over the periodwatch core."""
