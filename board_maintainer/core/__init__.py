"""Card maintenance rules: activity resolution, staleness and reordering."""
