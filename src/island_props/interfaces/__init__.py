"""Public facing interfaces exposed by :mod:`island_props`."""
