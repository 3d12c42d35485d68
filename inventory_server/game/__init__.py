"""Game world: item catalog, map geometry and the bundled world map."""
