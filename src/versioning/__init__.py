"""Version spec parsing and maximum-satisfying resolution."""
