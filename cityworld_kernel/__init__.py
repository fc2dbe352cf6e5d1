"""City world kernel: crisis, arc, texture, domain and story-hook generation per simulated cycle."""
