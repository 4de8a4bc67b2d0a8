"""Battle simulation core: stats, creatures, parties, damage and turn resolution."""
