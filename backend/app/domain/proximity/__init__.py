"""Location store and nearby-traveler discovery."""
