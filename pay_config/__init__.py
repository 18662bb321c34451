"""Administrative management of user pay config tiers."""
