"""Identity bounded context: accounts, profile, addresses and admin users."""
