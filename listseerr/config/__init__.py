"""ListSeerr configuration package."""
