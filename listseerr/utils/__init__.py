"""ListSeerr utility modules."""
