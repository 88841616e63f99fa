"""Identity models and the admin permission gate."""
