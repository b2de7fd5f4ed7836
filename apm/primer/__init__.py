"""Python versus R primer."""
