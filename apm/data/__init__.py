"""Sample datasets bundled with the statistical libraries."""
