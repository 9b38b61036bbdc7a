"""Moving bundles to the sold store."""
