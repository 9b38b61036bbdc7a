"""Bundle creation, lookup and numbering."""
