"""Small numeric helpers shared by providers and estimators."""
