"""Flask wizard and state store for the mortgage calculator."""
