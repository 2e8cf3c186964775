"""Configuration, logging, errors and chain descriptors."""
