"""Core provisioning logic: catalogue, diffing, execution and validation."""
