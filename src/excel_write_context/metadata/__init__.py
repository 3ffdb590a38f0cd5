"""Descriptors, header metadata and scope holders."""
