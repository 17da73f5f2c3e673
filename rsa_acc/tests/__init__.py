"""
Tests package for the RSA accumulator

- Unit tests: individual components in isolation
- Integration tests: complete workflows across components
"""
