"""Cache interface and its filesystem implementation."""
