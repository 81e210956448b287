"""Language toolchain adapters (package discovery)."""
