"""Static catalogs: the built-in toolchain requirement list."""
