"""Provider files: small documents consumed by AI tools that point at the project log."""
