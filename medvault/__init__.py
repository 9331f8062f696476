"""MedVault: dual-tier record store for model and scan artifacts."""

__version__ = "0.1.0"
