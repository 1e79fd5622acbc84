"""otabuild - Android OTA build orchestration and release manifests."""

__version__ = "0.1.0"
