"""External build system and signing tool adapters."""

from otabuild.builder.make import (
    CLEAN_TARGET,
    INSTALL_CLEAN_TARGET,
    MakeBuilder,
    lunch_combo,
    split_lunch_combo,
)
from otabuild.builder.protocols import Builder, BuildResult, SignResult, Signer
from otabuild.builder.signer import (
    SIGNED_OTA_NAME,
    SIGNED_TARGET_FILES_NAME,
    ReleaseSigner,
)

__all__ = [
    # Protocols
    "Builder",
    "Signer",
    "BuildResult",
    "SignResult",
    # Soong builder
    "MakeBuilder",
    "lunch_combo",
    "split_lunch_combo",
    "CLEAN_TARGET",
    "INSTALL_CLEAN_TARGET",
    # Signing
    "ReleaseSigner",
    "SIGNED_TARGET_FILES_NAME",
    "SIGNED_OTA_NAME",
]
