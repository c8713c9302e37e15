"""
Exception types raised by the provisioner.
"""


class ProvisioningError(RuntimeError):
    """Base error for provisioning failures."""


class ConfigurationError(ProvisioningError):
    """Raised when provisioning settings are missing or invalid."""


class CredentialsError(ProvisioningError):
    """Raised when AWS credentials cannot be resolved or are rejected."""


class ProfileNotFoundError(CredentialsError):
    """Raised when a named AWS profile is not configured locally."""


class AmiResolutionError(ProvisioningError):
    """Raised when the AMI lookup returns an image we do not trust."""


class KeyMaterialError(ProvisioningError):
    """Raised when SSH key material cannot be generated or read."""
