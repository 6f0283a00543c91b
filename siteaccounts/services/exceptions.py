"""Provides exceptions occurring with external services."""


class DirectoryError(IOError):
    """Failed to get data from the directory service."""


class DirectoryUnavailable(DirectoryError):
    """The directory service could not be reached or sent garbage."""


class OperatorNotFound(DirectoryError):
    """The directory service does not know the requested operator."""


class SiteNotFound(DirectoryError):
    """The directory service does not know the requested site."""


class CredentialsError(ValueError):
    """Test client credentials could not be encrypted or decrypted."""
