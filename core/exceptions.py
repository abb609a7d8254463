class RadarException(Exception):
    """Base exception"""

    pass


class SeedNotFoundError(RadarException):
    """Seed does not exist or belongs to another user"""

    pass


class ConfigurationError(RadarException):
    """Seed cannot be synced as configured (missing host, missing password)"""

    pass


# IMAP Exceptions
class ImapException(RadarException):
    """Base exception for IMAP sessions"""

    pass


class ConnectivityError(ImapException):
    """Socket or TLS setup failed, or the server dropped the connection"""

    pass


class ImapAuthenticationError(ImapException):
    """Server rejected the LOGIN credentials"""

    pass


class PersistenceError(RadarException):
    """Captured newsletter could not be stored"""

    pass
