"""Contact source errors."""


class ContactSourceError(Exception):
    """The document store could not be read (network, auth, bad response)."""


class ContactSourceTimeout(ContactSourceError):
    """The document store did not answer within the configured timeout."""
