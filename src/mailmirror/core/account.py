# =============================================================================
# Account Model
# =============================================================================
# Connection details for the remote IMAP server of one mail account.
#
# IMPORTANT: Passwords are NOT stored here. They are retrieved from the system
# keyring at connect time using the 'keyring' library.
# =============================================================================

from dataclasses import dataclass


@dataclass
class Account:
    """
    An email account as far as the mailbox mirror is concerned.

    Attributes:
        name: Unique identifier for this account (e.g., "personal", "work").
              Used as the key in config files and for keyring lookups.
        email: Login name / email address.
        imap_host: Hostname of the IMAP server.
        imap_port: 993 for implicit TLS, 143 for STARTTLS.
        imap_security: "ssl" or "starttls".
        timeout: Seconds before an IMAP command is considered lost.

    Example:
        >>> account = Account(
        ...     name="personal",
        ...     email="user@example.com",
        ...     imap_host="imap.example.com",
        ... )
    """

    name: str
    email: str
    imap_host: str = ""
    imap_port: int = 993                # Default to SSL port
    imap_security: str = "ssl"          # "ssl" or "starttls"
    timeout: float = 30.0

    @property
    def keyring_service(self) -> str:
        """
        Returns the service name used for keyring password storage.

        Passwords can be managed via the keyring CLI:
            keyring set mailmirror:personal user@example.com
        """
        return f"mailmirror:{self.name}"

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"

    def __repr__(self) -> str:
        return (
            f"Account(name={self.name!r}, email={self.email!r}, "
            f"imap={self.imap_host}:{self.imap_port})"
        )
