# =============================================================================
# Configuration Management
# =============================================================================
# Handles loading, saving, and validating mailmirror configuration.
#
# XDG Base Directory Compliance (https://specifications.freedesktop.org/basedir-spec/):
#   - Config:  $XDG_CONFIG_HOME/mailmirror/  (default: ~/.config/mailmirror/)
#   - State:   $XDG_STATE_HOME/mailmirror/   (default: ~/.local/state/mailmirror/)
#
# Files:
#   - config.toml: User configuration (accounts, paging, logging)
#   - mailmirror.log: Optional log file (in state directory)
# =============================================================================

import os
import tomllib  # Built into Python 3.11+
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import tomli_w  # For writing TOML (tomllib is read-only)

from mailmirror.core import Account


# =============================================================================
# XDG Directory Management
# =============================================================================

# Application identifier used in all XDG paths
APP_NAME = "mailmirror"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_xdg_config_home() -> Path:
    """
    Returns the XDG config directory for mailmirror.

    Respects $XDG_CONFIG_HOME if set, otherwise uses ~/.config/mailmirror/
    """
    xdg_config = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config:
        base = Path(xdg_config)
    else:
        base = Path.home() / ".config"
    return base / APP_NAME


def get_xdg_state_home() -> Path:
    """
    Returns the XDG state directory for mailmirror.

    Respects $XDG_STATE_HOME if set, otherwise uses ~/.local/state/mailmirror/
    This is where the log file lives.
    """
    xdg_state = os.environ.get("XDG_STATE_HOME")
    if xdg_state:
        base = Path(xdg_state)
    else:
        base = Path.home() / ".local" / "state"
    return base / APP_NAME


# =============================================================================
# Configuration Data Structures
# =============================================================================

@dataclass
class MailboxConfig:
    """
    Configuration for paging and fetching envelopes.

    Attributes:
        page_size: Envelopes loaded per page. Values above 50 are capped.
        max_per_call: Upper bound on messages asked for in one FETCH.
        initial_folder: Folder selected after startup, if it exists.
        preview_bytes: How much of each body to fetch for the preview line.
    """
    page_size: int = 50
    max_per_call: int = 1000
    initial_folder: str = "INBOX"
    preview_bytes: int = 200

    def validate(self) -> None:
        """
        Raises:
            ConfigError: If a value is out of range.
        """
        if self.page_size < 1:
            raise ConfigError(f"mailbox.page_size must be positive, got {self.page_size}")
        if self.max_per_call < 1:
            raise ConfigError(f"mailbox.max_per_call must be positive, got {self.max_per_call}")
        if self.preview_bytes < 0:
            raise ConfigError(f"mailbox.preview_bytes must not be negative, got {self.preview_bytes}")


@dataclass
class LoggingConfig:
    """
    Configuration for logging.

    Attributes:
        level: Console log level name ("DEBUG", "INFO", ...).
        file: Log file path. Relative paths are placed in the state
              directory; empty disables file logging.
    """
    level: str = "WARNING"
    file: str = ""

    def log_file_path(self) -> Path | None:
        if not self.file:
            return None
        path = Path(self.file).expanduser()
        if not path.is_absolute():
            path = get_xdg_state_home() / path
        return path


@dataclass
class Config:
    """
    Main configuration container for mailmirror.

    Attributes:
        default_account: Name of the account to use when none is given.
        accounts: Dictionary of configured email accounts, keyed by name.
        mailbox: Paging configuration.
        logging: Logging configuration.

    Usage:
        >>> config = Config.load()
        >>> print(config.accounts['personal'].email)
        'user@example.com'
    """
    # General settings
    default_account: str = ""

    # Account configurations (name -> Account)
    accounts: dict[str, Account] = field(default_factory=dict)

    # Subsystem configurations
    mailbox: MailboxConfig = field(default_factory=MailboxConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # -------------------------------------------------------------------------
    # File Paths
    # -------------------------------------------------------------------------

    @staticmethod
    def config_file_path() -> Path:
        """Returns the path to the main config file."""
        return get_xdg_config_home() / "config.toml"

    # -------------------------------------------------------------------------
    # Accounts
    # -------------------------------------------------------------------------

    def get_account(self, name: str | None = None) -> Account:
        """
        Look up an account by name, falling back to the default account.

        Raises:
            ConfigError: If no matching account is configured.
        """
        name = name or self.default_account
        if not name and len(self.accounts) == 1:
            return next(iter(self.accounts.values()))
        if name not in self.accounts:
            raise ConfigError(f"No account named {name!r} in {self.config_file_path()}")
        return self.accounts[name]

    # -------------------------------------------------------------------------
    # Loading and Saving
    # -------------------------------------------------------------------------

    @classmethod
    def load(cls, path: Path | None = None) -> "Config":
        """
        Load configuration from the config file.

        If the config file doesn't exist, returns default configuration.

        Args:
            path: Config file to read (default: XDG config location).

        Returns:
            Loaded Config object.

        Raises:
            ConfigError: If the config file exists but is invalid.
        """
        config_path = path or cls.config_file_path()

        if not config_path.exists():
            # No config file yet - return defaults
            return cls()

        # Load and parse the TOML file
        try:
            with open(config_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid config file: {e}") from e

        config = cls._from_dict(data)
        config.mailbox.validate()
        return config

    def save(self, path: Path | None = None) -> None:
        """
        Save configuration to the config file.

        Creates the config directory if it doesn't exist.
        """
        config_path = path or self.config_file_path()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "wb") as f:
            tomli_w.dump(self._to_dict(), f)

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "Config":
        """
        Create a Config object from a dictionary (parsed TOML).
        """
        config = cls()

        general = data.get("general", {})
        config.default_account = general.get("default_account", "")

        mailbox = data.get("mailbox", {})
        config.mailbox = MailboxConfig(
            page_size=mailbox.get("page_size", 50),
            max_per_call=mailbox.get("max_per_call", 1000),
            initial_folder=mailbox.get("initial_folder", "INBOX"),
            preview_bytes=mailbox.get("preview_bytes", 200),
        )

        logging_data = data.get("logging", {})
        level = str(logging_data.get("level", "WARNING")).upper()
        if level not in LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")
        config.logging = LoggingConfig(level=level, file=logging_data.get("file", ""))

        # Accounts - each key under [accounts] is an account name
        accounts_data = data.get("accounts", {})
        for name, acct_data in accounts_data.items():
            config.accounts[name] = Account(
                name=name,
                email=acct_data.get("email", ""),
                imap_host=acct_data.get("imap_host", ""),
                imap_port=acct_data.get("imap_port", 993),
                imap_security=acct_data.get("imap_security", "ssl"),
                timeout=acct_data.get("timeout", 30.0),
            )

        return config

    def _to_dict(self) -> dict[str, Any]:
        """
        Convert Config to a dictionary for TOML serialization.
        """
        data: dict[str, Any] = {}

        data["general"] = {
            "default_account": self.default_account,
        }

        data["mailbox"] = {
            "page_size": self.mailbox.page_size,
            "max_per_call": self.mailbox.max_per_call,
            "initial_folder": self.mailbox.initial_folder,
            "preview_bytes": self.mailbox.preview_bytes,
        }

        data["logging"] = {
            "level": self.logging.level,
            "file": self.logging.file,
        }

        data["accounts"] = {}
        for name, account in self.accounts.items():
            data["accounts"][name] = {
                "email": account.email,
                "imap_host": account.imap_host,
                "imap_port": account.imap_port,
                "imap_security": account.imap_security,
                "timeout": account.timeout,
            }

        return data


# =============================================================================
# Exceptions
# =============================================================================

class ConfigError(Exception):
    """Raised when there's an error loading or parsing configuration."""
    pass


# =============================================================================
# Utility Functions
# =============================================================================

def print_paths() -> None:
    """
    Print all XDG paths for debugging.
    Useful for users wondering where their config is stored.
    """
    print(f"Config:  {get_xdg_config_home()}")
    print(f"State:   {get_xdg_state_home()}")
    print()
    print(f"Config file:  {Config.config_file_path()}")
