"""Configuration schema definitions using dataclasses.

Defines the structure for TOML configuration with sensible defaults.
"""

from dataclasses import dataclass, field


@dataclass
class SiteConfig:
    """Site (platform) configuration.

    Attributes:
        database: Path to the site database
        dataroot: Data directory holding the course file areas
        admins: Ids of the site administrators, in priority order
    """

    database: str = "site.db"
    dataroot: str = "data"
    admins: list[int] = field(default_factory=lambda: [2])


@dataclass
class BackupDefaults:
    """Default settings applied to every backup plan.

    Attributes:
        users: Include user data in the backup
        anonymize: Anonymize user information
        use_shortname: Use the course shortname instead of its id in filenames
    """

    users: bool = True
    anonymize: bool = False
    use_shortname: bool = False


@dataclass
class Config:
    """Root configuration object.

    Attributes:
        site: Where the site records and file areas live
        backup: Default backup plan settings
    """

    site: SiteConfig = field(default_factory=SiteConfig)
    backup: BackupDefaults = field(default_factory=BackupDefaults)
