"""Appforge runtime configuration and settings."""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class AppforgeConfig:
    """Runtime configuration for an Appforge run.

    Attributes:
        generator: Scaffold generator command (default: "rails new")
        installer: Dependency installer command run inside the project
        db_task: Database setup command run inside the project
        deploy_cli: Remote deployment provider executable
        deploy_remote: Git remote the provider creates and the app is pushed to
        namespace: Fixed Ruby namespace the generated app is renamed to
        template_dir: Override for the installed template set
    """

    generator: str = "rails new"
    installer: str = "bundle install"
    db_task: str = "bundle exec rake db:setup"
    deploy_cli: str = "heroku"
    deploy_remote: str = "heroku"
    namespace: str = "Appforge"
    template_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "AppforgeConfig":
        """Create config from environment variables.

        Environment variables:
            APPFORGE_GENERATOR: Scaffold generator command
            APPFORGE_INSTALLER: Dependency installer command
            APPFORGE_DB_TASK: Database setup command
            APPFORGE_DEPLOY_CLI: Deployment provider executable
            APPFORGE_DEPLOY_REMOTE: Git remote pushed to on deploy
            APPFORGE_NAMESPACE: Namespace the app is renamed to
            APPFORGE_TEMPLATE_DIR: Alternative template set directory

        Returns:
            AppforgeConfig instance with values from environment or defaults
        """
        template_dir = os.getenv("APPFORGE_TEMPLATE_DIR")
        return cls(
            generator=os.getenv("APPFORGE_GENERATOR", cls.generator),
            installer=os.getenv("APPFORGE_INSTALLER", cls.installer),
            db_task=os.getenv("APPFORGE_DB_TASK", cls.db_task),
            deploy_cli=os.getenv("APPFORGE_DEPLOY_CLI", cls.deploy_cli),
            deploy_remote=os.getenv("APPFORGE_DEPLOY_REMOTE", cls.deploy_remote),
            namespace=os.getenv("APPFORGE_NAMESPACE", cls.namespace),
            template_dir=Path(template_dir) if template_dir else None,
        )


# Global config instance (can be overridden)
_config: Optional[AppforgeConfig] = None


def get_config() -> AppforgeConfig:
    """Get the global Appforge configuration.

    Returns:
        AppforgeConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = AppforgeConfig.from_env()
    return _config


def set_config(config: Optional[AppforgeConfig]):
    """Set the global Appforge configuration.

    Args:
        config: AppforgeConfig instance to use globally (None resets to env)
    """
    global _config
    _config = config
