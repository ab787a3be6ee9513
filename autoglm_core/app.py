"""Process bootstrap: builds the store graph once and hands it to callers."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from . import __version__
from .config import Config
from .enums import Language
from .logging_config import setup_logging
from .logs.store import LogStore
from .settings.crypto import MasterKeyProvider
from .settings.dev_import import DevProfileImporter
from .settings.profiles import ProfileRegistry
from .settings.repository import ConfigRepository
from .settings.store import SettingsStores
from .settings.templates import TemplateRegistry

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything a host process needs from this package.

    Create one per process with ``AppContext.create()`` and pass it (or
    its members) to callers instead of reaching for module globals.
    """

    stores: SettingsStores
    config_repo: ConfigRepository
    profiles: ProfileRegistry
    templates: TemplateRegistry
    dev_importer: DevProfileImporter
    log_store: LogStore

    @classmethod
    def create(
        cls,
        data_dir: Optional[Path] = None,
        key_provider: Optional[MasterKeyProvider] = None,
        secret_backend: Optional[str] = None,
        dev_profiles_path: Optional[Path] = None,
        configure_logging: bool = True,
    ) -> "AppContext":
        """Open the log store, wire the repositories and run startup chores.

        Startup chores, in order: mirror logging into the log files,
        migrate a legacy plaintext API key, import dev profiles once.
        Unset arguments fall back to ``Config``.
        """
        data_dir = Path(data_dir) if data_dir else Config.DATA_DIR
        if dev_profiles_path is None and Config.DEV_PROFILES_PATH:
            dev_profiles_path = Path(Config.DEV_PROFILES_PATH)

        log_store = LogStore(
            data_dir / "logs",
            max_file_bytes=Config.LOG_MAX_BYTES,
            keep_days=Config.LOG_KEEP_DAYS,
            export_dir=data_dir / "export",
            app_version=__version__,
            build_type=Config.BUILD_TYPE,
        ).open()
        log_store.set_enabled(Config.FILE_LOGGING)

        if configure_logging:
            setup_logging(Config.LOG_LEVEL, log_store)

        for issue in Config.validate():
            logger.warning(f"Config: {issue}")

        stores = SettingsStores.in_directory(
            data_dir,
            key_provider=key_provider,
            secret_backend=secret_backend or Config.SECRET_BACKEND,
        )
        config_repo = ConfigRepository(stores)
        profiles = ProfileRegistry(stores)
        ctx = cls(
            stores=stores,
            config_repo=config_repo,
            profiles=profiles,
            templates=TemplateRegistry(stores),
            dev_importer=DevProfileImporter(stores, profiles, config_repo),
            log_store=log_store,
        )

        config_repo.migrate_secret()

        if dev_profiles_path is not None:
            result = ctx.dev_importer.import_file(dev_profiles_path)
            if result.count > 0:
                logger.info(f"Imported {result.count} dev profiles from {dev_profiles_path.name}")

        return ctx

    def custom_system_prompts(self) -> Dict[Language, str]:
        """Custom prompts that are set, keyed by language."""
        prompts = {}
        for language in Language:
            prompt = self.config_repo.get_custom_system_prompt(language)
            if prompt is not None:
                logger.debug(f"Loaded custom {language} system prompt")
                prompts[language] = prompt
        return prompts

    def close(self) -> None:
        self.log_store.close()

    def __enter__(self) -> "AppContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
