"""Application settings loaded from environment variables via pydantic-settings.

Field ``sanity_project_id`` maps to the ``SANITY_PROJECT_ID`` environment
variable (pydantic-settings uppercases and matches).  A local ``.env`` file
is read as well; real environment variables always win.

Values passed to the constructor (e.g. from the YAML layer in
:mod:`cms_context.config.loader`) sit *below* environment variables, so a
deploy-time env var overrides whatever the checked-in config file says.
"""

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class Settings(BaseSettings):
    """cms-context application settings.

    Empty connection strings mean "not configured"; the tool layer reports
    a configuration error instead of attempting a request.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Sanity connection ===
    sanity_project_id: str = ""
    sanity_dataset: str = ""
    sanity_api_token: str = ""
    sanity_api_version: str = "2024-01-01"
    sanity_use_cdn: bool = False
    http_timeout: float = 30.0

    # === Content defaults ===
    # Comma-separated list, e.g. "post, page, article".
    default_document_types: str = ""

    # === RAG ===
    max_search_results: int = 25
    content_chunk_size: int = 1000

    # === App ===
    app_env: str = "development"
    log_level: str = "INFO"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def connection_missing(self) -> list[str]:
        """Return the names of required connection fields that are empty."""
        required = {
            "project ID": self.sanity_project_id,
            "dataset": self.sanity_dataset,
            "API token": self.sanity_api_token,
        }
        return [name for name, value in required.items() if not value]

    def document_types(self) -> list[str]:
        """Return ``default_document_types`` as a cleaned list (may be empty)."""
        return [t.strip() for t in self.default_document_types.split(",") if t.strip()]
