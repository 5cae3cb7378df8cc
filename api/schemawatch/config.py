from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "SchemaWatch"
    debug: bool = False
    log_level: str = "INFO"

    # Tag prefixed to pipeline log lines (usually the deployed version)
    release: str = "dev"

    # GitHub REST API
    github_api_url: str = "https://api.github.com"
    github_token: str = ""
    github_webhook_secret: str = ""

    # Repository file holding the per-environment schema/notification config
    config_path: str = ".github/schemawatch.yml"

    # Outgoing notifications
    notify_timeout: float = 10
    allow_private_targets: bool = False

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
