from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "doof"
    db_username: str = "doof"
    db_password: str = "secret"

    api_base_url: str = "http://localhost:5001/api"
    api_token: str = ""

    places_provider: str = "http"
    places_timeout_seconds: int = 15
    place_selection_policy: str = "first"

    neighborhood_timeout_seconds: int = 15

    submission_backend: str = "http"
    submission_timeout_seconds: int = 60
    admin_bulk_add_path: str = "/admin/bulk-add/{resource_type}"

    input_delimiter: str = ""

    default_city_id: int = 1
    default_neighborhood_id: int = 1
    default_neighborhood_name: str = "Default Neighborhood"

    inter_item_delay_seconds: float = 0.2
    max_concurrency: int = 1
    reason_max_length: int = 200
