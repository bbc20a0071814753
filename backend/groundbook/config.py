from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Display
    currency: str = "PKR"

    # Pricing rules (empty path loads the built-in seed rules)
    pricing_rules_file: str = ""
    rule_match_mode: str = "first"  # first | all

    # Operating day (start hours, 24+ = past midnight)
    opening_hour: int = 8
    closing_hour: int = 26

    # CORS
    cors_origins: str = "http://localhost:5173"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
