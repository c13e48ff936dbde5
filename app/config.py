"""Configuration management using Pydantic Settings"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models import FraudConfig


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Fraud detection
    fraud_threshold: float = 0.5
    large_amount_threshold: float = 5000
    suspicious_domains: str = ".ru,test.com,example.com"
    rapid_fire_enabled: bool = False
    rapid_fire_window_seconds: float = 45

    # Amount context defaults
    default_merchant_category: str = "retail"
    default_credit_limit: float = 5000  # 0 disables the credit limit rule

    # Explanation service
    openai_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-3.5-turbo"
    llm_timeout_seconds: float = 10.0
    explanation_cache_size: int = 100

    # Service
    service_name: str = "payment-risk-router"
    log_level: str = "INFO"

    def suspicious_domain_list(self) -> list[str]:
        """Split the comma-separated domain setting, dropping blanks."""
        return [d.strip() for d in self.suspicious_domains.split(",") if d.strip()]

    def fraud_config(self) -> FraudConfig:
        return FraudConfig(
            threshold=self.fraud_threshold,
            large_amount_threshold=self.large_amount_threshold,
            suspicious_domains=self.suspicious_domain_list(),
            rapid_fire_enabled=self.rapid_fire_enabled,
            rapid_fire_window_seconds=self.rapid_fire_window_seconds,
        )


settings = Settings()
