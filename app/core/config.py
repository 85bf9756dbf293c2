from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="Training Course Platform")
    app_description: str = Field(
        default="Course catalogs, cart, checkout and certificate issuance"
    )
    app_version: str = Field(default="1.0.0")
    app_url: str = Field(default="http://localhost:3000")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)
    timezone: str = Field(default="UTC")

    # Database Configuration
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="training-platform")
    db_username: str = Field(default="postgres")
    db_password: str = Field(default="postgres")

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:3000"])
    password_hash_rounds: int = Field(default=12)

    # JWT Configuration
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_user_expiration: int = Field(default=7)
    jwt_admin_expiration: int = Field(default=90)
    jwt_issuer: str = Field(default="Training Course Platform")

    # Certificates
    certificate_secret: str = Field(default="default-secret")
    certificate_institution_name: str = Field(default="IAAI Training Institute")
    certificate_default_instructor: str = Field(default="IAAI Training Team")

    # Commerce
    default_currency: str = Field(default="USD")
    self_paced_access_days: int = Field(default=365)

    # Rate limiting
    redis_url: str = Field(default="redis://localhost:6379")
    rate_limit_enabled: bool = Field(default=True)
    redis_rate_limit: str = Field(default="100/minute")
    verify_rate_limit: str = Field(default="30/minute")
    trust_forwarded_for: bool = Field(default=False)

    # Scheduler
    scheduler_enabled: bool = Field(default=True)
    linked_course_repair_hour: int = Field(default=3)

    # Logging
    log_level: str = Field(default="info")
    log_file: str = Field(default="logs/app.log")

    # Default admin account, created on startup when both are set
    admin_default_email: Optional[str] = Field(default=None)
    admin_default_password: Optional[str] = Field(default=None)

    # Authorization
    authorization_roles: List[str] = Field(default=["admin", "instructor", "student"])
    authorization_default_role: str = Field(default="student")

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("authorization_roles", mode="before")
    def validate_roles(cls, v):
        return cls._parse_csv(v, ["admin", "instructor", "student"])

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:3000"])

    @property
    def sqlalchemy_database_url(self) -> str:
        if self.database_url:
            return self.database_url
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}".format(
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
