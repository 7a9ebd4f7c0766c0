"""Application configuration using Pydantic Settings"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App
    app_name: str = "UrbanSprout API"
    debug: bool = False
    frontend_url: str = "http://localhost:5173"

    # Database
    mongodb_url: str
    mongodb_db_name: str = "urbansprout"

    # Security
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 60 * 24 * 7  # 7 days

    # Razorpay
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_currency: str = "INR"
    notes_value_limit: int = 1000

    # Checkout pricing (cart checkout charges the cart total as-is)
    checkout_tax_rate: float = 0.0
    checkout_shipping_fee: float = 0.0
    checkout_free_shipping_threshold: float = 0.0

    # Wishlist purchases
    wishlist_tax_rate: float = 0.08
    wishlist_shipping_fee: float = 9.99
    wishlist_free_shipping_threshold: float = 50.0

    # Email
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    email_from: str = "UrbanSprout <no-reply@urbansprout.local>"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
