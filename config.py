import os
from dotenv import load_dotenv

load_dotenv()


def _env_pem(name: str) -> str:
    """PEM values are often stored in .env with literal '\\n' sequences."""
    return os.getenv(name, '').replace('\\n', '\n')


class Config:
    # Flask
    SECRET_KEY: str = os.getenv('FLASK_SECRET_KEY', 'dev-secret-key-change-in-production')
    ENV: str = os.getenv('FLASK_ENV', 'development')
    DEBUG: bool = os.getenv('FLASK_DEBUG', 'True').lower() == 'true'
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')

    # Supabase Storage (roster blobs)
    SUPABASE_URL: str = os.getenv('SUPABASE_URL', '')
    SUPABASE_KEY: str = os.getenv('SUPABASE_SERVICE_ROLE_KEY', '')
    SUPABASE_STORAGE_BUCKET: str = os.getenv('SUPABASE_STORAGE_BUCKET', '')

    # Google Wallet (required for issuance)
    GOOGLE_ISSUER_ID: str = os.getenv('GOOGLE_ISSUER_ID', '')
    GOOGLE_SERVICE_ACCOUNT_EMAIL: str = os.getenv('GOOGLE_SERVICE_ACCOUNT_EMAIL', '')
    GOOGLE_PRIVATE_KEY: str = _env_pem('GOOGLE_PRIVATE_KEY')

    # Apple Wallet (optional; Google-only passes when incomplete)
    APPLE_WALLET_SIGNER_CERT: str = _env_pem('APPLE_WALLET_SIGNER_CERT')
    APPLE_WALLET_PRIVATE_KEY: str = _env_pem('APPLE_WALLET_PRIVATE_KEY')
    APPLE_WALLET_WWDR_CERT: str = _env_pem('APPLE_WALLET_WWDR_CERT')
    APPLE_WALLET_PASS_TYPE_ID: str = os.getenv('APPLE_WALLET_PASS_TYPE_ID', '')
    APPLE_WALLET_TEAM_ID: str = os.getenv('APPLE_WALLET_TEAM_ID', '')
    APPLE_WALLET_KEY_PASSWORD: str = os.getenv('APPLE_WALLET_KEY_PASSWORD', '')

    # Clubs: JSON file overriding the built-in club definitions
    CLUBS_CONFIG_PATH: str = os.getenv('CLUBS_CONFIG_PATH', '')

    # Pass assets
    PASS_STRIP_IMAGE_URL: str = os.getenv(
        'PASS_STRIP_IMAGE_URL',
        'https://c3-pass-assets.vercel.app/google-wallet/footer-v2.png'
    )


config = Config()
