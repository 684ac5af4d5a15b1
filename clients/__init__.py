# Infrastructure clients
from clients.vault_client import (
    VaultClient,
    VaultError,
    resolve_secret,
    get_database_url,
    get_valkey_url,
    get_jwt_secret,
)
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.email_client import (
    EmailConfig,
    EmailDeliveryError,
    ResendEmailClient,
    SmtpEmailClient,
    ConsoleEmailClient,
    create_email_client,
)
