"""
Secret-vault overlay for configuration.

When a vault URI is configured, secrets stored in Azure Key Vault are
read once at startup and layered on top of YAML and environment values.
Secret names follow the Key Vault configuration-provider convention
where "--" separates section and key (e.g. "AzureSpeech--Key").

Requires the optional "vault" extra:
    pip install speech-gateway[vault]

Authentication uses DefaultAzureCredential (managed identity, Azure CLI
login, environment credentials, ...).
"""
from __future__ import annotations

import copy
from typing import Any, Callable, Dict, Optional, Tuple

from speech_gateway.core.errors import ConfigurationError
from speech_gateway.core.logging import get_logger, info, verbose

_LOG = get_logger("speech-gateway.secrets")

# Vault secret name -> (section, key) in the raw settings dict
VAULT_SECRETS: Dict[str, Tuple[str, str]] = {
    "AzureSpeech--Key": ("speech", "key"),
    "AzureSpeech--Region": ("speech", "region"),
    "AzureSpeech--VoiceName": ("speech", "voice_name"),
    "AzureAd--Instance": ("identity", "instance"),
    "AzureAd--Domain": ("identity", "domain"),
    "AzureAd--TenantId": ("identity", "tenant_id"),
    "AzureAd--ClientId": ("identity", "client_id"),
    "AzureAd--Audience": ("identity", "audience"),
    "AzureAd--Scopes": ("identity", "scopes"),
}


def _default_client_factory(vault_uri: str) -> Any:
    try:
        from azure.identity import DefaultAzureCredential
        from azure.keyvault.secrets import SecretClient
    except ImportError as e:
        raise ConfigurationError(
            "A vault URI is configured but the Key Vault client is not installed. "
            "Install with: pip install speech-gateway[vault]"
        ) from e
    return SecretClient(vault_url=vault_uri, credential=DefaultAzureCredential())


def read_vault_secrets(
    vault_uri: str,
    client_factory: Optional[Callable[[str], Any]] = None,
) -> Dict[Tuple[str, str], str]:
    """
    Read the known gateway secrets from the vault.

    Secrets that do not exist in the vault are skipped.

    Args:
        vault_uri: Vault URL, e.g. "https://my-vault.vault.azure.net/".
        client_factory: Builds a SecretClient-like object (tests inject one).

    Returns:
        Mapping of (section, key) -> secret value.

    Raises:
        ConfigurationError: If the vault cannot be read.
    """
    factory = client_factory or _default_client_factory
    client = factory(vault_uri)

    found: Dict[Tuple[str, str], str] = {}
    for name, target in VAULT_SECRETS.items():
        try:
            secret = client.get_secret(name)
        except Exception as e:
            # ResourceNotFoundError carries status_code 404
            if getattr(e, "status_code", None) == 404:
                verbose(_LOG, "vault_secret_missing", name=name)
                continue
            raise ConfigurationError(
                f"Failed to read secret {name!r} from vault: {e}",
                details={"vault_uri": vault_uri},
            ) from e
        if secret is not None and secret.value:
            found[target] = secret.value

    info(_LOG, "vault_loaded", secrets=len(found))
    return found


def apply_vault_secrets(
    raw: Dict[str, Any],
    vault_uri: str,
    client_factory: Optional[Callable[[str], Any]] = None,
) -> Dict[str, Any]:
    """Return a copy of raw with vault secrets layered on top."""
    merged = copy.deepcopy(raw)
    for (section, key), value in read_vault_secrets(vault_uri, client_factory).items():
        if merged.get(section) is None:
            merged[section] = {}
        merged[section][key] = value
    return merged
