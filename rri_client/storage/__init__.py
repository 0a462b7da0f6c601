from .environments import CredentialSource, Environment, EnvironmentStore, EnvironmentStoreError

__all__ = ["CredentialSource", "Environment", "EnvironmentStore", "EnvironmentStoreError"]
