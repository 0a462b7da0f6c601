from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple, Union

import jsonschema
from cryptography.fernet import Fernet, InvalidToken
from pydantic import BaseModel

logger = logging.getLogger(__name__)

ENV_SUFFIX = ".json"
KEY_FILENAME = ".key"

ENVIRONMENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "address": {"type": "string"},
        "user": {"type": "string"},
        "pass": {"type": "string"},
    },
    "required": ["address"],
    "additionalProperties": False,
}


class EnvironmentStoreError(Exception):
    """Raised when an environment cannot be read, written or decrypted."""

    pass


class CredentialSource(Protocol):
    def load_credentials(self) -> Tuple[str, str, str]:
        """Return (address, user, password)."""
        ...


class Environment(BaseModel):
    address: str = ""
    user: str = ""
    password: str = ""

    def has_credentials(self) -> bool:
        return bool(self.user) and bool(self.password)

    def load_credentials(self) -> Tuple[str, str, str]:
        return self.address, self.user, self.password


class EnvironmentStore:
    """Named environments stored as JSON files, passwords encrypted with a local key."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory).expanduser()
        self._fernet: Optional[Fernet] = None

    def names(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{ENV_SUFFIX}") if not p.name.startswith("."))

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def load(self, name: str) -> Environment:
        path = self._path(name)
        try:
            with path.open("r", encoding="utf-8") as fp:
                data = json.load(fp)
        except FileNotFoundError as exc:
            raise EnvironmentStoreError(f"Environment {name!r} does not exist") from exc
        except (OSError, json.JSONDecodeError) as exc:
            raise EnvironmentStoreError(f"Cannot read environment {name!r}: {exc}") from exc
        try:
            jsonschema.validate(instance=data, schema=ENVIRONMENT_SCHEMA)
        except jsonschema.ValidationError as exc:
            raise EnvironmentStoreError(f"Environment {name!r} is malformed: {exc.message}") from exc

        password = ""
        if data.get("pass"):
            password = self._decrypt(data["pass"], name)
        return Environment(address=data["address"], user=data.get("user", ""), password=password)

    def save(self, name: str, env: Environment) -> None:
        path = self._path(name)
        data: Dict[str, Any] = {"address": env.address, "user": env.user}
        if env.password:
            data["pass"] = self._cipher().encrypt(env.password.encode("utf-8")).decode("ascii")
        self.directory.mkdir(parents=True, exist_ok=True)
        try:
            with path.open("w", encoding="utf-8") as fp:
                json.dump(data, fp, indent=2)
            os.chmod(path, 0o600)
        except OSError as exc:
            raise EnvironmentStoreError(f"Cannot write environment {name!r}: {exc}") from exc
        logger.info("Saved environment %s", name)

    def delete(self, name: str) -> None:
        try:
            self._path(name).unlink()
        except FileNotFoundError as exc:
            raise EnvironmentStoreError(f"Environment {name!r} does not exist") from exc

    def title(self, name: str) -> str:
        """Display title such as ``prod (user@host:700)`` without decrypting anything."""
        try:
            with self._path(name).open("r", encoding="utf-8") as fp:
                data = json.load(fp)
        except (OSError, json.JSONDecodeError):
            return name
        if not isinstance(data, dict):
            return name
        address = data.get("address", "")
        user = data.get("user", "")
        if user:
            return f"{name} ({user}@{address})"
        return f"{name} ({address})"

    def _path(self, name: str) -> Path:
        if not name or name.startswith(".") or "/" in name or "\\" in name or os.sep in name:
            raise EnvironmentStoreError(f"Invalid environment name {name!r}")
        return self.directory / f"{name}{ENV_SUFFIX}"

    def _cipher(self) -> Fernet:
        if self._fernet is None:
            self._fernet = Fernet(self._load_or_create_key())
        return self._fernet

    def _load_or_create_key(self) -> bytes:
        key_path = self.directory / KEY_FILENAME
        if key_path.is_file():
            return key_path.read_bytes().strip()
        self.directory.mkdir(parents=True, exist_ok=True)
        key = Fernet.generate_key()
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as fp:
            fp.write(key)
        logger.info("Created environment key in %s", self.directory)
        return key

    def _decrypt(self, token: str, name: str) -> str:
        try:
            return self._cipher().decrypt(token.encode("ascii")).decode("utf-8")
        except (InvalidToken, ValueError) as exc:
            raise EnvironmentStoreError(f"Cannot decrypt password of environment {name!r}") from exc


__all__ = ["CredentialSource", "Environment", "EnvironmentStore", "EnvironmentStoreError"]
