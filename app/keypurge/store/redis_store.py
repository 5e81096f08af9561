"""Redis store implementation.

Talks to Redis through redis-py with raw (undecoded) responses so values
are compared byte-for-byte.
"""

import logging

import redis
from redis.exceptions import RedisError

from keypurge.core.config import StoreConfig
from keypurge.core.errors import StoreError
from keypurge.store.base import KeyValueStore

logger = logging.getLogger(__name__)


def decode_key(raw: bytes | str) -> str:
    """Decode a raw key so that it can be encoded back losslessly."""
    if isinstance(raw, str):
        return raw
    return raw.decode("utf-8", errors="surrogateescape")


def encode_key(key: str) -> bytes:
    """Encode a key produced by :func:`decode_key`."""
    return key.encode("utf-8", errors="surrogateescape")


class RedisStore(KeyValueStore):
    """KeyValueStore backed by a redis-py client.

    Uses SCAN for enumeration, DBSIZE for the key count estimate, GET and
    HGETALL for flat and hash values, DEL and EXISTS for deletion.

    Attributes:
        client: The underlying redis client.
    """

    def __init__(self, client: redis.Redis, *, addr: str = "", tls: bool = False) -> None:
        """Initialize the store.

        Args:
            client: A redis client created with ``decode_responses=False``.
            addr: Address for diagnostics.
            tls: Whether the client uses TLS, for diagnostics.
        """
        self.client = client
        self._addr = addr
        self._tls = tls

    @classmethod
    def from_config(cls, config: StoreConfig) -> "RedisStore":
        """Create a store from connection settings.

        Args:
            config: Store connection settings.

        Returns:
            RedisStore with a configured (lazily connecting) client.
        """
        kwargs: dict[str, object] = {
            "host": config.host,
            "port": config.port,
            "db": config.db,
            "password": config.password,
            "socket_timeout": config.read_timeout,
            "decode_responses": False,
        }
        if config.tls:
            kwargs["ssl"] = True
            kwargs["ssl_cert_reqs"] = "none"

        logger.debug(
            "Connecting to redis at %s:%d (db=%d, tls=%s)",
            config.host,
            config.port,
            config.db,
            config.tls,
        )
        client = redis.Redis(**kwargs)  # type: ignore[arg-type]
        return cls(client, addr=config.addr, tls=config.tls)

    def describe(self) -> str:
        """Return ``redis[<addr> tls=<bool>]``."""
        return f"redis[{self._addr} tls={str(self._tls).lower()}]"

    def scan(self, cursor: int, count: int) -> tuple[int, list[str]]:
        try:
            next_cursor, raw_keys = self.client.scan(cursor=cursor, count=count)
        except RedisError as e:
            raise StoreError("SCAN", str(e)) from e
        return int(next_cursor), [decode_key(k) for k in raw_keys]

    def count_keys(self) -> int:
        try:
            return int(self.client.dbsize())
        except RedisError as e:
            raise StoreError("DBSIZE", str(e)) from e

    def get(self, key: str) -> bytes | None:
        try:
            return self.client.get(encode_key(key))
        except RedisError as e:
            raise StoreError("GET", str(e), key=key) from e

    def get_field_map(self, key: str) -> dict[bytes, bytes]:
        try:
            return self.client.hgetall(encode_key(key))
        except RedisError as e:
            raise StoreError("HGETALL", str(e), key=key) from e

    def delete(self, key: str) -> int:
        try:
            return int(self.client.delete(encode_key(key)))
        except RedisError as e:
            raise StoreError("DEL", str(e), key=key) from e

    def exists(self, key: str) -> bool:
        try:
            return int(self.client.exists(encode_key(key))) > 0
        except RedisError as e:
            raise StoreError("EXISTS", str(e), key=key) from e
