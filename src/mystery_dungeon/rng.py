from __future__ import annotations

import hashlib
import json
import logging
import random
import secrets
from dataclasses import dataclass
from typing import Any, Union

logger = logging.getLogger(__name__)

Seed = Union[int, str, bytes, None]


def _to_stable_json(value: Any) -> str:
    """Stable JSON encoding for hashing seed payloads."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


@dataclass(frozen=True)
class RNGManager:
    """Derives independent ``random.Random`` streams from one master seed.

    Every consumer of randomness (cavern layout, enemy movement) takes an
    injected ``random.Random``. The session builds those from this manager so
    a given (seed, domain, level) always yields the same stream, regardless of
    how many draws other domains made before it:

        rngm = RNGManager(seed)
        layout_rng = rngm.context_rng("cavern_layout", level)
        move_rng = rngm.context_rng("enemy_movement", level)

    Without a master seed a random one is drawn and logged so a run can be
    replayed.
    """

    master_seed: Seed

    def __post_init__(self) -> None:
        if self.master_seed is None:
            rand = secrets.token_bytes(16)
            object.__setattr__(self, "_master_seed_bytes", rand)
            logger.info("No master seed provided; generated random seed: %s", rand.hex())
        else:
            object.__setattr__(self, "_master_seed_bytes", self._canonicalize_seed(self.master_seed))
            logger.debug("Using master seed: %r", self.master_seed)

    @staticmethod
    def _canonicalize_seed(seed: Seed) -> bytes:
        if seed is None:
            return b""
        if isinstance(seed, bytes):
            return seed
        if isinstance(seed, bool):
            raise TypeError("Unsupported seed type: %r" % (type(seed),))
        if isinstance(seed, int):
            if seed < 0:
                raise ValueError("master seed must be non-negative")
            length = (seed.bit_length() + 7) // 8 or 1
            return seed.to_bytes(length, "big", signed=False)
        if isinstance(seed, str):
            s = seed.strip()
            if s.startswith("0x"):
                try:
                    val = int(s, 16)
                except ValueError:
                    return s.encode("utf-8")
                length = (val.bit_length() + 7) // 8 or 1
                return val.to_bytes(length, "big", signed=False)
            return s.encode("utf-8")
        raise TypeError("Unsupported seed type: %r" % (type(seed),))

    def derive_seed(self, domain: str, *identifiers: Any) -> int:
        """Derive a 64-bit integer seed from the master seed and a domain."""
        payload = {
            "domain": domain,
            "ids": identifiers,
            "master": self._master_seed_bytes.hex(),
            "algo": "blake2b-64",
            "version": 1,
        }
        data = _to_stable_json(payload).encode("utf-8")
        h = hashlib.blake2b(data, digest_size=8)
        seed_int = int.from_bytes(h.digest(), "big", signed=False)
        logger.debug("Derived seed for domain=%s ids=%s -> %d", domain, identifiers, seed_int)
        return seed_int

    def context_rng(self, domain: str, *identifiers: Any) -> random.Random:
        return random.Random(self.derive_seed(domain, *identifiers))

    def get_master_seed_hex(self) -> str:
        return self._master_seed_bytes.hex()


__all__ = ["RNGManager", "Seed"]
