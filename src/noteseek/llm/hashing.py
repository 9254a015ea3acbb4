"""Deterministic hash-based embedding provider for offline use and testing."""

import hashlib
import math


class HashEmbeddingProvider:
    """Deterministic hash-based embedding provider.

    Generates reproducible unit vectors from the SHA-256 digest of the text,
    which is useful for development without an embedding server. The vectors
    carry no semantic meaning: only identical texts are close.
    """

    def __init__(self, dimensions: int) -> None:
        self.dimensions = dimensions

    async def embed(self, text: str) -> list[float]:
        vector = []
        counter = 0
        while len(vector) < self.dimensions:
            digest = hashlib.sha256(f"{counter}:{text}".encode()).digest()
            for i in range(0, len(digest), 4):
                value = int.from_bytes(digest[i : i + 4], "big")
                # Map to [-1, 1]
                vector.append((value / 2**32) * 2 - 1)
            counter += 1

        vector = vector[: self.dimensions]
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]
