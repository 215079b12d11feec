from __future__ import annotations


class FakeSessionLocal:
    """Stands in for ``SessionLocal`` so route tests never open a connection."""

    def __init__(self) -> None:
        self.session = object()

    def begin(self) -> FakeSessionLocal:
        return self

    async def __aenter__(self) -> object:
        return self.session

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False
