__all__ = ["SyncProvider"]


class SyncProvider:
    def connect(self) -> None:
        pass

    def disconnect(self) -> None:
        pass
