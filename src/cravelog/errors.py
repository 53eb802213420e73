"""Exception hierarchy shared by the store, speech and HTTP layers."""


class CravelogError(Exception):
    """Base class for failures surfaced to the user as an alert."""


class RecordNotFoundError(CravelogError):
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Craving not found: {record_id}")


class MissingAPIKeyError(CravelogError):
    pass
