class FieldPlacementError(Exception):
    """Base class for every failure raised by the field placement core."""


class InvalidGeometry(FieldPlacementError):
    def __init__(self, width, height):
        super().__init__(f"field size must be positive, got {width}x{height}")
        self.width = width
        self.height = height


class InvalidPageSpec(FieldPlacementError):
    def __init__(self, spec, reason: str):
        super().__init__(f"invalid page specifier {spec!r}: {reason}")
        self.spec = spec
        self.reason = reason


class UnknownDocument(FieldPlacementError):
    def __init__(self, document_id):
        super().__init__(f"document {document_id} is not part of this contract")
        self.document_id = document_id


class UnknownField(FieldPlacementError):
    def __init__(self, field_id):
        super().__init__(f"field {field_id} is not part of this contract")
        self.field_id = field_id


class UnknownSigner(FieldPlacementError):
    def __init__(self, signer_id):
        super().__init__(f"signer {signer_id} is not part of this contract")
        self.signer_id = signer_id


class ContractNotEditable(FieldPlacementError):
    def __init__(self, status):
        super().__init__(f"contract fields cannot change once the contract is {status}")
        self.status = status


class SessionBusy(FieldPlacementError):
    def __init__(self, field_id):
        super().__init__(f"a drag on field {field_id} is already in progress")
        self.field_id = field_id


class NoActiveSession(FieldPlacementError):
    def __init__(self):
        super().__init__("no drag in progress")


class PersistenceFailure(FieldPlacementError):
    """The persistence boundary rejected or failed to answer a call."""

    def __init__(self, operation: str, detail: str = "", status_code=None):
        message = f"{operation} failed"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
