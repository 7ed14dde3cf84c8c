# medstock/core/exceptions.py
#
# Domain errors raised by the storage layer and the notification trigger.
# main.py maps each class to its status code.


class InventoryError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(InventoryError):
    """Bad input shape or a broken field constraint."""

    status_code = 400


class NotFoundError(InventoryError):
    status_code = 404

    def __init__(self, resource: str, identifier=None):
        if identifier is None:
            detail = f"{resource} not found"
        else:
            detail = f"{resource} '{identifier}' not found"
        super().__init__(detail)
        self.resource = resource
        self.identifier = identifier


class ConflictError(InventoryError):
    # e.g. deleting a cabinet that still holds items
    status_code = 409


class DeliveryError(InventoryError):
    """The email transport reported a failure. Nothing was recorded."""

    status_code = 500
