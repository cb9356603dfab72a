"""
Domain errors raised by the question bank services.

Routers never catch these; ``main.create_app`` maps each class to an HTTP
status through application-level exception handlers.
"""
from typing import Optional


class QBankError(Exception):
    """Base class for question bank errors."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidBankTypeError(QBankError):
    status_code = 400

    def __init__(self, bank_type: str):
        super().__init__(f"Invalid question bank type: {bank_type}")
        self.bank_type = bank_type


class InvalidPluginTypeError(QBankError):
    status_code = 400

    def __init__(self, plugin_type: str):
        super().__init__(f"Invalid question bank plugin type: {plugin_type}")
        self.plugin_type = plugin_type


class InvalidContextLevelError(QBankError):
    status_code = 400

    def __init__(self, contextlevel: int):
        super().__init__(f"Invalid question bank contextlevel: {contextlevel}")
        self.contextlevel = contextlevel


class RequiredCapabilityError(QBankError):
    """The acting user lacks a capability the operation requires."""

    status_code = 403

    def __init__(self, capability: str, context_id: Optional[int] = None):
        super().__init__(f"Sorry, but you do not currently have permissions to do that ({capability}).")
        self.capability = capability
        self.context_id = context_id


class ModuleDisabledError(QBankError):
    """The module type cannot be added to the target course."""

    status_code = 409

    def __init__(self, modname: str):
        super().__init__(f"Editing of the module '{modname}' has been disabled")
        self.modname = modname


class NotFoundError(QBankError):
    status_code = 404
