"""Use case layer for the Accounts context.

Re-export common use cases for convenient imports in tests.
"""

from .provisioning import (
    AdminStatsUseCase,
    CreateAccountInput,
    CreateAccountResult,
    CreateAccountUseCase,
    DeleteAccountUseCase,
    ListLearnersUseCase,
    UpdateDisplayNameUseCase,
    UpdateEmailInput,
    UpdateEmailUseCase,
)

__all__ = [
    "AdminStatsUseCase",
    "CreateAccountInput",
    "CreateAccountResult",
    "CreateAccountUseCase",
    "DeleteAccountUseCase",
    "ListLearnersUseCase",
    "UpdateDisplayNameUseCase",
    "UpdateEmailInput",
    "UpdateEmailUseCase",
]
