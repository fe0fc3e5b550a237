"""Use case layer for the Learning context.

Re-export common use cases for convenient imports in tests.
"""

from .proofs import (
    DecideProofInput,
    DecideProofUseCase,
    DecisionResult,
    GetProgressUseCase,
    ListProofsForAdminUseCase,
    ListProofsForUserUseCase,
    SubmitProofInput,
    SubmitProofUseCase,
)

__all__ = [
    "DecideProofInput",
    "DecideProofUseCase",
    "DecisionResult",
    "GetProgressUseCase",
    "ListProofsForAdminUseCase",
    "ListProofsForUserUseCase",
    "SubmitProofInput",
    "SubmitProofUseCase",
]
