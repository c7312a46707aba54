from enum import Enum


class CodePurpose(str, Enum):
    """Why a verification code was issued (a code only redeems for its own purpose)."""

    REGISTRATION = "registration"
    RECOVERY = "recovery"
