"""
Submission State Enum.

States of one portal submission attempt.
"""
from enum import Enum


class SubmissionState(str, Enum):
    """Portal automation states, in the order they are reached."""

    DISCONNECTED = "disconnected"
    AUTHENTICATED = "authenticated"
    CONTEXT_SELECTED = "context_selected"
    FORM_READY = "form_ready"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
