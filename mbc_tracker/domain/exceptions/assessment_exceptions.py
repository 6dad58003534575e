"""
Exception classes related to assessment instances.

The state errors are deliberately distinct so callers can render a
specific message: "already completed", "cannot act on cancelled" and
"link has expired" are different outcomes for the patient.
"""

from mbc_tracker.domain.exceptions.base_exceptions import BaseApplicationError


class AssessmentError(BaseApplicationError):
    """Base class for assessment-related exceptions."""

    def __init__(self, message: str = "Assessment operation failed") -> None:
        super().__init__(message)


class InvalidInstanceStateError(AssessmentError):
    """Raised when a transition is attempted from a terminal or incompatible state."""

    def __init__(
        self,
        message: str = "Invalid assessment state for the requested operation",
        current_state: str | None = None,
        attempted: str | None = None,
        instance_id: str | None = None,
    ) -> None:
        if current_state and attempted:
            message = f"{message}: cannot {attempted} from '{current_state}'"
        super().__init__(message)
        self.current_state = current_state
        self.attempted = attempted
        self.instance_id = instance_id


class InstanceAlreadyCompletedError(InvalidInstanceStateError):
    """Raised when acting on an instance that has already been completed."""

    def __init__(self, instance_id: str | None = None, attempted: str | None = None) -> None:
        super().__init__(
            "This questionnaire has already been completed",
            instance_id=instance_id,
        )
        self.current_state = "COMPLETED"
        self.attempted = attempted


class InstanceCancelledError(InvalidInstanceStateError):
    """Raised when acting on a cancelled instance."""

    def __init__(self, instance_id: str | None = None, attempted: str | None = None) -> None:
        super().__init__(
            "This questionnaire was cancelled and cannot be acted on",
            instance_id=instance_id,
        )
        self.current_state = "CANCELLED"
        self.attempted = attempted


class InstanceExpiredError(InvalidInstanceStateError):
    """Raised when the access link has expired, whether or not the sweep has run."""

    def __init__(self, instance_id: str | None = None, attempted: str | None = None) -> None:
        super().__init__("This link has expired", instance_id=instance_id)
        self.current_state = "EXPIRED"
        self.attempted = attempted


class AlreadyScheduledError(AssessmentError):
    """
    Idempotent generation no-op.

    Not a true error: the measure is already instantiated for the
    (patient, encounter) pair, so callers treat it as success with zero effect.
    """

    def __init__(
        self,
        patient_id: str | None = None,
        measure_name: str | None = None,
        encounter_id: str | None = None,
    ) -> None:
        super().__init__(
            f"{measure_name or 'Measure'} already scheduled for patient {patient_id}"
            + (f" and encounter {encounter_id}" if encounter_id else "")
        )
        self.patient_id = patient_id
        self.measure_name = measure_name
        self.encounter_id = encounter_id
