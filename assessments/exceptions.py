# assessments/exceptions.py
"""
Error kinds raised by the attempt engine.

Services raise these; ``cores.exceptions.api_exception_handler`` turns them
into ``{"error": ..., "code": ...}`` responses with ``status_code``.
"""


class ExamEngineError(Exception):
    code = 'exam_engine_error'
    status_code = 400
    default_message = "The request could not be processed."

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class ExamNotPublished(ExamEngineError):
    code = 'exam_not_published'
    default_message = "This exam has not been published yet."


class AlreadyInProgress(ExamEngineError):
    code = 'already_in_progress'
    status_code = 409
    default_message = "An attempt for this exam is already in progress."

    def __init__(self, attempt_id, message=None):
        super().__init__(message, attempt_id=attempt_id)
        self.attempt_id = attempt_id


class AttemptNotActive(ExamEngineError):
    code = 'attempt_not_active'
    status_code = 409
    default_message = "This attempt no longer accepts changes."


class NavigationNotAllowed(ExamEngineError):
    code = 'navigation_not_allowed'
    status_code = 403
    default_message = "Moving to that section is not allowed."


class UnknownSection(ExamEngineError):
    code = 'unknown_section'
    default_message = "The section does not belong to this exam."


class UnknownQuestion(ExamEngineError):
    code = 'unknown_question'
    default_message = "The question does not belong to this exam."


class InvalidOption(ExamEngineError):
    code = 'invalid_option'
    default_message = "The selected options are not valid for this question."


class ScoringError(ExamEngineError):
    code = 'scoring_error'
    status_code = 500
    default_message = "The attempt could not be scored."
