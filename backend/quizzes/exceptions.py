from rest_framework import exceptions, status


class Forbidden(exceptions.PermissionDenied):
    default_detail = 'Access denied.'
    default_code = 'forbidden'


class InvalidRequest(exceptions.ValidationError):
    default_detail = 'Invalid request data.'
    default_code = 'invalid_request'


class AttemptStateError(exceptions.APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = 'attempt_state'


class AttemptAlreadySubmitted(AttemptStateError):
    default_detail = 'This attempt has already been submitted.'
    default_code = 'attempt_already_submitted'


class AttemptNotSubmitted(AttemptStateError):
    default_detail = 'This attempt has not been submitted yet.'
    default_code = 'attempt_not_submitted'


class SubmissionDeadlinePassed(AttemptStateError):
    default_detail = 'The time limit for this quiz has passed and submissions are no longer accepted.'
    default_code = 'submission_deadline_passed'
